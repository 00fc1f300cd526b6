"""
Tests for the persisted ignore list.
"""

from unittest.mock import patch

import pytest

from brew_release_notes.ignore_list import (
    IgnoreList,
    append_ignored,
    filter_ignored,
    is_ignored,
    load_ignore_list,
    merge_ignored,
    write_ignore_list,
)


class TestLoadIgnoreList:
    """Test loading."""

    def test_creates_missing_file(self, tmp_path):
        path = tmp_path / "ignored_formulae.txt"
        ignore_list = load_ignore_list(path)

        assert path.exists()
        assert path.read_text() == ""
        assert len(ignore_list) == 0

    def test_strips_blanks_and_duplicates(self, tmp_path):
        path = tmp_path / "ignored_formulae.txt"
        path.write_text("zsh\n\n  node \nzsh\nawk\n")

        ignore_list = load_ignore_list(path)

        assert ignore_list.names == ("awk", "node", "zsh")
        assert "node" in ignore_list
        assert is_ignored(ignore_list, "awk")
        assert not is_ignored(ignore_list, "python")

    def test_accepts_string_path(self, tmp_path):
        ignore_list = load_ignore_list(str(tmp_path / "list.txt"))
        assert ignore_list.path == tmp_path / "list.txt"


class TestAppendIgnored:
    """Test persistence of additions."""

    def test_sorted_and_deduplicated(self, tmp_path):
        path = tmp_path / "ignored_formulae.txt"
        path.write_text("node\n")
        ignore_list = load_ignore_list(path)

        updated = append_ignored(ignore_list, ["awk", "node", "awk"])

        assert updated.names == ("awk", "node")
        assert path.read_text() == "awk\nnode\n"

    def test_appending_twice_stores_one_line(self, tmp_path):
        """The same identifier appended twice is stored once."""
        path = tmp_path / "ignored_formulae.txt"
        ignore_list = load_ignore_list(path)

        ignore_list = append_ignored(ignore_list, ["foo"])
        ignore_list = append_ignored(ignore_list, ["foo"])

        assert path.read_text().splitlines() == ["foo"]

    def test_no_temp_file_left(self, tmp_path):
        path = tmp_path / "ignored_formulae.txt"
        append_ignored(load_ignore_list(path), ["foo"])
        assert sorted(p.name for p in tmp_path.iterdir()) == ["ignored_formulae.txt"]

    def test_write_failure(self, tmp_path):
        ignore_list = IgnoreList(path=tmp_path / "ignored_formulae.txt", names=("foo",))
        with patch("builtins.open", side_effect=PermissionError("read-only")):
            with pytest.raises(IOError, match="Failed to write ignore list"):
                write_ignore_list(ignore_list)

    def test_merge_does_not_write(self, tmp_path):
        path = tmp_path / "ignored_formulae.txt"
        merged = merge_ignored(IgnoreList(path=path, names=("node",)), ["awk", " ", "node"])

        assert merged == IgnoreList(path=path, names=("awk", "node"))
        assert not path.exists()


class TestFilterIgnored:
    """Test candidate filtering."""

    def test_preserves_order(self, tmp_path):
        ignore_list = IgnoreList(path=tmp_path / "x", names=("foo",))
        assert filter_ignored(["zeta", "foo", "bar"], ignore_list) == ["zeta", "bar"]
