"""
Tests for Markdown report assembly and output files.
"""

import datetime

from brew_release_notes.config import DEFAULT_PLACEHOLDER
from brew_release_notes.notes import ReleaseEntry
from brew_release_notes.report import (
    MAJOR_UPGRADE_NOTE,
    assemble_report,
    make_output_dir,
    output_dir_path,
    report_filename,
    sanitize_name,
    write_report,
)
from brew_release_notes.versions import Tag


NOW = datetime.datetime(2024, 5, 17, 14, 30, 5)


def entries(*pairs):
    return [ReleaseEntry(Tag.from_raw(raw), body) for raw, body in pairs]


class TestAssembleReport:
    """Test document rendering."""

    def test_layout(self):
        """Header then one section per entry in the given order."""
        text = assemble_report(
            "foo",
            "1.2.0",
            entries(("v1.4.0", "Four"), ("v1.3.0", "Three\n\n- fix")),
            generated_at=NOW,
        )

        assert text == (
            "# Update report for: `foo`\n"
            "\n"
            "**Generated:** 2024-05-17 14:30:05\n"
            "\n"
            "This report covers changes since your installed version **1.2.0**.\n"
            "\n"
            "---\n"
            "## 🏷️ Version: v1.4.0\n"
            "\n"
            "Four\n"
            "\n"
            "---\n"
            "## 🏷️ Version: v1.3.0\n"
            "\n"
            "Three\n"
            "\n"
            "- fix\n"
            "\n"
        )

    def test_empty_body_uses_placeholder(self):
        """v3.0.0 with an empty body shows the placeholder, not a blank section."""
        text = assemble_report("foo", "2.0.0", entries(("v3.0.0", "")), generated_at=NOW)

        section = text.split("---\n", 1)[1]
        assert section == f"## 🏷️ Version: v3.0.0\n\n{DEFAULT_PLACEHOLDER}\n\n"

    def test_order_preserved(self):
        """Entries are neither sorted nor filtered."""
        text = assemble_report(
            "foo", "1.0", entries(("v1.1", "a"), ("v3.0", "b"), ("v2.0", "c")), generated_at=NOW
        )
        headings = [line for line in text.splitlines() if line.startswith("## ")]
        assert headings == [
            "## 🏷️ Version: v1.1",
            "## 🏷️ Version: v3.0",
            "## 🏷️ Version: v2.0",
        ]

    def test_stable_apart_from_timestamp(self):
        """Same entries give identical text except for the Generated line."""
        items = entries(("v2", "two"), ("v1", "one"))
        first = assemble_report("foo", "0.9", items, generated_at=NOW)
        second = assemble_report("foo", "0.9", items, generated_at=NOW + datetime.timedelta(hours=3))

        strip = lambda text: [l for l in text.splitlines() if not l.startswith("**Generated:**")]
        assert first != second
        assert strip(first) == strip(second)

    def test_target_version_and_major_note(self):
        text = assemble_report(
            "foo", "1.9", entries(("v2.0", "x")), generated_at=NOW,
            target_version="2.0", major_upgrade=True,
        )
        assert "Latest available version: **2.0**.\n" in text
        assert MAJOR_UPGRADE_NOTE in text
        assert text.index(MAJOR_UPGRADE_NOTE) < text.index("---")

    def test_no_entries(self):
        text = assemble_report("foo", "1.0", [], generated_at=NOW)
        assert "---" not in text
        assert text.endswith("**1.0**.\n\n")


class TestFileNames:
    """Test report and directory naming."""

    def test_sanitize(self):
        assert sanitize_name("owner/tap/foo") == "owner-tap-foo"

    def test_report_filename(self):
        assert report_filename("foo", "1.2.0") == "foo_1.2.0.md"
        assert report_filename("owner/tap/foo", "1.2.0", "1.4.0") == "owner-tap-foo_1.2.0_to_1.4.0.md"

    def test_output_dir_path(self, tmp_path):
        assert output_dir_path(tmp_path, "reports", NOW) == tmp_path / "reports_20240517_143005"

    def test_make_output_dir(self, tmp_path):
        path = make_output_dir(tmp_path / "nested", "reports", NOW)
        assert path.is_dir()
        assert path.name == "reports_20240517_143005"

    def test_write_report(self, tmp_path):
        path = write_report(tmp_path / "foo_1.0.md", "# Update report for: `foo`\n🏷️\n")
        assert path.read_text(encoding="utf-8") == "# Update report for: `foo`\n🏷️\n"
