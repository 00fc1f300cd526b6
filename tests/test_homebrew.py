"""
Tests for Homebrew metadata queries.
"""

import json
from unittest.mock import patch

import pytest

from brew_release_notes.common import CommandError
from brew_release_notes.homebrew import (
    Homebrew,
    OutdatedPackage,
    Package,
    PackageKind,
    PackageManagerError,
    parse_info,
    parse_outdated,
)


OUTDATED_V2 = {
    "formulae": [
        {
            "name": "foo",
            "installed_versions": ["1.2.0"],
            "current_version": "1.4.0",
            "pinned": False,
            "pinned_version": None,
        },
        {
            "name": "acme/tap/bar",
            "installed_versions": ["2.0.0_1", "1.9.0"],
            "current_version": "2.1.0",
            "pinned": True,
            "pinned_version": "2.0.0_1",
        },
    ],
    "casks": [
        {"name": "baz-app", "installed_versions": ["3.0"], "current_version": "3.1"},
    ],
}

FORMULA_INFO = {
    "formulae": [
        {
            "name": "foo",
            "homepage": "https://foo.example.com",
            "urls": {
                "stable": {"url": "https://github.com/acme/foo/archive/refs/tags/v1.4.0.tar.gz"},
                "head": {"url": "https://github.com/acme/foo.git", "branch": "main"},
            },
        }
    ],
    "casks": [],
}

CASK_INFO = {
    "formulae": [],
    "casks": [
        {
            "token": "baz-app",
            "homepage": "https://baz.example.com",
            "url": "https://github.com/acme/baz/releases/download/v3.1/Baz.dmg",
        }
    ],
}


class TestParseOutdated:
    """Test brew outdated --json=v2 parsing."""

    def test_formulae_then_casks(self):
        packages = parse_outdated(OUTDATED_V2)

        assert packages == [
            OutdatedPackage("foo", "1.2.0", "1.4.0", PackageKind.FORMULA, False),
            OutdatedPackage("acme/tap/bar", "2.0.0_1", "2.1.0", PackageKind.FORMULA, True),
            OutdatedPackage("baz-app", "3.0", "3.1", PackageKind.CASK, False),
        ]

    def test_empty(self):
        assert parse_outdated({"formulae": [], "casks": []}) == []
        assert parse_outdated({}) == []

    def test_string_installed_version(self):
        """Older brew releases report a plain string."""
        data = {"casks": [{"token": "app", "installed_versions": "1.0"}]}
        assert parse_outdated(data)[0].installed_version == "1.0"


class TestParseInfo:
    """Test brew info --json=v2 parsing."""

    def test_formula_urls(self):
        outdated = OutdatedPackage("foo", "1.2.0", "1.4.0")
        package = parse_info(FORMULA_INFO, outdated)

        assert package == Package(
            name="foo",
            installed_version="1.2.0",
            kind=PackageKind.FORMULA,
            target_version="1.4.0",
            homepage="https://foo.example.com",
            stable_url="https://github.com/acme/foo/archive/refs/tags/v1.4.0.tar.gz",
            vcs_url="https://github.com/acme/foo.git",
        )

    def test_formula_without_head(self):
        data = {"formulae": [{"homepage": "https://x.org", "urls": {"stable": {"url": "https://x.org/x.tgz"}}}]}
        package = parse_info(data, OutdatedPackage("x", "1"))
        assert package.vcs_url == ""
        assert [label for label, _ in package.candidate_urls()] == ["homepage", "stable", "vcs"]

    def test_cask_urls(self):
        outdated = OutdatedPackage("baz-app", "3.0", "3.1", PackageKind.CASK)
        package = parse_info(CASK_INFO, outdated)

        assert package.kind is PackageKind.CASK
        assert package.homepage == "https://baz.example.com"
        assert package.stable_url == "https://github.com/acme/baz/releases/download/v3.1/Baz.dmg"
        assert package.vcs_url == ""

    def test_missing_entry(self):
        with pytest.raises(PackageManagerError):
            parse_info({"formulae": []}, OutdatedPackage("foo", "1"))
        with pytest.raises(PackageManagerError):
            parse_info({"casks": []}, OutdatedPackage("app", "1", kind=PackageKind.CASK))


class TestHomebrew:
    """Test brew command invocation."""

    def test_outdated_formulae_only(self):
        with patch("brew_release_notes.homebrew.run_command", return_value=json.dumps(OUTDATED_V2)) as mock_run:
            packages = Homebrew().outdated()

        assert len(packages) == 3
        assert mock_run.call_args[0][0] == ["brew", "outdated", "--json=v2", "--formula"]

    def test_outdated_with_casks(self):
        with patch("brew_release_notes.homebrew.run_command", return_value="{}") as mock_run:
            Homebrew().outdated(include_casks=True)
        assert mock_run.call_args[0][0] == ["brew", "outdated", "--json=v2"]

    def test_outdated_failure(self):
        with patch("brew_release_notes.homebrew.run_command", side_effect=CommandError(["brew"], 1, "boom")):
            with pytest.raises(PackageManagerError, match="boom"):
                Homebrew().outdated()

    def test_outdated_invalid_json(self):
        with patch("brew_release_notes.homebrew.run_command", return_value="Error: not json"):
            with pytest.raises(PackageManagerError, match="Invalid JSON"):
                Homebrew().outdated()

    def test_outdated_unexpected_json(self):
        with patch("brew_release_notes.homebrew.run_command", return_value="[]"):
            with pytest.raises(PackageManagerError, match="expected an object"):
                Homebrew().outdated()

    def test_info_formula(self):
        with patch("brew_release_notes.homebrew.run_command", return_value=json.dumps(FORMULA_INFO)) as mock_run:
            package = Homebrew(timeout=15).info(OutdatedPackage("foo", "1.2.0", "1.4.0"))

        assert package.homepage == "https://foo.example.com"
        assert mock_run.call_args[0][0] == ["brew", "info", "--json=v2", "--formula", "foo"]
        assert mock_run.call_args[1] == {"timeout": 15}

    def test_info_cask(self):
        with patch("brew_release_notes.homebrew.run_command", return_value=json.dumps(CASK_INFO)) as mock_run:
            Homebrew().info(OutdatedPackage("baz-app", "3.0", kind=PackageKind.CASK))
        assert mock_run.call_args[0][0] == ["brew", "info", "--json=v2", "--cask", "baz-app"]

    def test_info_failure(self):
        error = CommandError(["brew"], 1, "No available formula")
        with patch("brew_release_notes.homebrew.run_command", side_effect=error):
            with pytest.raises(PackageManagerError):
                Homebrew().info(OutdatedPackage("foo", "1"))
