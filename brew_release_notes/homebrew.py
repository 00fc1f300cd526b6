"""
Homebrew package metadata queries.

Wraps `brew outdated --json=v2` and `brew info --json=v2` behind the
PackageManagerQuery protocol so the orchestrator can be driven by an
in-memory implementation in tests.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from .common import CommandError, ReleaseNotesError, run_command

logger = logging.getLogger(__name__)


class PackageManagerError(ReleaseNotesError):
    """Raised when the package manager cannot be queried or answers garbage."""
    pass


class PackageKind(Enum):
    """Kind of installable unit."""

    FORMULA = "formula"
    CASK = "cask"


@dataclass(frozen=True)
class OutdatedPackage:
    """
    Entry of the outdated package listing.

    Attributes:
        name: Package identifier (may contain a tap namespace, e.g. "owner/tap/foo")
        installed_version: Installed version (first of the installed versions)
        current_version: Latest version known to the package manager
        kind: Formula or cask
        pinned: Whether the package is pinned
    """
    name: str
    installed_version: str
    current_version: str = ""
    kind: PackageKind = PackageKind.FORMULA
    pinned: bool = False


@dataclass(frozen=True)
class Package:
    """
    Package metadata used for repository resolution.

    Attributes:
        name: Package identifier
        installed_version: Installed version string (free-form)
        kind: Formula or cask
        target_version: Latest version known to the package manager
        homepage: Declared homepage URL
        stable_url: Stable source (or cask download) URL
        vcs_url: Version-control checkout URL, if any
    """
    name: str
    installed_version: str
    kind: PackageKind = PackageKind.FORMULA
    target_version: str = ""
    homepage: str = ""
    stable_url: str = ""
    vcs_url: str = ""

    def candidate_urls(self) -> list[tuple[str, str]]:
        """Candidate URLs in resolution priority order as (label, url)."""
        return [
            ("homepage", self.homepage),
            ("stable", self.stable_url),
            ("vcs", self.vcs_url),
        ]


class PackageManagerQuery(Protocol):
    """Queries the resolver and orchestrator need from a package manager."""

    def outdated(self, include_casks: bool = False) -> list[OutdatedPackage]: ...

    def info(self, outdated: OutdatedPackage) -> Package: ...


def _parse_json(output: str, what: str) -> dict[str, Any]:
    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise PackageManagerError(f"Invalid JSON from {what}: {e}") from e
    if not isinstance(data, dict):
        raise PackageManagerError(f"Unexpected JSON from {what}: expected an object")
    return data


def _first_version(versions: Any) -> str:
    """Pick the first installed version from brew's installed_versions field."""
    if isinstance(versions, list) and versions:
        return str(versions[0])
    if isinstance(versions, str):
        return versions
    return ""


def parse_outdated(data: dict[str, Any]) -> list[OutdatedPackage]:
    """
    Parse `brew outdated --json=v2` output.

    Args:
        data: Decoded JSON document

    Returns:
        Outdated formulae followed by outdated casks
    """
    packages: list[OutdatedPackage] = []
    for section, kind in (("formulae", PackageKind.FORMULA), ("casks", PackageKind.CASK)):
        for entry in data.get(section) or []:
            name = entry.get("name") or entry.get("token") or ""
            if not name:
                continue
            packages.append(
                OutdatedPackage(
                    name=name,
                    installed_version=_first_version(entry.get("installed_versions")),
                    current_version=str(entry.get("current_version") or ""),
                    kind=kind,
                    pinned=bool(entry.get("pinned", False)),
                )
            )
    return packages


def parse_info(data: dict[str, Any], outdated: OutdatedPackage) -> Package:
    """
    Parse `brew info --json=v2` output for a single package.

    Args:
        data: Decoded JSON document
        outdated: The outdated entry being described

    Returns:
        Package with candidate URLs

    Raises:
        PackageManagerError: If the document has no entry for the package
    """
    if outdated.kind is PackageKind.CASK:
        entries = data.get("casks") or []
        if not entries:
            raise PackageManagerError(f"No cask metadata for {outdated.name}")
        cask = entries[0]
        return Package(
            name=outdated.name,
            installed_version=outdated.installed_version,
            kind=PackageKind.CASK,
            target_version=outdated.current_version,
            homepage=cask.get("homepage") or "",
            stable_url=cask.get("url") or "",
        )

    entries = data.get("formulae") or []
    if not entries:
        raise PackageManagerError(f"No formula metadata for {outdated.name}")
    formula = entries[0]
    urls = formula.get("urls") or {}
    return Package(
        name=outdated.name,
        installed_version=outdated.installed_version,
        kind=PackageKind.FORMULA,
        target_version=outdated.current_version,
        homepage=formula.get("homepage") or "",
        stable_url=(urls.get("stable") or {}).get("url") or "",
        vcs_url=(urls.get("head") or {}).get("url") or "",
    )


class Homebrew:
    """PackageManagerQuery backed by the `brew` command."""

    def __init__(self, executable: str = "brew", timeout: float | None = None):
        self.executable = executable
        self.timeout = timeout

    def outdated(self, include_casks: bool = False) -> list[OutdatedPackage]:
        """
        List outdated packages.

        Raises:
            PackageManagerError: If brew fails or returns invalid JSON
        """
        args = [self.executable, "outdated", "--json=v2"]
        if not include_casks:
            args.append("--formula")
        try:
            output = run_command(args, timeout=self.timeout)
        except CommandError as e:
            raise PackageManagerError(str(e)) from e
        packages = parse_outdated(_parse_json(output, "brew outdated"))
        logger.debug(f"brew reports {len(packages)} outdated package(s)")
        return packages

    def info(self, outdated: OutdatedPackage) -> Package:
        """
        Query metadata of one package.

        Raises:
            PackageManagerError: If brew fails or returns invalid JSON
        """
        flag = "--cask" if outdated.kind is PackageKind.CASK else "--formula"
        args = [self.executable, "info", "--json=v2", flag, outdated.name]
        try:
            output = run_command(args, timeout=self.timeout)
        except CommandError as e:
            raise PackageManagerError(str(e)) from e
        return parse_info(_parse_json(output, f"brew info {outdated.name}"), outdated)
