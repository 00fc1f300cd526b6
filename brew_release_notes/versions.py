"""
Version normalization, ordering and version-window computation.

Given an installed version and the tags published upstream, computes the
tags strictly newer than the installed version, newest first. All functions
here are pure.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Sequence

from packaging import version as pep440


_RUN_RE = re.compile(r"\d+|\D+")
# Homebrew rebuild revision, e.g. "1.2.3_1"
_REVISION_RE = re.compile(r"_\d+$")


@dataclass(frozen=True)
class Tag:
    """
    Tag as published by a hosting provider.

    Attributes:
        raw: Tag name exactly as published (e.g. "v1.2.3")
        version: Normalized version (prefix character stripped)
        prerelease: Whether the host marks this tag's release as a prerelease
    """
    raw: str
    version: str
    prerelease: bool = False

    @classmethod
    def from_raw(cls, raw: str, prerelease: bool = False) -> "Tag":
        return cls(raw=raw, version=normalize_version(raw), prerelease=prerelease)


@dataclass(frozen=True)
class VersionWindow:
    """
    Tags strictly newer than the installed version.

    Attributes:
        installed: Normalized installed version
        tags: Newer tags, newest first
        unmatched: Newer versions for which no raw tag could be recovered
        installed_listed: Whether the installed version is one of the upstream tags
    """
    installed: str
    tags: tuple[Tag, ...] = ()
    unmatched: tuple[str, ...] = ()
    installed_listed: bool = True

    @property
    def is_empty(self) -> bool:
        return not self.tags

    @property
    def newest(self) -> Tag | None:
        return self.tags[0] if self.tags else None

    def __len__(self) -> int:
        return len(self.tags)


def normalize_version(raw: str) -> str:
    """
    Strip one optional leading non-digit prefix character.

    Args:
        raw: Raw tag or version (e.g. "v1.2.3")

    Returns:
        Normalized version (e.g. "1.2.3")
    """
    raw = raw.strip()
    if raw and not raw[0].isdigit():
        return raw[1:]
    return raw


def strip_revision(version: str) -> str:
    """Drop a Homebrew rebuild revision suffix ("1.2.3_1" -> "1.2.3")."""
    return _REVISION_RE.sub("", version)


def _component_key(component: str) -> tuple:
    # Digit runs compare numerically and sort before text runs
    return tuple(
        (0, int(run), "") if run.isdigit() else (1, 0, run)
        for run in _RUN_RE.findall(component)
    )


def version_sort_key(version: str) -> tuple:
    """
    Ordering key for natural version sort.

    Components are split on "."; numeric components compare numerically,
    other components compare run by run. A shorter version sorts before any
    longer version it prefixes ("2.9" < "2.10" < "2.10.1").
    """
    return tuple(_component_key(part) for part in version.split("."))


def compare_versions(v1: str, v2: str) -> int:
    """
    Compare two version strings with natural version ordering.

    Args:
        v1: First version
        v2: Second version

    Returns:
        -1 if v1 < v2, 0 if v1 == v2, 1 if v1 > v2
    """
    k1 = version_sort_key(normalize_version(v1))
    k2 = version_sort_key(normalize_version(v2))
    if k1 < k2:
        return -1
    elif k1 > k2:
        return 1
    return 0


def sort_versions(versions: Iterable[str], reverse: bool = False) -> list[str]:
    """Sort version strings naturally (ties broken by string for determinism)."""
    return sorted(versions, key=lambda v: (version_sort_key(v), v), reverse=reverse)


def compute_window(installed: str, tags: Sequence[Tag | str]) -> VersionWindow:
    """
    Compute the ordered tags strictly newer than the installed version.

    The installed version is merged into the normalized tag set, the set is
    sorted ascending, everything up to and including the installed version is
    discarded and the remainder is returned newest first. Each kept version is
    mapped back to the first raw tag (in fetch order) that normalizes to it.

    Args:
        installed: Installed version string
        tags: Upstream tags in fetch order (prereleases already filtered out)

    Returns:
        VersionWindow (empty when nothing is newer or installed is blank)
    """
    tag_list = [t if isinstance(t, Tag) else Tag.from_raw(t) for t in tags]
    installed_norm = normalize_version(installed)

    tag_versions = {t.version for t in tag_list}
    installed_listed = bool(installed_norm) and (
        installed_norm in tag_versions or strip_revision(installed_norm) in tag_versions
    )

    if not installed_norm:
        return VersionWindow(installed="", installed_listed=False)

    merged = sort_versions({installed_norm} | tag_versions)

    try:
        position = merged.index(installed_norm)
    except ValueError:
        return VersionWindow(installed=installed_norm, installed_listed=False)

    installed_key = version_sort_key(installed_norm)
    newer = [v for v in merged[position + 1:] if version_sort_key(v) > installed_key]
    newer.reverse()

    kept: list[Tag] = []
    unmatched: list[str] = []
    for ver in newer:
        original = next((t for t in tag_list if t.version == ver), None)
        if original is None:
            unmatched.append(ver)
            continue
        kept.append(original)

    return VersionWindow(
        installed=installed_norm,
        tags=tuple(kept),
        unmatched=tuple(unmatched),
        installed_listed=installed_listed,
    )


def is_major_upgrade(v1: str, v2: str) -> bool:
    """
    Check if moving from v1 to v2 crosses a major version.

    Args:
        v1: Current version
        v2: Target version

    Returns:
        True if v2 is a major version ahead of v1 (False when unparseable)
    """
    try:
        ver1 = pep440.parse(strip_revision(normalize_version(v1)))
        ver2 = pep440.parse(strip_revision(normalize_version(v2)))
    except pep440.InvalidVersion:
        # Conservative: treat as non-breaking if can't determine
        return False
    return ver2.major > ver1.major
