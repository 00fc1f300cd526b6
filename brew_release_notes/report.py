"""
Markdown report rendering and output files.
"""

from __future__ import annotations

import datetime
from pathlib import Path
from typing import Sequence

from .common import compact_timestamp, local_timestamp
from .config import DEFAULT_PLACEHOLDER
from .notes import ReleaseEntry

MAJOR_UPGRADE_NOTE = (
    "> ⚠️ This update crosses a major version. "
    "Review the notes below for breaking changes before upgrading."
)


def assemble_report(
    package: str,
    installed_version: str,
    entries: Sequence[ReleaseEntry],
    generated_at: datetime.datetime | None = None,
    target_version: str = "",
    placeholder: str = DEFAULT_PLACEHOLDER,
    major_upgrade: bool = False,
) -> str:
    """
    Render the Markdown report for one package.

    Entries are rendered in the given order; nothing is filtered or reordered.

    Args:
        package: Package identifier
        installed_version: Installed version as reported by the package manager
        entries: Release entries, newest first
        generated_at: Generation time (defaults to now)
        target_version: Latest version known to the package manager, if any
        placeholder: Body used for entries whose body is blank
        major_upgrade: Add a breaking-change warning to the header

    Returns:
        Document text
    """
    lines = [
        f"# Update report for: `{package}`",
        "",
        f"**Generated:** {local_timestamp(generated_at)}",
        "",
        f"This report covers changes since your installed version **{installed_version}**.",
        "",
    ]
    if target_version:
        lines += [f"Latest available version: **{target_version}**.", ""]
    if major_upgrade:
        lines += [MAJOR_UPGRADE_NOTE, ""]

    for entry in entries:
        body = entry.body if entry.body.strip() else placeholder
        lines += [
            "---",
            f"## 🏷️ Version: {entry.tag.raw}",
            "",
            body,
            "",
        ]

    return "\n".join(lines) + "\n"


def sanitize_name(name: str) -> str:
    """Make a package identifier (possibly "owner/tap/name") safe as a file name."""
    return name.replace("/", "-")


def report_filename(name: str, installed_version: str, target_version: str = "") -> str:
    """
    File name of a package report.

    Args:
        name: Package identifier
        installed_version: Installed version
        target_version: Latest known version (optional)

    Returns:
        "<name>_<installed>.md" or "<name>_<installed>_to_<target>.md"
    """
    stem = f"{sanitize_name(name)}_{sanitize_name(installed_version)}"
    if target_version:
        stem += f"_to_{sanitize_name(target_version)}"
    return f"{stem}.md"


def output_dir_path(root: str | Path, prefix: str, now: datetime.datetime | None = None) -> Path:
    """Path of the timestamped report directory for a run."""
    return Path(root).expanduser() / f"{prefix}_{compact_timestamp(now)}"


def make_output_dir(root: str | Path, prefix: str, now: datetime.datetime | None = None) -> Path:
    """Create the timestamped report directory and return it."""
    path = output_dir_path(root, prefix, now)
    path.mkdir(parents=True, exist_ok=True)
    return path


def write_report(path: Path, text: str) -> Path:
    """Write a report file (UTF-8)."""
    path.write_text(text, encoding="utf-8")
    return path
