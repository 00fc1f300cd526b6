"""
Console rendering of the run summary.

Columns are aligned by display width (emoji aware, ANSI escapes ignored).
"""

from __future__ import annotations

import os
import re
from typing import Sequence

from wcwidth import wcswidth

from .orchestrator import (
    STATUS_FAILED,
    STATUS_NO_TAGS,
    STATUS_REPORTED,
    STATUS_UNRESOLVED,
    STATUS_UP_TO_DATE,
    RunSummary,
)


# Environment options
USE_EMOJI = os.environ.get("BREW_RELEASE_NOTES_EMOJI", "1") == "1"

# CSI (color etc.): ESC [ ... cmd
CSI_RE = re.compile(r'\x1b\[[0-?]*[ -/]*[@-~]')

_EMOJI_ICONS = {
    STATUS_REPORTED: "📝",
    STATUS_UP_TO_DATE: "🎉",
    STATUS_UNRESOLVED: "❓",
    STATUS_NO_TAGS: "🏷️",
    STATUS_FAILED: "❌",
}
_PLAIN_ICONS = {
    STATUS_REPORTED: "+",
    STATUS_UP_TO_DATE: "=",
    STATUS_UNRESOLVED: "?",
    STATUS_NO_TAGS: "-",
    STATUS_FAILED: "x",
}


def status_icon(status: str) -> str:
    """Get the icon for a package outcome status."""
    icons = _EMOJI_ICONS if USE_EMOJI else _PLAIN_ICONS
    return icons.get(status, "?")


def display_width(text: str) -> int:
    """Terminal display width of text, ignoring ANSI escapes."""
    visible = CSI_RE.sub('', text)
    width = wcswidth(visible)
    if width < 0:
        width = len(visible)  # non-printable characters; should rarely happen
    return width


def format_table(rows: Sequence[Sequence[str]], header: bool = True, pad: int = 2) -> list[str]:
    """
    Align rows into columns.

    Args:
        rows: Table rows (first row is the header when header=True)
        header: Draw a rule under the first row
        pad: Spaces between columns

    Returns:
        Formatted lines (trailing spaces stripped)
    """
    if not rows:
        return []
    ncol = max(len(r) for r in rows)
    widths = [0] * ncol
    for r in rows:
        for i, cell in enumerate(r):
            widths[i] = max(widths[i], display_width(cell))

    lines = []
    for ridx, r in enumerate(rows):
        cells = []
        for i in range(ncol):
            cell = r[i] if i < len(r) else ''
            cells.append(cell + ' ' * (widths[i] - display_width(cell)))
        lines.append((' ' * pad).join(cells).rstrip())
        if header and ridx == 0:
            lines.append((' ' * pad).join('-' * w for w in widths))
    return lines


def render_summary(summary: RunSummary) -> str:
    """
    Render the per-package outcome table plus a totals line.

    Args:
        summary: Result of a run

    Returns:
        Multi-line text
    """
    rows: list[list[str]] = [["", "package", "installed", "result"]]
    for outcome in summary.outcomes:
        if outcome.status == STATUS_REPORTED:
            result = f"{outcome.versions_count} newer version(s)"
            if outcome.report_path:
                result += f" → {outcome.report_path}"
        else:
            result = outcome.reason or outcome.status
        rows.append([status_icon(outcome.status), outcome.name, outcome.installed_version, result])

    counts = summary.counts()
    parts = [
        f"{counts.get(STATUS_REPORTED, 0)} reported",
        f"{counts.get(STATUS_UP_TO_DATE, 0)} up to date",
        f"{counts.get(STATUS_UNRESOLVED, 0) + counts.get(STATUS_NO_TAGS, 0)} skipped",
    ]
    if counts.get(STATUS_FAILED):
        parts.append(f"{counts[STATUS_FAILED]} failed")

    lines = format_table(rows) if summary.outcomes else []
    lines.append("")
    lines.append(f"Summary: {len(summary.outcomes)} package(s), {', '.join(parts)}")
    return "\n".join(lines)
