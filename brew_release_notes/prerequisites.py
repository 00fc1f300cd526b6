"""
External tool prerequisite checks.

A run needs Homebrew for package metadata, the GitHub CLI for release
listings, and gum for the interactive ignore-selection menu.
"""

from __future__ import annotations

import logging
import shutil
from typing import Sequence

from .common import ReleaseNotesError

logger = logging.getLogger(__name__)


# Tool binary -> what it is needed for
REQUIRED_TOOLS: dict[str, str] = {
    "brew": "Homebrew package metadata",
    "gh": "GitHub CLI for release listings and notes",
    "gum": "interactive ignore-list selection (https://github.com/charmbracelet/gum)",
}

# Tools that are only needed when the interactive menu is shown
INTERACTIVE_ONLY: frozenset[str] = frozenset({"gum"})


class PrerequisiteError(ReleaseNotesError):
    """Raised when required external tools are missing."""

    def __init__(self, missing: Sequence[str]):
        self.missing = tuple(missing)
        super().__init__(format_prerequisite_error(self.missing))


def required_tools(interactive: bool = True) -> list[str]:
    """
    Tools required for a run.

    Args:
        interactive: Whether the ignore-selection menu will be shown

    Returns:
        Binary names in check order
    """
    return [
        name for name in REQUIRED_TOOLS
        if interactive or name not in INTERACTIVE_ONLY
    ]


def is_tool_installed(tool_name: str) -> bool:
    """
    Check if a tool is installed and available on PATH.

    Args:
        tool_name: Binary name (e.g., "brew", "gh")

    Returns:
        True if tool is available in PATH
    """
    path = shutil.which(tool_name)
    if path:
        logger.debug(f"Found {tool_name} at: {path}")
        return True

    logger.debug(f"{tool_name} not found in PATH")
    return False


def check_prerequisites(tools: Sequence[str]) -> tuple[list[str], list[str]]:
    """
    Check which tools are installed and which are missing.

    Args:
        tools: Binary names to check

    Returns:
        Tuple of (installed, missing)
    """
    installed = []
    missing = []

    for tool in tools:
        if is_tool_installed(tool):
            installed.append(tool)
        else:
            missing.append(tool)

    return installed, missing


def ensure_prerequisites(interactive: bool = True) -> list[str]:
    """
    Verify every required tool is present.

    Args:
        interactive: Whether gum is needed

    Returns:
        The installed tools

    Raises:
        PrerequisiteError: If any required tool is missing
    """
    installed, missing = check_prerequisites(required_tools(interactive))
    if missing:
        raise PrerequisiteError(missing)
    return installed


def format_prerequisite_error(missing: Sequence[str]) -> str:
    """
    Format a human-readable error message for missing tools.

    Args:
        missing: Missing binary names

    Returns:
        Error message string (empty if nothing is missing)
    """
    if not missing:
        return ""

    lines = ["Required tools are not installed:"]
    for tool in missing:
        purpose = REQUIRED_TOOLS.get(tool, "")
        lines.append(f"  - {tool}" + (f" ({purpose})" if purpose else ""))
    return "\n".join(lines)
