"""
Common utilities shared across brew_release_notes modules.
"""

from __future__ import annotations

import datetime
import os
import subprocess
from typing import Sequence


class ReleaseNotesError(Exception):
    """Base exception for all brew-release-notes errors."""
    pass


class CommandError(ReleaseNotesError):
    """Raised when an external command cannot be run or exits non-zero."""

    def __init__(self, args: Sequence[str], returncode: int | None, stderr: str = ""):
        self.command = tuple(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        detail = f"exit code {returncode}" if returncode is not None else "not runnable"
        message = f"Command failed ({detail}): {' '.join(self.command)}"
        if self.stderr:
            message += f": {self.stderr}"
        super().__init__(message)


def run_command(
    args: Sequence[str],
    timeout: float | None = None,
) -> str:
    """
    Run an external command and return its standard output.

    Args:
        args: Command and arguments
        timeout: Optional timeout in seconds (None leaves the call unbounded)

    Returns:
        Captured stdout

    Raises:
        CommandError: If the command is missing, times out or exits non-zero
    """
    try:
        proc = subprocess.run(
            list(args),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
            env={**os.environ, "NO_COLOR": "1"},  # Plain output from CLIs
        )
    except FileNotFoundError as e:
        raise CommandError(args, None, str(e)) from e
    except subprocess.TimeoutExpired as e:
        raise CommandError(args, None, f"timed out after {timeout}s") from e

    if proc.returncode != 0:
        raise CommandError(args, proc.returncode, proc.stderr or "")
    return proc.stdout or ""


def local_timestamp(now: datetime.datetime | None = None) -> str:
    """Human readable local timestamp used in report headers."""
    now = now or datetime.datetime.now()
    return now.strftime("%Y-%m-%d %H:%M:%S")


def compact_timestamp(now: datetime.datetime | None = None) -> str:
    """Timestamp suitable for directory names (YYYYMMDD_HHMMSS)."""
    now = now or datetime.datetime.now()
    return now.strftime("%Y%m%d_%H%M%S")
