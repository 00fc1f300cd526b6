"""
Terminal multi-select for the ignore list.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Protocol, Sequence

from .common import CommandError


class MultiSelector(Protocol):
    """Presents candidates and returns the subset the user picked."""

    def choose(self, header: str, candidates: Sequence[str]) -> list[str]: ...


class GumSelector:
    """MultiSelector using `gum choose --no-limit`."""

    def __init__(self, logger: logging.Logger, executable: str = "gum"):
        self.logger = logger
        self.executable = executable

    def choose(self, header: str, candidates: Sequence[str]) -> list[str]:
        """
        Let the user pick any number of candidates.

        Returns:
            Chosen candidates (empty when none chosen or the menu was cancelled)

        Raises:
            CommandError: If gum cannot be started
        """
        if not candidates:
            return []

        args = [self.executable, "choose", "--no-limit", "--header", header]
        try:
            # stderr stays attached to the terminal: gum draws its menu there
            proc = subprocess.run(
                args,
                input="\n".join(candidates) + "\n",
                stdout=subprocess.PIPE,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise CommandError(args, None, str(e)) from e

        if proc.returncode != 0:
            self.logger.debug(f"Selection cancelled (gum exit code {proc.returncode})")
            return []

        allowed = set(candidates)
        chosen = [line.strip() for line in (proc.stdout or "").splitlines()]
        return [c for c in chosen if c in allowed]
