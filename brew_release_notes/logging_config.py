"""
Logging setup for brew-release-notes runs.

Console lines carry a level symbol so warnings stand out from progress
messages; an optional log file receives everything at DEBUG level.
"""

import logging
import sys
from pathlib import Path
from typing import Optional


LOGGER_NAME = "brew_release_notes"

FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT = "%(level_symbol)s %(message)s"


def console_level(level: str = "INFO", verbose: bool = False, quiet: bool = False) -> int:
    """Resolve the console threshold; --verbose beats --quiet beats level."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.getLevelName(level.upper())


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    verbose: bool = False,
    quiet: bool = False,
    propagate: bool = False,
) -> logging.Logger:
    """
    Configure the application logger for one run.

    Args:
        level: Console level name when neither verbose nor quiet is set
        log_file: Also write a DEBUG log with timestamps to this path
        verbose: Show DEBUG messages on the console
        quiet: Only show warnings and errors on the console
        propagate: Let records reach the root logger (tests use this)

    Returns:
        The configured logger; the CLI hands it to the orchestrator
    """
    threshold = console_level(level, verbose, quiet)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file else threshold)

    # setup_logging may run more than once per process
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(threshold)
    console.setFormatter(SymbolFormatter(CONSOLE_FORMAT, use_colors=sys.stdout.isatty()))
    logger.addHandler(console)

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        to_file = logging.FileHandler(path, encoding="utf-8")
        to_file.setLevel(logging.DEBUG)
        to_file.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATEFMT))
        logger.addHandler(to_file)

    logger.propagate = propagate
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Application logger, or a named child of it (e.g. "hosting")."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}" if name else LOGGER_NAME)


class SymbolFormatter(logging.Formatter):
    """
    Prefixes each record with a level symbol, coloured on a terminal.

    Exposes the prefix as %(level_symbol)s.
    """

    RESET = "\033[0m"
    # level -> (ANSI colour, symbol)
    STYLES = {
        logging.DEBUG: ("\033[36m", "🔍"),
        logging.INFO: ("\033[32m", "✓"),
        logging.WARNING: ("\033[33m", "⚠️"),
        logging.ERROR: ("\033[31m", "✗"),
        logging.CRITICAL: ("\033[1;31m", "🚨"),
    }

    def __init__(self, fmt: str, use_colors: bool = True):
        super().__init__(fmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        style = self.STYLES.get(record.levelno)
        if style is None:
            record.level_symbol = record.levelname
        elif self.use_colors:
            record.level_symbol = f"{style[0]}{style[1]}{self.RESET}"
        else:
            record.level_symbol = style[1]
        return super().format(record)
