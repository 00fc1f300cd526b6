"""
brew-release-notes - Markdown release notes for outdated Homebrew packages.

Checks which installed Homebrew packages are outdated, lets you add
packages to an ignore list interactively, and writes one report per
remaining package with the release notes of every newer upstream version.

Usage:
    brew-release-notes                    # Interactive run
    brew-release-notes --no-interactive   # Skip the ignore-list menu
    brew-release-notes --casks --dry-run  # Include casks, only list versions
"""

from __future__ import annotations

import argparse
import logging
import sys

from . import __version__
from .config import Config, load_config, validate_config
from .homebrew import Homebrew, PackageManagerError
from .hosting import GitHubCLI, GitLabAPI
from .logging_config import setup_logging
from .notes import ReleaseNoteFetcher
from .orchestrator import run_release_notes
from .prerequisites import PrerequisiteError
from .render import render_summary
from .selector import GumSelector

EXIT_OK = 0
EXIT_MISSING_TOOL = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="brew-release-notes",
        description=(
            "Generate Markdown reports with the release notes of every upstream "
            "version newer than your installed Homebrew packages."
        ),
        epilog=(
            "Requires brew, gh and gum (gum only for the interactive menu). "
            "Reports are written to a new '<prefix>_YYYYMMDD_HHMMSS' directory."
        ),
    )
    parser.add_argument("--config", help="Path to a YAML/JSON configuration file")
    parser.add_argument("--ignore-file", help="Ignore list file (default: ignored_formulae.txt)")
    parser.add_argument("--output-root", help="Directory in which the report directory is created")
    parser.add_argument("--casks", action="store_true", default=None, help="Also process outdated casks")
    parser.add_argument(
        "--no-interactive",
        action="store_true",
        help="Do not show the ignore-list selection menu",
    )
    parser.add_argument("--limit", type=int, help="Maximum releases listed per repository")
    parser.add_argument(
        "--include-prereleases",
        action="store_true",
        help="Keep releases marked as prereleases",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only compute newer versions; do not fetch notes or write files",
    )
    parser.add_argument("--log-file", help="Also write a DEBUG log to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only print warnings and errors")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def config_from_args(args: argparse.Namespace) -> Config:
    """
    Load configuration files and apply command line overrides.

    Raises:
        ValueError: If the configuration is invalid
    """
    config = load_config(args.config)
    return config.with_overrides(
        ignore_file=args.ignore_file,
        output_root=args.output_root,
        include_casks=args.casks,
        interactive=False if args.no_interactive else None,
        log_file=args.log_file,
        release_limit=args.limit,
        exclude_prereleases=False if args.include_prereleases else None,
    )


def build_fetcher(config: Config, logger: logging.Logger) -> ReleaseNoteFetcher:
    """Release note fetcher wired to the real hosting clients."""
    timeout = config.reports.timeout_seconds
    return ReleaseNoteFetcher(
        primary=GitHubCLI(timeout=timeout),
        secondary=GitLabAPI(timeout=timeout),
        logger=logger,
        placeholder=config.reports.placeholder,
        release_limit=config.reports.release_limit,
        exclude_prereleases=config.reports.exclude_prereleases,
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_USAGE

    logger = setup_logging(log_file=config.log_file, verbose=args.verbose, quiet=args.quiet)
    for warning in validate_config(config):
        logger.warning(f"Config: {warning}")

    selector = GumSelector(logger) if config.interactive else None

    try:
        summary = run_release_notes(
            config,
            package_manager=Homebrew(timeout=config.reports.timeout_seconds),
            fetcher=build_fetcher(config, logger),
            selector=selector,
            logger=logger,
            dry_run=args.dry_run,
        )
    except PrerequisiteError as e:
        logger.critical(str(e))
        return EXIT_MISSING_TOOL
    except PackageManagerError as e:
        logger.error(f"Could not list outdated packages: {e}")
        return EXIT_MISSING_TOOL
    except KeyboardInterrupt:
        print("", file=sys.stderr)
        return EXIT_INTERRUPTED

    if summary.outcomes and not args.quiet:
        print("")
        print(render_summary(summary))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
