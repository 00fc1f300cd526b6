"""
End-to-end run: enumerate outdated packages, update the ignore list, and
write one release-notes report per remaining package.

Packages are processed strictly one after another. Every per-package
problem (unresolvable repository, no tags, nothing newer, metadata failure)
is logged and skipped; only missing prerequisites and a failed enumeration
stop a run.
"""

from __future__ import annotations

import datetime
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from .config import Config
from .hosting import CollectionError
from .homebrew import OutdatedPackage, PackageManagerError, PackageManagerQuery
from .ignore_list import (
    IgnoreList,
    append_ignored,
    filter_ignored,
    is_ignored,
    load_ignore_list,
    merge_ignored,
)
from .notes import ReleaseNoteFetcher
from .prerequisites import ensure_prerequisites
from .report import assemble_report, make_output_dir, report_filename, write_report
from .resolver import ResolutionError, resolve
from .selector import MultiSelector
from .versions import compute_window, is_major_upgrade


STATUS_REPORTED = "reported"
STATUS_UP_TO_DATE = "up_to_date"
STATUS_UNRESOLVED = "unresolved"
STATUS_NO_TAGS = "no_tags"
STATUS_FAILED = "failed"

IGNORE_PROMPT_HEADER = "Select packages to add to the ignore list:"
SEPARATOR = "-" * 50


@dataclass(frozen=True)
class PackageOutcome:
    """
    Result of processing one package.

    Attributes:
        name: Package identifier
        status: One of the STATUS_* values
        installed_version: Installed version
        report_path: Written report (None when skipped or dry run)
        reason: Human readable reason for a skip
        versions_count: Number of newer versions found
    """
    name: str
    status: str
    installed_version: str = ""
    report_path: str | None = None
    reason: str = ""
    versions_count: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "status": self.status,
            "installed_version": self.installed_version,
            "report_path": self.report_path,
            "reason": self.reason,
            "versions_count": self.versions_count,
        }


@dataclass(frozen=True)
class RunSummary:
    """
    Result of a complete run.

    Attributes:
        output_dir: Report directory (None when nothing was written)
        outcomes: Per-package outcomes in processing order
        newly_ignored: Names added to the ignore list during this run
        duration_seconds: Total run time
    """
    output_dir: str | None = None
    outcomes: tuple[PackageOutcome, ...] = ()
    newly_ignored: tuple[str, ...] = ()
    duration_seconds: float = 0.0

    @property
    def reports(self) -> list[str]:
        return [o.report_path for o in self.outcomes if o.report_path]

    def counts(self) -> dict[str, int]:
        """Number of outcomes per status."""
        result: dict[str, int] = {}
        for outcome in self.outcomes:
            result[outcome.status] = result.get(outcome.status, 0) + 1
        return result

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "output_dir": self.output_dir,
            "outcomes": [o.to_dict() for o in self.outcomes],
            "newly_ignored": list(self.newly_ignored),
            "duration_seconds": self.duration_seconds,
        }


def update_ignore_list(
    names: Sequence[str],
    ignore_list: IgnoreList,
    selector: MultiSelector | None,
    logger: logging.Logger,
) -> tuple[IgnoreList, list[str]]:
    """
    Offer not-yet-ignored names for selection and persist the choice.

    Args:
        names: Outdated package identifiers
        ignore_list: Current ignore list
        selector: Selection UI (None disables the prompt)
        logger: Run logger

    Returns:
        Tuple of (updated ignore list, names newly added). When the file
        cannot be written the updated list still applies to this run.
    """
    candidates = filter_ignored(names, ignore_list)
    if not candidates or selector is None:
        return ignore_list, []

    logger.info("Found outdated packages that are not on the ignore list.")
    chosen = selector.choose(IGNORE_PROMPT_HEADER, candidates)
    if not chosen:
        return ignore_list, []

    try:
        updated = append_ignored(ignore_list, chosen)
    except OSError as e:
        updated = merge_ignored(ignore_list, chosen)
        logger.warning(f"{e}. The selection applies to this run only.")
        return updated, list(chosen)

    logger.info(f"Updated ignore list '{updated.path}' ({len(chosen)} added).")
    return updated, list(chosen)


def process_package(
    outdated: OutdatedPackage,
    package_manager: PackageManagerQuery,
    fetcher: ReleaseNoteFetcher,
    config: Config,
    output_dir: Path | None,
    logger: logging.Logger,
    now: datetime.datetime | None = None,
) -> PackageOutcome:
    """
    Resolve, fetch and render the report for one package.

    Never raises for per-package problems; they become the outcome.

    Args:
        outdated: Outdated package entry
        package_manager: Metadata source
        fetcher: Release note fetcher
        config: Run configuration
        output_dir: Report directory (None for a dry run)
        logger: Run logger
        now: Generation time for the report header

    Returns:
        PackageOutcome
    """
    name = outdated.name
    installed = outdated.installed_version

    def outcome(status: str, reason: str = "", **kwargs) -> PackageOutcome:
        return PackageOutcome(name=name, status=status, installed_version=installed, reason=reason, **kwargs)

    logger.info(SEPARATOR)
    logger.info(f"Processing {name} (installed: {installed})")

    try:
        package = package_manager.info(outdated)
    except PackageManagerError as e:
        logger.warning(f"Could not read metadata for '{name}': {e}")
        logger.info(f"Skipped report for '{name}'.")
        return outcome(STATUS_FAILED, "metadata query failed")

    try:
        coordinate = resolve(package, config.secondary_hosts)
    except ResolutionError as e:
        logger.warning(f"{e}.")
        for line in e.details():
            logger.warning(f"   - {line}")
        logger.info(f"Skipped report for '{name}'.")
        return outcome(STATUS_UNRESOLVED, "repository not recognised")

    logger.info(f"Repository: {coordinate}")
    logger.info("Fetching version list...")
    try:
        tags = fetcher.list_tags(coordinate)
    except CollectionError as e:
        logger.warning(f"Could not list releases of '{coordinate}': {e}")
        return outcome(STATUS_NO_TAGS, "release listing failed")

    if not tags:
        logger.warning(f"No releases found in repository '{coordinate}'.")
        return outcome(STATUS_NO_TAGS, "no releases found")

    window = compute_window(installed, tags)
    for version in window.unmatched:
        logger.warning(f"Could not find the original tag for version '{version}'.")

    if not window.installed_listed:
        logger.warning(
            f"Installed version '{installed}' of '{name}' is not among the upstream tags of "
            f"'{coordinate}'; newer versions are taken from its sorted position."
        )

    if window.is_empty:
        logger.info(f"'{name}' is up to date upstream. No report needed.")
        return outcome(STATUS_UP_TO_DATE, "no newer upstream versions")

    logger.info(f"Found {len(window)} newer version(s). Generating report...")

    if output_dir is None:
        for tag in window.tags:
            logger.info(f"    would fetch notes for {tag.raw}")
        return outcome(STATUS_REPORTED, "dry run", versions_count=len(window))

    entries = fetcher.fetch_entries(coordinate, list(window.tags))
    major = is_major_upgrade(installed, window.tags[0].version)
    text = assemble_report(
        name,
        installed,
        entries,
        generated_at=now,
        target_version=package.target_version,
        placeholder=config.reports.placeholder,
        major_upgrade=major,
    )

    path = output_dir / report_filename(name, installed, package.target_version)
    try:
        write_report(path, text)
    except OSError as e:
        logger.error(f"Could not write report {path}: {e}")
        return outcome(STATUS_FAILED, "report could not be written", versions_count=len(window))

    logger.info(f"Done! Report saved to: {path}")
    return outcome(STATUS_REPORTED, report_path=str(path), versions_count=len(window))


def run_release_notes(
    config: Config,
    package_manager: PackageManagerQuery,
    fetcher: ReleaseNoteFetcher,
    selector: MultiSelector | None,
    logger: logging.Logger,
    now: datetime.datetime | None = None,
    dry_run: bool = False,
    verify_tools: bool = True,
) -> RunSummary:
    """
    Run the complete release notes workflow.

    Args:
        config: Run configuration
        package_manager: Metadata source
        fetcher: Release note fetcher
        selector: Selection UI for the ignore list (None when not interactive)
        logger: Run logger, shared with every component that reports
        now: Run time (defaults to now; names the report directory)
        dry_run: Compute version windows without fetching notes or writing files
        verify_tools: Check required external tools first

    Returns:
        RunSummary

    Raises:
        PrerequisiteError: If a required external tool is missing
        PackageManagerError: If the outdated package listing fails
    """
    start = time.time()
    now = now or datetime.datetime.now()

    if verify_tools:
        ensure_prerequisites(interactive=selector is not None)

    try:
        ignore_list = load_ignore_list(config.ignore_file)
    except OSError as e:
        logger.warning(f"Could not read ignore list '{config.ignore_file}': {e}")
        ignore_list = IgnoreList(path=Path(config.ignore_file).expanduser())

    logger.info("Checking for outdated Homebrew packages...")
    outdated = package_manager.outdated(include_casks=config.include_casks)
    if not outdated:
        logger.info("All Homebrew packages are up to date.")
        return RunSummary(duration_seconds=time.time() - start)

    ignore_list, newly_ignored = update_ignore_list(
        [p.name for p in outdated], ignore_list, selector, logger
    )

    to_process = [p for p in outdated if not is_ignored(ignore_list, p.name)]
    if not to_process:
        logger.info("All outdated packages are on the ignore list. No reports to generate.")
        return RunSummary(
            newly_ignored=tuple(newly_ignored),
            duration_seconds=time.time() - start,
        )

    output_dir = None
    if not dry_run:
        output_dir = make_output_dir(config.output_root, config.output_prefix, now)
        logger.info(f"Reports will be saved in: {output_dir}")

    outcomes = [
        process_package(p, package_manager, fetcher, config, output_dir, logger, now)
        for p in to_process
    ]

    logger.info(SEPARATOR)
    logger.info("All operations finished.")
    return RunSummary(
        output_dir=str(output_dir) if output_dir else None,
        outcomes=tuple(outcomes),
        newly_ignored=tuple(newly_ignored),
        duration_seconds=time.time() - start,
    )
