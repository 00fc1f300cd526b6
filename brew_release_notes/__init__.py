"""
brew-release-notes - Release notes for outdated Homebrew packages.

Core Modules:
- Package metadata: Homebrew outdated listing and package info
- Resolution: Repository coordinates from package URLs
- Versions: Natural version ordering and newer-version windows
- Hosting: GitHub (gh CLI) and GitLab (REST API) release queries
- Reports: Markdown report assembly, ignore list, interactive selection
- Orchestration: The end-to-end run and its summary
"""

__version__ = "1.0.0"
__author__ = "brew-release-notes Contributors"

# Version info for backward compatibility
VERSION = __version__

# Foundation
from .common import CommandError, ReleaseNotesError, run_command
from .config import Config, ReportPreferences, load_config, load_config_file, validate_config
from .logging_config import setup_logging, get_logger
from .prerequisites import PrerequisiteError, check_prerequisites, ensure_prerequisites

# Package metadata and resolution
from .homebrew import Homebrew, OutdatedPackage, Package, PackageKind, PackageManagerError
from .resolver import (
    PrimaryHost,
    SecondaryHost,
    Unsupported,
    RepositoryCoordinate,
    ResolutionError,
    classify_url,
    parse_coordinate,
    resolve,
)

# Versions and release data
from .versions import Tag, VersionWindow, compare_versions, compute_window, normalize_version
from .hosting import CollectionError, GitHubCLI, GitLabAPI, NetworkError, NotFoundError, ParseError
from .notes import ReleaseEntry, ReleaseNoteFetcher

# Reports
from .report import assemble_report, make_output_dir, report_filename, write_report
from .ignore_list import IgnoreList, append_ignored, filter_ignored, is_ignored, load_ignore_list
from .selector import GumSelector

# Orchestration
from .orchestrator import PackageOutcome, RunSummary, process_package, run_release_notes
from .render import render_summary

__all__ = [
    # Version
    "__version__",
    "VERSION",
    # Foundation
    "CommandError",
    "ReleaseNotesError",
    "run_command",
    "Config",
    "ReportPreferences",
    "load_config",
    "load_config_file",
    "validate_config",
    "setup_logging",
    "get_logger",
    "PrerequisiteError",
    "check_prerequisites",
    "ensure_prerequisites",
    # Package metadata and resolution
    "Homebrew",
    "OutdatedPackage",
    "Package",
    "PackageKind",
    "PackageManagerError",
    "PrimaryHost",
    "SecondaryHost",
    "Unsupported",
    "RepositoryCoordinate",
    "ResolutionError",
    "classify_url",
    "parse_coordinate",
    "resolve",
    # Versions and release data
    "Tag",
    "VersionWindow",
    "compare_versions",
    "compute_window",
    "normalize_version",
    "CollectionError",
    "GitHubCLI",
    "GitLabAPI",
    "NetworkError",
    "NotFoundError",
    "ParseError",
    "ReleaseEntry",
    "ReleaseNoteFetcher",
    # Reports
    "assemble_report",
    "make_output_dir",
    "report_filename",
    "write_report",
    "IgnoreList",
    "append_ignored",
    "filter_ignored",
    "is_ignored",
    "load_ignore_list",
    "GumSelector",
    # Orchestration
    "PackageOutcome",
    "RunSummary",
    "process_package",
    "run_release_notes",
    "render_summary",
]
