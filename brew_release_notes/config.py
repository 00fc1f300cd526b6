"""
Run configuration: defaults, YAML/JSON files and command line overrides.

Files are looked up in CONFIG_LOCATIONS; the first one found has the highest
priority and fills its unset keys from the ones after it.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields, replace
from typing import Any

import yaml

logger = logging.getLogger(__name__)


CONFIG_LOCATIONS = [
    ".brew-release-notes.yml",
    ".brew-release-notes.yaml",
    os.path.expanduser("~/.config/brew-release-notes/config.yml"),
    os.path.expanduser("~/.config/brew-release-notes/config.yaml"),
]

DEFAULT_IGNORE_FILE = "ignored_formulae.txt"
DEFAULT_OUTPUT_PREFIX = "reports"
DEFAULT_PLACEHOLDER = "*No release notes available for this version.*"
DEFAULT_RELEASE_LIMIT = 200

# GitLab instances whose domain does not start with "gitlab."
DEFAULT_SECONDARY_HOSTS = (
    "gitlab.com",
    "gitlab.gnome.org",
    "gitlab.freedesktop.org",
    "salsa.debian.org",
    "invent.kde.org",
)


@dataclass(frozen=True)
class ReportPreferences:
    """
    How releases are listed and how reports render them.

    Attributes:
        release_limit: Releases (or tags) listed per repository, 1..1000
        exclude_prereleases: Leave out releases the host flags as prereleases
        placeholder: Body shown for a version without notes
        timeout_seconds: Per-call timeout for brew, gh and GitLab (None: no limit)
    """
    release_limit: int = DEFAULT_RELEASE_LIMIT
    exclude_prereleases: bool = True
    placeholder: str = DEFAULT_PLACEHOLDER
    timeout_seconds: int | None = None

    def __post_init__(self):
        if not 1 <= self.release_limit <= 1000:
            raise ValueError(
                f"Invalid release_limit: {self.release_limit}. Must be between 1 and 1000"
            )
        if self.timeout_seconds is not None and not 1 <= self.timeout_seconds <= 300:
            raise ValueError(
                f"Invalid timeout_seconds: {self.timeout_seconds}. "
                "Must be null or between 1 and 300"
            )

    @staticmethod
    def from_dict(data: dict[str, Any]) -> ReportPreferences:
        known = {f.name for f in fields(ReportPreferences)}
        return ReportPreferences(**{k: v for k, v in data.items() if k in known})


@dataclass(frozen=True)
class Config:
    """
    Everything a run needs besides its collaborators.

    Attributes:
        version: Schema version of the file (only 1 exists)
        ignore_file: Ignore list path
        output_root: Where the timestamped report directory is created
        output_prefix: Report directory name prefix
        include_casks: Process outdated casks as well as formulae
        interactive: Show the ignore-selection menu
        secondary_hosts: Domains treated as GitLab instances, besides gitlab.*
        log_file: Optional DEBUG log file
        reports: Release listing and rendering preferences
        source: File this configuration came from (empty for defaults)
        explicit: Keys the file set, report keys included; these win a merge
            even when they equal the default
    """
    version: int = 1
    ignore_file: str = DEFAULT_IGNORE_FILE
    output_root: str = "."
    output_prefix: str = DEFAULT_OUTPUT_PREFIX
    include_casks: bool = False
    interactive: bool = True
    secondary_hosts: tuple[str, ...] = DEFAULT_SECONDARY_HOSTS
    log_file: str | None = None
    reports: ReportPreferences = field(default_factory=ReportPreferences)
    source: str = ""
    explicit: frozenset[str] = field(default=frozenset(), compare=False)

    def __post_init__(self):
        if self.version != 1:
            raise ValueError(f"Unsupported config version: {self.version}. Expected version 1")
        if not self.ignore_file:
            raise ValueError("ignore_file must not be empty")
        if not self.output_prefix or "/" in self.output_prefix:
            raise ValueError(
                f"Invalid output_prefix: {self.output_prefix!r}. Must be a non-empty name without '/'"
            )

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "") -> Config:
        """Build a Config from a parsed file; missing keys keep their defaults."""
        hosts = data.get("secondary_hosts")
        reports = data.get("reports") or {}
        return Config(
            version=data.get("version", 1),
            ignore_file=data.get("ignore_file", DEFAULT_IGNORE_FILE),
            output_root=data.get("output_root", "."),
            output_prefix=data.get("output_prefix", DEFAULT_OUTPUT_PREFIX),
            include_casks=data.get("include_casks", False),
            interactive=data.get("interactive", True),
            secondary_hosts=(
                DEFAULT_SECONDARY_HOSTS if hosts is None
                else tuple(str(h).strip().lower() for h in hosts)
            ),
            log_file=data.get("log_file"),
            reports=ReportPreferences.from_dict(reports),
            source=source,
            explicit=frozenset(data) | frozenset(reports),
        )

    def merge_with(self, other: Config) -> Config:
        """
        Fill this config's unset values from a lower-priority one.

        A value is set when its key is in `explicit` or it differs from the
        default. Secondary hosts are the union of both, in order.

        Args:
            other: Lower-priority configuration

        Returns:
            New Config
        """
        def fill(name, mine, theirs, default):
            return mine if name in self.explicit or mine != default else theirs

        base, base_reports = Config(), ReportPreferences()
        reports = ReportPreferences(**{
            f.name: fill(
                f.name,
                getattr(self.reports, f.name),
                getattr(other.reports, f.name),
                getattr(base_reports, f.name),
            )
            for f in fields(ReportPreferences)
        })
        scalars = {
            name: fill(name, getattr(self, name), getattr(other, name), getattr(base, name))
            for name in ("ignore_file", "output_root", "output_prefix", "include_casks", "interactive", "log_file")
        }
        return Config(
            version=self.version,
            secondary_hosts=tuple(dict.fromkeys(self.secondary_hosts + other.secondary_hosts)),
            reports=reports,
            source=self.source or other.source,
            explicit=self.explicit | other.explicit,
            **scalars,
        )

    def with_overrides(self, **overrides: Any) -> Config:
        """
        Apply command line values; None means "not given".

        ReportPreferences field names are applied to the reports section.

        Raises:
            ValueError: If an override is invalid
        """
        report_keys = {f.name for f in fields(ReportPreferences)}
        given = {k: v for k, v in overrides.items() if v is not None}
        nested = {k: v for k, v in given.items() if k in report_keys}
        top = {k: v for k, v in given.items() if k not in report_keys}
        if nested:
            top["reports"] = replace(self.reports, **nested)
        return replace(self, **top) if top else self


def read_config_data(file_path: str) -> dict[str, Any] | None:
    """
    Parse a configuration file (JSON for *.json, YAML otherwise).

    Returns:
        The top-level mapping ({} for an empty or non-mapping document),
        or None if the file cannot be read or parsed
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            if file_path.endswith(".json"):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        logger.debug(f"Cannot parse {file_path}: {e}")
        return None
    return data if isinstance(data, dict) else {}


def load_config_file(file_path: str) -> Config | None:
    """
    Load one configuration file.

    Invalid values are logged as a warning and the file is ignored.

    Returns:
        Config, or None if the file is missing, unparsable or invalid
    """
    if not os.path.exists(file_path):
        return None

    data = read_config_data(file_path)
    if data is None:
        return None

    try:
        config = Config.from_dict(data, source=file_path)
    except (ValueError, TypeError) as e:
        logger.warning(f"Config validation failed for {file_path}: {e}")
        return None
    logger.debug(f"Loaded config: {file_path}")
    return config


def load_config(custom_path: str | None = None) -> Config:
    """
    Load the effective configuration.

    Priority: custom_path, then CONFIG_LOCATIONS in order, then defaults.

    Args:
        custom_path: File given with --config

    Returns:
        Merged Config (defaults when no file exists)

    Raises:
        ValueError: If custom_path is given but cannot be loaded
    """
    found: list[Config] = []
    if custom_path:
        config = load_config_file(custom_path)
        if config is None:
            raise ValueError(f"Could not load config from specified path: {custom_path}")
        found.append(config)

    found.extend(c for c in map(load_config_file, CONFIG_LOCATIONS) if c is not None)
    if not found:
        logger.debug("No config files found, using defaults")
        return Config()

    merged = found[0]
    for lower in found[1:]:
        merged = merged.merge_with(lower)
    return merged


def validate_config(config: Config) -> list[str]:
    """Non-fatal problems worth a warning (empty list when none)."""
    problems = []
    if len(set(config.secondary_hosts)) != len(config.secondary_hosts):
        problems.append("Duplicate entries in secondary_hosts")
    problems.extend(
        f"secondary_hosts entry should be a bare domain: {host!r}"
        for host in config.secondary_hosts
        if not host or "/" in host
    )
    if not config.reports.placeholder.strip():
        problems.append("Empty placeholder: versions without notes will render blank sections")
    return problems
