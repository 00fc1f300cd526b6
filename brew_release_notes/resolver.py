"""
Repository resolution from package URLs.

Classifies a package's homepage, stable-source and version-control URLs
(tried in that order) into a hosting provider and an owner/name coordinate.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence, Union

from .common import ReleaseNotesError
from .homebrew import Package


PRIMARY_DOMAIN = "github.com"

# scheme://[user@]domain/path with an optional "git+" prefix
_URL_RE = re.compile(r"^(?:git\+)?(?:https?|git)://(?:[^@/]+@)?(?P<domain>[^/:?#]+)(?::\d+)?(?P<path>/[^?#]*)?")
# Secondary providers whose domain varies by installation
_SECONDARY_DOMAIN_RE = re.compile(r"^gitlab\.[a-z0-9.-]+$")


@dataclass(frozen=True)
class PrimaryHost:
    """github.com"""

    domain: str = PRIMARY_DOMAIN

    def __str__(self) -> str:
        return "github"


@dataclass(frozen=True)
class SecondaryHost:
    """GitLab-style instance identified by its domain."""

    domain: str

    def __str__(self) -> str:
        return f"gitlab:{self.domain}"


@dataclass(frozen=True)
class Unsupported:
    """No supported hosting provider."""

    domain: str = ""

    def __str__(self) -> str:
        return "unsupported"


Host = Union[PrimaryHost, SecondaryHost, Unsupported]


@dataclass(frozen=True)
class RepositoryCoordinate:
    """
    Hosting provider plus repository owner and name.

    An Unsupported coordinate always has empty owner and name.
    """
    host: Host
    owner: str = ""
    name: str = ""

    def __post_init__(self):
        if isinstance(self.host, Unsupported) and (self.owner or self.name):
            raise ValueError("Unsupported coordinates carry no owner/name")

    @property
    def slug(self) -> str:
        """owner/name"""
        return f"{self.owner}/{self.name}" if self.owner else ""

    @property
    def supported(self) -> bool:
        return not isinstance(self.host, Unsupported)

    def __str__(self) -> str:
        if isinstance(self.host, SecondaryHost):
            return f"{self.host.domain}/{self.slug}"
        return self.slug or "unsupported"


class ResolutionError(ReleaseNotesError):
    """Raised when none of a package's URLs points at a supported host."""

    def __init__(self, package: str, checked_urls: Sequence[tuple[str, str]]):
        self.package = package
        self.checked_urls = list(checked_urls)
        super().__init__(f"Could not determine the source repository for '{package}'")

    def details(self) -> list[str]:
        """One diagnostic line per checked URL."""
        return [f"checked {label}: {url or '(none)'}" for label, url in self.checked_urls]


def _domain_of(url: str) -> tuple[str, str] | None:
    match = _URL_RE.match(url.strip())
    if not match:
        return None
    domain = match.group("domain").lower()
    if domain.startswith("www."):
        domain = domain[4:]
    return domain, match.group("path") or ""


def classify_url(url: str, secondary_domains: Sequence[str] = ()) -> Host:
    """
    Classify a URL into a hosting provider.

    Args:
        url: Candidate URL
        secondary_domains: Extra GitLab-style domains to accept

    Returns:
        PrimaryHost, SecondaryHost(domain) or Unsupported
    """
    parts = _domain_of(url) if url else None
    if parts is None:
        return Unsupported()

    domain, _ = parts
    if domain == PRIMARY_DOMAIN:
        return PrimaryHost()
    if _SECONDARY_DOMAIN_RE.match(domain) or domain in {d.lower() for d in secondary_domains}:
        return SecondaryHost(domain)
    return Unsupported()


def parse_coordinate(url: str, secondary_domains: Sequence[str] = ()) -> RepositoryCoordinate | None:
    """
    Extract a repository coordinate from a single URL.

    Takes exactly the first two path segments as owner and name and strips a
    trailing ".git".

    Args:
        url: Candidate URL
        secondary_domains: Extra GitLab-style domains to accept

    Returns:
        RepositoryCoordinate, or None if the URL is not a repository on a supported host
    """
    host = classify_url(url, secondary_domains)
    if isinstance(host, Unsupported):
        return None

    _, path = _domain_of(url)
    segments = [s for s in path.split("/") if s]
    if len(segments) < 2:
        return None

    owner, name = segments[0], segments[1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    if not owner or not name:
        return None

    return RepositoryCoordinate(host=host, owner=owner, name=name)


def resolve(package: Package, secondary_domains: Sequence[str] = ()) -> RepositoryCoordinate:
    """
    Resolve the repository a package's release feed lives in.

    Candidates are tried in priority order (homepage, stable-source URL,
    version-control URL); the first match wins.

    Args:
        package: Package metadata
        secondary_domains: Extra GitLab-style domains to accept

    Returns:
        RepositoryCoordinate of a supported host

    Raises:
        ResolutionError: If no candidate URL matches, carrying the URLs checked
    """
    checked: list[tuple[str, str]] = []
    for label, url in package.candidate_urls():
        if label == "vcs" and not url:
            continue
        checked.append((label, url))
        if not url:
            continue
        coordinate = parse_coordinate(url, secondary_domains)
        if coordinate is not None:
            return coordinate

    raise ResolutionError(package.name, checked)
