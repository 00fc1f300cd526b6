"""
Release and tag queries against hosting providers.

GitHub is queried through the `gh` CLI; GitLab-style secondary hosts through
their REST API (v4). Both implement the ReleaseHost protocol so tests can
substitute an in-memory host.
"""

from __future__ import annotations

import http.client
import json
import logging
import os
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Protocol

from .common import CommandError, ReleaseNotesError, run_command
from .resolver import RepositoryCoordinate, SecondaryHost
from .versions import Tag

logger = logging.getLogger(__name__)

USER_AGENT = "brew-release-notes/1.0"
# Maximum page size accepted by the GitHub and GitLab APIs
MAX_PAGE_SIZE = 100


class CollectionError(ReleaseNotesError):
    """Raised when release data collection fails."""
    pass


class NetworkError(CollectionError):
    """Raised when network requests or hosting CLI calls fail."""
    pass


class NotFoundError(CollectionError):
    """Raised when the requested release, tag or project does not exist."""
    pass


class ParseError(CollectionError):
    """Raised when response parsing fails."""
    pass


class ReleaseHost(Protocol):
    """Queries needed from a hosting provider, one method per query."""

    def list_tags(self, coordinate: RepositoryCoordinate, limit: int = 200) -> list[Tag]: ...

    def release_body(self, coordinate: RepositoryCoordinate, tag: Tag) -> str | None: ...

    def tag_message(self, coordinate: RepositoryCoordinate, tag: Tag) -> str | None: ...


def http_get(url: str, timeout: float | None = None, headers: dict[str, str] | None = None) -> bytes:
    """Perform HTTP GET request.

    Args:
        url: URL to fetch
        timeout: Timeout in seconds (None uses the socket default)
        headers: Optional HTTP headers

    Returns:
        Response body as bytes

    Raises:
        NotFoundError: On HTTP 404
        NetworkError: If the request fails otherwise
    """
    default_headers = {"User-Agent": USER_AGENT}
    if headers:
        default_headers.update(headers)

    req = urllib.request.Request(url, headers=default_headers)
    try:
        if timeout is None:
            response = urllib.request.urlopen(req)
        else:
            response = urllib.request.urlopen(req, timeout=timeout)
        with response:
            return response.read()
    except urllib.error.HTTPError as e:
        if e.code == 404:
            raise NotFoundError(f"Not found: {url}") from e
        raise NetworkError(f"Failed to fetch {url}: HTTP {e.code}") from e
    except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
        raise NetworkError(f"Failed to fetch {url}: {e}") from e


def _loads(payload: bytes | str, what: str) -> Any:
    try:
        return json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(f"Invalid JSON from {what}: {e}") from e


class GitHubCLI:
    """ReleaseHost for github.com backed by the `gh` command."""

    def __init__(self, executable: str = "gh", timeout: float | None = None):
        self.executable = executable
        self.timeout = timeout

    def _gh(self, *args: str) -> str:
        try:
            return run_command([self.executable, *args], timeout=self.timeout)
        except CommandError as e:
            if "not found" in e.stderr.lower() or "404" in e.stderr:
                raise NotFoundError(str(e)) from e
            raise NetworkError(str(e)) from e

    def list_tags(self, coordinate: RepositoryCoordinate, limit: int = 200) -> list[Tag]:
        """
        List releases (newest first, as gh returns them).

        Repositories that publish plain tags without releases fall back to
        the tags endpoint.
        """
        output = self._gh(
            "release", "list",
            "--repo", coordinate.slug,
            "--limit", str(limit),
            "--json", "tagName,isPrerelease",
        )
        releases = _loads(output or "[]", f"gh release list {coordinate.slug}")
        tags = [
            Tag.from_raw(r["tagName"], prerelease=bool(r.get("isPrerelease")))
            for r in releases
            if isinstance(r, dict) and r.get("tagName")
        ]
        if tags:
            logger.debug(f"GitHub {coordinate.slug}: {len(tags)} release(s)")
            return tags

        output = self._gh(
            "api", f"repos/{coordinate.slug}/tags?per_page={min(limit, MAX_PAGE_SIZE)}",
        )
        plain = _loads(output or "[]", f"gh api repos/{coordinate.slug}/tags")
        tags = [Tag.from_raw(t["name"]) for t in plain if isinstance(t, dict) and t.get("name")]
        logger.debug(f"GitHub {coordinate.slug}: no releases, {len(tags)} tag(s)")
        return tags

    def release_body(self, coordinate: RepositoryCoordinate, tag: Tag) -> str | None:
        """Body of the release for tag, or None if there is no such release."""
        try:
            output = self._gh(
                "release", "view", tag.raw,
                "--repo", coordinate.slug,
                "--json", "body",
            )
        except NotFoundError:
            return None
        data = _loads(output, f"gh release view {tag.raw}")
        return (data or {}).get("body") or None

    def tag_message(self, coordinate: RepositoryCoordinate, tag: Tag) -> str | None:
        """GitHub release notes come from releases only."""
        return None


class GitLabAPI:
    """ReleaseHost for GitLab-style instances using the REST API v4."""

    def __init__(self, timeout: float | None = None, token: str | None = None):
        self.timeout = timeout
        self.token = token if token is not None else os.environ.get("GITLAB_TOKEN", "")

    def _project_url(self, coordinate: RepositoryCoordinate) -> str:
        if not isinstance(coordinate.host, SecondaryHost):
            raise ValueError(f"Not a GitLab coordinate: {coordinate}")
        project = urllib.parse.quote(coordinate.slug, safe="")
        return f"https://{coordinate.host.domain}/api/v4/projects/{project}"

    def _get(self, url: str) -> Any:
        headers = {"PRIVATE-TOKEN": self.token} if self.token else None
        return _loads(http_get(url, timeout=self.timeout, headers=headers), url)

    def list_tags(self, coordinate: RepositoryCoordinate, limit: int = 200) -> list[Tag]:
        """List releases, falling back to repository tags when there are none."""
        base = self._project_url(coordinate)
        per_page = min(limit, MAX_PAGE_SIZE)

        releases = self._get(f"{base}/releases?per_page={per_page}")
        tags = [
            Tag.from_raw(r["tag_name"], prerelease=bool(r.get("upcoming_release")))
            for r in releases or []
            if isinstance(r, dict) and r.get("tag_name")
        ]
        if tags:
            logger.debug(f"GitLab {coordinate}: {len(tags)} release(s)")
            return tags

        plain = self._get(f"{base}/repository/tags?per_page={per_page}")
        tags = [Tag.from_raw(t["name"]) for t in plain or [] if isinstance(t, dict) and t.get("name")]
        logger.debug(f"GitLab {coordinate}: no releases, {len(tags)} tag(s)")
        return tags

    def release_body(self, coordinate: RepositoryCoordinate, tag: Tag) -> str | None:
        """Description of the release for tag, or None if absent."""
        url = f"{self._project_url(coordinate)}/releases/{urllib.parse.quote(tag.raw, safe='')}"
        try:
            data = self._get(url)
        except NotFoundError:
            return None
        return (data or {}).get("description") or None

    def tag_message(self, coordinate: RepositoryCoordinate, tag: Tag) -> str | None:
        """Annotation message of the tag, or its commit message."""
        url = f"{self._project_url(coordinate)}/repository/tags/{urllib.parse.quote(tag.raw, safe='')}"
        try:
            data = self._get(url) or {}
        except NotFoundError:
            return None
        message = (data.get("message") or "").strip()
        if message:
            return message
        commit = data.get("commit") or {}
        return (commit.get("message") or "").strip() or None
