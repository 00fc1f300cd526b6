"""
Release note fetching with per-host fallbacks.

Primary host: the release body for the tag.
Secondary hosts: the release body, then the tag's message.
Anything empty or failed becomes the placeholder; failures never escape a
single tag.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .config import DEFAULT_PLACEHOLDER
from .hosting import CollectionError, ReleaseHost
from .resolver import PrimaryHost, RepositoryCoordinate, SecondaryHost
from .versions import Tag


@dataclass(frozen=True)
class ReleaseEntry:
    """A tag paired with its note body (placeholder when none)."""

    tag: Tag
    body: str


class ReleaseNoteFetcher:
    """Dispatches tag listing and note fetching to the host of a coordinate."""

    def __init__(
        self,
        primary: ReleaseHost,
        secondary: ReleaseHost,
        logger: logging.Logger,
        placeholder: str = DEFAULT_PLACEHOLDER,
        release_limit: int = 200,
        exclude_prereleases: bool = True,
    ):
        self.primary = primary
        self.secondary = secondary
        self.logger = logger
        self.placeholder = placeholder
        self.release_limit = release_limit
        self.exclude_prereleases = exclude_prereleases

    def host_for(self, coordinate: RepositoryCoordinate) -> ReleaseHost:
        if isinstance(coordinate.host, PrimaryHost):
            return self.primary
        if isinstance(coordinate.host, SecondaryHost):
            return self.secondary
        raise ValueError(f"No release host for unsupported coordinate: {coordinate}")

    def list_tags(self, coordinate: RepositoryCoordinate) -> list[Tag]:
        """
        List the repository's tags in fetch order, prereleases removed.

        Raises:
            CollectionError: If the listing fails (the caller skips the package)
        """
        tags = self.host_for(coordinate).list_tags(coordinate, limit=self.release_limit)
        if self.exclude_prereleases:
            tags = [t for t in tags if not t.prerelease]
        return tags

    def fetch(self, coordinate: RepositoryCoordinate, tag: Tag) -> str:
        """
        Fetch the note body for one tag.

        Returns:
            The note text, or the placeholder when none is available
        """
        host = self.host_for(coordinate)
        try:
            body = host.release_body(coordinate, tag)
            if not (body or "").strip() and isinstance(coordinate.host, SecondaryHost):
                body = host.tag_message(coordinate, tag)
        except CollectionError as e:
            self.logger.warning(f"Could not fetch notes for {tag.raw} from {coordinate}: {e}")
            return self.placeholder

        if not (body or "").strip():
            return self.placeholder
        return body.rstrip("\n")

    def fetch_entries(self, coordinate: RepositoryCoordinate, tags: list[Tag]) -> list[ReleaseEntry]:
        """Fetch notes for tags, preserving their order."""
        entries = []
        for tag in tags:
            self.logger.info(f"    Fetching notes for {tag.raw}...")
            entries.append(ReleaseEntry(tag=tag, body=self.fetch(coordinate, tag)))
        return entries
