"""
Shared fixtures: in-memory package manager, release host and selector.
"""

from __future__ import annotations

import datetime
import logging

import pytest

from brew_release_notes.config import Config
from brew_release_notes.homebrew import OutdatedPackage, Package, PackageManagerError
from brew_release_notes.hosting import NetworkError
from brew_release_notes.logging_config import LOGGER_NAME
from brew_release_notes.notes import ReleaseNoteFetcher
from brew_release_notes.versions import Tag


FIXED_NOW = datetime.datetime(2024, 5, 17, 14, 30, 5)


class FakePackageManager:
    """PackageManagerQuery answering from dictionaries."""

    def __init__(self, outdated=None, packages=None, error=None):
        self._outdated = list(outdated or [])
        self._packages = dict(packages or {})
        self._error = error
        self.info_calls: list[str] = []
        self.include_casks = None

    def outdated(self, include_casks: bool = False) -> list[OutdatedPackage]:
        self.include_casks = include_casks
        if self._error:
            raise self._error
        return list(self._outdated)

    def info(self, outdated: OutdatedPackage) -> Package:
        self.info_calls.append(outdated.name)
        package = self._packages.get(outdated.name)
        if package is None:
            raise PackageManagerError(f"No available formula with the name \"{outdated.name}\"")
        return package


class FakeReleaseHost:
    """ReleaseHost keyed by repository slug."""

    def __init__(self, tags=None, bodies=None, messages=None, failing_tags=()):
        self.tags = dict(tags or {})
        self.bodies = dict(bodies or {})
        self.messages = dict(messages or {})
        self.failing_tags = set(failing_tags)
        self.list_calls: list[tuple[str, int]] = []
        self.body_calls: list[tuple[str, str]] = []
        self.message_calls: list[tuple[str, str]] = []

    def list_tags(self, coordinate, limit=200):
        self.list_calls.append((coordinate.slug, limit))
        value = self.tags.get(coordinate.slug, [])
        if isinstance(value, Exception):
            raise value
        return [t if isinstance(t, Tag) else Tag.from_raw(t) for t in value]

    def release_body(self, coordinate, tag):
        self.body_calls.append((coordinate.slug, tag.raw))
        if tag.raw in self.failing_tags:
            raise NetworkError(f"release view {tag.raw} failed")
        return self.bodies.get((coordinate.slug, tag.raw))

    def tag_message(self, coordinate, tag):
        self.message_calls.append((coordinate.slug, tag.raw))
        return self.messages.get((coordinate.slug, tag.raw))


class FakeSelector:
    """MultiSelector returning a fixed choice."""

    def __init__(self, choice=()):
        self.choice = list(choice)
        self.calls: list[tuple[str, list[str]]] = []

    def choose(self, header, candidates):
        self.calls.append((header, list(candidates)))
        return [c for c in self.choice if c in candidates]


@pytest.fixture(autouse=True)
def reset_app_logger():
    """Undo setup_logging() so records keep reaching caplog."""
    yield
    app_logger = logging.getLogger(LOGGER_NAME)
    for handler in list(app_logger.handlers):
        handler.close()
    app_logger.handlers.clear()
    app_logger.setLevel(logging.NOTSET)
    app_logger.propagate = True


@pytest.fixture
def logger():
    """Logger that propagates so caplog sees the records."""
    log = logging.getLogger("brew_release_notes.test")
    log.setLevel(logging.DEBUG)
    log.propagate = True
    return log


@pytest.fixture
def primary_host():
    return FakeReleaseHost()


@pytest.fixture
def secondary_host():
    return FakeReleaseHost()


@pytest.fixture
def fetcher(primary_host, secondary_host, logger):
    return ReleaseNoteFetcher(primary=primary_host, secondary=secondary_host, logger=logger)


@pytest.fixture
def config(tmp_path):
    """Config writing into a temporary directory."""
    return Config(
        ignore_file=str(tmp_path / "ignored_formulae.txt"),
        output_root=str(tmp_path),
    )
