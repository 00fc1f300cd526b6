"""
Persisted ignore list.

A plain-text file with one package identifier per line, kept sorted and
deduplicated. The tool only ever adds names; removing one is a manual edit.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence


@dataclass(frozen=True)
class IgnoreList:
    """Loaded ignore list and the file backing it."""

    path: Path
    names: tuple[str, ...] = ()

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def __len__(self) -> int:
        return len(self.names)


def _clean(names: Iterable[str]) -> tuple[str, ...]:
    return tuple(sorted({n.strip() for n in names if n and n.strip()}))


def load_ignore_list(path: str | Path) -> IgnoreList:
    """
    Load the ignore list, creating an empty file if absent.

    Args:
        path: Ignore list file path

    Returns:
        IgnoreList instance
    """
    path = Path(path).expanduser()
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch()
        return IgnoreList(path=path)

    with open(path, "r", encoding="utf-8") as f:
        return IgnoreList(path=path, names=_clean(f.read().splitlines()))


def is_ignored(ignore_list: IgnoreList, name: str) -> bool:
    """Whether a package identifier is on the ignore list."""
    return name in ignore_list


def write_ignore_list(ignore_list: IgnoreList) -> None:
    """
    Write the ignore list to its file.

    Raises:
        IOError: If the file cannot be written
    """
    path = ignore_list.path
    content = "".join(f"{name}\n" for name in ignore_list.names)

    # Atomic write: write to temp file then rename
    try:
        temp_path = path.with_name(path.name + ".tmp")
        with open(temp_path, "w", encoding="utf-8") as f:
            f.write(content)
        temp_path.replace(path)
    except OSError as e:
        raise IOError(f"Failed to write ignore list {path}: {e}") from e


def merge_ignored(ignore_list: IgnoreList, names: Sequence[str]) -> IgnoreList:
    """Ignore list with names added, sorted and deduplicated, without writing it."""
    return IgnoreList(path=ignore_list.path, names=_clean([*ignore_list.names, *names]))


def append_ignored(ignore_list: IgnoreList, names: Sequence[str]) -> IgnoreList:
    """
    Add names to the ignore list and persist it immediately.

    Args:
        ignore_list: Current ignore list
        names: Identifiers to add (duplicates and blanks are dropped)

    Returns:
        The persisted, sorted and deduplicated ignore list

    Raises:
        IOError: If the file cannot be written
    """
    updated = merge_ignored(ignore_list, names)
    write_ignore_list(updated)
    return updated


def filter_ignored(names: Sequence[str], ignore_list: IgnoreList) -> list[str]:
    """Names not on the ignore list, in their original order."""
    return [n for n in names if not is_ignored(ignore_list, n)]
