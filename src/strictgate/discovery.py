# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Filesystem traversal yielding candidate source files."""

from __future__ import annotations

import fnmatch
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Final

ALWAYS_EXCLUDE_DIRS: Final[frozenset[str]] = frozenset(
    {".git", ".hg", ".svn", ".pixi", "__pycache__", ".venv", "node_modules"},
)


@dataclass(frozen=True, slots=True)
class SourceWalk:
    """Lazy, finite, restartable sequence of source files under ``root``.

    Every call to :meth:`__iter__` walks the filesystem afresh, so the walk can
    be consumed any number of times. Files are yielded in sorted order to keep
    whole-project builds deterministic.

    Attributes:
        root: Directory to traverse; a missing directory yields nothing.
        suffix: Required file suffix such as ``.mojo``.
        name_glob: Optional ``fnmatch`` pattern applied to the file stem.
    """

    root: Path
    suffix: str
    name_glob: str | None = None

    def __iter__(self) -> Iterator[Path]:
        if not self.root.is_dir():
            return
        for directory, dirnames, filenames in iter_paths(self.root):
            dirnames.sort()
            for filename in sorted(filenames):
                if self._accepts(filename):
                    yield directory / filename

    def _accepts(self, filename: str) -> bool:
        if not filename.endswith(self.suffix):
            return False
        if self.name_glob is None:
            return True
        stem = filename[: -len(self.suffix)] if self.suffix else filename
        return fnmatch.fnmatchcase(stem, self.name_glob)


def iter_paths(
    root: Path,
    *,
    skip_names: Iterable[str] = ALWAYS_EXCLUDE_DIRS,
) -> Iterator[tuple[Path, list[str], list[str]]]:
    """Return an iterator over ``(directory, dirnames, filenames)`` triples.

    Args:
        root: Root directory whose descendants should be traversed.
        skip_names: Directory names pruned from the walk.

    Returns:
        Iterator[tuple[Path, list[str], list[str]]]: Iterator yielding directory walk tuples.
    """

    excluded = frozenset(skip_names)
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [name for name in dirnames if name not in excluded]
        yield Path(dirpath), dirnames, filenames


__all__ = ["ALWAYS_EXCLUDE_DIRS", "SourceWalk", "iter_paths"]
