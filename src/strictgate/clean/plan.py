# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Planning helpers for artefact cleanup."""

from __future__ import annotations

import os
import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Final

from strictgate.config import CleanConfig, LayoutConfig

PROTECTED_DIRECTORIES: Final[set[str]] = {".git", ".hg", ".svn"}


class CleanError(OSError):
    """Raised when a planned path cannot be removed."""


class CleanKind(str, Enum):
    """Categorise cleanup targets for reporting."""

    BUILD_OUTPUT = "build output"
    DIRECTORY = "directory"
    DEBUG_SYMBOLS = "debug symbols"
    BINARY = "executable"
    CACHE = "dependency cache"


@dataclass(frozen=True, slots=True)
class CleanPlanItem:
    """Describe a single filesystem path scheduled for cleanup."""

    path: Path
    kind: CleanKind


@dataclass(slots=True)
class CleanPlan:
    """Represent the cleanup targets discovered for a project."""

    items: list[CleanPlanItem] = field(default_factory=list)

    @property
    def paths(self) -> list[Path]:
        """Return the filesystem paths slated for removal.

        Returns:
            list[Path]: Paths that will be removed when the plan executes.
        """

        return [item.path for item in self.items]


class CleanPlanner:
    """Build a cleanup plan from the layout and cleanup configuration."""

    def __init__(self, *, include_cache: bool = False) -> None:
        """Initialise the planner.

        Args:
            include_cache: When ``True`` configured dependency caches are planned too.
        """

        self._include_cache = include_cache

    def plan(self, root: Path, config: CleanConfig, layout: LayoutConfig) -> CleanPlan:
        """Build a cleanup plan for ``root``.

        Only paths that currently exist are planned, which makes a second
        cleanup of an already-clean tree an empty plan.

        Args:
            root: Project root scanned for cleanup targets.
            config: Configuration naming directories, patterns and binaries.
            layout: Layout supplying the build output directory.

        Returns:
            CleanPlan: Plan describing discovered cleanup items in stable order.
        """

        root = root.resolve()
        candidates: list[CleanPlanItem] = [CleanPlanItem(root / layout.build_dir, CleanKind.BUILD_OUTPUT)]
        candidates.extend(CleanPlanItem(root / entry, CleanKind.DIRECTORY) for entry in config.directories)
        for pattern in config.patterns:
            candidates.extend(
                CleanPlanItem(match, CleanKind.DEBUG_SYMBOLS) for match in sorted(root.glob(pattern))
            )
        candidates.extend(
            CleanPlanItem(root / name, CleanKind.BINARY)
            for name in config.binaries
            if (root / name).is_file()
        )
        if self._include_cache:
            candidates.extend(
                CleanPlanItem(_expand(entry, root), CleanKind.CACHE) for entry in config.cache_directories
            )
        return CleanPlan(items=_dedupe(item for item in candidates if _eligible(item.path, root)))


def _expand(entry: str, root: Path) -> Path:
    expanded = Path(os.path.expandvars(entry)).expanduser()
    return expanded if expanded.is_absolute() else root / expanded


def _eligible(path: Path, root: Path) -> bool:
    if not (path.exists() or path.is_symlink()):
        return False
    if path == root:
        return False
    try:
        relative = path.relative_to(root)
    except ValueError:
        relative = path
    return not any(part in PROTECTED_DIRECTORIES for part in relative.parts)


def _dedupe(items: Iterable[CleanPlanItem]) -> list[CleanPlanItem]:
    seen: set[Path] = set()
    ordered: list[CleanPlanItem] = []
    for item in items:
        if item.path in seen:
            continue
        seen.add(item.path)
        ordered.append(item)
    return ordered


def remove_path(path: Path) -> None:
    """Remove ``path`` from the filesystem.

    Paths that vanished since planning are ignored; every other OS error is
    raised as :class:`CleanError` carrying the original message.

    Args:
        path: Filesystem path scheduled for deletion.

    Raises:
        CleanError: If the operating system refuses the removal.
    """

    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink(missing_ok=True)
    except FileNotFoundError:
        return
    except OSError as exc:
        raise CleanError(f"Unable to remove {path}: {exc.strerror or exc}") from exc


__all__ = [
    "PROTECTED_DIRECTORIES",
    "CleanError",
    "CleanKind",
    "CleanPlan",
    "CleanPlanItem",
    "CleanPlanner",
    "remove_path",
]
