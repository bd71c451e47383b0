# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Execution helpers for artefact cleanup."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from strictgate.config import CleanConfig, LayoutConfig
from strictgate.logging import info, step

from .plan import CleanPlan, CleanPlanner, remove_path


@dataclass(slots=True)
class CleanResult:
    """Capture the outcome of a cleanup operation."""

    removed: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)

    def register_removed(self, path: Path) -> None:
        """Record that ``path`` was removed during cleaning."""

        self.removed.append(path)

    def register_skipped(self, path: Path) -> None:
        """Record that ``path`` was left in place because of a dry run."""

        self.skipped.append(path)

    def __bool__(self) -> bool:
        """Return ``True`` when the cleanup produced any effect.

        Returns:
            bool: ``True`` if paths were removed or skipped, ``False`` otherwise.
        """

        return bool(self.removed or self.skipped)


def _display(path: Path, root: Path) -> str:
    try:
        relative = path.relative_to(root)
    except ValueError:
        return str(path)
    suffix = "/" if path.is_dir() else ""
    return f"{relative}{suffix}"


def clean_workspace(
    root: Path,
    *,
    config: CleanConfig,
    layout: LayoutConfig,
    include_cache: bool = False,
    dry_run: bool = False,
    use_emoji: bool = True,
) -> CleanResult:
    """Remove generated artefacts under ``root``.

    The toolchain is never invoked. Running the cleanup twice is safe: the
    second run finds nothing to remove.

    Args:
        root: Project root inspected for cleanup candidates.
        config: Cleanup configuration naming directories, patterns and binaries.
        layout: Layout supplying the build output directory.
        include_cache: When ``True`` dependency caches are removed as well.
        dry_run: When ``True`` report the plan without removing files.
        use_emoji: Flag indicating whether emoji output is desired.

    Returns:
        CleanResult: Summary describing removed and skipped paths.

    Raises:
        CleanError: If a planned path cannot be removed.
    """

    root = root.resolve()
    step("Cleaning build artifacts...", symbol="🧹", use_emoji=use_emoji)
    plan: CleanPlan = CleanPlanner(include_cache=include_cache).plan(root, config, layout)

    result = CleanResult()
    for item in plan.items:
        label = _display(item.path, root)
        if dry_run:
            info(f"DRY RUN: would remove {item.kind.value} {label}", use_emoji=use_emoji)
            result.register_skipped(item.path)
            continue
        remove_path(item.path)
        info(f"Removed {item.kind.value} {label}", use_emoji=use_emoji)
        result.register_removed(item.path)

    if not plan.items:
        info("Nothing to clean", use_emoji=use_emoji)
    return result


__all__ = ["CleanResult", "clean_workspace"]
