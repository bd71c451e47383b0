# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Location-based resolution of build targets."""

from __future__ import annotations

from pathlib import Path, PurePath

from .config import LayoutConfig
from .models import BuildTarget, TargetRole


def project_relative(path: Path, root: Path) -> Path:
    """Return ``path`` relative to ``root`` when it lives inside the project.

    Args:
        path: Raw path supplied by the caller, absolute or relative.
        root: Project root.

    Returns:
        Path: Project-relative path, or ``path`` unchanged when it lies outside.
    """

    if not path.is_absolute():
        return path
    try:
        return path.resolve().relative_to(root.resolve())
    except ValueError:
        return path


def is_under(path: PurePath, directory: str) -> bool:
    """Return ``True`` when ``path`` starts with the components of ``directory``."""

    prefix = PurePath(directory).parts
    if not prefix:
        return False
    return path.parts[: len(prefix)] == prefix and len(path.parts) > len(prefix)


def classify_role(path: PurePath, layout: LayoutConfig) -> TargetRole:
    """Classify ``path`` by the top-level directory it lives in.

    Args:
        path: Project-relative source path.
        layout: Directory conventions of the project.

    Returns:
        TargetRole: Role derived from the path's location.
    """

    if any(is_under(path, root) for root in layout.executable_roots):
        return TargetRole.EXECUTABLE
    if is_under(path, layout.library_dir):
        return TargetRole.LIBRARY_MODULE
    if is_under(path, layout.tests_dir):
        return TargetRole.TEST_MODULE
    return TargetRole.UNRESOLVED


def artefact_path(path: PurePath, role: TargetRole, layout: LayoutConfig) -> Path:
    """Return the default artefact location for ``path`` built as ``role``."""

    stem = path.stem
    name = f"{stem}.o" if role.object_only else stem
    return Path(layout.build_dir) / name


def resolve_target(
    path: Path,
    layout: LayoutConfig,
    *,
    root: Path,
    role: TargetRole | None = None,
    output: Path | None = None,
) -> BuildTarget:
    """Resolve ``path`` into a :class:`BuildTarget`.

    Files outside the library root receive the library root as an extra
    include path so cross-module imports resolve; files inside never do.
    Unresolved targets default to an executable artefact, matching the first
    attempt the dispatcher makes for them.

    Args:
        path: Source file supplied by the caller.
        layout: Directory conventions of the project.
        root: Project root used to relativise absolute paths.
        role: Explicit role overriding location-based classification.
        output: Explicit artefact path overriding the default location.

    Returns:
        BuildTarget: Immutable description of the compilation.
    """

    relative = project_relative(path, root)
    resolved_role = role if role is not None else classify_role(relative, layout)
    includes: tuple[Path, ...] = () if is_under(relative, layout.library_dir) else (Path(layout.library_dir),)
    return BuildTarget(
        source_path=relative,
        role=resolved_role,
        output_path=output if output is not None else artefact_path(relative, resolved_role, layout),
        extra_include_paths=includes,
    )


__all__ = [
    "artefact_path",
    "classify_role",
    "is_under",
    "project_relative",
    "resolve_target",
]
