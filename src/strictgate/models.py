# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Value objects exchanged between the runner, classifier, gate and dispatcher."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Final

DIAGNOSTICS_EXIT_CODE: Final[int] = 1
SIGNAL_EXIT_BASE: Final[int] = 128


class GatePolicy(str, Enum):
    """Select which markers trip the diagnostic existence test."""

    STRICT_INCLUDING_ERRORS = "strict"
    DIAGNOSTICS_ONLY = "diagnostics-only"


class FailureCategory(str, Enum):
    """Reasons a gate verdict can fail."""

    DIAGNOSTICS_PRESENT = "diagnostics-present"
    TOOLCHAIN_NON_ZERO_EXIT = "toolchain-non-zero-exit"


class TargetRole(str, Enum):
    """Classification of a source path by its location in the project."""

    EXECUTABLE = "executable"
    LIBRARY_MODULE = "library-module"
    TEST_MODULE = "test-module"
    UNRESOLVED = "unresolved"

    @property
    def object_only(self) -> bool:
        """Return ``True`` when the role compiles to an object file only."""

        return self in {TargetRole.LIBRARY_MODULE, TargetRole.TEST_MODULE}


@dataclass(frozen=True, slots=True)
class CapturedRun:
    """Outcome of a single toolchain invocation.

    Attributes:
        command: Arguments passed to the subprocess, executable first.
        combined_output: Interleaved stdout/stderr text in production order.
        exit_code: Exit status reported by the subprocess.
    """

    command: tuple[str, ...]
    combined_output: str
    exit_code: int


@dataclass(frozen=True, slots=True)
class DiagnosticCounts:
    """Per-category line counts derived from a :class:`CapturedRun`."""

    errors: int = 0
    warnings: int = 0
    notes: int = 0
    deprecations: int = 0

    @property
    def total(self) -> int:
        """Return the sum of every category count."""

        return self.errors + self.warnings + self.notes + self.deprecations

    def items(self) -> Iterator[tuple[str, int]]:
        """Yield ``(label, count)`` pairs in reporting order.

        Yields:
            tuple[str, int]: Human-readable category label and its count.
        """

        yield "error(s)", self.errors
        yield "warning(s)", self.warnings
        yield "note(s)", self.notes
        yield "deprecated usage(s)", self.deprecations


def normalise_exit_code(code: int) -> int:
    """Map negative (signal) exit codes onto the shell convention ``128 + N``.

    Args:
        code: Exit code reported by :mod:`subprocess`.

    Returns:
        int: Exit code suitable for ``sys.exit``.
    """

    if code < 0:
        return SIGNAL_EXIT_BASE - code
    return code


@dataclass(frozen=True, slots=True)
class GateVerdict:
    """Pass/fail decision rendered by the gate for one captured run."""

    passed: bool
    failure_category: FailureCategory | None
    report_lines: tuple[str, ...] = ()
    counts: DiagnosticCounts = field(default_factory=DiagnosticCounts)
    run: CapturedRun | None = None

    def __post_init__(self) -> None:
        if self.passed != (self.failure_category is None):
            raise ValueError("a verdict passes exactly when it has no failure category")

    @property
    def exit_code(self) -> int:
        """Return the process exit code that reflects this verdict."""

        if self.passed:
            return 0
        if self.failure_category is FailureCategory.DIAGNOSTICS_PRESENT or self.run is None:
            return DIAGNOSTICS_EXIT_CODE
        return normalise_exit_code(self.run.exit_code) or DIAGNOSTICS_EXIT_CODE


@dataclass(frozen=True, slots=True)
class BuildTarget:
    """Resolved description of what to compile and how.

    Attributes:
        source_path: Input file, or ``None`` for the whole project.
        role: Location-derived role of ``source_path``.
        output_path: Artefact written by the toolchain, when any.
        extra_include_paths: Additional module search roots.
    """

    source_path: Path | None
    role: TargetRole
    output_path: Path | None = None
    extra_include_paths: tuple[Path, ...] = ()

    @property
    def is_whole_project(self) -> bool:
        """Return ``True`` when the target names no single source file."""

        return self.source_path is None


__all__ = [
    "DIAGNOSTICS_EXIT_CODE",
    "BuildTarget",
    "CapturedRun",
    "DiagnosticCounts",
    "FailureCategory",
    "GatePolicy",
    "GateVerdict",
    "TargetRole",
    "normalise_exit_code",
]
