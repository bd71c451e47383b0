# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Strict compilation gate turning every toolchain diagnostic into a failure."""

from __future__ import annotations

from importlib import metadata

from .diagnostics import count_diagnostics, has_diagnostics
from .gate import StrictGate, evaluate
from .models import (
    BuildTarget,
    CapturedRun,
    DiagnosticCounts,
    FailureCategory,
    GatePolicy,
    GateVerdict,
    TargetRole,
)
from .process import run_captured

__all__ = [
    "BuildTarget",
    "CapturedRun",
    "DiagnosticCounts",
    "FailureCategory",
    "GatePolicy",
    "GateVerdict",
    "StrictGate",
    "TargetRole",
    "__version__",
    "count_diagnostics",
    "evaluate",
    "has_diagnostics",
    "run_captured",
]

try:
    __version__ = metadata.version("strictgate")
except metadata.PackageNotFoundError:  # pragma: no cover - local development fallback
    __version__ = "0.0.0"
