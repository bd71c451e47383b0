# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Artefact cleanup helpers."""

from __future__ import annotations

from .plan import (
    PROTECTED_DIRECTORIES,
    CleanError,
    CleanKind,
    CleanPlan,
    CleanPlanItem,
    CleanPlanner,
)
from .runner import CleanResult, clean_workspace

__all__ = [
    "CleanError",
    "CleanKind",
    "CleanPlan",
    "CleanPlanItem",
    "CleanPlanner",
    "CleanResult",
    "PROTECTED_DIRECTORIES",
    "clean_workspace",
]
