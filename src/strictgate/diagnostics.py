# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Textual classification of toolchain diagnostics.

Classification is purely pattern based. Each category is counted once per
line that contains its marker, mirroring ``grep -c``; a single line carrying
several markers contributes to every matching category.
"""

from __future__ import annotations

import re
from typing import Final

from .models import DiagnosticCounts, GatePolicy

ERROR_MARKER: Final[str] = "error:"
WARNING_MARKER: Final[str] = "warning:"
NOTE_MARKER: Final[str] = "note:"
DEPRECATION_MARKERS: Final[tuple[str, ...]] = ("deprecated:", "DEPRECATED")

_DEPRECATION_LINE: Final[re.Pattern[str]] = re.compile("deprecated", re.IGNORECASE)

_DIAGNOSTICS_ONLY_TRIGGER: Final[re.Pattern[str]] = re.compile(
    "|".join(re.escape(marker) for marker in (WARNING_MARKER, NOTE_MARKER, *DEPRECATION_MARKERS)),
)
_STRICT_TRIGGER: Final[re.Pattern[str]] = re.compile(
    "|".join(
        re.escape(marker) for marker in (ERROR_MARKER, WARNING_MARKER, NOTE_MARKER, *DEPRECATION_MARKERS)
    ),
)

_TRIGGERS: Final[dict[GatePolicy, re.Pattern[str]]] = {
    GatePolicy.STRICT_INCLUDING_ERRORS: _STRICT_TRIGGER,
    GatePolicy.DIAGNOSTICS_ONLY: _DIAGNOSTICS_ONLY_TRIGGER,
}


def has_diagnostics(text: str, policy: GatePolicy = GatePolicy.STRICT_INCLUDING_ERRORS) -> bool:
    """Return ``True`` when ``text`` contains any marker the policy treats as fatal.

    This is the cheap existence check run before :func:`count_diagnostics`.

    Args:
        text: Combined toolchain output.
        policy: Policy deciding whether ``error:`` participates in the test.

    Returns:
        bool: ``True`` when at least one trigger marker occurs anywhere in ``text``.
    """

    return _TRIGGERS[policy].search(text) is not None


def count_diagnostics(text: str) -> DiagnosticCounts:
    """Count the lines of ``text`` carrying each diagnostic marker.

    Args:
        text: Combined toolchain output.

    Returns:
        DiagnosticCounts: Exact, uncapped per-category line counts.
    """

    errors = warnings = notes = deprecations = 0
    # Lines are newline-delimited exactly as ``grep`` sees them.
    for line in text.split("\n"):
        if ERROR_MARKER in line:
            errors += 1
        if WARNING_MARKER in line:
            warnings += 1
        if NOTE_MARKER in line:
            notes += 1
        if _DEPRECATION_LINE.search(line):
            deprecations += 1
    return DiagnosticCounts(errors=errors, warnings=warnings, notes=notes, deprecations=deprecations)


__all__ = [
    "DEPRECATION_MARKERS",
    "ERROR_MARKER",
    "NOTE_MARKER",
    "WARNING_MARKER",
    "count_diagnostics",
    "has_diagnostics",
]
