# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Pass/fail decisions over captured toolchain runs."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Final

from .diagnostics import count_diagnostics, has_diagnostics
from .logging import fail, plain
from .models import CapturedRun, DiagnosticCounts, FailureCategory, GatePolicy, GateVerdict
from .process import Runner, run_captured

DIAGNOSTICS_HEADLINE: Final[str] = "ERROR: Compilation aborted due to diagnostics treated as errors"
_FOOTERS: Final[dict[GatePolicy, str]] = {
    GatePolicy.STRICT_INCLUDING_ERRORS: "   Fix ALL issues above. Zero tolerance for errors, warnings, and notes.",
    GatePolicy.DIAGNOSTICS_ONLY: "   Fix ALL issues above. Zero tolerance for warnings.",
}


def exit_code_headline(toolchain_name: str, exit_code: int) -> str:
    """Return the report headline for a failing toolchain exit status."""

    return f"ERROR: {toolchain_name} command failed with exit code {exit_code}"


def _count_lines(counts: DiagnosticCounts) -> list[str]:
    return [f"   - {count} {label} found" for label, count in counts.items() if count > 0]


def evaluate(
    run: CapturedRun,
    policy: GatePolicy = GatePolicy.STRICT_INCLUDING_ERRORS,
    *,
    toolchain_name: str = "Mojo",
) -> GateVerdict:
    """Decide whether ``run`` passes the gate.

    Diagnostics are checked before the exit status because the toolchain may
    exit ``0`` while still emitting warnings.

    Args:
        run: Captured toolchain invocation.
        policy: Policy selecting the markers treated as fatal.
        toolchain_name: Name used in the non-zero exit headline.

    Returns:
        GateVerdict: Verdict carrying the failure category and report lines.
    """

    if has_diagnostics(run.combined_output, policy):
        counts = count_diagnostics(run.combined_output)
        return GateVerdict(
            passed=False,
            failure_category=FailureCategory.DIAGNOSTICS_PRESENT,
            report_lines=(DIAGNOSTICS_HEADLINE, *_count_lines(counts), _FOOTERS[policy]),
            counts=counts,
            run=run,
        )
    if run.exit_code != 0:
        return GateVerdict(
            passed=False,
            failure_category=FailureCategory.TOOLCHAIN_NON_ZERO_EXIT,
            report_lines=(exit_code_headline(toolchain_name, run.exit_code),),
            counts=count_diagnostics(run.combined_output),
            run=run,
        )
    return GateVerdict(passed=True, failure_category=None, run=run)


def emit_report(verdict: GateVerdict, *, use_emoji: bool) -> None:
    """Print the failure report for ``verdict``; passing verdicts print nothing.

    Args:
        verdict: Verdict rendered by :func:`evaluate`.
        use_emoji: Flag indicating whether emoji output is desired.
    """

    if verdict.passed or not verdict.report_lines:
        return
    headline, *details = verdict.report_lines
    plain("")
    fail(headline, use_emoji=use_emoji)
    if not details:
        return
    *counts, footer = details
    plain("")
    for line in counts:
        plain(line)
    plain("")
    plain(footer)


class StrictGate:
    """Run toolchain commands and gate their output.

    The gate owns no mutable state besides the collaborators it is built with,
    so a single instance can serve every invocation of a dispatcher.
    """

    def __init__(
        self,
        *,
        toolchain_name: str,
        runner: Runner = run_captured,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        use_emoji: bool = True,
    ) -> None:
        self._toolchain_name = toolchain_name
        self._runner = runner
        self._cwd = cwd
        self._env = env
        self._use_emoji = use_emoji

    def check(self, command: Sequence[str], policy: GatePolicy) -> GateVerdict:
        """Run ``command``, echo its output, and return the rendered verdict.

        The captured output is always printed before the policy is evaluated so
        the diagnostic text is never swallowed by a failing gate.

        Args:
            command: Toolchain command line, executable first.
            policy: Policy selecting the markers treated as fatal.

        Returns:
            GateVerdict: Verdict for the invocation.
        """

        run = self._runner(list(command), cwd=self._cwd, env=self._env)
        output = run.combined_output.rstrip("\n")
        if output:
            plain(output)
        verdict = evaluate(run, policy, toolchain_name=self._toolchain_name)
        emit_report(verdict, use_emoji=self._use_emoji)
        return verdict


__all__ = [
    "DIAGNOSTICS_HEADLINE",
    "StrictGate",
    "emit_report",
    "evaluate",
    "exit_code_headline",
]
