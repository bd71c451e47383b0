# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Verb dispatch for build, run, test and clean."""

from __future__ import annotations

import tempfile
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Final

from .clean import clean_workspace
from .config import StrictGateConfig
from .discovery import SourceWalk
from .gate import StrictGate
from .logging import fail, info, plain, step, warn
from .models import (
    DIAGNOSTICS_EXIT_CODE,
    BuildTarget,
    FailureCategory,
    GatePolicy,
    GateVerdict,
    TargetRole,
    normalise_exit_code,
)
from .process import (
    CANNOT_EXECUTE_EXIT_CODE,
    COMMAND_NOT_FOUND_EXIT_CODE,
    ExecutableNotFoundError,
    Runner,
    run_captured,
    run_passthrough,
)
from .targets import project_relative, resolve_target
from .toolchain import ToolchainCommands

Executor = Callable[..., int]
DebugSink = Callable[[str], None]

_ROLE_LABELS: Final[dict[TargetRole, str]] = {
    TargetRole.EXECUTABLE: "executable",
    TargetRole.LIBRARY_MODULE: "library module",
    TargetRole.TEST_MODULE: "test module",
    TargetRole.UNRESOLVED: "auto-detect",
}


@dataclass(frozen=True, slots=True)
class BuildAttempt:
    """One toolchain invocation made while building a single file."""

    target: BuildTarget
    verdict: GateVerdict


@dataclass(frozen=True, slots=True)
class BuildOutcome:
    """Aggregate result of building one file, fallback attempts included.

    Attributes:
        attempts: Every attempt made, in order; at most two.
        report_lines: Compound report when every attempt failed for an
            unresolved target, otherwise empty.
    """

    attempts: tuple[BuildAttempt, ...]
    report_lines: tuple[str, ...] = ()

    @property
    def verdict(self) -> GateVerdict:
        """Return the verdict of the attempt that decides the outcome."""

        return self.attempts[-1].verdict

    @property
    def passed(self) -> bool:
        """Return ``True`` when the deciding attempt passed the gate."""

        return self.verdict.passed

    @property
    def unresolved(self) -> bool:
        """Return ``True`` when both the executable and library attempts failed."""

        return not self.passed and len(self.attempts) > 1

    @property
    def exit_code(self) -> int:
        """Return the exit code reflecting the outcome."""

        return self.verdict.exit_code


class Dispatcher:
    """Resolve verbs into toolchain invocations gated by :class:`StrictGate`.

    The configuration is fixed at construction; the dispatcher keeps no state
    between verbs.
    """

    def __init__(
        self,
        config: StrictGateConfig,
        *,
        root: Path,
        runner: Runner = run_captured,
        executor: Executor = run_passthrough,
        env: Mapping[str, str] | None = None,
        use_emoji: bool = True,
        debug: DebugSink | None = None,
    ) -> None:
        self._config = config
        self._root = root.resolve()
        self._env = dict(env) if env is not None else config.toolchain.process_env()
        self._executor = executor
        self._use_emoji = use_emoji
        self._debug = debug
        self._commands = ToolchainCommands(config.toolchain)
        self._gate = StrictGate(
            toolchain_name=config.toolchain.display_name,
            runner=runner,
            cwd=self._root,
            env=self._env,
            use_emoji=use_emoji,
        )

    @property
    def config(self) -> StrictGateConfig:
        """Return the configuration the dispatcher was built with."""

        return self._config

    # ------------------------------------------------------------------ build

    def build(self, path: Path | None = None, *, output: Path | None = None) -> int:
        """Build ``path``, or the whole project when ``path`` is ``None``.

        Args:
            path: Source file to compile.
            output: Explicit artefact path for single-file builds.

        Returns:
            int: ``0`` on a clean build, otherwise the failure exit code.
        """

        self._ensure_build_dir()
        step(f"Building {self._strictness_label()}...", symbol="🔨", use_emoji=self._use_emoji)
        if path is None:
            return self.build_project()
        outcome = self.build_file(path, output=output, policy=self._config.gate.single_file_policy)
        return 0 if outcome.passed else outcome.exit_code

    def build_file(
        self,
        path: Path,
        *,
        output: Path | None = None,
        policy: GatePolicy,
        role: TargetRole | None = None,
    ) -> BuildOutcome:
        """Compile a single file, falling back once for unresolved locations.

        Args:
            path: Source file to compile.
            output: Explicit artefact path.
            policy: Gate policy applied to every attempt.
            role: Explicit role overriding location-based classification.

        Returns:
            BuildOutcome: Attempts made and the deciding verdict.
        """

        target = resolve_target(path, self._config.layout, root=self._root, role=role, output=output)
        self._ensure_output_dir(target)
        if target.role is not TargetRole.UNRESOLVED:
            info(
                f"Building {_ROLE_LABELS[target.role]}: {target.source_path} → {target.output_path}",
                use_emoji=self._use_emoji,
            )
            return BuildOutcome(attempts=(self._attempt(target, policy),))
        return self._build_with_fallback(target, policy, output=output)

    def _build_with_fallback(
        self,
        target: BuildTarget,
        policy: GatePolicy,
        *,
        output: Path | None,
    ) -> BuildOutcome:
        source = target.source_path
        if source is None:
            raise ValueError("a fallback build needs a single source file")
        info(
            f"Building ({_ROLE_LABELS[TargetRole.UNRESOLVED]}): {source} → {target.output_path}",
            use_emoji=self._use_emoji,
        )
        first = self._attempt(replace(target, role=TargetRole.EXECUTABLE), policy)
        if first.verdict.failure_category is not FailureCategory.TOOLCHAIN_NON_ZERO_EXIT:
            return BuildOutcome(attempts=(first,))

        warn("Executable build failed, trying as library module...", use_emoji=self._use_emoji)
        fallback = resolve_target(
            source,
            self._config.layout,
            root=self._root,
            role=TargetRole.LIBRARY_MODULE,
            output=output,
        )
        self._ensure_output_dir(fallback)
        second = self._attempt(fallback, policy)
        if second.verdict.passed:
            return BuildOutcome(attempts=(first, second))

        report = _unresolved_report(source, first.verdict, second.verdict)
        plain("")
        fail(report[0], use_emoji=self._use_emoji)
        for line in report[1:]:
            plain(line)
        return BuildOutcome(attempts=(first, second), report_lines=report)

    def build_project(self) -> int:
        """Build every source of the project, stopping at the first failure.

        Returns:
            int: ``0`` when every file passes, otherwise the failing file's exit code.
        """

        info("Building entire project...", use_emoji=self._use_emoji)
        policy = self._config.gate.full_policy
        for heading, role, walk in self._project_groups():
            announced = False
            for source in walk:
                if not announced:
                    step(heading, symbol="🔧" if role.object_only else "🔨", use_emoji=self._use_emoji)
                    announced = True
                relative = project_relative(source, self._root)
                if source.name == self._config.layout.package_init:
                    info(f"   {relative} → skipped (package init file)", use_emoji=self._use_emoji)
                    continue
                target = resolve_target(relative, self._config.layout, root=self._root, role=role)
                info(f"   {relative} → {target.output_path}", use_emoji=self._use_emoji)
                attempt = self._attempt(target, policy)
                if not attempt.verdict.passed:
                    return attempt.verdict.exit_code
        return 0

    def _project_groups(self) -> Iterator[tuple[str, TargetRole, SourceWalk]]:
        layout = self._config.layout
        suffix = self._config.toolchain.source_suffix
        groups = (
            ("Building executables:", TargetRole.EXECUTABLE, layout.bin_dir),
            ("Validating library modules:", TargetRole.LIBRARY_MODULE, layout.library_dir),
            ("Building examples:", TargetRole.EXECUTABLE, layout.examples_dir),
            ("Building benchmarks:", TargetRole.EXECUTABLE, layout.benchmarks_dir),
            ("Validating test modules:", TargetRole.TEST_MODULE, layout.tests_dir),
        )
        for heading, role, directory in groups:
            yield heading, role, SourceWalk(root=self._root / directory, suffix=suffix)

    # -------------------------------------------------------------------- run

    def run(self, path: Path, args: Sequence[str] = ()) -> int:
        """Build ``path`` as an executable and execute it when the gate passes.

        Args:
            path: Source file to build and run.
            args: Arguments forwarded to the produced executable.

        Returns:
            int: The executable's exit code, ``1`` when the gate fails, ``127``
            when the artefact is missing and ``126`` when it cannot be executed.
        """

        step(f"Building and running {self._strictness_label()}...", symbol="🚀", use_emoji=self._use_emoji)
        self._ensure_build_dir()
        outcome = self.build_file(
            path,
            policy=self._config.gate.single_file_policy,
            role=TargetRole.EXECUTABLE,
        )
        if not outcome.passed:
            return DIAGNOSTICS_EXIT_CODE
        artefact = outcome.attempts[-1].target.output_path
        if artefact is None:
            raise ValueError(f"no artefact path resolved for {path}")
        info(f"Executing ./{artefact}", use_emoji=self._use_emoji)
        command = [str(artefact), *args]
        self._trace(command)
        try:
            code = self._executor(command, cwd=self._root, env=self._env)
        except ExecutableNotFoundError as exc:
            fail(str(exc), use_emoji=self._use_emoji)
            return COMMAND_NOT_FOUND_EXIT_CODE
        except OSError as exc:
            fail(f"{artefact}: {exc.strerror or exc}", use_emoji=self._use_emoji)
            return CANNOT_EXECUTE_EXIT_CODE
        return normalise_exit_code(code)

    # ------------------------------------------------------------------- test

    def test(self, arguments: Sequence[str] = ()) -> int:
        """Validate and run tests through the toolchain's test runner.

        Source files are validated as object files before their tests run;
        directories expand to the test files beneath them. Remaining arguments
        are forwarded to the test runner verbatim.

        Args:
            arguments: Files, directories or raw test-runner arguments.

        Returns:
            int: ``0`` when every test invocation passes the gate.
        """

        step("Testing with strict compilation checks...", symbol="🧪", use_emoji=self._use_emoji)
        files, passthrough = self._resolve_test_arguments(arguments)
        policy = self._config.gate.full_policy
        if not files and not passthrough and arguments:
            warn("No test files found", use_emoji=self._use_emoji)
            return 0
        for source in files:
            code = self._test_file(source, policy)
            if code != 0:
                return code
        if passthrough or not files:
            info(f"Running test suite: {' '.join(passthrough)}", use_emoji=self._use_emoji)
            includes = (Path(self._config.layout.library_dir),)
            verdict = self._check(self._commands.test(passthrough, includes=includes), policy)
            if not verdict.passed:
                return verdict.exit_code
        return 0

    def _resolve_test_arguments(self, arguments: Sequence[str]) -> tuple[list[Path], list[str]]:
        layout = self._config.layout
        suffix = self._config.toolchain.source_suffix
        if not arguments:
            tests_root = self._root / layout.tests_dir
            if not tests_root.is_dir():
                return [], []
            walk = SourceWalk(root=tests_root, suffix=suffix, name_glob=layout.test_file_glob)
            return [project_relative(path, self._root) for path in walk], []

        files: list[Path] = []
        passthrough: list[str] = []
        for argument in arguments:
            candidate = Path(argument)
            anchored = candidate if candidate.is_absolute() else self._root / candidate
            if argument.endswith(suffix):
                files.append(candidate)
            elif anchored.is_dir():
                walk = SourceWalk(root=anchored, suffix=suffix, name_glob=layout.test_file_glob)
                files.extend(project_relative(path, self._root) for path in walk)
            else:
                passthrough.append(argument)
        return files, passthrough

    def _test_file(self, source: Path, policy: GatePolicy) -> int:
        info(f"Validating test file as library module: {source}", use_emoji=self._use_emoji)
        with tempfile.TemporaryDirectory(prefix="strictgate-") as scratch:
            target = resolve_target(
                source,
                self._config.layout,
                root=self._root,
                role=TargetRole.TEST_MODULE,
                output=Path(scratch) / f"{source.stem}.o",
            )
            verdict = self._check(self._commands.build(target, sanitize=False), policy)
        if not verdict.passed:
            return verdict.exit_code
        info("Documentation validation passed", use_emoji=self._use_emoji)
        info(f"Running tests: {source}", use_emoji=self._use_emoji)
        command = self._commands.test([str(target.source_path)], includes=target.extra_include_paths)
        verdict = self._check(command, policy)
        return 0 if verdict.passed else verdict.exit_code

    # ------------------------------------------------------------------ clean

    def clean(self, *, include_cache: bool = False, dry_run: bool = False) -> int:
        """Remove generated artefacts without invoking the toolchain.

        Raises:
            CleanError: If the filesystem refuses a removal.
        """

        clean_workspace(
            self._root,
            config=self._config.clean,
            layout=self._config.layout,
            include_cache=include_cache,
            dry_run=dry_run,
            use_emoji=self._use_emoji,
        )
        return 0

    # ---------------------------------------------------------------- helpers

    def _attempt(self, target: BuildTarget, policy: GatePolicy) -> BuildAttempt:
        return BuildAttempt(target=target, verdict=self._check(self._commands.build(target), policy))

    def _check(self, command: Sequence[str], policy: GatePolicy) -> GateVerdict:
        self._trace(command, policy=policy)
        return self._gate.check(command, policy)

    def _trace(self, command: Sequence[str], *, policy: GatePolicy | None = None) -> None:
        if self._debug is None:
            return
        rendered = " ".join(command)
        suffix = f" policy={policy.value}" if policy is not None else ""
        self._debug(f'command="{rendered}"{suffix}')

    def _strictness_label(self) -> str:
        sanitizer = self._config.toolchain.sanitizer
        return f"with strict checks and {sanitizer} sanitizer" if sanitizer else "with strict checks"

    def _ensure_build_dir(self) -> None:
        (self._root / self._config.layout.build_dir).mkdir(parents=True, exist_ok=True)

    def _ensure_output_dir(self, target: BuildTarget) -> None:
        if target.output_path is None:
            return
        parent = target.output_path.parent
        anchored = parent if parent.is_absolute() else self._root / parent
        anchored.mkdir(parents=True, exist_ok=True)


def _unresolved_report(source: Path, first: GateVerdict, second: GateVerdict) -> tuple[str, ...]:
    lines = [
        f"ERROR: Could not build {source} as an executable or as a library module",
        f"   - executable attempt: {_describe(first)}",
        f"   - library module attempt: {_describe(second)}",
    ]
    return tuple(lines)


def _describe(verdict: GateVerdict) -> str:
    if verdict.failure_category is FailureCategory.DIAGNOSTICS_PRESENT:
        found = ", ".join(f"{count} {label}" for label, count in verdict.counts.items() if count > 0)
        return f"diagnostics present ({found})"
    exit_code = verdict.run.exit_code if verdict.run is not None else verdict.exit_code
    return f"exit code {exit_code}"


__all__ = ["BuildAttempt", "BuildOutcome", "Dispatcher"]
