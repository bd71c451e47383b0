# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for verb dispatch over a scripted toolchain."""

from __future__ import annotations

from pathlib import Path

import pytest

from strictgate.config import StrictGateConfig
from strictgate.dispatcher import Dispatcher
from strictgate.models import FailureCategory, GatePolicy, TargetRole

from conftest import FakeExecutor, FakeRunner, make_files


def _dispatcher(
    root: Path,
    runner: FakeRunner,
    executor: FakeExecutor | None = None,
    **kwargs: object,
) -> Dispatcher:
    return Dispatcher(
        StrictGateConfig(),
        root=root,
        runner=runner,
        executor=executor or FakeExecutor(),
        env={},
        use_emoji=False,
        **kwargs,
    )


def test_single_library_file_builds_object_without_include(project: Path, fake_runner: FakeRunner) -> None:
    code = _dispatcher(project, fake_runner).build(Path("src/pkg/core.mojo"))

    assert code == 0
    (command,) = fake_runner.commands
    assert command[3:6] == ["build", "--emit", "object"]
    assert "-I" not in command
    assert command[-3:] == ["src/pkg/core.mojo", "-o", "build/core.o"]
    assert fake_runner.cwds == [project.resolve()]
    assert (project / "build").is_dir()


def test_single_file_warning_fails_with_exit_one(project: Path) -> None:
    runner = FakeRunner(script=[("bin/app.mojo:3:1: warning: unused variable\n", 0)])

    assert _dispatcher(project, runner).build(Path("bin/app.mojo")) == 1


def test_single_file_uses_diagnostics_only_policy(project: Path) -> None:
    runner = FakeRunner(script=[("bin/app.mojo:3:1: error: bad\n", 2)])

    outcome = _dispatcher(project, runner).build_file(
        Path("bin/app.mojo"),
        policy=GatePolicy.DIAGNOSTICS_ONLY,
    )

    assert outcome.verdict.failure_category is FailureCategory.TOOLCHAIN_NON_ZERO_EXIT
    assert outcome.exit_code == 2


def test_explicit_output_overrides_artefact_path(project: Path, fake_runner: FakeRunner) -> None:
    _dispatcher(project, fake_runner).build(Path("bin/app.mojo"), output=Path("out/app-bin"))

    assert fake_runner.commands[0][-2:] == ["-o", "out/app-bin"]
    assert (project / "out").is_dir()


def test_unresolved_file_falls_back_to_library_module(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    make_files(tmp_path, ["misc/tool.mojo"])
    runner = FakeRunner(script=[("linker failed\n", 1), ("", 0)])

    outcome = _dispatcher(tmp_path, runner).build_file(Path("misc/tool.mojo"), policy=GatePolicy.DIAGNOSTICS_ONLY)

    assert outcome.passed
    assert [attempt.target.role for attempt in outcome.attempts] == [
        TargetRole.EXECUTABLE,
        TargetRole.LIBRARY_MODULE,
    ]
    first, second = runner.commands
    assert "--emit" not in first
    assert first[-2:] == ["-o", "build/tool"]
    assert second[4:6] == ["--emit", "object"]
    assert second[-2:] == ["-o", "build/tool.o"]
    assert "Executable build failed, trying as library module..." in capsys.readouterr().out


def test_unresolved_file_with_diagnostics_does_not_fall_back(tmp_path: Path) -> None:
    make_files(tmp_path, ["misc/tool.mojo"])
    runner = FakeRunner(script=[("misc/tool.mojo:1:1: note: consider this\n", 0)])

    outcome = _dispatcher(tmp_path, runner).build_file(Path("misc/tool.mojo"), policy=GatePolicy.DIAGNOSTICS_ONLY)

    assert not outcome.passed
    assert len(runner.commands) == 1
    assert outcome.verdict.failure_category is FailureCategory.DIAGNOSTICS_PRESENT


def test_unresolved_file_reports_both_attempts(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    make_files(tmp_path, ["misc/tool.mojo"])
    runner = FakeRunner(script=[("", 1), ("", 3)])

    outcome = _dispatcher(tmp_path, runner).build_file(Path("misc/tool.mojo"), policy=GatePolicy.DIAGNOSTICS_ONLY)

    assert outcome.unresolved
    assert outcome.exit_code == 3
    assert outcome.report_lines == (
        "ERROR: Could not build misc/tool.mojo as an executable or as a library module",
        "   - executable attempt: exit code 1",
        "   - library module attempt: exit code 3",
    )
    assert "Could not build misc/tool.mojo" in capsys.readouterr().out


def test_whole_project_builds_every_group_and_skips_package_init(project: Path, fake_runner: FakeRunner) -> None:
    code = _dispatcher(project, fake_runner).build()

    assert code == 0
    sources = [command[command.index("-o") - 1] for command in fake_runner.commands]
    assert sources == [
        "bin/app.mojo",
        "src/pkg/core.mojo",
        "examples/basic_usage.mojo",
        "tests/helpers.mojo",
        "tests/test_core.mojo",
    ]
    library_command = fake_runner.commands[1]
    assert "--emit" in library_command
    assert "-I" not in library_command


def test_whole_project_stops_at_first_failure(project: Path) -> None:
    runner = FakeRunner(script=[("bin/app.mojo:1:1: warning: shadowed\n", 0)])

    code = _dispatcher(project, runner).build()

    assert code == 1
    assert len(runner.commands) == 1


def test_whole_project_treats_errors_as_diagnostics(project: Path) -> None:
    runner = FakeRunner(script=[("", 0), ("src/pkg/core.mojo:1:1: error: stray\n", 0)])

    assert _dispatcher(project, runner).build() == 1
    assert len(runner.commands) == 2


def test_run_executes_artefact_after_clean_build(project: Path, fake_runner: FakeRunner) -> None:
    executor = FakeExecutor(exit_code=4)

    code = _dispatcher(project, fake_runner, executor).run(Path("bin/app.mojo"), ["--fast", "x"])

    assert code == 4
    assert executor.commands == [["build/app", "--fast", "x"]]
    assert "--emit" not in fake_runner.commands[0]


def test_run_never_executes_when_gate_fails(project: Path) -> None:
    runner = FakeRunner(script=[("bin/app.mojo:1:1: warning: unused\n", 0)])
    executor = FakeExecutor()

    code = _dispatcher(project, runner, executor).run(Path("bin/app.mojo"))

    assert code == 1
    assert executor.commands == []


def test_run_forces_executable_role_for_library_files(project: Path, fake_runner: FakeRunner) -> None:
    executor = FakeExecutor()

    _dispatcher(project, fake_runner, executor).run(Path("src/pkg/core.mojo"))

    assert "--emit" not in fake_runner.commands[0]
    assert executor.commands == [["build/core"]]


def test_test_without_arguments_validates_then_runs_each_test_file(project: Path, fake_runner: FakeRunner) -> None:
    code = _dispatcher(project, fake_runner).test()

    assert code == 0
    validate, run_tests = fake_runner.commands
    assert validate[3] == "build"
    assert "--sanitize" not in validate
    assert "tests/test_core.mojo" in validate
    assert run_tests[3] == "test"
    assert run_tests[-3:] == ["-I", "src", "tests/test_core.mojo"]


def test_test_stops_when_validation_fails(project: Path) -> None:
    runner = FakeRunner(script=[("tests/test_core.mojo:1:1: warning: missing docstring\n", 0)])

    assert _dispatcher(project, runner).test() == 1
    assert len(runner.commands) == 1


def test_test_forwards_unknown_arguments_to_runner(project: Path, fake_runner: FakeRunner) -> None:
    code = _dispatcher(project, fake_runner).test(["--filter", "fast"])

    assert code == 0
    (command,) = fake_runner.commands
    assert command[3] == "test"
    assert command[-4:] == ["-I", "src", "--filter", "fast"]


def test_test_directory_without_test_files_warns(project: Path, fake_runner: FakeRunner, capsys) -> None:
    code = _dispatcher(project, fake_runner).test(["examples"])

    assert code == 0
    assert fake_runner.commands == []
    assert "No test files found" in capsys.readouterr().out


def test_test_runner_failure_propagates_exit_code(project: Path) -> None:
    runner = FakeRunner(script=[("", 0), ("1 test failed\n", 5)])

    assert _dispatcher(project, runner).test(["tests/test_core.mojo"]) == 5


def test_debug_sink_receives_each_command(project: Path, fake_runner: FakeRunner) -> None:
    traces: list[str] = []

    _dispatcher(project, fake_runner, debug=traces.append).build(Path("bin/app.mojo"))

    assert len(traces) == 1
    assert traces[0].startswith('command="pixi run mojo build')
    assert traces[0].endswith("policy=diagnostics-only")


def test_run_reports_missing_artefact_as_command_not_found(project: Path, fake_runner: FakeRunner) -> None:
    dispatcher = Dispatcher(StrictGateConfig(), root=project, runner=fake_runner, env={}, use_emoji=False)

    assert dispatcher.run(Path("bin/app.mojo")) == 127


def test_run_reports_unexecutable_artefact(project: Path, fake_runner: FakeRunner, capsys) -> None:
    dispatcher = Dispatcher(StrictGateConfig(), root=project, runner=fake_runner, env={}, use_emoji=False)
    artefact = make_files(project, ["build/app"], "not a program\n")[0]
    artefact.chmod(0o644)

    assert dispatcher.run(Path("bin/app.mojo")) == 126
    assert "build/app: Permission denied" in capsys.readouterr().out


def test_clean_never_invokes_the_toolchain(project: Path, fake_runner: FakeRunner) -> None:
    make_files(project, ["build/app", "main"])
    dispatcher = _dispatcher(project, fake_runner)

    assert dispatcher.clean() == 0
    assert dispatcher.clean(include_cache=True, dry_run=True) == 0
    assert fake_runner.commands == []
    assert not (project / "build").exists()


def test_test_validation_object_is_removed_afterwards(project: Path, fake_runner: FakeRunner) -> None:
    code = _dispatcher(project, fake_runner).test(["tests/test_core.mojo"])

    assert code == 0
    validate = fake_runner.commands[0]
    scratch = Path(validate[validate.index("-o") + 1])
    assert scratch.name == "test_core.o"
    assert scratch.is_absolute()
    assert not scratch.parent.exists()
