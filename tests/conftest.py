# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from strictgate.models import CapturedRun
from strictgate.runtime.console import get_console_manager


@dataclass
class FakeRunner:
    """Scripted stand-in for :func:`strictgate.process.run_captured`.

    Each call consumes the next ``(output, exit_code)`` pair; once the script is
    exhausted every further call succeeds silently.
    """

    script: list[tuple[str, int]] = field(default_factory=list)
    commands: list[list[str]] = field(default_factory=list)
    cwds: list[Path | None] = field(default_factory=list)

    def __call__(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> CapturedRun:
        self.commands.append(list(command))
        self.cwds.append(cwd)
        output, exit_code = self.script.pop(0) if self.script else ("", 0)
        return CapturedRun(command=tuple(command), combined_output=output, exit_code=exit_code)


@dataclass
class FakeExecutor:
    """Record artefact executions and return a fixed exit code."""

    exit_code: int = 0
    commands: list[list[str]] = field(default_factory=list)

    def __call__(self, command: Sequence[str], **_: object) -> int:
        self.commands.append(list(command))
        return self.exit_code


def make_files(root: Path, relative_paths: Iterable[str], content: str = "") -> list[Path]:
    """Create ``relative_paths`` under ``root`` and return them."""

    created: list[Path] = []
    for relative in relative_paths:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        created.append(path)
    return created


@pytest.fixture(autouse=True)
def _fresh_consoles() -> None:
    """Drop cached Rich consoles so each test observes its own TTY state."""

    get_console_manager().clear()


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Return a project root following the default layout."""

    make_files(
        tmp_path,
        [
            "bin/app.mojo",
            "src/pkg/__init__.mojo",
            "src/pkg/core.mojo",
            "examples/basic_usage.mojo",
            "tests/test_core.mojo",
            "tests/helpers.mojo",
        ],
    )
    return tmp_path
