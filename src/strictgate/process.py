# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe wrappers around ``subprocess`` execution."""

from __future__ import annotations

import shutil

# Commands are argument vectors; ``shell=True`` is never used.
import subprocess  # nosec B404
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Final

from .models import CapturedRun

COMMAND_NOT_FOUND_EXIT_CODE: Final[int] = 127
TIMEOUT_EXIT_CODE: Final[int] = 124
CANNOT_EXECUTE_EXIT_CODE: Final[int] = 126

Runner = Callable[..., CapturedRun]


class ExecutableNotFoundError(FileNotFoundError):
    """Raised when the head of a command cannot be resolved on ``PATH``."""

    def __init__(self, executable: str) -> None:
        super().__init__(f"{executable}: command not found")
        self.executable = executable


def _normalize_args(args: Sequence[str], *, cwd: Path | None = None) -> list[str]:
    if not args:
        msg = "subprocess command requires at least one argument"
        raise ValueError(msg)

    head, *rest = args
    head_path = Path(head)
    if head_path.is_absolute() or len(head_path.parts) > 1:
        # Relative paths such as ``build/app`` name produced artefacts.
        anchored = head_path if head_path.is_absolute() or cwd is None else cwd / head_path
        if not anchored.exists():
            raise ExecutableNotFoundError(head)
        return [str(anchored.absolute()), *rest]

    resolved = shutil.which(head)
    if resolved is None:
        raise ExecutableNotFoundError(head)
    return [resolved, *rest]


def _ensure_text(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return value.decode(errors="replace")


def run_captured(
    command: Sequence[str],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> CapturedRun:
    """Execute ``command`` once and capture its merged output.

    ``stderr`` is redirected into ``stdout`` so diagnostics keep the order in
    which the subprocess produced them. A non-zero exit status is ordinary
    output of this function and never raises.

    An executable that is missing yields exit code 127; one the operating
    system refuses to start yields 126.

    Args:
        command: Executable followed by its arguments.
        cwd: Optional working directory for the child process.
        env: Optional environment replacing the inherited one.
        timeout: Optional limit in seconds; expiry yields exit code 124.

    Returns:
        CapturedRun: The executed command, its combined output and exit code.
    """

    try:
        normalized = _normalize_args(command, cwd=cwd)
    except ExecutableNotFoundError as exc:
        return CapturedRun(
            command=tuple(command),
            combined_output=f"{exc}\n",
            exit_code=COMMAND_NOT_FOUND_EXIT_CODE,
        )

    try:
        # Bandit: commands are built from validated configuration; argument lists
        # are passed directly without shell expansion.
        completed = subprocess.run(  # nosec B603
            normalized,
            cwd=str(cwd) if cwd is not None else None,
            env=dict(env) if env is not None else None,
            check=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        partial = _ensure_text(exc.output)
        if partial and not partial.endswith("\n"):
            partial += "\n"
        return CapturedRun(
            command=tuple(command),
            combined_output=f"{partial}Command timed out after {timeout:.1f}s\n",
            exit_code=TIMEOUT_EXIT_CODE,
        )
    except OSError as exc:
        return CapturedRun(
            command=tuple(command),
            combined_output=f"{command[0]}: {exc.strerror or exc}\n",
            exit_code=CANNOT_EXECUTE_EXIT_CODE,
        )

    return CapturedRun(
        command=tuple(command),
        combined_output=_ensure_text(completed.stdout),
        exit_code=completed.returncode,
    )


def run_passthrough(
    command: Sequence[str],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> int:
    """Execute ``command`` with inherited stdio and return its exit status.

    Args:
        command: Executable followed by its arguments.
        cwd: Optional working directory for the child process.
        env: Optional environment replacing the inherited one.

    Returns:
        int: Exit status of the child process.

    Raises:
        ExecutableNotFoundError: If the executable cannot be located.
        OSError: If the operating system refuses to execute the command.
    """

    normalized = _normalize_args(command, cwd=cwd)
    # Bandit: see ``run_captured``.
    completed = subprocess.run(  # nosec B603
        normalized,
        cwd=str(cwd) if cwd is not None else None,
        env=dict(env) if env is not None else None,
        check=False,
    )
    return completed.returncode


__all__ = [
    "CANNOT_EXECUTE_EXIT_CODE",
    "COMMAND_NOT_FOUND_EXIT_CODE",
    "TIMEOUT_EXIT_CODE",
    "ExecutableNotFoundError",
    "Runner",
    "run_captured",
    "run_passthrough",
]
