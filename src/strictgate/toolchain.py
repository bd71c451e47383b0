# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Translate build targets into toolchain command lines."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .config import ToolchainConfig
from .models import BuildTarget


@dataclass(frozen=True, slots=True)
class ToolchainCommands:
    """Build argument vectors for the configured toolchain."""

    config: ToolchainConfig

    def _include_args(self, includes: Sequence[Path]) -> list[str]:
        args: list[str] = []
        for include in includes:
            args.extend((self.config.include_flag, str(include)))
        return args

    def build(self, target: BuildTarget, *, sanitize: bool = True) -> list[str]:
        """Return the compile command for ``target``.

        Args:
            target: Resolved single-file target.
            sanitize: Whether the configured sanitizer flags are included.

        Returns:
            list[str]: Command line, launcher first.

        Raises:
            ValueError: If ``target`` names no source file.
        """

        if target.is_whole_project:
            raise ValueError("a build command needs a single source file")
        cfg = self.config
        command = [*cfg.launcher, cfg.build_subcommand]
        if target.role.object_only:
            command.extend(cfg.emit_object_flags)
        command.extend(cfg.common_flags)
        command.extend(cfg.build_flags)
        if sanitize:
            command.extend(cfg.sanitizer_flags)
        command.extend(self._include_args(target.extra_include_paths))
        command.append(str(target.source_path))
        if target.output_path is not None:
            command.extend((cfg.output_flag, str(target.output_path)))
        return command

    def test(self, arguments: Sequence[str], *, includes: Sequence[Path] = ()) -> list[str]:
        """Return the test-runner command forwarding ``arguments`` verbatim."""

        cfg = self.config
        return [
            *cfg.launcher,
            cfg.test_subcommand,
            *cfg.common_flags,
            *cfg.sanitizer_flags,
            *self._include_args(includes),
            *arguments,
        ]


__all__ = ["ToolchainCommands"]
