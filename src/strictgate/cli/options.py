# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Option declarations shared by every strictgate command."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer

ROOT_OPTION = Annotated[
    Path,
    typer.Option("--root", "-r", help="Project root.", file_okay=False),
]
CONFIG_OPTION = Annotated[
    Path | None,
    typer.Option("--config", help="Configuration file (defaults to .strictgate.toml or pyproject.toml)."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
DEBUG_OPTION = Annotated[
    bool,
    typer.Option("--debug", help="Trace every toolchain command."),
]
OUTPUT_OPTION = Annotated[
    Path | None,
    typer.Option("--output", "-o", help="Artefact path for a single-file build."),
]
CACHE_OPTION = Annotated[
    bool,
    typer.Option("--cache", help="Also remove the dependency cache."),
]
DRY_RUN_OPTION = Annotated[
    bool,
    typer.Option("--dry-run", help="Show what would be removed."),
]


@dataclass(slots=True)
class CommonOptions:
    """Options accepted by every command."""

    root: Path
    config: Path | None
    emoji: bool
    debug: bool


def build_common_options(root: Path, config: Path | None, emoji: bool, debug: bool) -> CommonOptions:
    """Normalise the shared command options."""

    return CommonOptions(
        root=root.resolve(),
        config=config.resolve() if config is not None else None,
        emoji=emoji,
        debug=debug,
    )


__all__ = [
    "CACHE_OPTION",
    "CONFIG_OPTION",
    "DEBUG_OPTION",
    "DRY_RUN_OPTION",
    "EMOJI_OPTION",
    "OUTPUT_OPTION",
    "ROOT_OPTION",
    "CommonOptions",
    "build_common_options",
]
