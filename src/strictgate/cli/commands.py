# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""The ``build``, ``run``, ``test`` and ``clean`` commands."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Annotated, Final, NoReturn

import typer

from ..clean import CleanError
from ..config import ConfigError, load_config
from ..dispatcher import Dispatcher
from .options import (
    CACHE_OPTION,
    CONFIG_OPTION,
    DEBUG_OPTION,
    DRY_RUN_OPTION,
    EMOJI_OPTION,
    OUTPUT_OPTION,
    ROOT_OPTION,
    CommonOptions,
    build_common_options,
)
from .shared import CLIError, CLILogger, build_cli_logger

CONFIG_ERROR_EXIT_CODE: Final[int] = 2
_PASSTHROUGH_SETTINGS: Final[dict[str, bool]] = {"ignore_unknown_options": True}

Action = Callable[[Dispatcher], int]


def _execute(options: CommonOptions, action: Action) -> NoReturn:
    """Run ``action`` against a configured dispatcher and exit with its status."""

    logger = build_cli_logger(emoji=options.emoji, debug=options.debug)
    try:
        config = load_config(options.root, path=options.config)
    except ConfigError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=CONFIG_ERROR_EXIT_CODE) from exc

    dispatcher = Dispatcher(
        config,
        root=options.root,
        use_emoji=options.emoji,
        debug=logger.debug if options.debug else None,
    )
    try:
        code = action(dispatcher)
    except CLIError as exc:
        _report_cli_error(exc, logger)
        raise typer.Exit(code=exc.exit_code) from exc
    except CleanError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=1) from exc

    if code == 0:
        logger.ok("Complete")
    raise typer.Exit(code=code)


def _report_cli_error(exc: CLIError, logger: CLILogger) -> None:
    logger.fail(f"ERROR: {exc}")
    if exc.usage:
        logger.echo(exc.usage)


def cmd_build(
    path: Annotated[Path | None, typer.Argument(help="Source file; omit to build the whole project.")] = None,
    output: OUTPUT_OPTION = None,
    root: ROOT_OPTION = Path("."),
    config: CONFIG_OPTION = None,
    emoji: EMOJI_OPTION = True,
    debug: DEBUG_OPTION = False,
) -> None:
    """Compile with zero tolerance for diagnostics."""

    options = build_common_options(root, config, emoji, debug)

    def _action(dispatcher: Dispatcher) -> int:
        if path is None and output is not None:
            raise CLIError(
                "An output path requires a source file",
                usage="Usage: strictgate build [SOURCE] [-o OUTPUT]",
            )
        return dispatcher.build(path, output=output)

    _execute(options, _action)


def cmd_run(
    path: Annotated[Path | None, typer.Argument(help="Source file to build and execute.")] = None,
    args: Annotated[
        list[str] | None,
        typer.Argument(help="Arguments forwarded to the executable; put them after -- when they clash with our options."),
    ] = None,
    root: ROOT_OPTION = Path("."),
    config: CONFIG_OPTION = None,
    emoji: EMOJI_OPTION = True,
    debug: DEBUG_OPTION = False,
) -> None:
    """Build an executable and run it when the gate passes.

    Example: ``strictgate run bin/main.mojo -- --root data --debug``
    """

    options = build_common_options(root, config, emoji, debug)

    def _action(dispatcher: Dispatcher) -> int:
        if path is None:
            raise CLIError("No source file provided", usage="Usage: strictgate run <SOURCE> [ARGS...]")
        return dispatcher.run(path, list(args or ()))

    _execute(options, _action)


def cmd_test(
    targets: Annotated[
        list[str] | None,
        typer.Argument(
            help="Test files, directories, or test-runner arguments; put runner options that clash with ours after --.",
        ),
    ] = None,
    root: ROOT_OPTION = Path("."),
    config: CONFIG_OPTION = None,
    emoji: EMOJI_OPTION = True,
    debug: DEBUG_OPTION = False,
) -> None:
    """Validate and run tests with strict compilation checks."""

    options = build_common_options(root, config, emoji, debug)
    _execute(options, lambda dispatcher: dispatcher.test(list(targets or ())))


def cmd_clean(
    cache: CACHE_OPTION = False,
    dry_run: DRY_RUN_OPTION = False,
    root: ROOT_OPTION = Path("."),
    config: CONFIG_OPTION = None,
    emoji: EMOJI_OPTION = True,
    debug: DEBUG_OPTION = False,
) -> None:
    """Remove build artefacts, debug symbols and cached environments."""

    options = build_common_options(root, config, emoji, debug)
    _execute(options, lambda dispatcher: dispatcher.clean(include_cache=cache, dry_run=dry_run))


def register_commands(app: typer.Typer) -> None:
    """Register the strictgate verbs on ``app``.

    Args:
        app: Typer application receiving the commands.
    """

    app.command(name="build")(cmd_build)
    app.command(name="run", context_settings=_PASSTHROUGH_SETTINGS)(cmd_run)
    app.command(name="test", context_settings=_PASSTHROUGH_SETTINGS)(cmd_test)
    app.command(name="clean")(cmd_clean)


__all__ = [
    "cmd_build",
    "cmd_clean",
    "register_commands",
    "cmd_run",
    "cmd_test",
]
