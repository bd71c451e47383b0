# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and loaders for the strict compilation gate."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .models import GatePolicy

CONFIG_FILENAME: Final[str] = ".strictgate.toml"
PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "strictgate"

DEFAULT_LAUNCHER: Final[tuple[str, ...]] = ("pixi", "run", "mojo")
DEFAULT_COMMON_FLAGS: Final[tuple[str, ...]] = (
    "-g",
    "--diagnose-missing-doc-strings",
    "--validate-doc-strings",
)
DEFAULT_BUILD_FLAGS: Final[tuple[str, ...]] = ("--max-notes-per-diagnostic", "50")
DEFAULT_TOOLCHAIN_ENV: Final[dict[str, str]] = {
    "MOJO_PYTHON_INTEROP_WARNINGS": "error",
    "MOJO_ENABLE_ASSERTIONS": "1",
    "MOJO_ASSERT_ON_ERROR": "1",
    "MOJO_DISABLE_OPTIMIZATIONS": "0",
}
DEFAULT_CLEAN_DIRECTORIES: Final[tuple[str, ...]] = ("packages", ".pixi/envs")
DEFAULT_CLEAN_PATTERNS: Final[tuple[str, ...]] = ("*.dSYM",)
DEFAULT_CLEAN_BINARIES: Final[tuple[str, ...]] = ("main", "test", "app", "benchmark")


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


def _default_cache_directories() -> tuple[str, ...]:
    for variable in ("PIXI_CACHE_DIR", "RATTLER_CACHE_DIR"):
        value = os.environ.get(variable)
        if value:
            return (value,)
    return ("~/.cache/rattler",)


class ToolchainConfig(BaseModel):
    """Describe how the wrapped toolchain is launched and which flags it receives."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    display_name: str = "Mojo"
    launcher: tuple[str, ...] = Field(default=DEFAULT_LAUNCHER, min_length=1)
    source_suffix: str = ".mojo"
    build_subcommand: str = "build"
    test_subcommand: str = "test"
    common_flags: tuple[str, ...] = DEFAULT_COMMON_FLAGS
    build_flags: tuple[str, ...] = DEFAULT_BUILD_FLAGS
    sanitizer: str | None = "thread"
    emit_object_flags: tuple[str, ...] = ("--emit", "object")
    include_flag: str = "-I"
    output_flag: str = "-o"
    environment: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_TOOLCHAIN_ENV))

    @property
    def sanitizer_flags(self) -> tuple[str, ...]:
        """Return the sanitizer arguments, empty when no sanitizer is configured."""

        return ("--sanitize", self.sanitizer) if self.sanitizer else ()

    def process_env(self, base: Mapping[str, str] | None = None) -> dict[str, str]:
        """Return the environment for toolchain invocations.

        Configured variables are forwarded opaquely; values already present in
        ``base`` take precedence.

        Args:
            base: Environment inherited from the caller, ``os.environ`` by default.

        Returns:
            dict[str, str]: Environment mapping handed to the subprocess.
        """

        env = dict(os.environ if base is None else base)
        for key, value in self.environment.items():
            env.setdefault(key, value)
        return env


class LayoutConfig(BaseModel):
    """Directory conventions used to derive the role of a source file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    bin_dir: str = "bin"
    library_dir: str = "src"
    tests_dir: str = "tests"
    examples_dir: str = "examples"
    benchmarks_dir: str = "benchmarks"
    build_dir: str = "build"
    package_init: str = "__init__.mojo"
    test_file_glob: str = "test_*"

    @property
    def executable_roots(self) -> tuple[str, ...]:
        """Return directories whose sources compile to executables."""

        return (self.bin_dir, self.examples_dir, self.benchmarks_dir)


class GateConfig(BaseModel):
    """Select the diagnostic policy applied at each call site."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    full_policy: GatePolicy = GatePolicy.STRICT_INCLUDING_ERRORS
    single_file_policy: GatePolicy = GatePolicy.DIAGNOSTICS_ONLY


class CleanConfig(BaseModel):
    """Configuration for artefact cleanup."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    directories: tuple[str, ...] = DEFAULT_CLEAN_DIRECTORIES
    patterns: tuple[str, ...] = DEFAULT_CLEAN_PATTERNS
    binaries: tuple[str, ...] = DEFAULT_CLEAN_BINARIES
    cache_directories: tuple[str, ...] = Field(default_factory=_default_cache_directories)


class StrictGateConfig(BaseModel):
    """Primary configuration container threaded into the dispatcher."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    gate: GateConfig = Field(default_factory=GateConfig)
    clean: CleanConfig = Field(default_factory=CleanConfig)


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to read {path}: {exc}") from exc


def _extract_section(path: Path, document: Mapping[str, Any]) -> Mapping[str, Any]:
    if path.name != PYPROJECT_FILENAME:
        return document
    tool_section = document.get(PYPROJECT_TOOL_KEY)
    if not isinstance(tool_section, Mapping):
        return {}
    section = tool_section.get(PYPROJECT_SECTION_KEY)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"[tool.{PYPROJECT_SECTION_KEY}] in {path} must be a table")
    return section


def discover_config_file(root: Path) -> Path | None:
    """Return the configuration file that applies to ``root``, if any.

    ``.strictgate.toml`` wins over ``pyproject.toml``; the latter only counts
    when it declares a ``[tool.strictgate]`` table.

    Args:
        root: Project root searched for configuration files.

    Returns:
        Path | None: Matching configuration file or ``None``.
    """

    dedicated = root / CONFIG_FILENAME
    if dedicated.is_file():
        return dedicated
    pyproject = root / PYPROJECT_FILENAME
    if pyproject.is_file() and _extract_section(pyproject, _read_toml(pyproject)):
        return pyproject
    return None


def load_config(root: Path, *, path: Path | None = None) -> StrictGateConfig:
    """Load the gate configuration for ``root``.

    Args:
        root: Project root used for discovery when ``path`` is omitted.
        path: Explicit configuration file overriding discovery.

    Returns:
        StrictGateConfig: Validated configuration, defaults when no file applies.

    Raises:
        ConfigError: If the file is missing, unreadable or fails validation.
    """

    if path is not None and not path.is_file():
        raise ConfigError(f"Configuration file not found: {path}")
    source = path if path is not None else discover_config_file(root)
    if source is None:
        return StrictGateConfig()
    payload = _extract_section(source, _read_toml(source))
    try:
        return StrictGateConfig.model_validate(dict(payload))
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {source}:\n{exc}") from exc


__all__ = [
    "CONFIG_FILENAME",
    "CleanConfig",
    "ConfigError",
    "GateConfig",
    "LayoutConfig",
    "StrictGateConfig",
    "ToolchainConfig",
    "discover_config_file",
    "load_config",
]
