# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for location-based target resolution."""

from __future__ import annotations

from pathlib import Path, PurePath

import pytest

from strictgate.config import LayoutConfig
from strictgate.models import TargetRole
from strictgate.targets import classify_role, project_relative, resolve_target

LAYOUT = LayoutConfig()


@pytest.mark.parametrize(
    ("path", "role"),
    [
        ("bin/main.mojo", TargetRole.EXECUTABLE),
        ("examples/basic_usage.mojo", TargetRole.EXECUTABLE),
        ("benchmarks/core_performance.mojo", TargetRole.EXECUTABLE),
        ("src/pkg/core.mojo", TargetRole.LIBRARY_MODULE),
        ("tests/test_core.mojo", TargetRole.TEST_MODULE),
        ("scratch/tool.mojo", TargetRole.UNRESOLVED),
        ("tool.mojo", TargetRole.UNRESOLVED),
        ("srcs/other.mojo", TargetRole.UNRESOLVED),
        ("./bin/main.mojo", TargetRole.EXECUTABLE),
    ],
)
def test_classify_role_by_top_level_directory(path: str, role: TargetRole) -> None:
    assert classify_role(PurePath(path), LAYOUT) is role


def test_library_module_gets_object_artefact_and_no_include() -> None:
    target = resolve_target(Path("src/pkg/core.mojo"), LAYOUT, root=Path("/project"))

    assert target.role is TargetRole.LIBRARY_MODULE
    assert target.output_path == Path("build/core.o")
    assert target.extra_include_paths == ()
    assert not target.is_whole_project


def test_files_outside_library_root_receive_include_path() -> None:
    executable = resolve_target(Path("bin/app.mojo"), LAYOUT, root=Path("/project"))
    test_module = resolve_target(Path("tests/test_core.mojo"), LAYOUT, root=Path("/project"))

    assert executable.output_path == Path("build/app")
    assert executable.extra_include_paths == (Path("src"),)
    assert test_module.output_path == Path("build/test_core.o")
    assert test_module.extra_include_paths == (Path("src"),)


def test_unresolved_defaults_to_executable_artefact() -> None:
    target = resolve_target(Path("misc/tool.mojo"), LAYOUT, root=Path("/project"))

    assert target.role is TargetRole.UNRESOLVED
    assert target.output_path == Path("build/tool")
    assert target.extra_include_paths == (Path("src"),)


def test_explicit_role_and_output_override_defaults() -> None:
    target = resolve_target(
        Path("src/pkg/core.mojo"),
        LAYOUT,
        root=Path("/project"),
        role=TargetRole.EXECUTABLE,
        output=Path("out/core-bin"),
    )

    assert target.role is TargetRole.EXECUTABLE
    assert target.output_path == Path("out/core-bin")
    assert target.extra_include_paths == ()


def test_absolute_paths_inside_the_project_are_relativised(tmp_path: Path) -> None:
    source = tmp_path / "src" / "core.mojo"

    assert project_relative(source, tmp_path) == Path("src/core.mojo")
    assert resolve_target(source, LAYOUT, root=tmp_path).role is TargetRole.LIBRARY_MODULE


def test_absolute_paths_outside_the_project_are_kept(tmp_path: Path) -> None:
    outside = Path("/elsewhere/src/core.mojo")

    assert project_relative(outside, tmp_path / "project") == outside


def test_custom_layout_directories() -> None:
    layout = LayoutConfig(library_dir="lib/mojo", bin_dir="apps")

    assert classify_role(PurePath("lib/mojo/a.mojo"), layout) is TargetRole.LIBRARY_MODULE
    assert classify_role(PurePath("lib/a.mojo"), layout) is TargetRole.UNRESOLVED
    assert classify_role(PurePath("apps/a.mojo"), layout) is TargetRole.EXECUTABLE
