# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""End-to-end checks against a scripted stand-in toolchain."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from strictgate.config import StrictGateConfig, ToolchainConfig
from strictgate.dispatcher import Dispatcher

from conftest import make_files

# Echoes the source file as compiler output and exits with the status named on
# a ``STATUS=`` line, writing the requested artefact on success.
_FAKE_TOOLCHAIN = """\
import sys
from pathlib import Path

args = sys.argv[1:]
source = next(Path(arg) for arg in args if arg.endswith(".mojo"))
text = source.read_text()
sys.stdout.write(text)
status = 0
for line in text.splitlines():
    if line.startswith("STATUS="):
        status = int(line.split("=", 1)[1])
if status == 0 and "-o" in args:
    target = Path(args[args.index("-o") + 1])
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text("artefact")
sys.exit(status)
"""


@pytest.fixture
def toolchain_project(tmp_path: Path) -> tuple[Path, StrictGateConfig]:
    script = tmp_path / "fake_mojo.py"
    script.write_text(_FAKE_TOOLCHAIN, encoding="utf-8")
    root = tmp_path / "project"
    root.mkdir()
    config = StrictGateConfig(toolchain=ToolchainConfig(launcher=(sys.executable, str(script))))
    return root, config


def test_clean_source_builds_artefact(toolchain_project: tuple[Path, StrictGateConfig]) -> None:
    root, config = toolchain_project
    make_files(root, ["bin/app.mojo"], "Compiling app\n")

    code = Dispatcher(config, root=root, use_emoji=False).build(Path("bin/app.mojo"))

    assert code == 0
    assert (root / "build" / "app").is_file()


def test_warning_with_zero_exit_is_fatal(
    toolchain_project: tuple[Path, StrictGateConfig],
    capsys: pytest.CaptureFixture[str],
) -> None:
    root, config = toolchain_project
    make_files(root, ["src/core.mojo"], "src/core.mojo:2:9: warning: 'x' was never used\n")

    code = Dispatcher(config, root=root, use_emoji=False).build(Path("src/core.mojo"))

    out = capsys.readouterr().out
    assert code == 1
    assert "'x' was never used" in out
    assert "   - 1 warning(s) found" in out


def test_unresolved_source_falls_back_end_to_end(toolchain_project: tuple[Path, StrictGateConfig]) -> None:
    root, config = toolchain_project
    make_files(root, ["scratch/tool.mojo"], "STATUS=3\n")

    outcome = Dispatcher(config, root=root, use_emoji=False).build_file(
        Path("scratch/tool.mojo"),
        policy=config.gate.single_file_policy,
    )

    assert outcome.unresolved
    assert outcome.exit_code == 3
