"""Shared fixtures: fake calendar scripts run through the exec runner."""

from __future__ import annotations

import stat
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

from calendar_mcp.core.runners import ExecRunner

posix_only = pytest.mark.skipif(
    sys.platform == "win32", reason="fake scripts are POSIX shell scripts"
)


@pytest.fixture
def scripts_dir(tmp_path: Path) -> Path:
    path = tmp_path / "scripts"
    path.mkdir()
    return path


@pytest.fixture
def write_script(scripts_dir: Path) -> Callable[[str, str], Path]:
    """Return a factory writing an executable ``/bin/sh`` script into *scripts_dir*."""

    def _write(name: str, body: str) -> Path:
        path = scripts_dir / name
        path.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _write


@pytest.fixture
def exec_runner(scripts_dir: Path) -> ExecRunner:
    return ExecRunner(scripts_dir, timeout=10)
