"""ExecRunner: runs a script file directly, without a shell.

Used for calendar scripts that carry their own interpreter line (shell,
Python, AppleScript wrappers).  Flags are passed as separate argv entries,
so nothing in a value is ever interpreted by a shell.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

from calendar_mcp.core.runners.base import ScriptRunner, register_runner

_UTF8_ENV = {
    "PYTHONIOENCODING": "utf-8",
    "LC_ALL": "C.UTF-8",
    "LANG": "C.UTF-8",
}


class ExecRunner(ScriptRunner):
    """Runner that executes ``<scripts_dir>/<id><suffix>`` directly."""

    default_suffix = ""

    async def _spawn(self, path: Path, flags: list[str]) -> asyncio.subprocess.Process:
        return await asyncio.create_subprocess_exec(
            str(path),
            *flags,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env={**os.environ, **_UTF8_ENV},
            cwd=str(self.scripts_dir),
        )


register_runner("exec", ExecRunner)
