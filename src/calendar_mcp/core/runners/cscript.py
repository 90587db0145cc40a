"""CScriptRunner: runs VBScript files through Windows Script Host.

The command line is handed to ``cmd.exe`` so the console code page can be
switched to UTF-8 (``chcp 65001``) before ``cscript`` starts; otherwise
non-ASCII subjects and attendee names come back mangled.

Because ``cscript`` is a grandchild of the spawned shell, stopping a script
on timeout or cancellation kills the whole process tree with ``taskkill``.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

from calendar_mcp.core.runners.base import ScriptRunner, register_runner

logger = logging.getLogger(__name__)


class CScriptRunner(ScriptRunner):
    """Runner for ``.vbs`` scripts via ``cscript //NoLogo``."""

    default_suffix = ".vbs"

    @staticmethod
    def build_command(path: Path, flags: list[str]) -> str:
        command = f'chcp 65001 >nul 2>&1 && cscript //NoLogo "{path}"'
        if flags:
            command = f"{command} {' '.join(flags)}"
        return command

    async def _spawn(self, path: Path, flags: list[str]) -> asyncio.subprocess.Process:
        return await asyncio.create_subprocess_shell(
            self.build_command(path, flags),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )

    async def _terminate(self, proc: asyncio.subprocess.Process) -> None:
        if sys.platform == "win32" and proc.returncode is None:
            killer = await asyncio.create_subprocess_exec(
                "taskkill",
                "/T",
                "/F",
                "/PID",
                str(proc.pid),
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
            if await killer.wait() != 0:
                logger.warning("taskkill failed for pid %s; killing the shell only", proc.pid)
        await super()._terminate(proc)


register_runner("cscript", CScriptRunner)
