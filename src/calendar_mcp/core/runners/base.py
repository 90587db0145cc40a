"""ScriptRunner ABC, parameter encoding, and runner registry.

A runner turns an executable id plus a parameter mapping into exactly one
external process and hands back the raw text it produced.  Runners never
interpret that text; decoding belongs to :mod:`calendar_mcp.core.protocol`.
"""

from __future__ import annotations

import abc
import asyncio
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from calendar_mcp.errors import ScriptInvocationError, ScriptNotFoundError

logger = logging.getLogger(__name__)

_SAFE_EXECUTABLE_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass(frozen=True)
class RawProcessOutput:
    """Unparsed result of one script run."""

    stdout: str
    stderr: str
    exit_failed: bool
    returncode: int = 0


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def encode_parameters(parameters: Mapping[str, Any]) -> list[str]:
    """Encode *parameters* as ``/key:"value"`` flags in insertion order.

    Entries whose value is ``None`` or the empty string are omitted rather
    than sent as empty flags.  Double quotes inside values are escaped so
    they cannot terminate the quoted value early.
    """
    flags: list[str] = []
    for key, value in parameters.items():
        if value is None or value == "":
            continue
        escaped = _format_value(value).replace('"', '\\"')
        flags.append(f'/{key}:"{escaped}"')
    return flags


class ScriptRunner(abc.ABC):
    """Abstract base class for script runners.

    Parameters
    ----------
    scripts_dir:
        Directory holding the calendar scripts.  Executable ids are resolved
        against it and nowhere else.
    suffix:
        File suffix appended to the executable id.  ``None`` selects the
        runner's ``default_suffix``.
    timeout:
        Seconds to wait for a script before killing it.  ``None`` waits for
        as long as the script runs.
    """

    default_suffix: str = ""

    def __init__(
        self,
        scripts_dir: Path,
        *,
        suffix: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._scripts_dir = Path(scripts_dir)
        self._suffix = self.default_suffix if suffix is None else suffix
        self._timeout = timeout

    @property
    def scripts_dir(self) -> Path:
        return self._scripts_dir

    @property
    def suffix(self) -> str:
        return self._suffix

    def resolve(self, executable_id: str) -> Path:
        """Map *executable_id* to an existing script under the scripts directory.

        Raises
        ------
        ScriptNotFoundError
            If the id contains anything but letters, digits, ``_`` or ``-``,
            or if no such script file exists.
        """
        if not _SAFE_EXECUTABLE_ID_RE.fullmatch(executable_id):
            raise ScriptNotFoundError(
                executable_id,
                f"Invalid script name {executable_id!r}; allowed pattern is [A-Za-z0-9_-]+",
            )
        path = self._scripts_dir / f"{executable_id}{self._suffix}"
        if not path.is_file():
            raise ScriptNotFoundError(executable_id, f"Script not found: {path}")
        return path

    async def invoke(
        self, executable_id: str, parameters: Mapping[str, Any] | None = None
    ) -> RawProcessOutput:
        """Run the script named *executable_id* with *parameters* encoded as flags.

        Raises
        ------
        ScriptNotFoundError
            If the executable id does not resolve to a script.
        ScriptInvocationError
            If the process could not be launched or exceeded the timeout.
        """
        path = self.resolve(executable_id)
        flags = encode_parameters(parameters or {})
        logger.debug("Running script %s with %d flag(s)", executable_id, len(flags))

        try:
            proc = await self._spawn(path, flags)
        except OSError as exc:
            raise ScriptInvocationError(f"Script execution failed: {exc}") from exc

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                proc.communicate(),
                timeout=self._timeout,
            )
        except TimeoutError:
            logger.error("Script %s timed out after %ss", executable_id, self._timeout)
            await self._terminate(proc)
            raise ScriptInvocationError(
                f"Script execution failed: {executable_id} timed out after {self._timeout} seconds"
            ) from None
        except BaseException:
            # Cancelled by the caller; the script must not outlive the call.
            logger.info("Script %s cancelled, killing pid %s", executable_id, proc.pid)
            await self._terminate(proc)
            raise

        stdout = stdout_bytes.decode("utf-8", errors="replace")
        stderr = stderr_bytes.decode("utf-8", errors="replace")
        if stderr:
            logger.debug("Script %s stderr: %s", executable_id, stderr[:500])

        returncode = proc.returncode or 0
        if returncode != 0:
            logger.warning("Script %s exited with code %d", executable_id, returncode)

        return RawProcessOutput(
            stdout=stdout,
            stderr=stderr,
            exit_failed=returncode != 0,
            returncode=returncode,
        )

    async def _terminate(self, proc: asyncio.subprocess.Process) -> None:
        """Kill *proc* if it is still running and reap it."""
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                # Exited between the returncode check and the kill.
                pass
        await proc.wait()

    @abc.abstractmethod
    async def _spawn(self, path: Path, flags: list[str]) -> asyncio.subprocess.Process:
        """Start the process for *path* with stdout and stderr piped."""
        ...


# ---------------------------------------------------------------------------
# Runner registry
# ---------------------------------------------------------------------------

_RUNNER_REGISTRY: dict[str, type[ScriptRunner]] = {}


def register_runner(type_str: str, runner_cls: type[ScriptRunner]) -> None:
    """Register a script runner class under the given type string."""
    _RUNNER_REGISTRY[type_str] = runner_cls


def get_runner(type_str: str) -> type[ScriptRunner]:
    """Look up a runner class by type string (e.g. ``'cscript'``, ``'exec'``).

    Raises
    ------
    ValueError
        If no runner is registered for the given type string.
    """
    if type_str not in _RUNNER_REGISTRY:
        available = ", ".join(sorted(_RUNNER_REGISTRY)) or "(none)"
        raise ValueError(f"Unknown runner type {type_str!r}. Available runners: {available}")
    return _RUNNER_REGISTRY[type_str]


def available_runners() -> list[str]:
    return sorted(_RUNNER_REGISTRY)
