"""Calendar operations backed by external scripts.

Each operation is a thin composition: build the script parameters from its
argument model, run the script, decode the output, and map the decoded
result to a return value or a :class:`~calendar_mcp.errors.GatewayError`.
No calendar semantics (dates, recurrence, timezones) are interpreted here.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import structlog

from calendar_mcp.calendar.models import (
    AttendeeStatusArgs,
    CreateEventArgs,
    DeleteEventArgs,
    FindFreeSlotsArgs,
    GetCalendarsArgs,
    ListEventsArgs,
    ToolArguments,
    UpdateEventArgs,
)
from calendar_mcp.core.protocol import MalformedPayload, ScriptError, Success, decode
from calendar_mcp.core.runners import RawProcessOutput, ScriptRunner
from calendar_mcp.errors import (
    MalformedPayloadError,
    ProtocolViolationError,
    ScriptInvocationError,
    ScriptReportedError,
)

logger = logging.getLogger(__name__)

SCRIPT_LIST_EVENTS = "listEvents"
SCRIPT_CREATE_EVENT = "createEvent"
SCRIPT_FIND_FREE_SLOTS = "findFreeSlots"
SCRIPT_GET_ATTENDEE_STATUS = "getAttendeeStatus"
SCRIPT_DELETE_EVENT = "deleteEvent"
SCRIPT_UPDATE_EVENT = "updateEvent"
SCRIPT_GET_CALENDARS = "getCalendars"

# Raw output is echoed back to the client for diagnosis; cap it.
MAX_RAW_OUTPUT_CHARS = 2000


def _truncate(text: str, limit: int = MAX_RAW_OUTPUT_CHARS) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]}... [truncated {len(text) - limit} chars]"


def _require_object(payload: Any, script: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise MalformedPayloadError(
            f"Failed to parse script output: {script} returned "
            f"{type(payload).__name__}, expected an object",
            fragment=repr(payload),
        )
    return payload


class CalendarOperations:
    """Calendar operations executed through a :class:`ScriptRunner`.

    Parameters
    ----------
    runner:
        The runner that resolves and launches calendar scripts.
    """

    def __init__(self, runner: ScriptRunner) -> None:
        self._runner = runner

    async def run_script(self, script: str, arguments: ToolArguments) -> Any:
        """Run *script* with *arguments* and return the decoded success payload.

        Raises
        ------
        ScriptReportedError
            The script printed the error marker.
        MalformedPayloadError
            The script printed the success marker followed by invalid JSON.
        ProtocolViolationError
            The output carried neither marker.
        ScriptInvocationError
            The script could not be launched, timed out, or exited non-zero
            without printing either marker.
        """
        with structlog.contextvars.bound_contextvars(script=script):
            output = await self._runner.invoke(script, arguments.script_parameters())
            return self._interpret(script, output)

    def _interpret(self, script: str, output: RawProcessOutput) -> Any:
        result = decode(output.stdout)

        if isinstance(result, Success):
            return result.payload

        if isinstance(result, ScriptError):
            logger.info("Script %s reported an error: %s", script, result.message)
            raise ScriptReportedError(result.message)

        if isinstance(result, MalformedPayload):
            logger.warning("Script %s produced an unreadable payload: %s", script, result.error)
            raise MalformedPayloadError(
                f"Failed to parse script output: {result.error}",
                fragment=result.fragment,
            )

        # ProtocolViolation: a failed exit with no marker means the script never ran properly.
        if output.exit_failed:
            detail = (
                output.stderr.strip() or output.stdout.strip() or f"exit code {output.returncode}"
            )
            raise ScriptInvocationError(
                f"Script execution failed: {script} exited with code "
                f"{output.returncode}: {_truncate(detail)}"
            )
        raise ProtocolViolationError(
            f"Unexpected script output: {_truncate(result.raw_output)}",
            raw_output=result.raw_output,
        )

    async def list_events(self, args: ListEventsArgs) -> Any:
        """List events within a date range; the event records are opaque."""
        return await self.run_script(SCRIPT_LIST_EVENTS, args)

    async def create_event(self, args: CreateEventArgs) -> str:
        """Create an event and return its new id."""
        payload = _require_object(await self.run_script(SCRIPT_CREATE_EVENT, args), "createEvent")
        if "eventId" not in payload:
            raise MalformedPayloadError(
                "Failed to parse script output: createEvent result has no eventId",
                fragment=repr(dict(payload)),
            )
        return str(payload["eventId"])

    async def find_free_slots(self, args: FindFreeSlotsArgs) -> Any:
        return await self.run_script(SCRIPT_FIND_FREE_SLOTS, args)

    async def get_attendee_status(self, args: AttendeeStatusArgs) -> Any:
        return await self.run_script(SCRIPT_GET_ATTENDEE_STATUS, args)

    async def delete_event(self, args: DeleteEventArgs) -> bool:
        payload = _require_object(await self.run_script(SCRIPT_DELETE_EVENT, args), "deleteEvent")
        return bool(payload.get("success"))

    async def update_event(self, args: UpdateEventArgs) -> bool:
        payload = _require_object(await self.run_script(SCRIPT_UPDATE_EVENT, args), "updateEvent")
        return bool(payload.get("success"))

    async def get_calendars(self, args: GetCalendarsArgs | None = None) -> Any:
        return await self.run_script(SCRIPT_GET_CALENDARS, args or GetCalendarsArgs())
