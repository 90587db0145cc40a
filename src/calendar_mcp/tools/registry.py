"""Tool registry: names, descriptions, input schemas, and handlers.

The registry is built once at startup by :func:`build_registry` and is
read-only afterwards, so any number of concurrent calls may read it.  Input
schemas are derived from the pydantic argument models, which keeps the
advertised schema and the fields the operations actually read in lockstep.
"""

from __future__ import annotations

import copy
import json
import logging
import types
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Union, get_args, get_origin

from pydantic import ValidationError

from calendar_mcp.calendar import (
    AttendeeStatusArgs,
    CalendarOperations,
    CreateEventArgs,
    DeleteEventArgs,
    FindFreeSlotsArgs,
    GetCalendarsArgs,
    ListEventsArgs,
    ToolArguments,
    UpdateEventArgs,
)
from calendar_mcp.errors import GatewayError, ToolArgumentError
from calendar_mcp.tools.envelope import ResultEnvelope

logger = logging.getLogger(__name__)

JsonSchema = dict[str, Any]
Operation = Callable[[Any], Awaitable[Any]]

TOOL_LIST_EVENTS = "list_events"
TOOL_CREATE_EVENT = "create_event"
TOOL_FIND_FREE_SLOTS = "find_free_slots"
TOOL_GET_ATTENDEE_STATUS = "get_attendee_status"
TOOL_DELETE_EVENT = "delete_event"
TOOL_UPDATE_EVENT = "update_event"
TOOL_GET_CALENDARS = "get_calendars"

TOOL_NAME_ORDER: tuple[str, ...] = (
    TOOL_LIST_EVENTS,
    TOOL_CREATE_EVENT,
    TOOL_FIND_FREE_SLOTS,
    TOOL_GET_ATTENDEE_STATUS,
    TOOL_DELETE_EVENT,
    TOOL_UPDATE_EVENT,
    TOOL_GET_CALENDARS,
)


# ---------------------------------------------------------------------------
# Schema derivation
# ---------------------------------------------------------------------------


def _json_type(annotation: Any) -> str:
    origin = get_origin(annotation)
    if origin in (Union, types.UnionType):
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if args and all(arg in (int, float) for arg in args):
            return "number"
        return _json_type(args[0]) if args else "string"
    mapping = {
        str: "string",
        bool: "boolean",
        int: "number",
        float: "number",
    }
    return mapping.get(annotation, "string")


def input_schema(model: type[ToolArguments]) -> JsonSchema:
    """Build the JSON schema advertised for *model*.

    Every field becomes a property with a ``type`` and ``description``.
    ``required`` lists the fields without defaults and is left out entirely
    when there are none.
    """
    properties: dict[str, JsonSchema] = {}
    required: list[str] = []
    for field_name, field in model.model_fields.items():
        prop: JsonSchema = {"type": _json_type(field.annotation)}
        if field.description:
            prop["description"] = field.description
        properties[field_name] = prop
        if field.is_required():
            required.append(field_name)

    schema: JsonSchema = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ToolDescriptor:
    """Metadata and handler for one exposed tool.

    Attributes:
        action: Gerund phrase used in error text, e.g. ``"deleting event"``.
        operation: Coroutine run with the validated ``arguments_model`` instance.
        format_result: Turns the operation's return value into the result text.
    """

    name: str
    description: str
    input_schema: JsonSchema
    arguments_model: type[ToolArguments]
    action: str
    operation: Operation
    format_result: Callable[[Any], str]

    def describe(self) -> dict[str, Any]:
        """Return ``{name, description, inputSchema}`` without touching the handler."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": copy.deepcopy(self.input_schema),
        }

    async def handler(self, arguments: Mapping[str, Any] | None) -> ResultEnvelope:
        """Validate *arguments*, run the operation, and wrap the outcome.

        Every :class:`GatewayError` becomes an error envelope; nothing else is
        caught here.
        """
        try:
            args = parse_arguments(self.arguments_model, arguments)
            result = await self.operation(args)
        except GatewayError as exc:
            logger.warning("Tool %s failed: %s", self.name, exc)
            return ResultEnvelope.error(f"Error {self.action}: {exc}")
        return ResultEnvelope.ok(self.format_result(result))


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "arguments"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


def parse_arguments(
    model: type[ToolArguments], arguments: Mapping[str, Any] | None
) -> ToolArguments:
    """Validate raw tool *arguments* against *model*.

    Raises
    ------
    ToolArgumentError
        If a required field is missing or a value has the wrong type.
    """
    try:
        return model.model_validate(dict(arguments) if arguments is not None else {})
    except (ValidationError, TypeError, ValueError) as exc:
        detail = (
            _format_validation_error(exc) if isinstance(exc, ValidationError) else str(exc)
        )
        raise ToolArgumentError(f"Invalid arguments: {detail}") from exc


def format_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def _outcome_text(success_text: str, failure_text: str) -> Callable[[bool], str]:
    def _format(succeeded: bool) -> str:
        return success_text if succeeded else failure_text

    return _format


def _make_descriptor(
    name: str,
    *,
    description: str,
    action: str,
    model: type[ToolArguments],
    operation: Operation,
    format_result: Callable[[Any], str] = format_json,
) -> ToolDescriptor:
    return ToolDescriptor(
        name=name,
        description=description,
        input_schema=input_schema(model),
        arguments_model=model,
        action=action,
        operation=operation,
        format_result=format_result,
    )


def build_registry(operations: CalendarOperations) -> Mapping[str, ToolDescriptor]:
    """Build the read-only mapping of tool name to :class:`ToolDescriptor`.

    Raises
    ------
    ValueError
        If two descriptors share a name.
    """
    descriptors = [
        _make_descriptor(
            TOOL_LIST_EVENTS,
            description="List calendar events within a specified date range",
            action="listing events",
            model=ListEventsArgs,
            operation=operations.list_events,
        ),
        _make_descriptor(
            TOOL_CREATE_EVENT,
            description="Create a new calendar event or meeting",
            action="creating event",
            model=CreateEventArgs,
            operation=operations.create_event,
            format_result=lambda event_id: f"Event created successfully with ID: {event_id}",
        ),
        _make_descriptor(
            TOOL_FIND_FREE_SLOTS,
            description="Find available time slots in the calendar",
            action="finding free slots",
            model=FindFreeSlotsArgs,
            operation=operations.find_free_slots,
        ),
        _make_descriptor(
            TOOL_GET_ATTENDEE_STATUS,
            description="Check the response status of meeting attendees",
            action="getting attendee status",
            model=AttendeeStatusArgs,
            operation=operations.get_attendee_status,
        ),
        _make_descriptor(
            TOOL_DELETE_EVENT,
            description="Delete a calendar event by its ID",
            action="deleting event",
            model=DeleteEventArgs,
            operation=operations.delete_event,
            format_result=_outcome_text("Event deleted successfully", "Failed to delete event"),
        ),
        _make_descriptor(
            TOOL_UPDATE_EVENT,
            description="Update an existing calendar event",
            action="updating event",
            model=UpdateEventArgs,
            operation=operations.update_event,
            format_result=_outcome_text("Event updated successfully", "Failed to update event"),
        ),
        _make_descriptor(
            TOOL_GET_CALENDARS,
            description="List available calendars",
            action="getting calendars",
            model=GetCalendarsArgs,
            operation=operations.get_calendars,
        ),
    ]

    registry: dict[str, ToolDescriptor] = {}
    for descriptor in descriptors:
        if descriptor.name in registry:
            raise ValueError(f"Tool '{descriptor.name}' is already registered.")
        registry[descriptor.name] = descriptor
    return types.MappingProxyType(registry)
