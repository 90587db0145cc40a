"""Calendar operations and their argument models."""

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
from calendar_mcp.calendar.operations import CalendarOperations

__all__ = [
    "AttendeeStatusArgs",
    "CalendarOperations",
    "CreateEventArgs",
    "DeleteEventArgs",
    "FindFreeSlotsArgs",
    "GetCalendarsArgs",
    "ListEventsArgs",
    "ToolArguments",
    "UpdateEventArgs",
]
