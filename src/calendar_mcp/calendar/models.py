"""Argument models for the calendar operations.

Field names are the wire names the calendar scripts expect (``startDate``,
``eventId``, ...), and declaration order is the order in which flags are
passed to the script.  Dates and times are opaque strings; interpreting them
is the script's job.  Optional fields default to ``None`` and are omitted
from the script invocation, which the scripts read as "use your default" or
"leave unchanged".
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

_DATE = "in MM/DD/YYYY format"
_TIME = "in HH:MM AM/PM format"


class ToolArguments(BaseModel):
    """Base class for operation arguments.

    Unknown keys are ignored, and numbers sent for text fields (a numeric
    event id, a date typed as 20250106) are passed on as their string form.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, coerce_numbers_to_str=True)

    def script_parameters(self) -> dict[str, Any]:
        """Return the parameter mapping passed to the script, in field order."""
        return self.model_dump()


class ListEventsArgs(ToolArguments):
    startDate: str = Field(description=f"Start date {_DATE}")
    endDate: str | None = Field(default=None, description=f"End date {_DATE} (optional)")
    calendar: str | None = Field(default=None, description="Calendar name (optional)")


class CreateEventArgs(ToolArguments):
    subject: str = Field(description="Event subject/title")
    startDate: str = Field(description=f"Start date {_DATE}")
    startTime: str = Field(description=f"Start time {_TIME}")
    endDate: str | None = Field(
        default=None,
        description=f"End date {_DATE} (optional, defaults to start date)",
    )
    endTime: str | None = Field(
        default=None,
        description=f"End time {_TIME} (optional, defaults to 30 minutes after start time)",
    )
    location: str | None = Field(default=None, description="Event location (optional)")
    body: str | None = Field(default=None, description="Event description/body (optional)")
    isMeeting: bool | None = Field(
        default=None,
        description="Whether this is a meeting with attendees (optional, defaults to false)",
    )
    attendees: str | None = Field(
        default=None,
        description="Semicolon-separated list of attendee email addresses (optional)",
    )
    calendar: str | None = Field(default=None, description="Calendar name (optional)")

    @field_validator("attendees", mode="before")
    @classmethod
    def join_attendee_list(cls, value: Any) -> Any:
        if isinstance(value, list | tuple):
            return ";".join(str(item).strip() for item in value if str(item).strip())
        return value


class FindFreeSlotsArgs(ToolArguments):
    startDate: str = Field(description=f"Start date {_DATE}")
    endDate: str | None = Field(
        default=None,
        description=f"End date {_DATE} (optional, defaults to 7 days from start date)",
    )
    duration: int | float | None = Field(
        default=None,
        description="Duration in minutes (optional, defaults to 30)",
    )
    workDayStart: int | float | None = Field(
        default=None,
        description="Work day start hour (0-23) (optional, defaults to 9)",
    )
    workDayEnd: int | float | None = Field(
        default=None,
        description="Work day end hour (0-23) (optional, defaults to 17)",
    )
    calendar: str | None = Field(default=None, description="Calendar name (optional)")


class AttendeeStatusArgs(ToolArguments):
    eventId: str = Field(description="Event ID")
    calendar: str | None = Field(default=None, description="Calendar name (optional)")


class DeleteEventArgs(ToolArguments):
    eventId: str = Field(description="Event ID to delete")
    calendar: str | None = Field(default=None, description="Calendar name (optional)")


class UpdateEventArgs(ToolArguments):
    eventId: str = Field(description="Event ID to update")
    subject: str | None = Field(default=None, description="New event subject/title (optional)")
    startDate: str | None = Field(default=None, description=f"New start date {_DATE} (optional)")
    startTime: str | None = Field(default=None, description=f"New start time {_TIME} (optional)")
    endDate: str | None = Field(default=None, description=f"New end date {_DATE} (optional)")
    endTime: str | None = Field(default=None, description=f"New end time {_TIME} (optional)")
    location: str | None = Field(default=None, description="New event location (optional)")
    body: str | None = Field(
        default=None, description="New event description/body (optional)"
    )
    calendar: str | None = Field(default=None, description="Calendar name (optional)")


class GetCalendarsArgs(ToolArguments):
    pass
