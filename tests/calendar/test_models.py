"""Tests for the calendar argument models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from calendar_mcp.calendar import (
    CreateEventArgs,
    DeleteEventArgs,
    FindFreeSlotsArgs,
    GetCalendarsArgs,
    ListEventsArgs,
)

pytestmark = pytest.mark.unit


def test_unknown_keys_are_ignored():
    args = CreateEventArgs.model_validate(
        {"subject": "x", "startDate": "1/6/2025", "startTime": "9:00 AM", "priority": "high"}
    )
    assert "priority" not in args.script_parameters()


def test_missing_required_field():
    with pytest.raises(ValidationError) as exc_info:
        CreateEventArgs.model_validate({"subject": "x", "startDate": "1/6/2025"})
    assert [error["loc"] for error in exc_info.value.errors()] == [("startTime",)]


def test_script_parameters_follow_field_order():
    args = CreateEventArgs(
        calendar="Work", subject="x", startTime="9:00 AM", startDate="1/6/2025"
    )
    keys = list(args.script_parameters())
    assert keys[:3] == ["subject", "startDate", "startTime"]
    assert keys[-1] == "calendar"


def test_numeric_fields_accept_int_and_float():
    args = FindFreeSlotsArgs(startDate="1/6/2025", duration=45, workDayStart=8.5)
    assert args.duration == 45
    assert args.workDayStart == 8.5


def test_arguments_are_immutable():
    args = FindFreeSlotsArgs(startDate="1/6/2025")
    with pytest.raises(ValidationError):
        args.startDate = "1/7/2025"


def test_get_calendars_has_no_parameters():
    assert GetCalendarsArgs().script_parameters() == {}


def test_numbers_for_text_fields_become_strings():
    args = DeleteEventArgs.model_validate({"eventId": 12345})
    assert args.eventId == "12345"
    listed = ListEventsArgs.model_validate({"startDate": 20250106})
    assert listed.script_parameters()["startDate"] == "20250106"


def test_attendee_list_is_joined():
    args = CreateEventArgs(
        subject="Sync",
        startDate="1/6/2025",
        startTime="9:00 AM",
        attendees=["a@example.com", " b@example.com ", ""],
    )
    assert args.attendees == "a@example.com;b@example.com"


def test_non_scalar_text_fields_are_rejected():
    with pytest.raises(ValidationError):
        DeleteEventArgs.model_validate({"eventId": ["E1"]})
