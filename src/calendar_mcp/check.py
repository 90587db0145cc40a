"""Connection smoke test against the configured calendar scripts.

Runs the scripts the way the tools do (through :class:`CalendarOperations`)
and stops at the first failing step, since later steps depend on earlier
ones: nothing can be listed without a connection, and nothing can be
updated or deleted without the id of the event created in the write step.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime

from calendar_mcp.calendar import (
    CalendarOperations,
    CreateEventArgs,
    DeleteEventArgs,
    ListEventsArgs,
    UpdateEventArgs,
)
from calendar_mcp.errors import GatewayError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one smoke-test step."""

    name: str
    passed: bool
    detail: str


def format_script_date(day: date) -> str:
    """Format *day* as M/D/YYYY, the form the calendar scripts parse."""
    return f"{day.month}/{day.day}/{day.year}"


async def run_connection_check(
    operations: CalendarOperations,
    *,
    write: bool = False,
    today: date | None = None,
) -> list[CheckResult]:
    """Run the smoke-test steps and return one result per executed step.

    The read-only steps list calendars and today's events.  With *write*,
    a test event is created, updated, and deleted again.
    """
    day = format_script_date(today or date.today())
    results: list[CheckResult] = []

    def _record(name: str, passed: bool, detail: str) -> bool:
        results.append(CheckResult(name=name, passed=passed, detail=detail))
        return passed

    try:
        calendars = await operations.get_calendars()
    except GatewayError as exc:
        _record("connection", False, str(exc))
        return results
    count = len(calendars) if isinstance(calendars, list) else 0
    _record("connection", True, f"{count} calendar(s) available")

    try:
        events = await operations.list_events(ListEventsArgs(startDate=day, endDate=day))
    except GatewayError as exc:
        _record("read", False, str(exc))
        return results
    count = len(events) if isinstance(events, list) else 0
    _record("read", True, f"{count} event(s) on {day}")

    if not write:
        return results

    subject = f"Test Event {datetime.now().isoformat(timespec='seconds')}"
    try:
        event_id = await operations.create_event(
            CreateEventArgs(
                subject=subject,
                startDate=day,
                startTime="2:00 PM",
                endDate=day,
                endTime="2:30 PM",
                location="Test Location",
                body="Test event created by the calendar-mcp connection check.",
            )
        )
    except GatewayError as exc:
        _record("write", False, str(exc))
        return results
    _record("write", True, f"created event {event_id}")

    try:
        updated = await operations.update_event(
            UpdateEventArgs(
                eventId=event_id,
                subject=f"{subject} - UPDATED",
                location="Updated Test Location",
            )
        )
    except GatewayError as exc:
        updated, detail = False, str(exc)
    else:
        detail = f"updated event {event_id}" if updated else "script reported no update"
    if not _record("update", updated, detail):
        logger.warning("Update step failed; test event %s may need manual cleanup", event_id)
        return results

    try:
        deleted = await operations.delete_event(DeleteEventArgs(eventId=event_id))
    except GatewayError as exc:
        deleted, detail = False, str(exc)
    else:
        detail = f"deleted event {event_id}" if deleted else "script reported no deletion"
    _record("delete", deleted, detail)
    return results
