"""Tests for ToolGateway dispatch."""

from __future__ import annotations

import asyncio
import logging
import os
from types import MappingProxyType
from unittest.mock import AsyncMock, MagicMock

import pytest

from calendar_mcp.calendar import CalendarOperations, GetCalendarsArgs
from calendar_mcp.errors import UnknownToolError
from calendar_mcp.tools import ResultEnvelope, ToolDescriptor, ToolGateway, build_registry
from tests.conftest import posix_only

pytestmark = pytest.mark.unit


@pytest.fixture
def operations() -> MagicMock:
    ops = MagicMock(spec=CalendarOperations)
    ops.get_calendars = AsyncMock(return_value=[{"name": "Calendar"}])
    ops.delete_event = AsyncMock(return_value=True)
    return ops


@pytest.fixture
def gateway(operations) -> ToolGateway:
    return ToolGateway(build_registry(operations), service_name="test-calendar")


def _descriptor(name: str, operation) -> ToolDescriptor:
    return ToolDescriptor(
        name=name,
        description="test",
        input_schema={"type": "object", "properties": {}},
        arguments_model=GetCalendarsArgs,
        action="testing",
        operation=operation,
        format_result=str,
    )


class TestListTools:
    def test_lists_all_tools(self, gateway):
        tools = gateway.list_tools()
        assert [tool["name"] for tool in tools] == gateway.tool_names
        assert len(tools) == 7
        assert set(tools[0]) == {"name", "description", "inputSchema"}


class TestDispatch:
    async def test_dispatches_to_handler(self, gateway, operations):
        envelope = await gateway.dispatch("delete_event", {"eventId": "E1"})
        assert envelope == ResultEnvelope.ok("Event deleted successfully")
        operations.delete_event.assert_awaited_once()

    async def test_none_arguments(self, gateway):
        envelope = await gateway.dispatch("get_calendars", None)
        assert envelope.is_error is False
        assert '"Calendar"' in envelope.text

    async def test_unknown_tool_raises(self, gateway, caplog):
        with caplog.at_level(logging.WARNING, logger="calendar_mcp.tools.gateway"):
            with pytest.raises(UnknownToolError, match="Tool not found: send_email") as exc_info:
                await gateway.dispatch("send_email", {})
        assert exc_info.value.name == "send_email"
        assert "Unknown tool requested: send_email" in caplog.text

    async def test_unexpected_handler_exception_is_contained(self, caplog):
        operation = AsyncMock(side_effect=KeyError("boom"))
        gateway = ToolGateway(MappingProxyType({"broken": _descriptor("broken", operation)}))

        with caplog.at_level(logging.ERROR, logger="calendar_mcp.tools.gateway"):
            envelope = await gateway.dispatch("broken", {})

        assert envelope.is_error is True
        assert envelope.text == "Error executing tool broken: 'boom'"
        assert any(record.exc_info for record in caplog.records)

    async def test_concurrent_dispatch(self, gateway):
        results = await asyncio.gather(
            *(gateway.dispatch("delete_event", {"eventId": f"E{i}"}) for i in range(5))
        )
        assert all(envelope.text == "Event deleted successfully" for envelope in results)


@posix_only
async def test_cancelled_dispatch_kills_the_script(write_script, exec_runner, scripts_dir):
    pid_file = scripts_dir / "script.pid"
    write_script("getCalendars", f'echo $$ > "{pid_file}"\nexec sleep 5')
    gateway = ToolGateway(build_registry(CalendarOperations(exec_runner)))

    task = asyncio.create_task(gateway.dispatch("get_calendars", {}))
    for _ in range(100):
        if pid_file.exists() and pid_file.read_text().strip():
            break
        await asyncio.sleep(0.05)
    pid = int(pid_file.read_text())

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)
