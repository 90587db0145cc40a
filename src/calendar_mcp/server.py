"""MCP stdio server exposing the calendar tools.

The ``tools/list`` and ``tools/call`` request handlers are installed
directly on the low-level server rather than through its ``call_tool``
decorator.  The decorator turns every exception into an error-flagged tool
result; an unknown tool name must instead come back as a JSON-RPC error so
the client can tell a bad request from a failed calendar operation.
"""

from __future__ import annotations

import logging

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError

from calendar_mcp import __version__
from calendar_mcp.calendar import CalendarOperations
from calendar_mcp.config import GatewayConfig
from calendar_mcp.core.runners import ScriptRunner, get_runner
from calendar_mcp.errors import UnknownToolError
from calendar_mcp.tools import ToolGateway, build_registry

logger = logging.getLogger(__name__)

SERVER_NAME = "outlook-calendar-server"
INSTRUCTIONS = (
    "Calendar tools backed by local scripts. Dates use MM/DD/YYYY and times "
    "HH:MM AM/PM. Use get_calendars to discover calendar names and "
    "list_events to find event IDs for update, delete and attendee lookups."
)


def build_runner(config: GatewayConfig) -> ScriptRunner:
    runner_cls = get_runner(config.runner.type)
    return runner_cls(
        config.scripts_dir,
        suffix=config.runner.suffix,
        timeout=config.runner.timeout_seconds,
    )


def build_gateway(config: GatewayConfig) -> ToolGateway:
    """Wire runner, operations, and registry into a gateway for *config*."""
    operations = CalendarOperations(build_runner(config))
    registry = build_registry(operations)
    logger.info(
        "Registered %d tools (runner=%s, scripts_dir=%s)",
        len(registry),
        config.runner.type,
        config.scripts_dir,
    )
    return ToolGateway(registry, service_name=config.name)


def build_server(gateway: ToolGateway) -> Server:
    """Create a low-level MCP server whose tool requests go through *gateway*."""
    server = Server(SERVER_NAME, version=__version__, instructions=INSTRUCTIONS)

    async def _list_tools(_request: types.ListToolsRequest) -> types.ServerResult:
        tools = [
            types.Tool(
                name=tool["name"],
                description=tool["description"],
                inputSchema=tool["inputSchema"],
            )
            for tool in gateway.list_tools()
        ]
        return types.ServerResult(types.ListToolsResult(tools=tools))

    async def _call_tool(request: types.CallToolRequest) -> types.ServerResult:
        name = request.params.name
        try:
            envelope = await gateway.dispatch(name, request.params.arguments or {})
        except UnknownToolError as exc:
            error = types.ErrorData(code=types.METHOD_NOT_FOUND, message=str(exc))
            raise McpError(error) from exc

        return types.ServerResult(
            types.CallToolResult(
                content=[
                    types.TextContent(type="text", text=block.text) for block in envelope.content
                ],
                isError=envelope.is_error,
            )
        )

    server.request_handlers[types.ListToolsRequest] = _list_tools
    server.request_handlers[types.CallToolRequest] = _call_tool
    return server


async def serve_stdio(server: Server) -> None:
    """Run *server* over stdin/stdout until the client disconnects."""
    async with stdio_server() as (read_stream, write_stream):
        logger.info("%s running on stdio", SERVER_NAME)
        await server.run(read_stream, write_stream, server.create_initialization_options())
