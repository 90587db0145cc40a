"""Dispatch gateway between the transport and the tool registry.

``dispatch`` looks a tool up by name and runs its handler.  It has exactly
two outcomes: a :class:`ResultEnvelope`, or :class:`UnknownToolError` when
the client named a tool that does not exist.  Handlers already turn every
expected failure into an error envelope; the catch-all here only guards
against bugs in a handler.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import structlog

from calendar_mcp.core.telemetry import tool_span
from calendar_mcp.errors import UnknownToolError
from calendar_mcp.tools.envelope import ResultEnvelope
from calendar_mcp.tools.registry import ToolDescriptor

logger = logging.getLogger(__name__)


class ToolGateway:
    """Looks up and invokes tools from a read-only registry.

    Parameters
    ----------
    registry:
        Mapping of tool name to descriptor, as built by
        :func:`~calendar_mcp.tools.registry.build_registry`.
    service_name:
        Name recorded on tool spans and log records.
    """

    def __init__(
        self,
        registry: Mapping[str, ToolDescriptor],
        *,
        service_name: str = "calendar-mcp",
    ) -> None:
        self._registry = registry
        self._service_name = service_name

    @property
    def tool_names(self) -> list[str]:
        return list(self._registry)

    def list_tools(self) -> list[dict[str, Any]]:
        """Return ``{name, description, inputSchema}`` for every registered tool."""
        return [descriptor.describe() for descriptor in self._registry.values()]

    async def dispatch(self, name: str, arguments: Mapping[str, Any] | None) -> ResultEnvelope:
        """Run tool *name* with *arguments* and return its result envelope.

        Raises
        ------
        UnknownToolError
            If *name* is not registered.  This is the only exception that
            leaves the gateway.
        """
        descriptor = self._registry.get(name)
        if descriptor is None:
            logger.warning("Unknown tool requested: %s", name)
            raise UnknownToolError(name)

        with structlog.contextvars.bound_contextvars(service=self._service_name, tool=name):
            try:
                with tool_span(name, service_name=self._service_name):
                    return await descriptor.handler(arguments)
            except Exception as exc:
                logger.exception("Error executing tool %s", name)
                return ResultEnvelope.error(f"Error executing tool {name}: {exc}")
