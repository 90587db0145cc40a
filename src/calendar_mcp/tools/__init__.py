"""Tool registry, result envelopes, and the dispatch gateway."""

from calendar_mcp.tools.envelope import ResultEnvelope, TextBlock
from calendar_mcp.tools.gateway import ToolGateway
from calendar_mcp.tools.registry import (
    TOOL_NAME_ORDER,
    ToolDescriptor,
    build_registry,
    input_schema,
)

__all__ = [
    "TOOL_NAME_ORDER",
    "ResultEnvelope",
    "TextBlock",
    "ToolDescriptor",
    "ToolGateway",
    "build_registry",
    "input_schema",
]
