"""Error hierarchy for the calendar tool gateway.

Every failure produced while running a calendar script is a ``GatewayError``.
Tool handlers convert these into error-flagged result envelopes, so none of
them reach the MCP transport.  ``UnknownToolError`` is deliberately *not* a
``GatewayError``: it signals a malformed request from the client and is
surfaced as a protocol-level error instead of a failed tool call.
"""

from __future__ import annotations


class GatewayError(RuntimeError):
    """Base error raised by script runners and calendar operations."""


class ScriptInvocationError(GatewayError):
    """Raised when a calendar script could not be run or produced no usable output."""


class ScriptNotFoundError(ScriptInvocationError):
    """Raised when an executable id does not resolve to a script file."""

    def __init__(self, executable_id: str, message: str) -> None:
        self.executable_id = executable_id
        super().__init__(message)


class ScriptReportedError(GatewayError):
    """Raised when a script explicitly reported failure via its error marker."""


class ProtocolViolationError(GatewayError):
    """Raised when script output carries neither the success nor the error marker."""

    def __init__(self, message: str, *, raw_output: str) -> None:
        self.raw_output = raw_output
        super().__init__(message)


class MalformedPayloadError(GatewayError):
    """Raised when a success payload was produced but could not be read."""

    def __init__(self, message: str, *, fragment: str) -> None:
        self.fragment = fragment
        super().__init__(message)


class ToolArgumentError(GatewayError):
    """Raised when tool arguments fail validation against the argument model."""


class UnknownToolError(LookupError):
    """Raised by the gateway when a client calls a tool that is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool not found: {name}")
