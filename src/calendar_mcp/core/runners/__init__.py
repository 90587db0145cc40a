"""Script runner abstraction layer.

Provides the ScriptRunner ABC and a registry for looking up runner classes
by type string.
"""

from calendar_mcp.core.runners.base import (
    RawProcessOutput,
    ScriptRunner,
    available_runners,
    encode_parameters,
    get_runner,
    register_runner,
)
from calendar_mcp.core.runners.cscript import CScriptRunner
from calendar_mcp.core.runners.exec import ExecRunner

__all__ = [
    "CScriptRunner",
    "ExecRunner",
    "RawProcessOutput",
    "ScriptRunner",
    "available_runners",
    "encode_parameters",
    "get_runner",
    "register_runner",
]
