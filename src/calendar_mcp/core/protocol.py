"""Decoder for the text protocol spoken by calendar scripts.

A script reports its outcome on stdout with one of two markers::

    SUCCESS:<json payload>
    ERROR:<human readable message>

Everything before the marker (banner lines, diagnostics) is ignored and
everything after it is taken as the payload.  When the error marker appears
anywhere in the output it wins over the success marker: a script that
partially succeeded and then failed is treated as failed.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

SUCCESS_MARKER = "SUCCESS:"
ERROR_MARKER = "ERROR:"


@dataclass(frozen=True)
class Success:
    """The script succeeded; ``payload`` is the parsed JSON value."""

    payload: Any


@dataclass(frozen=True)
class ScriptError:
    """The script reported failure; ``message`` is the text after the error marker."""

    message: str


@dataclass(frozen=True)
class ProtocolViolation:
    """The output matched neither marker."""

    raw_output: str


@dataclass(frozen=True)
class MalformedPayload:
    """The success marker was present but the payload was not valid JSON."""

    error: str
    fragment: str


DecodedResult = Success | ScriptError | ProtocolViolation | MalformedPayload


def _after_marker(output: str, marker: str) -> str | None:
    index = output.find(marker)
    if index < 0:
        return None
    return output[index + len(marker) :].strip()


def decode(output: str) -> DecodedResult:
    """Classify raw script stdout into a :data:`DecodedResult`.

    Parameters
    ----------
    output:
        Captured standard output of one script run.

    Returns
    -------
    DecodedResult
        ``ScriptError`` when the error marker is present, otherwise
        ``Success`` or ``MalformedPayload`` when the success marker is
        present, otherwise ``ProtocolViolation``.
    """
    message = _after_marker(output, ERROR_MARKER)
    if message is not None:
        return ScriptError(message=message)

    fragment = _after_marker(output, SUCCESS_MARKER)
    if fragment is None:
        return ProtocolViolation(raw_output=output)

    try:
        payload = json.loads(fragment)
    except (json.JSONDecodeError, ValueError) as exc:
        return MalformedPayload(error=str(exc), fragment=fragment)
    return Success(payload=payload)
