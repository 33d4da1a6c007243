"""Wire timestamp codec.

The service sends dates as ``/Date(<milliseconds since epoch>)/``, optionally
with a ``+hhmm``/``-hhmm`` offset after the milliseconds. The millisecond
value is always UTC, so the offset is ignored. This MUST be the single
implementation used by the decoders.
"""
from __future__ import annotations

import re

from .errors import MalformedTimestampError

WIRE_PREFIX = "/Date("
WIRE_SUFFIX = ")/"

_WIRE_RE = re.compile(r"^/Date\((?P<ms>-?\d+)(?:[+-]\d{4})?\)/$")


def parse_wire_timestamp(value: str) -> float:
    """Convert ``/Date(1351594328296)/`` to ``1351594328.296`` epoch seconds.

    Zero and negative values are accepted. Raises MalformedTimestampError if
    the markers are missing or the embedded value is not an integer.
    """
    if not isinstance(value, str):
        raise MalformedTimestampError(value)
    match = _WIRE_RE.match(value.strip())
    if not match:
        raise MalformedTimestampError(value)
    return int(match.group("ms")) / 1000


def format_wire_timestamp(seconds: float) -> str:
    """Inverse of parse_wire_timestamp (millisecond precision)."""
    return f"{WIRE_PREFIX}{round(seconds * 1000)}{WIRE_SUFFIX}"
