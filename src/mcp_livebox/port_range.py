"""Codec for the router's external port field.

A rule forwards either a single port (``"8080"``) or a range written as
``"<first>-<last>"``. The client models a range as the first port plus an
extent, so ``"10000-10005"`` is port 10000 with an extent of 5.
"""

from __future__ import annotations

import re
from typing import Any, Tuple

from .exceptions import DecodeError

_INTEGER = re.compile(r"[+-]?[0-9]+")


def parse_int(value: Any, what: str) -> int:
    """Parse a decimal integer sent as a string by the router.

    Only plain ASCII digits with an optional sign are accepted; numbers,
    whitespace and underscores are rejected.

    Raises:
        DecodeError: If the value is not such a string.
    """
    if not isinstance(value, str) or not _INTEGER.fullmatch(value):
        raise DecodeError(f"parse {what}: invalid integer {value!r}")
    return int(value)


def parse_port_range(text: str) -> Tuple[int, int]:
    """Parse a port with an optional range.

    Args:
        text: Port field as sent by the router, e.g. "51820" or "10000-10005".

    Returns:
        Tuple of (external port, range extent). The extent is 0 when no
        range is given.

    Raises:
        DecodeError: If a segment is not an integer.
    """
    if not isinstance(text, str):
        raise DecodeError(f"parse external port: invalid port field {text!r}")

    parts = text.split("-", 1)
    start = parse_int(parts[0], "external port")

    if len(parts) == 1:
        return start, 0

    end = parse_int(parts[1], "external port range")
    return start, end - start


def format_port_range(port: int, port_range: int) -> str:
    """Format a port and a range extent the way the router expects.

    An extent of 0 or 1 both mean "no range" and give the plain port.
    """
    if port_range in (0, 1):
        return str(port)
    return f"{port}-{port + port_range}"
