"""Protocols supported by Livebox port forwarding rules.

The router encodes protocols as IANA protocol numbers joined by commas:
``"6"`` for TCP, ``"17"`` for UDP and ``"6,17"`` for both.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Tuple


class Protocol(str, Enum):
    """Protocol of a port forwarding rule."""

    UNKNOWN = "unknown"
    TCP = "tcp"
    UDP = "udp"
    TCP_UDP = "tcp/udp"

    @property
    def wire_value(self) -> str:
        """Router encoding of the protocol, empty for UNKNOWN."""
        return _TO_WIRE.get(self, "")

    @classmethod
    def from_wire(cls, value: str) -> Protocol:
        """Decode a router protocol string, falling back to UNKNOWN."""
        return _FROM_WIRE.get(value, cls.UNKNOWN)

    @classmethod
    def parse(cls, value: Any) -> Protocol:
        """Map a user supplied protocol name to a member.

        Args:
            value: A Protocol member or a name such as "udp" or "TCP/UDP".

        Returns:
            The matching member, or UNKNOWN if the name is not recognized.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.UNKNOWN
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.UNKNOWN

    @classmethod
    def concrete(cls) -> Tuple[Protocol, ...]:
        """Members that can be sent to the router."""
        return (cls.TCP, cls.UDP, cls.TCP_UDP)

    def __str__(self) -> str:
        return self.value


_TO_WIRE = {
    Protocol.TCP: "6",
    Protocol.UDP: "17",
    Protocol.TCP_UDP: "6,17",
}

_FROM_WIRE = {wire: protocol for protocol, wire in _TO_WIRE.items()}
