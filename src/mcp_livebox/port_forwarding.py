"""Port forwarding rules and their router representation."""

from __future__ import annotations

import ipaddress
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Union

from .exceptions import DecodeError, ValidationError
from .port_range import format_port_range, parse_int, parse_port_range
from .protocol import Protocol

# Rules created through the web interface are keyed "webui_<name>"
ORIGIN = "webui"
WIRE_ID_PREFIX = ORIGIN + "_"
SOURCE_INTERFACE = "data"

MIN_PORT = 1
MAX_PORT = 65535


def wire_id(name: str) -> str:
    """Router identifier of the rule with the given name."""
    return WIRE_ID_PREFIX + name


def _valid_port(value: Any, low: int = MIN_PORT) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and low <= value <= MAX_PORT


@dataclass
class PortForwardingRule:
    """A port forwarding rule.

    The same type describes the configuration sent on upsert and the record
    read back from the router.

    Attributes:
        name: Unique name of the rule, used verbatim in its router identifier.
        protocol: TCP, UDP or both. Accepts a Protocol or its string value.
        external_port: First external port.
        internal_port: Port on the destination host.
        port_range: Extent of the external range; 0 and 1 mean a single port.
        destination: IPv4 or IPv6 address of the destination host.
        enabled: Whether the rule is active.
    """

    name: str
    protocol: Union[Protocol, str]
    external_port: int
    internal_port: int
    destination: str
    port_range: int = 0
    enabled: bool = True

    def validate(self) -> None:
        """Check the rule can be sent to the router.

        Raises:
            ValidationError: Describing the first invalid field.
        """
        if not isinstance(self.name, str):
            raise ValidationError(f"invalid name; must be a string, got {self.name!r}")

        if not self.name:
            raise ValidationError("empty name")

        if not _valid_port(self.external_port):
            raise ValidationError(f"invalid external port; must be between {MIN_PORT} and {MAX_PORT}")

        if not _valid_port(self.internal_port):
            raise ValidationError(f"invalid internal port; must be between {MIN_PORT} and {MAX_PORT}")

        if not _valid_port(self.port_range, low=0):
            raise ValidationError(f"invalid port range; must be between 0 and {MAX_PORT}")

        if Protocol.parse(self.protocol) not in Protocol.concrete():
            names = ", ".join(repr(p.value) for p in Protocol.concrete())
            raise ValidationError(f"invalid protocol; must be one of: {names}")

        if not isinstance(self.destination, str):
            raise ValidationError("invalid destination; must be a valid IP address")

        try:
            ipaddress.ip_address(self.destination)
        except ValueError as e:
            raise ValidationError("invalid destination; must be a valid IP address") from e

    def normalized(self) -> PortForwardingRule:
        """Return a copy with the protocol as a Protocol member."""
        return replace(self, protocol=Protocol.parse(self.protocol))

    def to_parameters(self) -> Dict[str, Any]:
        """Build the parameters of a ``setPortForwarding`` call."""
        return {
            "id": wire_id(self.name),
            "description": self.name,
            "protocol": Protocol.parse(self.protocol).wire_value,
            "internalPort": self.internal_port,
            "externalPort": format_port_range(self.external_port, self.port_range),
            "destinationIPAddress": self.destination,
            "sourcePrefix": "",
            "persistent": True,
            "enable": self.enabled,
            "sourceInterface": SOURCE_INTERFACE,
            "origin": ORIGIN,
        }

    @classmethod
    def from_wire(cls, rule_id: str, raw: Dict[str, Any]) -> PortForwardingRule:
        """Decode a rule returned by ``getPortForwarding``.

        Args:
            rule_id: Router identifier of the rule.
            raw: Raw record as sent by the router.

        Raises:
            DecodeError: If the record or one of its ports is malformed.
        """
        if not isinstance(raw, dict):
            raise DecodeError(f"unexpected record for {rule_id!r}: {raw!r}")

        try:
            external_port, port_range = parse_port_range(raw.get("ExternalPort", ""))
        except DecodeError as e:
            raise e.wrap("parse port range") from e

        internal_port = parse_int(raw.get("InternalPort", ""), "internal port")

        return cls(
            name=rule_id.removeprefix(WIRE_ID_PREFIX),
            protocol=Protocol.from_wire(raw.get("Protocol", "")),
            external_port=external_port,
            internal_port=internal_port,
            port_range=port_range,
            destination=raw.get("DestinationIPAddress", ""),
            enabled=bool(raw.get("Enable", False)),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PortForwardingRule:
        """Create a rule from a plain mapping, ignoring unknown keys."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON friendly dictionary."""
        data = asdict(self)
        data["protocol"] = Protocol.parse(self.protocol).value
        return data
