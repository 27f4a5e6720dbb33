"""MCP server and client for Livebox port forwarding management.

This package provides a client for the JSON web-service API of Livebox
routers, focused on NAT port forwarding rules, and an MCP (Model Context
Protocol) server exposing it to AI assistants.

Example usage:
    >>> from mcp_livebox import LiveboxClient, PortForwardingRule, Protocol
    >>> with LiveboxClient('https://192.168.1.1', 'my_password') as client:
    ...     client.upsert_port_forwarding(PortForwardingRule(
    ...         name='wireguard',
    ...         protocol=Protocol.UDP,
    ...         external_port=51820,
    ...         internal_port=51820,
    ...         destination='192.168.1.200',
    ...     ))

For MCP server usage, run:
    $ mcp-livebox
"""

from .cookie_patch import CookieNamePatcher
from .envelope import ApiRequest, ApiResponse
from .exceptions import (
    APIError,
    AuthenticationError,
    DecodeError,
    LiveboxError,
    NotFoundError,
    TransportError,
    ValidationError,
)
from .livebox_client import LiveboxClient
from .port_forwarding import PortForwardingRule
from .port_range import format_port_range, parse_port_range
from .protocol import Protocol
from .server import ClientConfig, ClientManager, get_client_manager, main

__version__ = "0.1.0"

__all__ = [
    # Main entry point
    "main",
    # Client
    "LiveboxClient",
    "CookieNamePatcher",
    # Server components
    "ClientConfig",
    "ClientManager",
    "get_client_manager",
    # Data classes
    "PortForwardingRule",
    "Protocol",
    "ApiRequest",
    "ApiResponse",
    # Codecs
    "parse_port_range",
    "format_port_range",
    # Exceptions
    "LiveboxError",
    "TransportError",
    "DecodeError",
    "APIError",
    "AuthenticationError",
    "ValidationError",
    "NotFoundError",
]
