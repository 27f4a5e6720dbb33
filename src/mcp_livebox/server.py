"""MCP Server for Livebox port forwarding management.

This module provides an MCP (Model Context Protocol) server for managing
the port forwarding rules of a Livebox router through AI assistants.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .exceptions import LiveboxError
from .livebox_client import LiveboxClient
from .port_forwarding import PortForwardingRule
from .protocol import Protocol

# Load environment variables
load_dotenv()

# Configure module logger
logger = logging.getLogger(__name__)

HOST_ENV = "LIVEBOX_HOST"
PASSWORD_ENV = "LIVEBOX_PASSWORD"


@dataclass
class ClientConfig:
    """Configuration for the Livebox client."""

    host: str
    password: str

    @classmethod
    def from_env(
        cls,
        host: Optional[str] = None,
        password: Optional[str] = None,
    ) -> ClientConfig:
        """Create configuration from environment variables.

        Args:
            host: Explicit host, taking precedence over LIVEBOX_HOST.
            password: Explicit password, taking precedence over LIVEBOX_PASSWORD.

        Returns:
            ClientConfig with values from the arguments or the environment.
        """
        return cls(
            host=host if host is not None else os.getenv(HOST_ENV, ""),
            password=password if password is not None else os.getenv(PASSWORD_ENV, ""),
        )

    def validate(self) -> None:
        """Check both values are set.

        Raises:
            ValueError: Naming every missing value.
        """
        missing = []
        if not self.host:
            missing.append(f"host (set {HOST_ENV})")
        if not self.password:
            missing.append(f"password (set {PASSWORD_ENV})")
        if missing:
            raise ValueError("Missing Livebox configuration: " + ", ".join(missing))


class ClientManager:
    """Manages the Livebox client lifecycle.

    The client is created lazily on first use. Since the router session
    expires after a few minutes, callers reset the client after a failure
    so the next call logs in again.

    Attributes:
        config: Client configuration.
    """

    def __init__(self, config: Optional[ClientConfig] = None) -> None:
        """Initialize the client manager.

        Args:
            config: Optional client configuration. If not provided,
                    configuration is loaded from environment variables.
        """
        self._config = config or ClientConfig.from_env()
        self._client: Optional[LiveboxClient] = None
        self._lock = asyncio.Lock()

    @property
    def config(self) -> ClientConfig:
        """Get the client configuration."""
        return self._config

    async def get_client(self) -> LiveboxClient:
        """Get or create the Livebox client.

        Returns:
            Logged in LiveboxClient instance.

        Raises:
            ValueError: If the configuration is incomplete.
            LiveboxError: If login fails.
        """
        async with self._lock:
            if self._client is None:
                self._config.validate()
                logger.debug("Creating new LiveboxClient for %s", self._config.host)
                self._client = await asyncio.to_thread(
                    LiveboxClient,
                    self._config.host,
                    self._config.password,
                )
            return self._client

    async def reset_client(self) -> None:
        """Drop the client, forcing a new login on next use."""
        async with self._lock:
            if self._client:
                self._client.close()
                self._client = None
            logger.debug("Client reset")


# Global client manager instance
_client_manager = ClientManager()


def get_client_manager() -> ClientManager:
    """Get the global client manager.

    Returns:
        The global ClientManager instance.
    """
    return _client_manager


# Initialize MCP server
server = Server("mcp-livebox")

_RULE_PROPERTIES: Dict[str, Any] = {
    "name": {
        "type": "string",
        "description": "Unique name of the port forwarding rule"
    },
    "protocol": {
        "type": "string",
        "description": "Protocol to forward",
        "enum": [p.value for p in Protocol.concrete()]
    },
    "external_port": {
        "type": "integer",
        "description": "First external port (1-65535)"
    },
    "internal_port": {
        "type": "integer",
        "description": "Port on the destination host (1-65535)"
    },
    "port_range": {
        "type": "integer",
        "description": "Number of extra external ports forwarded after external_port (0 for a single port)"
    },
    "destination": {
        "type": "string",
        "description": "IPv4 or IPv6 address of the destination host"
    },
    "enabled": {
        "type": "boolean",
        "description": "Whether the rule is active (default true)"
    },
}


def _get_tool_definitions() -> List[Tool]:
    """Get the list of available tool definitions.

    Returns:
        List of Tool definitions for the MCP server.
    """
    return [
        Tool(
            name="list_port_forwardings",
            description="List all port forwarding rules configured on the Livebox",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="get_port_forwarding",
            description="Get a port forwarding rule by name",
            inputSchema={
                "type": "object",
                "properties": {
                    "name": _RULE_PROPERTIES["name"]
                },
                "required": ["name"]
            }
        ),
        Tool(
            name="upsert_port_forwarding",
            description="Create a port forwarding rule, or replace the rule with the same name",
            inputSchema={
                "type": "object",
                "properties": _RULE_PROPERTIES,
                "required": ["name", "protocol", "external_port", "internal_port", "destination"]
            }
        ),
        Tool(
            name="delete_port_forwarding",
            description="Delete a port forwarding rule by name",
            inputSchema={
                "type": "object",
                "properties": {
                    "name": _RULE_PROPERTIES["name"]
                },
                "required": ["name"]
            }
        ),
    ]


def _handle_tool_call(
    client: LiveboxClient,
    name: str,
    arguments: Dict[str, Any]
) -> Any:
    """Handle a tool call and return the result.

    Args:
        client: The LiveboxClient instance.
        name: The tool name.
        arguments: The tool arguments.

    Returns:
        The JSON serializable result of the tool call.

    Raises:
        ValueError: If the tool name is unknown.
        LiveboxError: If the router call fails.
    """
    if name == "list_port_forwardings":
        return [rule.to_dict() for rule in client.list_port_forwardings()]

    elif name == "get_port_forwarding":
        return client.get_port_forwarding(arguments["name"]).to_dict()

    elif name == "upsert_port_forwarding":
        rule = PortForwardingRule.from_dict(arguments)
        return client.upsert_port_forwarding(rule).to_dict()

    elif name == "delete_port_forwarding":
        client.delete_port_forwarding(arguments["name"])
        return {"success": True, "deleted": arguments["name"]}

    else:
        raise ValueError(f"Unknown tool: {name}")


@server.list_tools()
async def list_tools() -> List[Tool]:
    """List available tools.

    Returns:
        List of available Tool definitions.
    """
    return _get_tool_definitions()


def _error_content(message: str) -> List[TextContent]:
    return [TextContent(type="text", text=json.dumps({"error": message}, indent=2))]


@server.call_tool()
async def call_tool(name: str, arguments: Dict[str, Any]) -> List[TextContent]:
    """Handle tool calls.

    Args:
        name: The tool name to call.
        arguments: The arguments for the tool.

    Returns:
        List containing a single TextContent with the JSON result.
    """
    manager = get_client_manager()

    try:
        client = await manager.get_client()
        result = await asyncio.to_thread(_handle_tool_call, client, name, arguments)
        return [TextContent(type="text", text=json.dumps(result, indent=2))]
    except LiveboxError as e:
        logger.warning("Livebox error in %s: %s", name, e)
        await manager.reset_client()
        return _error_content(str(e))
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Invalid tool call %s: %s", name, e)
        return _error_content(str(e))
    except Exception as e:
        logger.exception("Tool call error for %s: %s", name, e)
        return _error_content(str(e))


def main() -> None:
    """Main entry point for the MCP server."""
    # Configure logging
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    async def run() -> None:
        """Run the MCP server."""
        logger.info("Starting MCP Livebox server")
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options()
            )

    asyncio.run(run())


if __name__ == "__main__":
    main()
