"""Tests for the MCP server module."""

import json
import os
from unittest.mock import MagicMock, patch

import pytest

from mcp_livebox.exceptions import APIError, NotFoundError
from mcp_livebox.port_forwarding import PortForwardingRule
from mcp_livebox.protocol import Protocol
from mcp_livebox.server import (
    ClientConfig,
    ClientManager,
    _get_tool_definitions,
    _handle_tool_call,
    call_tool,
    get_client_manager,
)


def sample_rule() -> PortForwardingRule:
    return PortForwardingRule(
        name="wireguard",
        protocol=Protocol.UDP,
        external_port=51820,
        internal_port=51820,
        destination="192.168.10.200",
    )


class TestClientConfig:
    """Tests for ClientConfig dataclass."""

    def test_creation(self) -> None:
        """Test config creation with values."""
        config = ClientConfig(host="https://192.168.1.1", password="secret")
        assert config.host == "https://192.168.1.1"
        assert config.password == "secret"

    def test_from_env_defaults(self) -> None:
        """Test from_env with no environment variables."""
        with patch.dict(os.environ, {}, clear=True):
            config = ClientConfig.from_env()
            assert config.host == ""
            assert config.password == ""

    def test_from_env_with_values(self) -> None:
        """Test from_env with environment variables set."""
        env_vars = {
            "LIVEBOX_HOST": "https://192.168.1.1",
            "LIVEBOX_PASSWORD": "testpass",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            config = ClientConfig.from_env()
            assert config.host == "https://192.168.1.1"
            assert config.password == "testpass"

    def test_explicit_values_take_precedence(self) -> None:
        """Test explicit values override the environment."""
        env_vars = {
            "LIVEBOX_HOST": "https://192.168.1.1",
            "LIVEBOX_PASSWORD": "envpass",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            config = ClientConfig.from_env(host="https://10.0.0.1")
            assert config.host == "https://10.0.0.1"
            assert config.password == "envpass"

    def test_validate_ok(self) -> None:
        """Test a complete configuration validates."""
        ClientConfig(host="https://192.168.1.1", password="secret").validate()

    def test_validate_missing_values(self) -> None:
        """Test missing values are all reported."""
        with pytest.raises(ValueError) as exc_info:
            ClientConfig(host="", password="").validate()
        assert "LIVEBOX_HOST" in str(exc_info.value)
        assert "LIVEBOX_PASSWORD" in str(exc_info.value)


class TestClientManager:
    """Tests for ClientManager class."""

    def test_init_custom_config(self) -> None:
        """Test manager initialization with custom config."""
        config = ClientConfig(host="https://10.0.0.1", password="pass")
        manager = ClientManager(config)
        assert manager.config.host == "https://10.0.0.1"
        assert manager._client is None

    @pytest.mark.asyncio
    async def test_get_client_creates_client_once(self) -> None:
        """Test get_client logs in on first call and reuses the client."""
        config = ClientConfig(host="https://192.168.1.1", password="test")
        manager = ClientManager(config)
        with patch("mcp_livebox.server.LiveboxClient") as client_cls:
            client1 = await manager.get_client()
            client2 = await manager.get_client()
        assert client1 is client2
        client_cls.assert_called_once_with("https://192.168.1.1", "test")

    @pytest.mark.asyncio
    async def test_get_client_incomplete_config(self) -> None:
        """Test get_client refuses to log in without a password."""
        manager = ClientManager(ClientConfig(host="https://192.168.1.1", password=""))
        with patch("mcp_livebox.server.LiveboxClient") as client_cls:
            with pytest.raises(ValueError):
                await manager.get_client()
        client_cls.assert_not_called()

    @pytest.mark.asyncio
    async def test_reset_client(self) -> None:
        """Test reset_client closes and clears the client."""
        manager = ClientManager(ClientConfig(host="https://192.168.1.1", password="test"))
        with patch("mcp_livebox.server.LiveboxClient"):
            client = await manager.get_client()

        await manager.reset_client()

        client.close.assert_called_once_with()
        assert manager._client is None

    @pytest.mark.asyncio
    async def test_reset_client_when_no_client(self) -> None:
        """Test reset_client when no client exists."""
        manager = ClientManager(ClientConfig(host="", password=""))
        # Should not raise
        await manager.reset_client()
        assert manager._client is None


class TestGetClientManager:
    """Tests for get_client_manager function."""

    def test_returns_same_manager(self) -> None:
        """Test get_client_manager returns the same instance."""
        manager = get_client_manager()
        assert isinstance(manager, ClientManager)
        assert manager is get_client_manager()


class TestToolDefinitions:
    """Tests for tool definitions."""

    def test_all_tools_are_described(self) -> None:
        """Test all tools have a name, description and object schema."""
        for tool in _get_tool_definitions():
            assert tool.name
            assert tool.description
            assert tool.inputSchema["type"] == "object"

    def test_expected_tools_exist(self) -> None:
        """Test the CRUD tools are defined."""
        tool_names = {tool.name for tool in _get_tool_definitions()}
        assert tool_names == {
            "list_port_forwardings",
            "get_port_forwarding",
            "upsert_port_forwarding",
            "delete_port_forwarding",
        }

    def test_upsert_schema_protocols(self) -> None:
        """Test the upsert schema only offers concrete protocols."""
        [upsert] = [t for t in _get_tool_definitions() if t.name == "upsert_port_forwarding"]
        protocol = upsert.inputSchema["properties"]["protocol"]
        assert protocol["enum"] == ["tcp", "udp", "tcp/udp"]


class TestHandleToolCall:
    """Tests for tool dispatch."""

    def test_list(self) -> None:
        """Test list_port_forwardings returns rule dictionaries."""
        client = MagicMock()
        client.list_port_forwardings.return_value = [sample_rule()]
        result = _handle_tool_call(client, "list_port_forwardings", {})
        assert result == [sample_rule().to_dict()]

    def test_get(self) -> None:
        """Test get_port_forwarding passes the name through."""
        client = MagicMock()
        client.get_port_forwarding.return_value = sample_rule()
        result = _handle_tool_call(client, "get_port_forwarding", {"name": "wireguard"})
        client.get_port_forwarding.assert_called_once_with("wireguard")
        assert result["protocol"] == "udp"

    def test_get_not_found_propagates(self) -> None:
        """Test client errors are not swallowed by the dispatcher."""
        client = MagicMock()
        client.get_port_forwarding.side_effect = NotFoundError("port forward not found")
        with pytest.raises(NotFoundError):
            _handle_tool_call(client, "get_port_forwarding", {"name": "missing"})

    def test_upsert(self) -> None:
        """Test upsert_port_forwarding builds a rule from the arguments."""
        client = MagicMock()
        client.upsert_port_forwarding.side_effect = lambda rule: rule.normalized()
        arguments = {
            "name": "wireguard",
            "protocol": "udp",
            "external_port": 51820,
            "internal_port": 51820,
            "destination": "192.168.10.200",
        }

        result = _handle_tool_call(client, "upsert_port_forwarding", arguments)

        [rule] = client.upsert_port_forwarding.call_args.args
        assert rule == sample_rule()
        assert result == sample_rule().to_dict()

    def test_delete(self) -> None:
        """Test delete_port_forwarding reports the deleted name."""
        client = MagicMock()
        result = _handle_tool_call(client, "delete_port_forwarding", {"name": "wireguard"})
        client.delete_port_forwarding.assert_called_once_with("wireguard")
        assert result == {"success": True, "deleted": "wireguard"}

    def test_unknown_tool(self) -> None:
        """Test unknown tools raise ValueError."""
        with pytest.raises(ValueError, match="Unknown tool"):
            _handle_tool_call(MagicMock(), "reboot_router", {})


class TestCallTool:
    """Tests for the MCP call_tool handler."""

    @staticmethod
    def make_manager() -> ClientManager:
        return ClientManager(ClientConfig(host="https://192.168.1.1", password="test"))

    @pytest.mark.asyncio
    async def test_success_returns_json_text(self) -> None:
        """Test a successful call returns the result as JSON text."""
        manager = self.make_manager()
        with patch("mcp_livebox.server.get_client_manager", return_value=manager), \
                patch("mcp_livebox.server.LiveboxClient") as client_cls:
            client_cls.return_value.list_port_forwardings.return_value = [sample_rule()]
            [content] = await call_tool("list_port_forwardings", {})

        assert content.type == "text"
        assert json.loads(content.text) == [sample_rule().to_dict()]
        assert manager._client is not None

    @pytest.mark.asyncio
    async def test_livebox_error_resets_client(self) -> None:
        """Test a router error is reported and the next call logs in again."""
        manager = self.make_manager()
        with patch("mcp_livebox.server.get_client_manager", return_value=manager), \
                patch("mcp_livebox.server.LiveboxClient") as client_cls:
            client = client_cls.return_value
            client.list_port_forwardings.side_effect = APIError(
                "do request: api error: expired", errors=["expired"]
            )

            [content] = await call_tool("list_port_forwardings", {})

            assert json.loads(content.text) == {"error": "do request: api error: expired"}
            client.close.assert_called_once_with()
            assert manager._client is None

            client.list_port_forwardings.side_effect = None
            client.list_port_forwardings.return_value = []
            [content] = await call_tool("list_port_forwardings", {})

        assert json.loads(content.text) == []
        assert client_cls.call_count == 2

    @pytest.mark.asyncio
    async def test_unknown_tool_keeps_client(self) -> None:
        """Test an invalid tool call is reported without dropping the client."""
        manager = self.make_manager()
        with patch("mcp_livebox.server.get_client_manager", return_value=manager), \
                patch("mcp_livebox.server.LiveboxClient") as client_cls:
            [content] = await call_tool("reboot_router", {})

        assert json.loads(content.text) == {"error": "Unknown tool: reboot_router"}
        client_cls.return_value.close.assert_not_called()
        assert manager._client is not None

    @pytest.mark.asyncio
    async def test_missing_argument(self) -> None:
        """Test a missing required argument is reported as an error."""
        manager = self.make_manager()
        with patch("mcp_livebox.server.get_client_manager", return_value=manager), \
                patch("mcp_livebox.server.LiveboxClient"):
            [content] = await call_tool("get_port_forwarding", {})

        assert "error" in json.loads(content.text)
        assert manager._client is not None

    @pytest.mark.asyncio
    async def test_incomplete_config(self) -> None:
        """Test a missing password is reported as an error."""
        manager = ClientManager(ClientConfig(host="https://192.168.1.1", password=""))
        with patch("mcp_livebox.server.get_client_manager", return_value=manager), \
                patch("mcp_livebox.server.LiveboxClient") as client_cls:
            [content] = await call_tool("list_port_forwardings", {})

        assert "LIVEBOX_PASSWORD" in json.loads(content.text)["error"]
        client_cls.assert_not_called()
