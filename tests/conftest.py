"""
Pytest configuration and shared fixtures for mcpdemo tests.
"""

import pytest

from mcpdemo.capabilities import build_registry
from mcpdemo.dispatcher import Dispatcher
from mcpdemo.server import MCPServer, MCPServerSettings

SERVER_NAME = "test-mcp-server"
SERVER_VERSION = "9.8.7"


@pytest.fixture
def registry():
    return build_registry(SERVER_NAME, SERVER_VERSION)


@pytest.fixture
def dispatcher(registry):
    return Dispatcher(registry)


@pytest.fixture
def settings(monkeypatch):
    """Settings isolated from the caller's MCP_* environment."""
    for var in (
        "MCP_SERVER_NAME",
        "MCP_SERVER_VERSION",
        "MCP_SERVER_VARIANT",
        "MCP_TRANSPORT",
        "MCP_HOST",
        "MCP_PORT",
        "MCP_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    return MCPServerSettings(mcp_server_name=SERVER_NAME, mcp_server_version=SERVER_VERSION)


@pytest.fixture
def mcp_server(settings):
    return MCPServer(settings)
