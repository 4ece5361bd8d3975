"""
Tests for the FastMCP variant, driven in-memory through fastmcp.Client.
"""

import json
import logging

import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError

from conftest import SERVER_NAME, SERVER_VERSION
from mcpdemo.fastmcp_server import create_fastmcp_server

logger = logging.getLogger(__name__)


@pytest.fixture
def fastmcp_server(settings):
    return create_fastmcp_server(settings)


class TestFastMCPTools:
    """Tests for tools registered through FastMCP."""

    @pytest.mark.asyncio
    async def test_list_tools(self, fastmcp_server):
        async with Client(fastmcp_server) as client:
            tools = await client.list_tools()

        assert {tool.name for tool in tools} == {"hello", "calculate"}
        calculate = next(tool for tool in tools if tool.name == "calculate")
        assert calculate.inputSchema["properties"]["operation"]["enum"] == [
            "add", "subtract", "multiply", "divide"
        ]
        logger.info("✓ FastMCP tools listed")

    @pytest.mark.asyncio
    async def test_hello(self, fastmcp_server):
        async with Client(fastmcp_server) as client:
            result = await client.call_tool("hello", {"name": "Alice"})

        assert result.content[0].text == "Hello, Alice! Welcome to MCP!"

    @pytest.mark.asyncio
    async def test_hello_empty_name_greets_world(self, fastmcp_server):
        async with Client(fastmcp_server) as client:
            result = await client.call_tool("hello", {"name": ""})

        assert result.content[0].text == "Hello, World! Welcome to MCP!"

    @pytest.mark.asyncio
    async def test_calculate(self, fastmcp_server):
        async with Client(fastmcp_server) as client:
            result = await client.call_tool("calculate", {"operation": "add", "a": 2, "b": 3})

        assert result.content[0].text == "2 add 3 = 5"

    @pytest.mark.asyncio
    async def test_divide_by_zero_fails_call(self, fastmcp_server):
        """Test division by zero fails the call and later calls still work."""
        async with Client(fastmcp_server) as client:
            with pytest.raises(ToolError, match="Division by zero is not allowed"):
                await client.call_tool("calculate", {"operation": "divide", "a": 10, "b": 0})

            result = await client.call_tool("calculate", {"operation": "divide", "a": 10, "b": 4})
            assert result.content[0].text == "10 divide 4 = 2.5"

    @pytest.mark.asyncio
    async def test_missing_argument_fails_call(self, fastmcp_server):
        async with Client(fastmcp_server) as client:
            with pytest.raises(ToolError):
                await client.call_tool("hello", {})


class TestFastMCPResourcesAndPrompts:
    """Tests for resources and prompts registered through FastMCP."""

    @pytest.mark.asyncio
    async def test_read_config(self, fastmcp_server):
        async with Client(fastmcp_server) as client:
            contents = await client.read_resource("demo://config")

        assert json.loads(contents[0].text) == {
            "serverName": SERVER_NAME,
            "version": SERVER_VERSION,
            "capabilities": ["tools", "resources", "prompts"],
        }

    @pytest.mark.asyncio
    async def test_read_example(self, fastmcp_server):
        async with Client(fastmcp_server) as client:
            contents = await client.read_resource("demo://example")

        assert contents[0].text == "This is an example resource from the MCP server!"

    @pytest.mark.asyncio
    async def test_list_prompts(self, fastmcp_server):
        async with Client(fastmcp_server) as client:
            prompts = await client.list_prompts()

        assert {prompt.name for prompt in prompts} == {"greet_user", "explain_mcp"}

    @pytest.mark.asyncio
    async def test_greet_user(self, fastmcp_server):
        async with Client(fastmcp_server) as client:
            result = await client.get_prompt("greet_user", {"name": "Alice"})

        assert result.messages[0].role == "user"
        assert result.messages[0].content.text == (
            "Please create a friendly greeting for Alice. Make it warm and welcoming!"
        )
        logger.info("✓ FastMCP prompt rendered")
