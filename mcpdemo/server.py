"""
MCPServer serving the capability registry over stdio.

Binds the dispatcher to the low-level server of the MCP SDK, which owns
JSON-RPC framing, the initialize handshake and request correlation.
"""

import logging
from typing import Any, Dict, Iterable, List, Literal, Optional

import anyio
import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from pydantic import AnyUrl, model_validator
from pydantic_settings import BaseSettings

from mcpdemo.capabilities import build_registry
from mcpdemo.dispatcher import Dispatcher
from mcpdemo.registry import Registry
from mcpdemo.telemetry import OtelManager

logger = logging.getLogger(__name__)


class MCPServerSettings(BaseSettings):
    """MCP server configuration from environment variables."""

    mcp_server_name: str = "basic-mcp-server"
    mcp_server_version: str = "0.1.0"
    mcp_server_variant: Literal["lowlevel", "fastmcp"] = "lowlevel"
    mcp_transport: Literal["stdio", "http", "sse"] = "stdio"
    mcp_host: str = "127.0.0.1"
    mcp_port: int = 8002
    mcp_log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False

    @model_validator(mode="after")
    def _check_transport(self) -> "MCPServerSettings":
        if self.mcp_transport != "stdio" and self.mcp_server_variant != "fastmcp":
            raise ValueError(
                f"Transport '{self.mcp_transport}' requires the fastmcp variant, "
                f"got '{self.mcp_server_variant}'"
            )
        return self


class MCPServer:
    """MCP server that routes every request through a `Dispatcher`."""

    def __init__(self, settings: MCPServerSettings, registry: Optional[Registry] = None):
        """Initialize MCP server.

        Args:
            settings: Server configuration
            registry: Capability table; defaults to the built-in demo capabilities
        """
        self.settings = settings
        self.registry = registry or build_registry(settings.mcp_server_name, settings.mcp_server_version)
        self.dispatcher = Dispatcher(self.registry, OtelManager(settings.mcp_server_name))
        self.server = Server(settings.mcp_server_name, version=settings.mcp_server_version)

        self._setup_handlers()
        logger.info(
            f"MCPServer {settings.mcp_server_name} {settings.mcp_server_version} initialized "
            f"with tools: {self.get_registered_tools()}"
        )

    def _setup_handlers(self):
        """Register SDK request handlers for tools, resources and prompts."""
        dispatcher = self.dispatcher

        @self.server.list_tools()
        async def list_tools() -> List[types.Tool]:
            return [types.Tool(**tool) for tool in dispatcher.list_tools()]

        # The dispatcher validates against the same schema; skip the SDK's copy
        @self.server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
            result = await dispatcher.call_tool(name, arguments)
            return [types.TextContent(**content) for content in result["content"]]

        @self.server.list_resources()
        async def list_resources() -> List[types.Resource]:
            return [types.Resource(**resource) for resource in dispatcher.list_resources()]

        @self.server.read_resource()
        async def read_resource(uri: AnyUrl) -> Iterable[ReadResourceContents]:
            result = await dispatcher.read_resource(str(uri))
            return [
                ReadResourceContents(content=content["text"], mime_type=content["mimeType"])
                for content in result["contents"]
            ]

        @self.server.list_prompts()
        async def list_prompts() -> List[types.Prompt]:
            return [
                types.Prompt(
                    name=prompt["name"],
                    description=prompt["description"],
                    arguments=[types.PromptArgument(**argument) for argument in prompt["arguments"]],
                )
                for prompt in dispatcher.list_prompts()
            ]

        @self.server.get_prompt()
        async def get_prompt(name: str, arguments: Optional[Dict[str, str]]) -> types.GetPromptResult:
            result = await dispatcher.get_prompt(name, arguments)
            return types.GetPromptResult(
                description=result["description"],
                messages=[
                    types.PromptMessage(role=message["role"], content=types.TextContent(**message["content"]))
                    for message in result["messages"]
                ],
            )

    def get_registered_tools(self) -> List[str]:
        """Get list of registered tool names."""
        return list(self.registry.tools.keys())

    async def run_stdio(self) -> None:
        """Serve requests from stdin until the client closes the stream."""
        async with stdio_server() as (read_stream, write_stream):
            logger.info(f"{self.settings.mcp_server_name} running on stdio")
            await self.server.run(read_stream, write_stream, self.server.create_initialization_options())

    def run(self) -> None:
        """Run the MCP server over stdio."""
        anyio.run(self.run_stdio)
