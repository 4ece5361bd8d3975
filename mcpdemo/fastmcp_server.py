"""
Demo capabilities served through FastMCP's decorator API.

FastMCP derives each tool's input schema from the function signature and
validates arguments itself, so the functions below only describe their
parameters and delegate to the shared implementations.
"""

import logging
from typing import Annotated

from fastmcp import FastMCP
from pydantic import Field

from mcpdemo.capabilities import (
    EXAMPLE_RESOURCE_TEXT,
    EXPLAIN_MCP_TEXT,
    Operation,
    calculate as calculate_result,
    config_document,
    greet,
    greeting_prompt,
)
from mcpdemo.server import MCPServerSettings

logger = logging.getLogger(__name__)


def create_fastmcp_server(settings: MCPServerSettings) -> FastMCP:
    """Create a FastMCP server exposing the demo tools, resources and prompts."""
    mcp = FastMCP(settings.mcp_server_name, version=settings.mcp_server_version)

    @mcp.tool(name="hello", description="A simple greeting tool that says hello")
    def hello(name: Annotated[str, Field(description="The name to greet")]) -> str:
        return greet(name or "World")

    @mcp.tool(name="calculate", description="Perform basic arithmetic calculations")
    def calculate(
        operation: Annotated[Operation, Field(description="The arithmetic operation to perform")],
        a: Annotated[float, Field(description="First number")],
        b: Annotated[float, Field(description="Second number")],
    ) -> str:
        return calculate_result(operation, a, b)

    @mcp.resource(
        "demo://example",
        name="Example Resource",
        description="A simple example resource",
        mime_type="text/plain",
    )
    def example_resource() -> str:
        return EXAMPLE_RESOURCE_TEXT

    @mcp.resource(
        "demo://config",
        name="Server Configuration",
        description="Current server configuration",
        mime_type="application/json",
    )
    def config_resource() -> str:
        return config_document(settings.mcp_server_name, settings.mcp_server_version)

    @mcp.prompt(name="greet_user", description="Generate a greeting message")
    def greet_user(name: Annotated[str, Field(description="The name of the person to greet")]) -> str:
        return greeting_prompt(name or "User")

    @mcp.prompt(name="explain_mcp", description="Get an explanation of what MCP is")
    def explain_mcp() -> str:
        return EXPLAIN_MCP_TEXT

    logger.info(f"FastMCP server {settings.mcp_server_name} {settings.mcp_server_version} initialized")
    return mcp


def run_fastmcp_server(settings: MCPServerSettings) -> None:
    """Run the FastMCP variant on the configured transport."""
    mcp = create_fastmcp_server(settings)

    if settings.mcp_transport == "stdio":
        logger.info(f"{settings.mcp_server_name} running on stdio")
        mcp.run(transport="stdio")
    else:
        logger.info(
            f"Starting {settings.mcp_server_name} on {settings.mcp_host}:{settings.mcp_port} "
            f"({settings.mcp_transport})"
        )
        mcp.run(transport=settings.mcp_transport, host=settings.mcp_host, port=settings.mcp_port)
