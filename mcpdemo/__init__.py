"""
Demo Model Context Protocol servers.

A static registry of tools, resources and prompts, a dispatcher that
validates and routes requests to them, and bindings that serve the
dispatcher over stdio with the MCP SDK or FastMCP.
"""

from mcpdemo.capabilities import build_registry
from mcpdemo.dispatcher import Dispatcher
from mcpdemo.errors import DomainError, InvalidArgumentsError, MCPDemoError, NotFoundError
from mcpdemo.registry import (
    CapabilityKind,
    PromptArgument,
    PromptDefinition,
    Registry,
    ResourceDefinition,
    ToolArguments,
    ToolDefinition,
)

__version__ = "0.1.0"

__all__ = [
    "CapabilityKind",
    "Dispatcher",
    "DomainError",
    "InvalidArgumentsError",
    "MCPDemoError",
    "NotFoundError",
    "PromptArgument",
    "PromptDefinition",
    "Registry",
    "ResourceDefinition",
    "ToolArguments",
    "ToolDefinition",
    "build_registry",
]
