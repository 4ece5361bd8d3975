"""
Built-in demo capabilities.

Tools `hello` and `calculate`, resources `demo://example` and
`demo://config`, prompts `greet_user` and `explain_mcp`. The plain
functions here hold the behaviour; `build_registry` wires them into
definitions, and the FastMCP variant registers the same functions.
"""

import json
import math
from decimal import Decimal
from typing import Dict, List, Literal

from pydantic import Field

from mcpdemo.errors import DomainError
from mcpdemo.registry import (
    PromptArgument,
    PromptDefinition,
    Registry,
    ResourceDefinition,
    ToolArguments,
    ToolDefinition,
)

SERVER_CAPABILITIES: List[str] = ["tools", "resources", "prompts"]

EXAMPLE_RESOURCE_TEXT = "This is an example resource from the MCP server!"
EXPLAIN_MCP_TEXT = "What is the Model Context Protocol (MCP)? Explain it in simple terms."

Operation = Literal["add", "subtract", "multiply", "divide"]


class HelloArguments(ToolArguments):
    name: str = Field(description="The name to greet")


class CalculateArguments(ToolArguments):
    operation: Operation = Field(description="The arithmetic operation to perform")
    a: float = Field(description="First number")
    b: float = Field(description="Second number")


def format_number(value: float) -> str:
    """Render a number the way the JavaScript demo servers print it.

    Follows ECMAScript Number::toString: shortest round-trip digits, fixed
    notation for 1e-6 <= |value| < 1e21, otherwise an unpadded exponent.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"
    if value < 0:
        return "-" + format_number(-value)

    # value == int(digits) * 10 ** exponent
    _, digit_tuple, exponent = Decimal(repr(float(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    k = len(digits)
    n = k + exponent  # position of the decimal point

    if k <= n <= 21:
        return digits + "0" * (n - k)
    if 0 < n <= 21:
        return f"{digits[:n]}.{digits[n:]}"
    if -6 < n <= 0:
        return "0." + "0" * -n + digits

    e = n - 1
    mantissa = digits if k == 1 else f"{digits[0]}.{digits[1:]}"
    return f"{mantissa}e{'+' if e > 0 else '-'}{abs(e)}"


def greet(name: str) -> str:
    return f"Hello, {name}! Welcome to MCP!"


def calculate(operation: str, a: float, b: float) -> str:
    """Apply a basic arithmetic operation and describe the result.

    Raises:
        DomainError: On division by zero or an unknown operation
    """
    if operation == "add":
        result = a + b
    elif operation == "subtract":
        result = a - b
    elif operation == "multiply":
        result = a * b
    elif operation == "divide":
        if b == 0:
            raise DomainError("Division by zero is not allowed")
        result = a / b
    else:
        raise DomainError(f"Unknown operation: {operation}")

    return f"{format_number(a)} {operation} {format_number(b)} = {format_number(result)}"


def config_document(server_name: str, version: str) -> str:
    return json.dumps(
        {"serverName": server_name, "version": version, "capabilities": SERVER_CAPABILITIES},
        indent=2,
    )


def greeting_prompt(name: str) -> str:
    return f"Please create a friendly greeting for {name}. Make it warm and welcoming!"


def build_registry(server_name: str, version: str) -> Registry:
    """Build the demo capability table for a server.

    Args:
        server_name: Name reported by the `demo://config` resource
        version: Version reported by the `demo://config` resource
    """

    def load_config() -> str:
        return config_document(server_name, version)

    def load_greeting(arguments: Dict[str, str]) -> str:
        return greeting_prompt(arguments.get("name") or "User")

    tools = [
        ToolDefinition(
            name="hello",
            description="A simple greeting tool that says hello",
            arguments=HelloArguments,
            handler=lambda args: greet(args.name or "World"),
        ),
        ToolDefinition(
            name="calculate",
            description="Perform basic arithmetic calculations",
            arguments=CalculateArguments,
            handler=lambda args: calculate(args.operation, args.a, args.b),
        ),
    ]

    resources = [
        ResourceDefinition(
            uri="demo://example",
            name="Example Resource",
            description="A simple example resource",
            mime_type="text/plain",
            loader=lambda: EXAMPLE_RESOURCE_TEXT,
        ),
        ResourceDefinition(
            uri="demo://config",
            name="Server Configuration",
            description="Current server configuration",
            mime_type="application/json",
            loader=load_config,
        ),
    ]

    prompts = [
        PromptDefinition(
            name="greet_user",
            description="Generate a greeting message",
            loader=load_greeting,
            arguments=(
                PromptArgument(name="name", description="The name of the person to greet", required=True),
            ),
        ),
        PromptDefinition(
            name="explain_mcp",
            description="Get an explanation of what MCP is",
            loader=lambda arguments: EXPLAIN_MCP_TEXT,
        ),
    ]

    return Registry(tools=tools, resources=resources, prompts=prompts)
