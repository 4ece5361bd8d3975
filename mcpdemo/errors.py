"""Error taxonomy for capability dispatch."""

from typing import Any, Dict, List, Optional


class MCPDemoError(Exception):
    """Base class for errors raised while serving a capability request."""


class NotFoundError(MCPDemoError):
    """No capability with the requested name (or URI) is registered."""

    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"Unknown {kind}: {name}")


class InvalidArgumentsError(MCPDemoError):
    """Arguments do not satisfy the capability's declared schema."""

    def __init__(self, kind: str, name: str, errors: Optional[List[Dict[str, Any]]] = None):
        self.kind = kind
        self.name = name
        self.errors = errors or []
        details = "; ".join(_describe(error) for error in self.errors)
        message = f"Invalid arguments for {kind} '{name}'"
        super().__init__(f"{message}: {details}" if details else message)


class DomainError(MCPDemoError):
    """A handler rejected otherwise valid input (e.g. division by zero)."""


def _describe(error: Dict[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())) or "arguments"
    return f"{location}: {error.get('msg', 'invalid value')}"
