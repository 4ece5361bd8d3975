"""
Capability definitions and the immutable registry that holds them.

A registry is built once at process start from tools, resources and prompts.
Each kind is indexed by its key (name for tools and prompts, URI for
resources) in registration order, and is exposed read-only afterwards.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict

from mcpdemo.errors import NotFoundError

logger = logging.getLogger(__name__)


class CapabilityKind(str, Enum):
    """The three kinds of capability an MCP server exposes."""

    TOOL = "tool"
    RESOURCE = "resource"
    PROMPT = "prompt"


class ToolArguments(BaseModel):
    """Base model for tool arguments.

    Validation is strict: values are never coerced between types and
    fields the schema does not declare are rejected.
    """

    model_config = ConfigDict(strict=True, extra="forbid")


Payload = Union[str, Dict[str, Any], List[Any]]
ToolHandler = Callable[[Any], Union[Payload, Awaitable[Payload]]]
ResourceLoader = Callable[[], Union[Payload, Awaitable[Payload]]]
PromptLoader = Callable[[Dict[str, str]], Union[str, Awaitable[str]]]


@dataclass(frozen=True)
class ToolDefinition:
    """A named callable described by a `ToolArguments` model."""

    name: str
    description: str
    arguments: Type[ToolArguments]
    handler: ToolHandler

    @property
    def key(self) -> str:
        return self.name

    def input_schema(self) -> Dict[str, Any]:
        """JSON schema published to clients, derived from the arguments model."""
        return self.arguments.model_json_schema()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }


@dataclass(frozen=True)
class ResourceDefinition:
    """A URI-addressed readable content item."""

    uri: str
    name: str
    description: str
    mime_type: str
    loader: ResourceLoader

    @property
    def key(self) -> str:
        return self.uri

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uri": self.uri,
            "name": self.name,
            "description": self.description,
            "mimeType": self.mime_type,
        }


@dataclass(frozen=True)
class PromptArgument:
    name: str
    description: str = ""
    required: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description, "required": self.required}


@dataclass(frozen=True)
class PromptDefinition:
    """A parameterised template rendering conversational instruction text."""

    name: str
    description: str
    loader: PromptLoader
    arguments: Tuple[PromptArgument, ...] = field(default_factory=tuple)

    @property
    def key(self) -> str:
        return self.name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "arguments": [argument.to_dict() for argument in self.arguments],
        }


Capability = Union[ToolDefinition, ResourceDefinition, PromptDefinition]


def _validate_name(kind: CapabilityKind, name: str) -> None:
    if not name or not isinstance(name, str):
        raise ValueError(f"{kind.value.capitalize()} name must be a non-empty string, got: {name}")

    # Alphanumeric + underscore + hyphen
    if not name.replace('_', '').replace('-', '').isalnum():
        raise ValueError(f"{kind.value.capitalize()} name '{name}' contains invalid characters")


class Registry:
    """Read-only table of capabilities, keyed per kind."""

    def __init__(
        self,
        tools: Iterable[ToolDefinition] = (),
        resources: Iterable[ResourceDefinition] = (),
        prompts: Iterable[PromptDefinition] = (),
    ):
        self._tables: Mapping[CapabilityKind, Mapping[str, Capability]] = MappingProxyType({
            CapabilityKind.TOOL: self._index(CapabilityKind.TOOL, tools),
            CapabilityKind.RESOURCE: self._index(CapabilityKind.RESOURCE, resources),
            CapabilityKind.PROMPT: self._index(CapabilityKind.PROMPT, prompts),
        })

        logger.info(
            f"Registry built with {len(self.tools)} tools, "
            f"{len(self.resources)} resources and {len(self.prompts)} prompts"
        )

    @staticmethod
    def _index(kind: CapabilityKind, capabilities: Iterable[Capability]) -> Mapping[str, Capability]:
        table: Dict[str, Capability] = {}
        for capability in capabilities:
            if kind is CapabilityKind.RESOURCE:
                if not capability.uri:
                    raise ValueError("Resource URI must be a non-empty string")
            else:
                _validate_name(kind, capability.name)

            if capability.key in table:
                raise ValueError(f"Duplicate {kind.value} registered: {capability.key}")

            table[capability.key] = capability
            logger.debug(f"Registered {kind.value}: {capability.key}")
        return MappingProxyType(table)

    @property
    def tools(self) -> Mapping[str, ToolDefinition]:
        return self._tables[CapabilityKind.TOOL]

    @property
    def resources(self) -> Mapping[str, ResourceDefinition]:
        return self._tables[CapabilityKind.RESOURCE]

    @property
    def prompts(self) -> Mapping[str, PromptDefinition]:
        return self._tables[CapabilityKind.PROMPT]

    def list(self, kind: CapabilityKind) -> List[Capability]:
        """All capabilities of a kind, in registration order."""
        return list(self._tables[CapabilityKind(kind)].values())

    def get(self, kind: CapabilityKind, key: str) -> Capability:
        """Look up a capability by name (or URI for resources).

        Raises:
            NotFoundError: If nothing is registered under that key
        """
        kind = CapabilityKind(kind)
        try:
            return self._tables[kind][key]
        except (KeyError, TypeError):
            raise NotFoundError(kind.value, str(key)) from None
