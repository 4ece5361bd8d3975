"""
Capability dispatcher.

Routes a request (capability kind, name, argument bag) to the registered
handler. Every invocation runs through two separate stages: `validate`
turns the raw argument bag into a typed value using the capability's
declared schema, then `execute` runs the handler on that value and wraps
its payload in the MCP result envelope.

Results are plain dicts in MCP wire shape so that any transport binding
can forward them unchanged.
"""

import inspect
import json
import logging
import time
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from mcpdemo.errors import InvalidArgumentsError, MCPDemoError
from mcpdemo.registry import (
    Capability,
    CapabilityKind,
    PromptDefinition,
    Registry,
    ResourceDefinition,
    ToolDefinition,
)
from mcpdemo.telemetry import OtelManager

logger = logging.getLogger(__name__)


def to_text(payload: Any) -> str:
    """Render a handler payload as text; structured data becomes JSON."""
    if isinstance(payload, str):
        return payload
    return json.dumps(payload, indent=2)


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class Dispatcher:
    """Stateless router from capability requests to registered handlers."""

    def __init__(self, registry: Registry, otel: Optional[OtelManager] = None):
        self._registry = registry
        self._otel = otel or OtelManager("mcpdemo")

    @property
    def registry(self) -> Registry:
        return self._registry

    def list(self, kind: CapabilityKind) -> List[Dict[str, Any]]:
        """Describe every capability of a kind, in registration order."""
        return [capability.to_dict() for capability in self._registry.list(kind)]

    async def invoke(
        self, kind: CapabilityKind, name: str, args: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        """Look up, validate and execute a capability.

        Args:
            kind: Capability kind
            name: Tool or prompt name, or resource URI
            args: Raw argument bag from the request

        Returns:
            The result envelope for the capability kind

        Raises:
            NotFoundError: Nothing registered under `name`
            InvalidArgumentsError: `args` do not satisfy the declared schema
            DomainError: The handler rejected the input
        """
        kind = CapabilityKind(kind)
        start = time.perf_counter()
        success = False
        try:
            with self._otel.capability_span(kind.value, str(name)):
                capability = self._registry.get(kind, name)
                arguments = self.validate(capability, args)
                result = await self.execute(capability, arguments)
            success = True
            return result
        except MCPDemoError as e:
            logger.warning(f"{kind.value} request '{name}' failed: {e}")
            raise
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            self._otel.record_call(kind.value, str(name), duration_ms, success)

    def validate(self, capability: Capability, args: Optional[Mapping[str, Any]]) -> Any:
        """Check `args` against the capability's schema.

        Returns:
            A validated `ToolArguments` instance for tools, a dict of string
            values for prompts, None for resources
        """
        if args is None:
            args = {}

        if isinstance(capability, ToolDefinition):
            kind = CapabilityKind.TOOL
        elif isinstance(capability, PromptDefinition):
            kind = CapabilityKind.PROMPT
        else:
            kind = CapabilityKind.RESOURCE

        if not isinstance(args, Mapping):
            raise InvalidArgumentsError(
                kind.value, capability.key,
                [{"loc": (), "msg": f"arguments must be an object, got {type(args).__name__}"}],
            )

        if kind is CapabilityKind.TOOL:
            try:
                return capability.arguments.model_validate(dict(args))
            except ValidationError as e:
                raise InvalidArgumentsError(kind.value, capability.key, e.errors()) from e

        if kind is CapabilityKind.PROMPT:
            return self._validate_prompt_arguments(capability, args)

        if args:
            raise InvalidArgumentsError(
                kind.value, capability.key,
                [{"loc": (key,), "msg": "Extra inputs are not permitted"} for key in args],
            )
        return None

    @staticmethod
    def _validate_prompt_arguments(prompt: PromptDefinition, args: Mapping[str, Any]) -> Dict[str, str]:
        declared = {argument.name: argument for argument in prompt.arguments}
        errors = []

        for argument in prompt.arguments:
            if argument.required and args.get(argument.name) is None:
                errors.append({"loc": (argument.name,), "msg": "Field required"})

        for key, value in args.items():
            if key not in declared:
                errors.append({"loc": (key,), "msg": "Extra inputs are not permitted"})
            elif value is not None and not isinstance(value, str):
                errors.append({"loc": (key,), "msg": "Input should be a valid string"})

        if errors:
            raise InvalidArgumentsError(CapabilityKind.PROMPT.value, prompt.name, errors)

        return {key: value for key, value in args.items() if value is not None}

    async def execute(self, capability: Capability, arguments: Any) -> Dict[str, Any]:
        """Run the capability's handler and wrap its payload.

        Handler errors propagate unchanged.
        """
        if isinstance(capability, ToolDefinition):
            payload = await _resolve(capability.handler(arguments))
            return {"content": [{"type": "text", "text": to_text(payload)}]}

        if isinstance(capability, ResourceDefinition):
            payload = await _resolve(capability.loader())
            return {
                "contents": [
                    {"uri": capability.uri, "mimeType": capability.mime_type, "text": to_text(payload)}
                ]
            }

        text = await _resolve(capability.loader(arguments))
        return {
            "description": capability.description,
            "messages": [{"role": "user", "content": {"type": "text", "text": text}}],
        }

    # MCP method surface

    def list_tools(self) -> List[Dict[str, Any]]:
        return self.list(CapabilityKind.TOOL)

    async def call_tool(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return await self.invoke(CapabilityKind.TOOL, name, arguments)

    def list_resources(self) -> List[Dict[str, Any]]:
        return self.list(CapabilityKind.RESOURCE)

    async def read_resource(self, uri: str) -> Dict[str, Any]:
        return await self.invoke(CapabilityKind.RESOURCE, uri)

    def list_prompts(self) -> List[Dict[str, Any]]:
        return self.list(CapabilityKind.PROMPT)

    async def get_prompt(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return await self.invoke(CapabilityKind.PROMPT, name, arguments)
