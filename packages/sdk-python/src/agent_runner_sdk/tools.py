import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from agent_runner_sdk.events import ToolCall
from agent_runner_sdk.types import ToolDefinition

TOOL_NAME_PATTERN = re.compile(r"[a-zA-Z][a-zA-Z0-9_]*")

ToolHandler = Callable[[ToolCall], Mapping[str, Any]]


@dataclass(frozen=True)
class RemoteTool:
    name: str
    description: str
    handler: ToolHandler
    parameters: dict[str, Any] = field(default_factory=dict)

    def definition(self) -> ToolDefinition:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }

    def handle(self, call: ToolCall) -> Mapping[str, Any]:
        return self.handler(call)


class ToolRegistry:
    """Remote tools the agent runner may call back into, keyed by name."""

    def __init__(self) -> None:
        self._tools: dict[str, RemoteTool] = {}

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def register(
        self,
        name: str,
        description: str,
        parameters: Mapping[str, Any] | None,
        handler: ToolHandler,
    ) -> RemoteTool:
        if TOOL_NAME_PATTERN.fullmatch(name) is None:
            raise ValueError(f"Invalid tool name: {name!r}")

        tool = RemoteTool(
            name=name,
            description=description,
            handler=handler,
            parameters=dict(parameters or {}),
        )
        self._tools[name] = tool
        return tool

    def tool(
        self,
        name: str,
        *,
        description: str,
        parameters: Mapping[str, Any] | None = None,
    ) -> Callable[[ToolHandler], ToolHandler]:
        def decorator(handler: ToolHandler) -> ToolHandler:
            self.register(name, description, parameters, handler)
            return handler

        return decorator

    def get(self, name: str) -> RemoteTool | None:
        return self._tools.get(name)

    def has(self, name: str) -> bool:
        return name in self._tools

    def names(self) -> list[str]:
        return list(self._tools)

    def all(self) -> dict[str, RemoteTool]:
        return dict(self._tools)

    def definitions(self, names: Iterable[str] | None = None) -> list[ToolDefinition]:
        """Definitions in registration order; ``None`` selects every tool, unknown names are skipped."""
        if names is None:
            return [tool.definition() for tool in self._tools.values()]

        wanted = set(names)
        return [tool.definition() for name, tool in self._tools.items() if name in wanted]
