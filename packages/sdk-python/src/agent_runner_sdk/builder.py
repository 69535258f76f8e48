"""Fluent, immutable session builder.

Every setter returns a new builder over a replaced ``AgentConfig``, so a
partially configured builder can be shared and specialised safely. The config
is turned into the wire-level ``AgentDefinition`` only when a session starts,
in one of three modes:

- ``run``: create, send, consume the stream with the registered handlers and
  return the ``done`` event (or ``None``).
- ``start``: create, send, hand back the session id and the unconsumed stream.
- ``dispatch``: create, send, return the session id; the outcome arrives later
  through the status callback.
"""

import copy
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from typing import Any, Self

from agent_runner_sdk.client import AgentRunnerClient, AsyncAgentRunnerClient
from agent_runner_sdk.events import EventHandlers, StreamEvent
from agent_runner_sdk.sse import AsyncEventStream, EventStream
from agent_runner_sdk.tools import ToolRegistry
from agent_runner_sdk.types import AgentDefinition, CallbackConfig, ToolsDefinition

SESSION_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]{1,128}")


@dataclass(frozen=True)
class AgentDefaults:
    model: str = "gpt-4o-mini"
    max_turns: int = 30
    max_tokens: int = 0
    temperature: float | None = None


@dataclass(frozen=True)
class AgentConfig:
    name: str = ""
    model: str | None = None
    system_prompt: str | None = None
    max_turns: int | None = None
    max_tokens: int | None = None
    temperature: float | None = None
    builtin_tools: tuple[str, ...] = ()
    remote_tool_names: tuple[str, ...] = ()
    all_remote_tools: bool = False
    session_id: str | None = None
    work_dir: str | None = None
    callback: CallbackConfig | None = None
    handlers: EventHandlers = field(default_factory=EventHandlers)

    @property
    def remote_selection(self) -> tuple[str, ...] | None:
        """``None`` selects every registered tool; an empty tuple selects none."""
        if self.all_remote_tools:
            return None
        return self.remote_tool_names


def build_tools_definition(config: AgentConfig, registry: ToolRegistry) -> ToolsDefinition:
    return {
        "builtin": list(config.builtin_tools),
        "remote": registry.definitions(config.remote_selection),
    }


def build_agent_definition(
    config: AgentConfig, defaults: AgentDefaults, registry: ToolRegistry
) -> AgentDefinition:
    agent: AgentDefinition = {
        "name": config.name,
        "model": config.model or defaults.model,
        "system_prompt": config.system_prompt or "",
        "max_turns": config.max_turns if config.max_turns is not None else defaults.max_turns,
        "tools": build_tools_definition(config, registry),
    }

    max_tokens = config.max_tokens if config.max_tokens is not None else defaults.max_tokens
    if max_tokens:
        agent["max_tokens"] = max_tokens

    temperature = config.temperature if config.temperature is not None else defaults.temperature
    if temperature is not None:
        agent["temperature"] = temperature

    return agent


@dataclass(frozen=True)
class StartedSession:
    session_id: str
    stream: EventStream | AsyncEventStream


class _BaseAgentBuilder:
    def __init__(
        self,
        *,
        registry: ToolRegistry,
        defaults: AgentDefaults | None = None,
        callback: CallbackConfig | None = None,
        config: AgentConfig | None = None,
    ) -> None:
        self._registry = registry
        self._defaults = defaults or AgentDefaults()
        self._default_callback = callback
        self._config = config or AgentConfig()

    @property
    def config(self) -> AgentConfig:
        return self._config

    def _with(self, **changes: Any) -> Self:
        clone = copy.copy(self)
        clone._config = replace(self._config, **changes)
        return clone

    def _with_handler(self, **handler: Callable[..., Any]) -> Self:
        return self._with(handlers=replace(self._config.handlers, **handler))

    def agent(self, name: str) -> Self:
        return self._with(name=name)

    def model(self, model: str) -> Self:
        return self._with(model=model)

    def system_prompt(self, prompt: str) -> Self:
        return self._with(system_prompt=prompt)

    def max_turns(self, max_turns: int) -> Self:
        return self._with(max_turns=max_turns)

    def max_tokens(self, max_tokens: int) -> Self:
        return self._with(max_tokens=max_tokens)

    def temperature(self, temperature: float) -> Self:
        return self._with(temperature=temperature)

    def tools(self, names: Iterable[str]) -> Self:
        merged = dict.fromkeys((*self._config.builtin_tools, *names))
        return self._with(builtin_tools=tuple(merged))

    def remote_tools(self, names: Iterable[str]) -> Self:
        merged = dict.fromkeys((*self._config.remote_tool_names, *names))
        return self._with(remote_tool_names=tuple(merged))

    def with_all_remote_tools(self) -> Self:
        return self._with(all_remote_tools=True)

    def without_remote_tools(self) -> Self:
        return self._with(all_remote_tools=False, remote_tool_names=())

    def session_id(self, session_id: str) -> Self:
        if SESSION_ID_PATTERN.fullmatch(session_id) is None:
            raise ValueError(f"Invalid session id: {session_id!r}")
        return self._with(session_id=session_id)

    def work_dir(self, path: str) -> Self:
        return self._with(work_dir=path)

    def callback(self, base_url: str, timeout: int | None = None) -> Self:
        callback: CallbackConfig = {"base_url": base_url}
        if timeout is not None:
            callback["timeout_sec"] = timeout
        return self._with(callback=callback)

    def on_text(self, handler: Callable[[str | None], Any]) -> Self:
        return self._with_handler(on_text=handler)

    def on_tool_call(self, handler: Callable[[str | None, dict[str, Any] | None], Any]) -> Self:
        return self._with_handler(on_tool_call=handler)

    def on_tool_result(self, handler: Callable[[str | None, bool, str], Any]) -> Self:
        return self._with_handler(on_tool_result=handler)

    def on_thinking(self, handler: Callable[[str | None], Any]) -> Self:
        return self._with_handler(on_thinking=handler)

    def on_error(self, handler: Callable[[str | None], Any]) -> Self:
        return self._with_handler(on_error=handler)

    def on_done(self, handler: Callable[[dict[str, Any]], Any]) -> Self:
        return self._with_handler(on_done=handler)

    def build_agent_definition(self) -> AgentDefinition:
        return build_agent_definition(self._config, self._defaults, self._registry)

    def _session_callback(self) -> CallbackConfig | None:
        if self._config.callback is not None:
            return self._config.callback
        return self._default_callback


class AgentBuilder(_BaseAgentBuilder):
    """Blocking builder; its event handlers must be plain functions."""

    def __init__(
        self,
        client: AgentRunnerClient,
        registry: ToolRegistry,
        *,
        defaults: AgentDefaults | None = None,
        callback: CallbackConfig | None = None,
        config: AgentConfig | None = None,
    ) -> None:
        super().__init__(registry=registry, defaults=defaults, callback=callback, config=config)
        self._client = client

    def run(self, message: str) -> StreamEvent | None:
        session_id = self._create_and_send(message)
        return self._client.stream(session_id).listen(self._config.handlers)

    def start(self, message: str) -> StartedSession:
        session_id = self._create_and_send(message)
        return StartedSession(session_id=session_id, stream=self._client.stream(session_id))

    def dispatch(self, message: str) -> str:
        return self._create_and_send(message)

    def _create_and_send(self, message: str) -> str:
        session = self._client.create_session(
            self.build_agent_definition(),
            callback=self._session_callback(),
            session_id=self._config.session_id,
            work_dir=self._config.work_dir,
        )
        session_id = session["session_id"]
        self._client.send_message(session_id, message)
        return session_id


class AsyncAgentBuilder(_BaseAgentBuilder):
    def __init__(
        self,
        client: AsyncAgentRunnerClient,
        registry: ToolRegistry,
        *,
        defaults: AgentDefaults | None = None,
        callback: CallbackConfig | None = None,
        config: AgentConfig | None = None,
    ) -> None:
        super().__init__(registry=registry, defaults=defaults, callback=callback, config=config)
        self._client = client

    async def run(self, message: str) -> StreamEvent | None:
        session_id = await self._create_and_send(message)
        return await self._client.stream(session_id).listen(self._config.handlers)

    async def start(self, message: str) -> StartedSession:
        session_id = await self._create_and_send(message)
        return StartedSession(session_id=session_id, stream=self._client.stream(session_id))

    async def dispatch(self, message: str) -> str:
        return await self._create_and_send(message)

    async def _create_and_send(self, message: str) -> str:
        session = await self._client.create_session(
            self.build_agent_definition(),
            callback=self._session_callback(),
            session_id=self._config.session_id,
            work_dir=self._config.work_dir,
        )
        session_id = session["session_id"]
        await self._client.send_message(session_id, message)
        return session_id
