from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from agent_runner_sdk.types import TERMINAL_SESSION_STATUSES

TEXT = "text"
TOOL_CALL = "tool_call"
TOOL_RESULT = "tool_result"
THINKING = "thinking"
ERROR = "error"
DONE = "done"

EVENT_TYPES: frozenset[str] = frozenset({TEXT, TOOL_CALL, TOOL_RESULT, THINKING, ERROR, DONE})


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class StreamEvent:
    type: str
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def is_done(self) -> bool:
        return self.type == DONE

    @property
    def content(self) -> str | None:
        return self.data.get("content")

    @property
    def tool(self) -> str | None:
        return self.data.get("tool")

    @property
    def args(self) -> dict[str, Any] | None:
        return self.data.get("args")

    @property
    def success(self) -> bool:
        return bool(self.data.get("success", False))

    @property
    def message(self) -> str | None:
        return self.data.get("message")

    @property
    def status(self) -> str | None:
        return self.data.get("status")

    @property
    def output(self) -> str | None:
        return self.data.get("output")

    @property
    def turns(self) -> int | None:
        return _optional_int(self.data.get("turns"))

    @property
    def duration_ms(self) -> int | None:
        return _optional_int(self.data.get("duration_ms"))


@dataclass(frozen=True)
class EventHandlers:
    """One optional handler per recognized event type.

    Handlers may return an awaitable; the async stream awaits it, the sync
    stream ignores the return value.
    """

    on_text: Callable[[str | None], Any] | None = None
    on_tool_call: Callable[[str | None, dict[str, Any] | None], Any] | None = None
    on_tool_result: Callable[[str | None, bool, str], Any] | None = None
    on_thinking: Callable[[str | None], Any] | None = None
    on_error: Callable[[str | None], Any] | None = None
    on_done: Callable[[dict[str, Any]], Any] | None = None

    def dispatch(self, event: StreamEvent) -> Any:
        if event.type == TEXT:
            if self.on_text is not None:
                return self.on_text(event.content)
        elif event.type == TOOL_CALL:
            if self.on_tool_call is not None:
                return self.on_tool_call(event.tool, event.args)
        elif event.type == TOOL_RESULT:
            if self.on_tool_result is not None:
                return self.on_tool_result(event.tool, event.success, event.data.get("content") or "")
        elif event.type == THINKING:
            if self.on_thinking is not None:
                return self.on_thinking(event.content)
        elif event.type == ERROR:
            if self.on_error is not None:
                return self.on_error(event.message)
        elif event.type == DONE:
            if self.on_done is not None:
                return self.on_done(event.data)
        return None


@dataclass(frozen=True)
class StatusPayload:
    session_id: str
    client_id: str
    status: str
    error: str | None = None
    output: str | None = None
    turns: int | None = None
    duration_ms: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StatusPayload":
        return cls(
            session_id=str(data.get("session_id") or ""),
            client_id=str(data.get("client_id") or ""),
            status=str(data.get("status") or ""),
            error=data.get("error"),
            output=data.get("output"),
            turns=_optional_int(data.get("turns")),
            duration_ms=_optional_int(data.get("duration_ms")),
        )

    @property
    def is_created(self) -> bool:
        return self.status == "created"

    @property
    def is_running(self) -> bool:
        return self.status == "running"

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"

    @property
    def is_failed(self) -> bool:
        return self.status == "failed"

    @property
    def is_cancelled(self) -> bool:
        return self.status == "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_SESSION_STATUSES


@dataclass(frozen=True)
class ToolCall:
    session_id: str
    tool_name: str
    arguments: dict[str, Any] = field(default_factory=dict)

    def argument(self, key: str, default: Any = None) -> Any:
        return self.arguments.get(key, default)
