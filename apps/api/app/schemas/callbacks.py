from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from agent_runner_sdk.events import StatusPayload, ToolCall


class ToolCallbackRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    session_id: str = ""
    tool_name: str = ""
    arguments: dict[str, Any] = Field(default_factory=dict)

    def to_tool_call(self, tool_name: str) -> ToolCall:
        return ToolCall(
            session_id=self.session_id,
            tool_name=self.tool_name or tool_name,
            arguments=dict(self.arguments),
        )


class ToolCallbackResponse(BaseModel):
    success: bool
    content: str | None = None
    error: str | None = None


class StatusCallbackRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    client_id: str = ""
    status: str
    error: str | None = None
    output: str | None = None
    turns: int | None = None
    duration_ms: int | None = None

    def to_payload(self, session_id: str) -> StatusPayload:
        return StatusPayload(
            session_id=session_id,
            client_id=self.client_id,
            status=self.status,
            error=self.error,
            output=self.output,
            turns=self.turns,
            duration_ms=self.duration_ms,
        )


class StatusCallbackResponse(BaseModel):
    ok: bool = True
