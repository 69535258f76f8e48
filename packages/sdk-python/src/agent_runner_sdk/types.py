from typing import Any, Literal, NotRequired, TypedDict

SessionStatus = Literal["created", "running", "completed", "failed", "cancelled"]

SESSION_STATUSES: frozenset[str] = frozenset(
    {"created", "running", "completed", "failed", "cancelled"}
)
TERMINAL_SESSION_STATUSES: frozenset[str] = frozenset({"completed", "failed", "cancelled"})


class SignatureEnvelope(TypedDict):
    signature: str
    timestamp: str
    nonce: str


class ToolDefinition(TypedDict):
    name: str
    description: str
    parameters: dict[str, Any]


class ToolsDefinition(TypedDict):
    builtin: list[str]
    remote: list[ToolDefinition]


class AgentDefinition(TypedDict):
    name: str
    model: str
    system_prompt: str
    max_turns: int
    max_tokens: NotRequired[int]
    temperature: NotRequired[float]
    tools: ToolsDefinition


class CallbackConfig(TypedDict):
    base_url: str
    timeout_sec: NotRequired[int]


class CreateSessionBody(TypedDict):
    agent: AgentDefinition
    callback: NotRequired[CallbackConfig]
    session_id: NotRequired[str]
    work_dir: NotRequired[str]


class CreateSessionResponse(TypedDict):
    session_id: str
    status: str


class SessionInfo(TypedDict, total=False):
    session_id: str
    status: str
    error: str
    output: str
    turns: int
    duration_ms: int


class SendMessageResponse(TypedDict):
    session_id: str
    status: str
    tools_registered: list[str]


class ToolResult(TypedDict):
    success: bool
    content: NotRequired[str]
    error: NotRequired[str]
