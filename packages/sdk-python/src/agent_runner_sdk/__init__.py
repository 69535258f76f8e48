from agent_runner_sdk.builder import (
    AgentBuilder,
    AgentConfig,
    AgentDefaults,
    AsyncAgentBuilder,
    StartedSession,
    build_agent_definition,
)
from agent_runner_sdk.client import AgentRunnerClient, AsyncAgentRunnerClient
from agent_runner_sdk.errors import (
    AgentRunnerError,
    ApiError,
    SessionNotFoundError,
    SignatureVerificationError,
    StreamError,
    ToolExecutionError,
)
from agent_runner_sdk.events import EventHandlers, StatusPayload, StreamEvent, ToolCall
from agent_runner_sdk.nonce import InMemoryNonceStore, NonceStore
from agent_runner_sdk.runner import AgentRunner
from agent_runner_sdk.signing import (
    encode_json_body,
    is_fresh_timestamp,
    is_valid_nonce,
    sign_body,
    signature_headers,
    verify_signature,
)
from agent_runner_sdk.sse import AsyncEventStream, EventStream, SseDecoder
from agent_runner_sdk.tools import RemoteTool, ToolRegistry

__all__ = [
    "encode_json_body",
    "sign_body",
    "verify_signature",
    "signature_headers",
    "is_valid_nonce",
    "is_fresh_timestamp",
    "NonceStore",
    "InMemoryNonceStore",
    "SseDecoder",
    "EventStream",
    "AsyncEventStream",
    "StreamEvent",
    "EventHandlers",
    "StatusPayload",
    "ToolCall",
    "RemoteTool",
    "ToolRegistry",
    "AgentRunnerClient",
    "AsyncAgentRunnerClient",
    "AgentBuilder",
    "AsyncAgentBuilder",
    "AgentConfig",
    "AgentDefaults",
    "StartedSession",
    "build_agent_definition",
    "AgentRunner",
    "AgentRunnerError",
    "ApiError",
    "SessionNotFoundError",
    "SignatureVerificationError",
    "StreamError",
    "ToolExecutionError",
]
