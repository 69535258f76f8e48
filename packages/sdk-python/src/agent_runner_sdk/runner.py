from agent_runner_sdk.builder import AgentBuilder, AgentDefaults
from agent_runner_sdk.client import AgentRunnerClient
from agent_runner_sdk.sse import EventStream
from agent_runner_sdk.tools import ToolRegistry
from agent_runner_sdk.types import (
    AgentDefinition,
    CallbackConfig,
    CreateSessionResponse,
    SendMessageResponse,
    SessionInfo,
)


class AgentRunner:
    """Entry point tying a client, a tool registry and agent defaults together."""

    def __init__(
        self,
        client: AgentRunnerClient,
        registry: ToolRegistry,
        *,
        defaults: AgentDefaults | None = None,
        callback: CallbackConfig | None = None,
    ) -> None:
        self._client = client
        self._registry = registry
        self._defaults = defaults or AgentDefaults()
        self._callback = callback

    @property
    def client(self) -> AgentRunnerClient:
        return self._client

    @property
    def tools(self) -> ToolRegistry:
        return self._registry

    def agent(self, name: str) -> AgentBuilder:
        builder = AgentBuilder(
            self._client,
            self._registry,
            defaults=self._defaults,
            callback=self._callback,
        )
        return builder.agent(name)

    def create_session(
        self,
        agent: AgentDefinition,
        *,
        callback: CallbackConfig | None = None,
        session_id: str | None = None,
        work_dir: str | None = None,
    ) -> CreateSessionResponse:
        return self._client.create_session(
            agent, callback=callback, session_id=session_id, work_dir=work_dir
        )

    def get_session(self, session_id: str) -> SessionInfo:
        return self._client.get_session(session_id)

    def delete_session(self, session_id: str) -> SessionInfo:
        return self._client.delete_session(session_id)

    def send_message(self, session_id: str, message: str) -> SendMessageResponse:
        return self._client.send_message(session_id, message)

    def stream(self, session_id: str) -> EventStream:
        return self._client.stream(session_id)
