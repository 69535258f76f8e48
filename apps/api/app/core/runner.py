from agent_runner_sdk.client import AgentRunnerClient
from agent_runner_sdk.runner import AgentRunner
from agent_runner_sdk.tools import ToolRegistry
from app.core.config import Settings


def build_agent_runner(settings: Settings, registry: ToolRegistry) -> AgentRunner:
    client = AgentRunnerClient(
        base_url=settings.agent_runner_url,
        client_id=settings.agent_runner_client_id,
        hmac_secret=settings.agent_runner_hmac_secret,
        timeout=settings.http_timeout_seconds,
        connect_timeout=settings.http_connect_timeout_seconds,
        stream_timeout=settings.sse_timeout_seconds,
    )
    return AgentRunner(
        client,
        registry,
        defaults=settings.agent_defaults,
        callback=settings.callback_config,
    )
