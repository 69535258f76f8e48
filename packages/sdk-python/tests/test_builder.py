import asyncio
import json
from collections.abc import Mapping
from typing import Any

import httpx
import pytest

from agent_runner_sdk.builder import AgentBuilder, AgentDefaults, AsyncAgentBuilder
from agent_runner_sdk.client import AgentRunnerClient, AsyncAgentRunnerClient
from agent_runner_sdk.events import ToolCall
from agent_runner_sdk.runner import AgentRunner
from agent_runner_sdk.sse import EventStream
from agent_runner_sdk.tools import ToolRegistry

STREAM_BODY = (
    b": heartbeat\n\n"
    b'event: text\ndata: {"content":"Hello"}\n\n'
    b'event: done\ndata: {"status":"completed","output":"Hello"}\n\n'
)


def _noop(call: ToolCall) -> Mapping[str, Any]:
    return {"success": True}


def _registry() -> ToolRegistry:
    registry = ToolRegistry()
    registry.register("lookup", "Look things up", {"type": "object"}, _noop)
    registry.register("notify", "Send a notification", {"type": "object"}, _noop)
    return registry


class _FakeRunner:
    """Records requests and answers like the agent runner service."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/v1/sessions":
            body = json.loads(request.content)
            return httpx.Response(
                201, json={"session_id": body.get("session_id", "sess-gen"), "status": "created"}
            )
        if path.endswith("/messages"):
            session_id = path.split("/")[3]
            return httpx.Response(
                200, json={"session_id": session_id, "status": "running", "tools_registered": []}
            )
        if path.endswith("/stream"):
            return httpx.Response(200, content=STREAM_BODY)
        return httpx.Response(404, json={"error": "not found"})

    def paths(self) -> list[str]:
        return [f"{request.method} {request.url.path}" for request in self.requests]

    def created_body(self) -> dict[str, Any]:
        return json.loads(self.requests[0].content)


def _builder(fake: _FakeRunner, **kwargs: Any) -> AgentBuilder:
    client = AgentRunnerClient(
        base_url="http://runner.test",
        client_id="test-client",
        hmac_secret="secret",
        transport=httpx.MockTransport(fake),
    )
    return AgentBuilder(client, _registry(), **kwargs).agent("assistant")


def test_agent_definition_defaults() -> None:
    definition = _builder(_FakeRunner()).build_agent_definition()

    assert definition == {
        "name": "assistant",
        "model": "gpt-4o-mini",
        "system_prompt": "",
        "max_turns": 30,
        "tools": {"builtin": [], "remote": []},
    }


def test_agent_definition_overrides_and_custom_defaults() -> None:
    builder = _builder(
        _FakeRunner(), defaults=AgentDefaults(model="m-default", max_turns=5, max_tokens=1000)
    )

    assert builder.build_agent_definition()["max_tokens"] == 1000
    assert builder.build_agent_definition()["model"] == "m-default"

    definition = (
        builder.model("gpt-4o")
        .system_prompt("Be brief")
        .max_turns(10)
        .max_tokens(256)
        .temperature(0.0)
        .build_agent_definition()
    )

    assert definition["model"] == "gpt-4o"
    assert definition["system_prompt"] == "Be brief"
    assert definition["max_turns"] == 10
    assert definition["max_tokens"] == 256
    assert definition["temperature"] == 0.0


def test_builder_is_immutable() -> None:
    base = _builder(_FakeRunner())
    derived = base.model("gpt-4o").tools(["bash"])

    assert base.config.model is None
    assert base.config.builtin_tools == ()
    assert derived.config.model == "gpt-4o"
    assert derived.config.builtin_tools == ("bash",)


def test_builtin_tools_deduplicated_in_order() -> None:
    builder = _builder(_FakeRunner()).tools(["read_file", "bash"]).tools(["bash", "write_file"])

    assert builder.build_agent_definition()["tools"]["builtin"] == ["read_file", "bash", "write_file"]


def test_remote_tool_selection_forms() -> None:
    builder = _builder(_FakeRunner())

    none_selected = builder.build_agent_definition()["tools"]["remote"]
    all_selected = builder.with_all_remote_tools().build_agent_definition()["tools"]["remote"]
    subset = builder.remote_tools(["notify", "unknown"]).build_agent_definition()["tools"]["remote"]
    reset = builder.with_all_remote_tools().without_remote_tools()

    assert none_selected == []
    assert [tool["name"] for tool in all_selected] == ["lookup", "notify"]
    assert [tool["name"] for tool in subset] == ["notify"]
    assert reset.config.remote_selection == ()
    assert builder.with_all_remote_tools().config.remote_selection is None


def test_invalid_session_id_rejected() -> None:
    with pytest.raises(ValueError):
        _builder(_FakeRunner()).session_id("bad id!")


def test_run_creates_sends_streams_and_dispatches() -> None:
    fake = _FakeRunner()
    texts: list[str | None] = []
    finished: list[dict[str, Any]] = []

    done = (
        _builder(fake)
        .session_id("my-session")
        .work_dir("/srv/work")
        .callback("http://host.test/api/agent-runner", timeout=15)
        .on_text(texts.append)
        .on_done(finished.append)
        .run("Hi there")
    )

    assert fake.paths() == [
        "POST /v1/sessions",
        "POST /v1/sessions/my-session/messages",
        "GET /v1/sessions/my-session/stream",
    ]
    body = fake.created_body()
    assert body["session_id"] == "my-session"
    assert body["work_dir"] == "/srv/work"
    assert body["callback"] == {"base_url": "http://host.test/api/agent-runner", "timeout_sec": 15}
    assert json.loads(fake.requests[1].content) == {"message": "Hi there"}
    assert texts == ["Hello"]
    assert finished == [{"status": "completed", "output": "Hello"}]
    assert done is not None and done.output == "Hello"


def test_run_without_done_returns_none() -> None:
    fake = _FakeRunner()

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/stream"):
            fake.requests.append(request)
            return httpx.Response(200, content=b'event: text\ndata: {"content":"x"}\n\n')
        return fake(request)

    client = AgentRunnerClient(
        base_url="http://runner.test",
        client_id="test-client",
        transport=httpx.MockTransport(handler),
    )

    assert AgentBuilder(client, _registry()).agent("a").run("hi") is None


def test_start_returns_unconsumed_stream() -> None:
    fake = _FakeRunner()

    started = _builder(fake).start("Hi")

    assert started.session_id == "sess-gen"
    assert isinstance(started.stream, EventStream)
    assert fake.paths() == ["POST /v1/sessions", "POST /v1/sessions/sess-gen/messages"]

    with started.stream as stream:
        assert [event.type for event in stream] == ["text", "done"]


def test_dispatch_returns_session_id_only() -> None:
    fake = _FakeRunner()

    session_id = _builder(fake).dispatch("Fire and forget")

    assert session_id == "sess-gen"
    assert fake.paths() == ["POST /v1/sessions", "POST /v1/sessions/sess-gen/messages"]


def test_default_callback_used_unless_overridden() -> None:
    fake = _FakeRunner()
    builder = _builder(fake, callback={"base_url": "http://default.test/cb", "timeout_sec": 30})

    builder.dispatch("one")
    builder.callback("http://override.test/cb").dispatch("two")

    assert json.loads(fake.requests[0].content)["callback"]["base_url"] == "http://default.test/cb"
    assert json.loads(fake.requests[2].content)["callback"] == {"base_url": "http://override.test/cb"}


def test_agent_runner_facade() -> None:
    fake = _FakeRunner()
    client = AgentRunnerClient(
        base_url="http://runner.test",
        client_id="test-client",
        transport=httpx.MockTransport(fake),
    )
    runner = AgentRunner(client, _registry(), defaults=AgentDefaults(model="custom-model"))

    session_id = runner.agent("helper").with_all_remote_tools().dispatch("go")

    assert session_id == "sess-gen"
    agent = fake.created_body()["agent"]
    assert agent["name"] == "helper"
    assert agent["model"] == "custom-model"
    assert len(agent["tools"]["remote"]) == 2
    assert runner.tools.has("lookup")
    assert runner.client is client


def test_async_builder_run() -> None:
    fake = _FakeRunner()
    client = AsyncAgentRunnerClient(
        base_url="http://runner.test",
        client_id="test-client",
        hmac_secret="secret",
        transport=httpx.MockTransport(fake),
    )
    texts: list[str | None] = []

    async def on_text(content: str | None) -> None:
        texts.append(content)

    async def run() -> None:
        builder = AsyncAgentBuilder(client, _registry()).agent("assistant").on_text(on_text)
        done = await builder.run("Hi")
        assert done is not None and done.status == "completed"
        assert await builder.dispatch("again") == "sess-gen"

    asyncio.run(run())

    assert texts == ["Hello"]
    assert fake.paths()[:3] == [
        "POST /v1/sessions",
        "POST /v1/sessions/sess-gen/messages",
        "GET /v1/sessions/sess-gen/stream",
    ]
