import logging
from collections.abc import Mapping
from typing import Any

from fastapi import HTTPException
from pydantic import BaseModel, Field

from agent_runner_sdk import AgentRunner, ApiError, StatusPayload, StreamError, ToolCall, ToolRegistry
from app.core.config import settings
from app.core.runner import build_agent_runner
from app.main import create_app
from app.modules.status_events.service import StatusDispatcher

logger = logging.getLogger("agent_runner.example")

registry = ToolRegistry()
dispatcher = StatusDispatcher()
ORDERS: dict[str, dict[str, object]] = {
    "A-1001": {"status": "shipped", "carrier": "DHL"},
    "A-1002": {"status": "processing"},
}


@registry.tool(
    "lookup_order",
    description="Look up an order by its identifier.",
    parameters={
        "type": "object",
        "properties": {"order_id": {"type": "string"}},
        "required": ["order_id"],
    },
)
def lookup_order(call: ToolCall) -> Mapping[str, Any]:
    order_id = str(call.argument("order_id", ""))
    order = ORDERS.get(order_id)
    if order is None:
        return {"success": False, "error": f"No order {order_id}"}
    return {"success": True, "content": f"Order {order_id}: {order}"}


@dispatcher.listener("completed")
def on_completed(payload: StatusPayload) -> None:
    logger.info(
        "example_session_completed",
        extra={"event_name": "example_session_completed", "session_id": payload.session_id},
    )


class AskPayload(BaseModel):
    message: str = Field(min_length=1)
    background: bool = False


app = create_app(settings, registry=registry, status_dispatcher=dispatcher)
runner: AgentRunner = build_agent_runner(settings, registry)


@app.get("/health")
def health() -> dict[str, object]:
    return {"ok": True, "service": "fastapi-host", "agent_runner_url": settings.agent_runner_url}


@app.post("/ask")
def ask(data: AskPayload) -> dict[str, object]:
    agent = (
        runner.agent("support-assistant")
        .system_prompt("Answer questions about customer orders.")
        .remote_tools(["lookup_order"])
    )

    try:
        if data.background:
            return {"ok": True, "session_id": agent.dispatch(data.message)}

        chunks: list[str] = []
        done = agent.on_text(lambda content: chunks.append(content or "")).run(data.message)
    except ApiError as exc:
        raise HTTPException(
            status_code=502,
            detail={"error": "Agent runner request failed", "upstream_status": exc.status_code},
        ) from exc
    except StreamError as exc:
        raise HTTPException(status_code=502, detail={"error": "Agent runner stream failed"}) from exc

    return {
        "ok": done is not None and done.status == "completed",
        "text": "".join(chunks),
        "output": done.output if done is not None else None,
    }
