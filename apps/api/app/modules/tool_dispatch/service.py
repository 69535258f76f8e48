import logging
from typing import Any

from agent_runner_sdk.errors import ToolExecutionError
from agent_runner_sdk.events import ToolCall
from agent_runner_sdk.tools import RemoteTool, ToolRegistry

logger = logging.getLogger("agent_runner.tools")


def find_tool(registry: ToolRegistry, tool_name: str) -> RemoteTool | None:
    tool = registry.get(tool_name)
    if tool is None:
        logger.warning(
            "tool_not_found",
            extra={
                "event_name": "tool_not_found",
                "tool_name": tool_name,
            },
        )
    return tool


def execute_tool(tool: RemoteTool, call: ToolCall) -> dict[str, Any]:
    try:
        result = dict(tool.handle(call))
    except Exception as exc:
        logger.error(
            "tool_failed",
            extra={
                "event_name": "tool_failed",
                "tool_name": tool.name,
                "session_id": call.session_id,
            },
            exc_info=True,
        )
        raise ToolExecutionError(tool.name, str(exc)) from exc

    logger.info(
        "tool_executed",
        extra={
            "event_name": "tool_executed",
            "tool_name": tool.name,
            "session_id": call.session_id,
            "success": bool(result.get("success", False)),
        },
    )
    return result
