from typing import Annotated

from fastapi import APIRouter, Depends, Path
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from agent_runner_sdk.errors import ToolExecutionError
from agent_runner_sdk.tools import TOOL_NAME_PATTERN
from app.api.deps import RegistryDep
from app.core.errors import raise_http_error, validation_message
from app.core.hmac_auth import verify_callback_signature
from app.core.openapi import CALLBACK_ERROR_RESPONSES
from app.core.reason_codes import ReasonCode
from app.modules.tool_dispatch.service import execute_tool, find_tool
from app.schemas.callbacks import ToolCallbackRequest, ToolCallbackResponse

router = APIRouter(tags=["tools"])
VerifiedBody = Annotated[bytes, Depends(verify_callback_signature)]
ToolName = Annotated[str, Path(pattern=f"^{TOOL_NAME_PATTERN.pattern}$")]


@router.post(
    "/tools/{tool_name}",
    response_model=ToolCallbackResponse,
    summary="Execute Remote Tool",
    description=(
        "Runs a registered remote tool on behalf of an agent session. Unknown tools "
        "and handler failures are reported as `success: false`."
    ),
    responses={
        **CALLBACK_ERROR_RESPONSES,
        404: {"model": ToolCallbackResponse, "description": "Tool is not registered."},
        500: {"model": ToolCallbackResponse, "description": "Tool handler raised."},
    },
)
def tool_callback(tool_name: ToolName, body: VerifiedBody, registry: RegistryDep) -> JSONResponse:
    tool = find_tool(registry, tool_name)
    if tool is None:
        return JSONResponse(
            status_code=404,
            content={"success": False, "error": f"Unknown tool: {tool_name}"},
        )

    try:
        payload = ToolCallbackRequest.model_validate_json(body)
    except ValidationError as exc:
        raise_http_error(422, ReasonCode.VALIDATION_ERROR, validation_message(exc))

    try:
        result = execute_tool(tool, payload.to_tool_call(tool_name))
    except ToolExecutionError as exc:
        return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})

    return JSONResponse(content=jsonable_encoder(result))
