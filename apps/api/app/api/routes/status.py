from typing import Annotated

from fastapi import APIRouter, Depends, Path
from pydantic import ValidationError

from app.api.deps import StatusDispatcherDep
from app.core.errors import raise_http_error, validation_message
from app.core.hmac_auth import verify_callback_signature
from app.core.openapi import CALLBACK_ERROR_RESPONSES
from app.core.reason_codes import ReasonCode
from app.schemas.callbacks import StatusCallbackRequest, StatusCallbackResponse

router = APIRouter(tags=["status"])
VerifiedBody = Annotated[bytes, Depends(verify_callback_signature)]
SessionId = Annotated[str, Path(pattern=r"^[a-zA-Z0-9_-]+$")]


@router.post(
    "/sessions/{session_id}/status",
    response_model=StatusCallbackResponse,
    summary="Session Status Callback",
    description=(
        "Receives out-of-band session status changes. Known statuses are forwarded "
        "to registered listeners; unknown ones are acknowledged and ignored."
    ),
    responses=CALLBACK_ERROR_RESPONSES,
)
def status_callback(
    session_id: SessionId, body: VerifiedBody, dispatcher: StatusDispatcherDep
) -> StatusCallbackResponse:
    try:
        payload = StatusCallbackRequest.model_validate_json(body)
    except ValidationError as exc:
        raise_http_error(422, ReasonCode.VALIDATION_ERROR, validation_message(exc))

    dispatcher.dispatch(payload.to_payload(session_id))
    return StatusCallbackResponse(ok=True)
