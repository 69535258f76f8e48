import logging

from fastapi import Request
from starlette.concurrency import run_in_threadpool

from agent_runner_sdk.errors import SignatureVerificationError
from agent_runner_sdk.nonce import NonceStore
from agent_runner_sdk.signing import (
    CLIENT_ID_HEADER,
    NONCE_HEADER,
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    is_valid_nonce,
    is_valid_timestamp,
    verify_signature,
)
from app.api.deps import NonceStoreDep, SettingsDep
from app.core.errors import raise_http_error

logger = logging.getLogger("agent_runner.auth")


def check_request_signature(
    *,
    secret: str,
    signature: str,
    timestamp: str,
    nonce: str,
    body: bytes,
    nonce_store: NonceStore,
    now: int | None = None,
) -> None:
    """Raise ``SignatureVerificationError`` unless the envelope is valid and its nonce is new.

    The nonce is only recorded once the signature checks out, so forged
    requests cannot burn nonces of legitimate ones.
    """
    if not signature or not timestamp or not nonce:
        raise SignatureVerificationError(SignatureVerificationError.MISSING_HEADERS)

    if not is_valid_nonce(nonce):
        raise SignatureVerificationError(SignatureVerificationError.INVALID_NONCE)

    if not is_valid_timestamp(timestamp):
        raise SignatureVerificationError(SignatureVerificationError.INVALID_TIMESTAMP)

    if not verify_signature(
        secret,
        signature=signature,
        timestamp=timestamp,
        nonce=nonce,
        body=body,
        now=now,
    ):
        raise SignatureVerificationError(SignatureVerificationError.SIGNATURE_INVALID)

    if not nonce_store.try_accept(nonce):
        raise SignatureVerificationError(SignatureVerificationError.NONCE_REPLAYED)


async def verify_callback_signature(
    request: Request, settings: SettingsDep, nonce_store: NonceStoreDep
) -> bytes:
    """Authenticate the raw callback body and hand it on for parsing."""
    body = await request.body()
    secret = settings.agent_runner_hmac_secret
    if not secret and settings.allow_unsigned_callbacks:
        return body

    try:
        if not secret:
            # Nothing can be verified without a shared secret.
            raise SignatureVerificationError(SignatureVerificationError.SIGNATURE_INVALID)
        # Redis-backed stores block on I/O.
        await run_in_threadpool(
            check_request_signature,
            secret=secret,
            signature=request.headers.get(SIGNATURE_HEADER, ""),
            timestamp=request.headers.get(TIMESTAMP_HEADER, ""),
            nonce=request.headers.get(NONCE_HEADER, ""),
            body=body,
            nonce_store=nonce_store,
        )
    except SignatureVerificationError as exc:
        logger.warning(
            "signature_rejected",
            extra={
                "event_name": "signature_rejected",
                "reason_code": exc.reason,
                "client_id": request.headers.get(CLIENT_ID_HEADER),
                "path": request.url.path,
                "method": request.method,
            },
        )
        raise_http_error(401, exc.reason, str(exc))

    return body
