import hashlib
import hmac
import json
import re
import secrets
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from agent_runner_sdk.types import SignatureEnvelope

MAX_TIMESTAMP_AGE_SECONDS = 120
# Twice the freshness window, so a nonce outlives any timestamp that could still pass.
NONCE_TTL_SECONDS = 2 * MAX_TIMESTAMP_AGE_SECONDS

NONCE_MIN_LENGTH = 8
NONCE_MAX_LENGTH = 128

SIGNATURE_HEADER = "X-Signature"
TIMESTAMP_HEADER = "X-Timestamp"
NONCE_HEADER = "X-Nonce"
CLIENT_ID_HEADER = "X-Client-ID"

_NONCE_PATTERN = re.compile(r"[A-Za-z0-9_-]+")
_TIMESTAMP_PATTERN = re.compile(r"[0-9]+")


def _now_seconds() -> int:
    return int(datetime.now(tz=UTC).timestamp())


def _to_bytes(body: str | bytes) -> bytes:
    if isinstance(body, bytes):
        return body
    return body.encode("utf-8")


def _compute_signature(secret: str, timestamp: str, nonce: str, body: bytes) -> str:
    payload = f"{timestamp}.{nonce}.".encode("utf-8") + body
    digest = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


def is_valid_nonce(nonce: str) -> bool:
    if not NONCE_MIN_LENGTH <= len(nonce) <= NONCE_MAX_LENGTH:
        return False
    return _NONCE_PATTERN.fullmatch(nonce) is not None


def is_valid_timestamp(timestamp: str) -> bool:
    return _TIMESTAMP_PATTERN.fullmatch(timestamp) is not None


def is_fresh_timestamp(timestamp: str, *, now: int | None = None) -> bool:
    if not is_valid_timestamp(timestamp):
        return False
    current = _now_seconds() if now is None else now
    return abs(current - int(timestamp)) <= MAX_TIMESTAMP_AGE_SECONDS


def sign_body(secret: str, body: str | bytes, *, now: int | None = None) -> SignatureEnvelope:
    timestamp = str(_now_seconds() if now is None else now)
    nonce = secrets.token_hex(16)
    return {
        "signature": _compute_signature(secret, timestamp, nonce, _to_bytes(body)),
        "timestamp": timestamp,
        "nonce": nonce,
    }


def verify_signature(
    secret: str,
    *,
    signature: str,
    timestamp: str,
    nonce: str,
    body: str | bytes,
    now: int | None = None,
) -> bool:
    if not signature or not timestamp or not nonce:
        return False

    if not is_valid_nonce(nonce):
        return False

    if not is_fresh_timestamp(timestamp, now=now):
        return False

    expected = _compute_signature(secret, timestamp, nonce, _to_bytes(body))
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))


def signature_headers(envelope: SignatureEnvelope) -> dict[str, str]:
    return {
        SIGNATURE_HEADER: envelope["signature"],
        TIMESTAMP_HEADER: envelope["timestamp"],
        NONCE_HEADER: envelope["nonce"],
    }


def encode_json_body(payload: Mapping[str, Any]) -> bytes:
    """Encode a request body exactly once; the returned bytes are what gets signed and sent."""
    return json.dumps(
        payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")
