from enum import StrEnum

from agent_runner_sdk.errors import SignatureVerificationError


class ReasonCode(StrEnum):
    MISSING_HEADERS = SignatureVerificationError.MISSING_HEADERS
    INVALID_TIMESTAMP = SignatureVerificationError.INVALID_TIMESTAMP
    INVALID_NONCE = SignatureVerificationError.INVALID_NONCE
    SIGNATURE_INVALID = SignatureVerificationError.SIGNATURE_INVALID
    NONCE_REPLAYED = SignatureVerificationError.NONCE_REPLAYED

    VALIDATION_ERROR = "VALIDATION_ERROR"
    TOOL_NOT_FOUND = "TOOL_NOT_FOUND"
    TOOL_FAILED = "TOOL_FAILED"
