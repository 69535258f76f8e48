class AgentRunnerError(Exception):
    """Base class for every failure raised by the SDK."""


class SignatureVerificationError(AgentRunnerError):
    MISSING_HEADERS = "MISSING_HEADERS"
    INVALID_TIMESTAMP = "INVALID_TIMESTAMP"
    INVALID_NONCE = "INVALID_NONCE"
    SIGNATURE_INVALID = "SIGNATURE_INVALID"
    NONCE_REPLAYED = "NONCE_REPLAYED"

    _MESSAGES = {
        MISSING_HEADERS: "Missing signature, timestamp, or nonce headers.",
        INVALID_TIMESTAMP: "Invalid or expired timestamp.",
        INVALID_NONCE: "Invalid nonce format.",
        SIGNATURE_INVALID: "Invalid HMAC signature.",
        NONCE_REPLAYED: "Nonce has already been used.",
    }

    def __init__(self, reason: str) -> None:
        super().__init__(self._MESSAGES.get(reason, "Signature verification failed."))
        self.reason = reason


class ApiError(AgentRunnerError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SessionNotFoundError(ApiError):
    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}", status_code=404)
        self.session_id = session_id


class StreamError(AgentRunnerError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ToolExecutionError(AgentRunnerError):
    def __init__(self, tool_name: str, message: str) -> None:
        super().__init__(f"Tool '{tool_name}' execution failed: {message}")
        self.tool_name = tool_name
