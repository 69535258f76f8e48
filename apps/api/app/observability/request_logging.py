import logging
from time import perf_counter

from fastapi import Request, Response
from starlette.middleware.base import RequestResponseEndpoint

from agent_runner_sdk.signing import CLIENT_ID_HEADER

logger = logging.getLogger("agent_runner.http")


def _log_request(request: Request, *, status: int, start: float, failed: bool = False) -> None:
    path_params = request.path_params
    logger.info(
        "http_request",
        extra={
            "event_name": "http_request",
            "method": request.method,
            "path": request.url.path,
            "status": status,
            "latency_ms": round((perf_counter() - start) * 1000, 2),
            "client_id": request.headers.get(CLIENT_ID_HEADER),
            "session_id": path_params.get("session_id"),
            "tool_name": path_params.get("tool_name"),
        },
        exc_info=failed,
    )


async def request_logging_middleware(
    request: Request, call_next: RequestResponseEndpoint
) -> Response:
    start = perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        _log_request(request, status=500, start=start, failed=True)
        raise

    _log_request(request, status=response.status_code, start=start)
    return response
