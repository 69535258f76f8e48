import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from agent_runner_sdk.events import StatusPayload
from agent_runner_sdk.types import SESSION_STATUSES

logger = logging.getLogger("agent_runner.status")

StatusListener = Callable[[StatusPayload], Any]


class StatusDispatcher:
    """Routes session status callbacks to listeners registered per status."""

    def __init__(self) -> None:
        self._listeners: defaultdict[str, list[StatusListener]] = defaultdict(list)

    def on(self, status: str, listener: StatusListener) -> StatusListener:
        if status not in SESSION_STATUSES:
            raise ValueError(f"Unknown session status: {status!r}")
        self._listeners[status].append(listener)
        return listener

    def listener(self, status: str) -> Callable[[StatusListener], StatusListener]:
        def decorator(listener: StatusListener) -> StatusListener:
            return self.on(status, listener)

        return decorator

    def dispatch(self, payload: StatusPayload) -> int:
        """Notify listeners for ``payload.status``; unknown statuses notify nobody."""
        known = payload.status in SESSION_STATUSES
        logger.info(
            "session_status_received",
            extra={
                "event_name": "session_status_received",
                "session_id": payload.session_id,
                "client_id": payload.client_id,
                "status": payload.status,
                "known_status": known,
            },
        )
        if not known:
            return 0

        listeners = list(self._listeners.get(payload.status, ()))
        for listener in listeners:
            listener(payload)
        return len(listeners)
