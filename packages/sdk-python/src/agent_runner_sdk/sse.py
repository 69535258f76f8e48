"""Server-sent event stream reader.

Frames look like ``event: {type}\\ndata: {json}\\n\\n``; lines starting with ``:``
are heartbeats. Decoding is incremental: ``SseDecoder`` keeps a rolling buffer
so any split of the byte stream yields the same events. ``EventStream`` and
``AsyncEventStream`` wrap a live HTTP response and stop at the ``done`` event.
"""

import inspect
import json
import logging
from collections.abc import AsyncGenerator, Callable, Generator
from types import TracebackType

import httpx

from agent_runner_sdk.errors import StreamError
from agent_runner_sdk.events import EventHandlers, StreamEvent

logger = logging.getLogger("agent_runner.sse")


def parse_frame(raw: str) -> StreamEvent | None:
    event_type: str | None = None
    data: str | None = None

    for line in raw.split("\n"):
        line = line.strip()
        if not line or line.startswith(":"):
            continue
        if line.startswith("event:"):
            event_type = line[len("event:") :].strip()
        elif line.startswith("data:"):
            data = line[len("data:") :].strip()

    # Both an event line and a data line are required.
    if event_type is None or data is None:
        return None

    payload: dict[str, object] = {}
    if data:
        try:
            decoded = json.loads(data)
        except json.JSONDecodeError:
            logger.warning(
                "sse_frame_dropped",
                extra={"event_name": "sse_frame_dropped", "event_type": event_type},
            )
            return None
        if isinstance(decoded, dict):
            payload = decoded

    return StreamEvent(type=event_type, data=payload)


class SseDecoder:
    def __init__(self) -> None:
        self._buffer = b""

    @property
    def pending(self) -> bytes:
        return self._buffer

    def feed(self, chunk: bytes) -> list[StreamEvent]:
        # Normalize after concatenating so a CRLF split across chunks is still caught.
        self._buffer = (self._buffer + chunk).replace(b"\r\n", b"\n")

        events: list[StreamEvent] = []
        while True:
            end = self._buffer.find(b"\n\n")
            if end == -1:
                break
            frame = self._buffer[:end]
            self._buffer = self._buffer[end + 2 :]

            event = parse_frame(frame.decode("utf-8", errors="replace"))
            if event is not None:
                events.append(event)
        return events


def _status_error(response: httpx.Response) -> StreamError:
    return StreamError(
        f"Event stream returned HTTP {response.status_code}",
        status_code=response.status_code,
    )


class EventStream:
    """Lazy, single-use iterator over the events of one session stream.

    The connection opens on the first ``next()`` and is released on ``done``,
    on error, or when ``close()`` is called. Use it as a context manager when
    iteration may stop early.
    """

    def __init__(
        self,
        *,
        url: str,
        headers: Callable[[], dict[str, str]],
        timeout: httpx.Timeout,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._url = url
        self._headers = headers
        self._timeout = timeout
        self._transport = transport
        self._events: Generator[StreamEvent, None, None] | None = None
        self._closed = False

    def __iter__(self) -> "EventStream":
        return self

    def __next__(self) -> StreamEvent:
        if self._events is None:
            if self._closed:
                raise StopIteration
            self._events = self._read_events()
        return next(self._events)

    def __enter__(self) -> "EventStream":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._closed = True
        if self._events is not None:
            self._events.close()

    def listen(self, handlers: EventHandlers) -> StreamEvent | None:
        last_done: StreamEvent | None = None
        with self:
            for event in self:
                result = handlers.dispatch(event)
                if inspect.isawaitable(result):
                    if inspect.iscoroutine(result):
                        result.close()
                    raise TypeError(
                        f"Handler for {event.type!r} returned an awaitable; "
                        "use AsyncAgentBuilder or AsyncEventStream for async handlers"
                    )
                if event.is_done:
                    last_done = event
        return last_done

    def _read_events(self) -> Generator[StreamEvent, None, None]:
        decoder = SseDecoder()
        terminated = False
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                with client.stream("GET", self._url, headers=self._headers()) as response:
                    if not response.is_success:
                        raise _status_error(response)

                    for chunk in response.iter_bytes():
                        for event in decoder.feed(chunk):
                            terminated = event.is_done
                            yield event
                            if terminated:
                                return
        except httpx.HTTPError as exc:
            if terminated:
                logger.debug(
                    "sse_late_error_suppressed",
                    extra={"event_name": "sse_late_error_suppressed"},
                    exc_info=True,
                )
                return
            raise StreamError(f"Event stream error: {exc}") from exc


class AsyncEventStream:
    """Async twin of ``EventStream``; use ``async with`` or ``aclose()`` to release early."""

    def __init__(
        self,
        *,
        url: str,
        headers: Callable[[], dict[str, str]],
        timeout: httpx.Timeout,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._headers = headers
        self._timeout = timeout
        self._transport = transport
        self._events: AsyncGenerator[StreamEvent, None] | None = None
        self._closed = False

    def __aiter__(self) -> "AsyncEventStream":
        return self

    async def __anext__(self) -> StreamEvent:
        if self._events is None:
            if self._closed:
                raise StopAsyncIteration
            self._events = self._read_events()
        return await self._events.__anext__()

    async def __aenter__(self) -> "AsyncEventStream":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        self._closed = True
        if self._events is not None:
            await self._events.aclose()

    async def listen(self, handlers: EventHandlers) -> StreamEvent | None:
        last_done: StreamEvent | None = None
        async with self:
            async for event in self:
                result = handlers.dispatch(event)
                if inspect.isawaitable(result):
                    await result
                if event.is_done:
                    last_done = event
        return last_done

    async def _read_events(self) -> AsyncGenerator[StreamEvent, None]:
        decoder = SseDecoder()
        terminated = False
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                async with client.stream("GET", self._url, headers=self._headers()) as response:
                    if not response.is_success:
                        raise _status_error(response)

                    async for chunk in response.aiter_bytes():
                        for event in decoder.feed(chunk):
                            terminated = event.is_done
                            yield event
                            if terminated:
                                return
        except httpx.HTTPError as exc:
            if terminated:
                logger.debug(
                    "sse_late_error_suppressed",
                    extra={"event_name": "sse_late_error_suppressed"},
                    exc_info=True,
                )
                return
            raise StreamError(f"Event stream error: {exc}") from exc
