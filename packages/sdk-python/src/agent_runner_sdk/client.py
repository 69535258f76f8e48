"""HTTP clients for the five agent runner endpoints.

Request bodies follow body-then-sign: the JSON body is encoded to bytes once,
those bytes are signed, and the same bytes go on the wire via ``content=``.
Letting httpx re-encode with ``json=`` could change the bytes and break the
signature on the server.
"""

from collections.abc import Mapping
from typing import Any, cast

import httpx

from agent_runner_sdk.errors import ApiError, SessionNotFoundError
from agent_runner_sdk.signing import (
    CLIENT_ID_HEADER,
    encode_json_body,
    sign_body,
    signature_headers,
)
from agent_runner_sdk.sse import AsyncEventStream, EventStream
from agent_runner_sdk.types import (
    AgentDefinition,
    CallbackConfig,
    CreateSessionBody,
    CreateSessionResponse,
    SendMessageResponse,
    SessionInfo,
)


def _safe_json(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {"raw": response.text}

    if isinstance(payload, dict):
        return payload
    return {"raw": payload}


def _ensure_successful(response: httpx.Response) -> None:
    if response.is_success:
        return

    error = _safe_json(response).get("error") or "Unknown error"
    raise ApiError(
        f"Agent Runner API error ({response.status_code}): {error}",
        status_code=response.status_code,
    )


def _success_json(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise ApiError(
            f"Agent Runner API returned a non-JSON response ({response.status_code})",
            status_code=response.status_code,
        ) from exc

    if not isinstance(payload, dict):
        raise ApiError(
            f"Agent Runner API returned an unexpected response ({response.status_code})",
            status_code=response.status_code,
        )
    return payload


def _create_session_body(
    agent: AgentDefinition,
    callback: CallbackConfig | None,
    session_id: str | None,
    work_dir: str | None,
) -> CreateSessionBody:
    body: CreateSessionBody = {"agent": agent}
    if callback is not None:
        body["callback"] = callback
    if session_id is not None:
        body["session_id"] = session_id
    if work_dir is not None:
        body["work_dir"] = work_dir
    return body


class _ClientConfig:
    def __init__(
        self,
        *,
        base_url: str,
        client_id: str,
        hmac_secret: str,
        timeout: float,
        connect_timeout: float,
        stream_timeout: float,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client_id = client_id
        self._hmac_secret = hmac_secret
        self._timeout = httpx.Timeout(timeout, connect=connect_timeout)
        self._stream_timeout = httpx.Timeout(stream_timeout, connect=connect_timeout)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def client_id(self) -> str:
        return self._client_id

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _headers(self, body: bytes) -> dict[str, str]:
        headers = {CLIENT_ID_HEADER: self._client_id, "Accept": "application/json"}
        if self._hmac_secret:
            headers.update(signature_headers(sign_body(self._hmac_secret, body)))
        return headers

    def _json_headers(self, body: bytes) -> dict[str, str]:
        headers = self._headers(body)
        headers["Content-Type"] = "application/json"
        return headers

    def _stream_headers(self) -> dict[str, str]:
        headers = self._headers(b"")
        headers["Accept"] = "text/event-stream"
        headers["Cache-Control"] = "no-cache"
        return headers


class AgentRunnerClient(_ClientConfig):
    def __init__(
        self,
        *,
        base_url: str,
        client_id: str,
        hmac_secret: str = "",
        timeout: float = 30.0,
        connect_timeout: float = 5.0,
        stream_timeout: float = 600.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__(
            base_url=base_url,
            client_id=client_id,
            hmac_secret=hmac_secret,
            timeout=timeout,
            connect_timeout=connect_timeout,
            stream_timeout=stream_timeout,
        )
        self._transport = transport

    def create_session(
        self,
        agent: AgentDefinition,
        *,
        callback: CallbackConfig | None = None,
        session_id: str | None = None,
        work_dir: str | None = None,
    ) -> CreateSessionResponse:
        body = _create_session_body(agent, callback, session_id, work_dir)
        return cast(CreateSessionResponse, self._send_json("POST", "/v1/sessions", body))

    def get_session(self, session_id: str) -> SessionInfo:
        response = self._request("GET", f"/v1/sessions/{session_id}")
        if response.status_code == 404:
            raise SessionNotFoundError(session_id)
        _ensure_successful(response)
        return cast(SessionInfo, _success_json(response))

    def delete_session(self, session_id: str) -> SessionInfo:
        response = self._request("DELETE", f"/v1/sessions/{session_id}")
        if response.status_code == 404:
            raise SessionNotFoundError(session_id)
        _ensure_successful(response)
        return cast(SessionInfo, _success_json(response))

    def send_message(self, session_id: str, message: str) -> SendMessageResponse:
        return cast(
            SendMessageResponse,
            self._send_json("POST", f"/v1/sessions/{session_id}/messages", {"message": message}),
        )

    def stream(self, session_id: str) -> EventStream:
        return EventStream(
            url=self._url(f"/v1/sessions/{session_id}/stream"),
            headers=self._stream_headers,
            timeout=self._stream_timeout,
            transport=self._transport,
        )

    def _send_json(self, method: str, path: str, data: Mapping[str, Any]) -> dict[str, Any]:
        body = encode_json_body(data)
        response = self._request(method, path, content=body, headers=self._json_headers(body))
        _ensure_successful(response)
        return _success_json(response)

    def _request(
        self,
        method: str,
        path: str,
        *,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                return client.request(
                    method,
                    self._url(path),
                    content=content,
                    headers=headers if headers is not None else self._headers(b""),
                )
        except httpx.TimeoutException as exc:
            raise ApiError(f"Agent Runner request timed out: {exc}") from exc
        except httpx.RequestError as exc:
            raise ApiError(f"Agent Runner unreachable: {exc}") from exc


class AsyncAgentRunnerClient(_ClientConfig):
    def __init__(
        self,
        *,
        base_url: str,
        client_id: str,
        hmac_secret: str = "",
        timeout: float = 30.0,
        connect_timeout: float = 5.0,
        stream_timeout: float = 600.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(
            base_url=base_url,
            client_id=client_id,
            hmac_secret=hmac_secret,
            timeout=timeout,
            connect_timeout=connect_timeout,
            stream_timeout=stream_timeout,
        )
        self._transport = transport

    async def create_session(
        self,
        agent: AgentDefinition,
        *,
        callback: CallbackConfig | None = None,
        session_id: str | None = None,
        work_dir: str | None = None,
    ) -> CreateSessionResponse:
        body = _create_session_body(agent, callback, session_id, work_dir)
        return cast(CreateSessionResponse, await self._send_json("POST", "/v1/sessions", body))

    async def get_session(self, session_id: str) -> SessionInfo:
        response = await self._request("GET", f"/v1/sessions/{session_id}")
        if response.status_code == 404:
            raise SessionNotFoundError(session_id)
        _ensure_successful(response)
        return cast(SessionInfo, _success_json(response))

    async def delete_session(self, session_id: str) -> SessionInfo:
        response = await self._request("DELETE", f"/v1/sessions/{session_id}")
        if response.status_code == 404:
            raise SessionNotFoundError(session_id)
        _ensure_successful(response)
        return cast(SessionInfo, _success_json(response))

    async def send_message(self, session_id: str, message: str) -> SendMessageResponse:
        return cast(
            SendMessageResponse,
            await self._send_json(
                "POST", f"/v1/sessions/{session_id}/messages", {"message": message}
            ),
        )

    def stream(self, session_id: str) -> AsyncEventStream:
        return AsyncEventStream(
            url=self._url(f"/v1/sessions/{session_id}/stream"),
            headers=self._stream_headers,
            timeout=self._stream_timeout,
            transport=self._transport,
        )

    async def _send_json(self, method: str, path: str, data: Mapping[str, Any]) -> dict[str, Any]:
        body = encode_json_body(data)
        response = await self._request(method, path, content=body, headers=self._json_headers(body))
        _ensure_successful(response)
        return _success_json(response)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                return await client.request(
                    method,
                    self._url(path),
                    content=content,
                    headers=headers if headers is not None else self._headers(b""),
                )
        except httpx.TimeoutException as exc:
            raise ApiError(f"Agent Runner request timed out: {exc}") from exc
        except httpx.RequestError as exc:
            raise ApiError(f"Agent Runner unreachable: {exc}") from exc
