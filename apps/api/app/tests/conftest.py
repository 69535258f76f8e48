import json
from collections.abc import Callable
from typing import Any

import pytest
from fastapi.testclient import TestClient

from agent_runner_sdk.nonce import InMemoryNonceStore
from agent_runner_sdk.signing import sign_body, signature_headers
from agent_runner_sdk.tools import ToolRegistry
from app.core.config import Settings
from app.main import create_app
from app.modules.status_events.service import StatusDispatcher

TEST_SECRET = "test-secret"
PREFIX = "/api/agent-runner"

SignedPost = Callable[..., Any]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        agent_runner_hmac_secret=TEST_SECRET,
        agent_runner_client_id="test-client",
        nonce_store_backend="memory",
        route_prefix=PREFIX,
    )


@pytest.fixture
def registry() -> ToolRegistry:
    return ToolRegistry()


@pytest.fixture
def dispatcher() -> StatusDispatcher:
    return StatusDispatcher()


@pytest.fixture
def nonce_store() -> InMemoryNonceStore:
    return InMemoryNonceStore()


@pytest.fixture
def client(
    settings: Settings,
    registry: ToolRegistry,
    dispatcher: StatusDispatcher,
    nonce_store: InMemoryNonceStore,
) -> TestClient:
    app = create_app(
        settings,
        registry=registry,
        nonce_store=nonce_store,
        status_dispatcher=dispatcher,
    )
    return TestClient(app)


def encode(payload: dict[str, Any]) -> bytes:
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def signed_headers(body: bytes, *, secret: str = TEST_SECRET) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "X-Client-ID": "test-client",
        **signature_headers(sign_body(secret, body)),
    }


@pytest.fixture
def signed_post(client: TestClient) -> SignedPost:
    def post(path: str, payload: dict[str, Any]) -> Any:
        body = encode(payload)
        return client.post(f"{PREFIX}{path}", content=body, headers=signed_headers(body))

    return post


@pytest.fixture
def sign() -> Callable[..., dict[str, str]]:
    return signed_headers
