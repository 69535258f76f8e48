from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from agent_runner_sdk.nonce import NonceStore
from agent_runner_sdk.tools import ToolRegistry
from app.api.routes.status import router as status_router
from app.api.routes.tools import router as tools_router
from app.core.config import Settings
from app.core.config import settings as default_settings
from app.core.openapi import API_DESCRIPTION, install_custom_openapi
from app.modules.replay.service import build_nonce_store
from app.modules.status_events.service import StatusDispatcher
from app.observability.logging import configure_logging
from app.observability.request_logging import request_logging_middleware


def create_app(
    settings: Settings | None = None,
    *,
    registry: ToolRegistry | None = None,
    nonce_store: NonceStore | None = None,
    status_dispatcher: StatusDispatcher | None = None,
) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.log_level)
        yield

    app = FastAPI(
        title="Agent Runner Callback API",
        summary="Signed tool and status callbacks for agent runner sessions",
        description=API_DESCRIPTION,
        version="0.1.0",
        license_info={"name": "MIT"},
        openapi_url="/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        servers=[
            {"url": f"http://localhost:{settings.app_port}", "description": "Local development"},
        ],
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.tool_registry = registry if registry is not None else ToolRegistry()
    app.state.nonce_store = nonce_store if nonce_store is not None else build_nonce_store(settings)
    app.state.status_dispatcher = (
        status_dispatcher if status_dispatcher is not None else StatusDispatcher()
    )

    app.openapi = install_custom_openapi(app)  # type: ignore[method-assign]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(BaseHTTPMiddleware, dispatch=request_logging_middleware)

    prefix = settings.route_prefix.rstrip("/")
    app.include_router(tools_router, prefix=prefix)
    app.include_router(status_router, prefix=prefix)
    return app


app = create_app()
