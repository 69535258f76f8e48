from typing import Annotated

from fastapi import Depends, Request

from agent_runner_sdk.nonce import NonceStore
from agent_runner_sdk.tools import ToolRegistry
from app.core.config import Settings
from app.modules.status_events.service import StatusDispatcher


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_tool_registry(request: Request) -> ToolRegistry:
    return request.app.state.tool_registry


def get_nonce_store(request: Request) -> NonceStore:
    return request.app.state.nonce_store


def get_status_dispatcher(request: Request) -> StatusDispatcher:
    return request.app.state.status_dispatcher


SettingsDep = Annotated[Settings, Depends(get_settings)]
RegistryDep = Annotated[ToolRegistry, Depends(get_tool_registry)]
NonceStoreDep = Annotated[NonceStore, Depends(get_nonce_store)]
StatusDispatcherDep = Annotated[StatusDispatcher, Depends(get_status_dispatcher)]
