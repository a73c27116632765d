"""FastAPI dependencies: shared store, gateway client and the services built on them.

The store and gateway client live on ``app.state`` (set up in the lifespan).
Tests replace ``get_store`` / ``get_gateway_client`` via ``dependency_overrides``.
"""

from fastapi import Depends, Request

from studio.core.config import settings
from studio.db.store import PersistenceStore
from studio.gateway.client import GatewayClient
from studio.services.edit_workflow import EditWorkflow
from studio.services.setting_service import SettingService
from studio.services.style_service import StyleService


def get_store(request: Request) -> PersistenceStore:
    return request.app.state.store


def get_gateway_client(request: Request) -> GatewayClient:
    return request.app.state.gateway


def get_edit_workflow(
    store: PersistenceStore = Depends(get_store),
    gateway: GatewayClient = Depends(get_gateway_client),
) -> EditWorkflow:
    return EditWorkflow(
        store,
        gateway,
        max_tokens=settings.edit_max_tokens,
        temperature=settings.edit_temperature,
    )


def get_style_service(
    store: PersistenceStore = Depends(get_store),
    gateway: GatewayClient = Depends(get_gateway_client),
) -> StyleService:
    return StyleService(
        store,
        gateway,
        max_tokens=settings.style_max_tokens,
        temperature=settings.style_temperature,
    )


def get_setting_service(store: PersistenceStore = Depends(get_store)) -> SettingService:
    return SettingService(store)
