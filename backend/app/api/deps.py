from __future__ import annotations

from fastapi import Depends, Header

from backend.app import config
from backend.app.clients.commerce import CommerceContext, OrderSnapshotLoader, OrderUpdateService
from backend.services.procurement import ReceivingSessionRegistry

_registry = ReceivingSessionRegistry()


def get_registry() -> ReceivingSessionRegistry:
    return _registry


def get_commerce_context(authorization: str | None = Header(default=None)) -> CommerceContext:
    token = config.COMMERCE_API_TOKEN
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip() or token
    return CommerceContext(
        base_url=config.COMMERCE_API_BASE_URL,
        base_path=config.COMMERCE_API_BASE_PATH,
        token=token,
        timeout=config.COMMERCE_API_TIMEOUT,
    )


def get_snapshot_loader(ctx: CommerceContext = Depends(get_commerce_context)) -> OrderSnapshotLoader:
    return OrderSnapshotLoader(ctx)


def get_update_service(ctx: CommerceContext = Depends(get_commerce_context)) -> OrderUpdateService:
    return OrderUpdateService(ctx)
