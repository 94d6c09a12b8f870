from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from backend.app.api.deps import get_registry, get_snapshot_loader, get_update_service
from backend.app.clients.commerce import OrderSnapshotLoader, OrderUpdateService
from backend.app.schemas.receiving import DefectiveUpdate, VariantProgressRead, VariantStateRead
from backend.services.errors import (
    OrderNotFound,
    SnapshotError,
    SubmissionError,
    ValidationRejection,
    VariantNotFound,
)
from backend.services.procurement import ReceivingSession, ReceivingSessionRegistry

router = APIRouter(prefix="/receiving")


# ---------- Helpers ----------
def _require_session(registry: ReceivingSessionRegistry, order_id: str) -> ReceivingSession:
    session = registry.get(order_id)
    if not session:
        raise HTTPException(status_code=404, detail="No receiving session for this PO")
    return session


def _variant_view(session: ReceivingSession, product_id: str, variant_id: str) -> dict:
    v = session.variant(product_id, variant_id)
    vp = session.progress.variants[v.key]
    return {
        **VariantStateRead.model_validate(v).model_dump(mode="json"),
        **VariantProgressRead.model_validate(vp).model_dump(mode="json"),
    }


def _session_view(session: ReceivingSession) -> dict:
    order = session.order
    p = session.progress
    summary = session.summary()
    return {
        "order_id": order.order_id,
        "brand": order.brand,
        "season": order.season,
        "start_ship_date": order.start_ship_date,
        "completed": p.completed,
        "progress": {
            "total_quantity": p.total_quantity,
            "total_received_so_far": p.total_received_so_far,
            "receiving_now": p.receiving_now,
            "percentage": p.percentage,
        },
        "summary": {
            "units_added": summary.units_added,
            "preorder_stopped": summary.preorder_stopped,
            "over_received": [list(k) for k in summary.over_received],
            "message": summary.message(),
            "can_submit": session.can_submit,
        },
        "products": [
            {
                "product_id": product.product_ref,
                "name": product.name,
                "canceled": product.canceled,
                "variants": [
                    _variant_view(session, v.product_id, v.variant_id)
                    for v in session.state.product_variants(product.product_ref)
                ],
            }
            for product in order.products
        ],
    }


def _mutate(session: ReceivingSession, action, *args) -> dict:
    try:
        v = action(*args)
    except VariantNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationRejection as e:
        raise HTTPException(status_code=409, detail={"reason": e.reason.value, "message": str(e)})
    return {
        "variant": _variant_view(session, v.product_id, v.variant_id),
        "progress": {
            "total_received_so_far": session.progress.total_received_so_far,
            "receiving_now": session.progress.receiving_now,
            "percentage": session.progress.percentage,
            "completed": session.progress.completed,
        },
    }


# ---------- Endpoints ----------
@router.post("/{order_id}")
def open_session(
    order_id: str,
    registry: ReceivingSessionRegistry = Depends(get_registry),
    loader: OrderSnapshotLoader = Depends(get_snapshot_loader),
    updater: OrderUpdateService = Depends(get_update_service),
):
    try:
        session = ReceivingSession.open(order_id, loader=loader, updater=updater)
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="Purchase order not found")
    except SnapshotError as e:
        raise HTTPException(status_code=502, detail=str(e))

    # réouverture = état précédent jeté
    registry.put(order_id, session)
    return _session_view(session)


@router.get("/{order_id}")
def get_session(order_id: str, registry: ReceivingSessionRegistry = Depends(get_registry)):
    return _session_view(_require_session(registry, order_id))


@router.delete("/{order_id}")
def abandon_session(order_id: str, registry: ReceivingSessionRegistry = Depends(get_registry)):
    if not registry.discard(order_id):
        raise HTTPException(status_code=404, detail="No receiving session for this PO")
    return {"order_id": order_id, "discarded": True}


@router.post("/{order_id}/products/{product_id}/variants/{variant_id}/increment")
def increment_variant(
    order_id: str,
    product_id: str,
    variant_id: str,
    registry: ReceivingSessionRegistry = Depends(get_registry),
):
    session = _require_session(registry, order_id)
    return _mutate(session, session.increment, product_id, variant_id)


@router.post("/{order_id}/products/{product_id}/variants/{variant_id}/decrement")
def decrement_variant(
    order_id: str,
    product_id: str,
    variant_id: str,
    registry: ReceivingSessionRegistry = Depends(get_registry),
):
    session = _require_session(registry, order_id)
    return _mutate(session, session.decrement, product_id, variant_id)


@router.put("/{order_id}/products/{product_id}/variants/{variant_id}/defective")
def set_variant_defective(
    order_id: str,
    product_id: str,
    variant_id: str,
    payload: DefectiveUpdate,
    registry: ReceivingSessionRegistry = Depends(get_registry),
):
    session = _require_session(registry, order_id)
    return _mutate(session, session.set_defective, product_id, variant_id, payload.value)


@router.get("/{order_id}/transaction")
def preview_transaction(order_id: str, registry: ReceivingSessionRegistry = Depends(get_registry)):
    session = _require_session(registry, order_id)
    return session.build_transaction().to_wire()


@router.post("/{order_id}/submit")
def submit_session(order_id: str, registry: ReceivingSessionRegistry = Depends(get_registry)):
    session = _require_session(registry, order_id)
    try:
        result = session.submit()
    except ValidationRejection as e:
        raise HTTPException(status_code=409, detail={"reason": e.reason.value, "message": str(e)})
    except SubmissionError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except SnapshotError as e:
        # envoi OK mais rechargement KO : la session n'est plus fiable
        registry.discard(order_id)
        raise HTTPException(status_code=502, detail=f"Inventory updated, reload failed: {e}")

    return {"result": result, "session": _session_view(session)}
