"""
Agrégats dérivés (lecture seule) : variante -> produit -> commande.

Règles :
    total_received   = prior_received + receiving_now
    fully_received   = total_received >= ordered
    over_received    = total_received > ordered
    percentage       = 100 * SUM(total_received) / SUM(ordered)   (0 si SUM(ordered) == 0)

Le pourcentage n'est PAS plafonné à 100 : le sur-reçu doit rester visible.
Recalcul O(variantes) après chaque mutation, sans cas d'erreur.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from backend.app.core_types import VariantStatus
from backend.services.reconciliation import ReconciliationState, VariantKey, VariantState

logger = logging.getLogger("receiving.progress")


@dataclass(frozen=True)
class VariantProgress:
    key: VariantKey
    total_received: int
    is_fully_received: bool
    is_over_received: bool
    status: VariantStatus
    can_increment: bool
    can_decrement: bool
    can_set_defective: bool
    defective_exceeds_ordered: bool


@dataclass(frozen=True)
class ProductProgress:
    product_id: str
    ordered: int
    total_received: int
    receiving_now: int
    defective: int


@dataclass(frozen=True)
class OrderProgress:
    total_quantity: int
    total_received_so_far: int
    receiving_now: int
    percentage: float
    completed: bool
    preorder_stopped: int
    variants: dict[VariantKey, VariantProgress] = field(default_factory=dict)
    products: list[ProductProgress] = field(default_factory=list)

    @property
    def over_received(self) -> list[VariantKey]:
        return [k for k, vp in self.variants.items() if vp.is_over_received]


def variant_status(v: VariantState) -> VariantStatus:
    if v.canceled:
        return VariantStatus.canceled
    if v.locked:
        return VariantStatus.locked
    if v.total_received > v.ordered:
        return VariantStatus.over_received
    if v.total_received >= v.ordered:
        return VariantStatus.fully_received
    if v.receiving_now > 0:
        return VariantStatus.receiving
    return VariantStatus.not_started


def variant_progress(v: VariantState) -> VariantProgress:
    total = v.total_received
    frozen = v.canceled or v.locked
    return VariantProgress(
        key=v.key,
        total_received=total,
        is_fully_received=total >= v.ordered,
        is_over_received=total > v.ordered,
        status=variant_status(v),
        can_increment=not frozen,
        can_decrement=not frozen and v.receiving_now > 0,
        can_set_defective=not frozen and total > 0,
        defective_exceeds_ordered=v.defective > v.ordered,
    )


def compute_progress(state: ReconciliationState) -> OrderProgress:
    variants: dict[VariantKey, VariantProgress] = {}
    per_product: dict[str, list[VariantState]] = {}

    total_quantity = 0
    total_received = 0
    receiving_now = 0
    preorder_stopped = 0

    for v in state.variants():
        vp = variant_progress(v)
        variants[v.key] = vp
        per_product.setdefault(v.product_id, []).append(v)

        total_quantity += v.ordered
        total_received += vp.total_received
        receiving_now += v.receiving_now
        if v.preorder_stop:
            preorder_stopped += 1

    products = [
        ProductProgress(
            product_id=pid,
            ordered=sum(v.ordered for v in vs),
            total_received=sum(v.total_received for v in vs),
            receiving_now=sum(v.receiving_now for v in vs),
            defective=sum(v.defective for v in vs),
        )
        for pid, vs in per_product.items()
    ]

    percentage = 100 * total_received / total_quantity if total_quantity > 0 else 0.0

    all_received = total_quantity > 0 and all(vp.is_fully_received for vp in variants.values())

    return OrderProgress(
        total_quantity=total_quantity,
        total_received_so_far=total_received,
        receiving_now=receiving_now,
        percentage=percentage,
        completed=state.order_completed or all_received,
        preorder_stopped=preorder_stopped,
        variants=variants,
        products=products,
    )


class ProgressAggregator:
    """Garde le dernier calcul ; verrouille la complétion de la commande une fois atteinte."""

    def __init__(self):
        self.current: OrderProgress | None = None

    def recompute(self, state: ReconciliationState) -> OrderProgress:
        progress = compute_progress(state)
        if progress.completed and not state.order_completed:
            # terminal pour la session, même si on décrémente ensuite
            state.mark_completed()
            logger.info("PO %s fully received", state.order.order_id)
        self.current = progress
        return progress
