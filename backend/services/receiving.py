"""
Mutations d'une session de réception.

- QuantityAdjuster : +1 / -1 sur receiving_now
- DefectiveTracker : nombre d'unités défectueuses

Chaque mutation acceptée déclenche un recalcul synchrone des agrégats.
Une mutation refusée lève ValidationRejection et laisse l'état intact.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from backend.app.core_types import RejectionReason
from backend.services.errors import OutOfRange, ValidationRejection
from backend.services.preorder import PreorderResolver
from backend.services.progress import ProgressAggregator
from backend.services.reconciliation import ReconciliationState, VariantState

logger = logging.getLogger("receiving.mutations")


def _ensure_mutable(v: VariantState) -> None:
    if v.canceled:
        raise ValidationRejection(RejectionReason.canceled, f"Product {v.product_id} is canceled")
    if v.locked:
        raise ValidationRejection(RejectionReason.locked, f"Variant {v.variant_id} was already fully received")


class _Mutator:
    def __init__(
        self,
        state: ReconciliationState,
        progress: ProgressAggregator,
        preorder: PreorderResolver | None = None,
    ):
        self._state = state
        self._progress = progress
        self._preorder = preorder or PreorderResolver()

    def _commit(self, variant: VariantState) -> VariantState:
        self._state.put(variant)
        self._progress.recompute(self._state)
        return variant


class QuantityAdjuster(_Mutator):
    """
    Pas de plafond à ordered - prior_received : le sur-reçu est permis
    (sur-livraison fournisseur), seulement signalé par les agrégats.
    """

    def increment(self, product_id: str, variant_id: str) -> VariantState:
        v = self._state.get(product_id, variant_id)
        try:
            _ensure_mutable(v)
        except ValidationRejection as e:
            logger.warning("increment rejected for %s/%s: %s", product_id, variant_id, e.reason.value)
            raise

        v = self._preorder.apply(replace(v, receiving_now=v.receiving_now + 1))
        if v.total_received > v.ordered:
            logger.warning(
                "over-receiving %s/%s: %d received for %d ordered",
                product_id,
                variant_id,
                v.total_received,
                v.ordered,
            )
        logger.debug("increment %s/%s -> %d", product_id, variant_id, v.receiving_now)
        return self._commit(v)

    def decrement(self, product_id: str, variant_id: str) -> VariantState:
        v = self._state.get(product_id, variant_id)
        try:
            _ensure_mutable(v)
            if v.receiving_now == 0:
                raise ValidationRejection(RejectionReason.nothing_to_remove, "Nothing is being received")
        except ValidationRejection as e:
            logger.warning("decrement rejected for %s/%s: %s", product_id, variant_id, e.reason.value)
            raise

        v = replace(v, receiving_now=v.receiving_now - 1)
        if v.defective > v.total_received:
            # defective <= prior_received + receiving_now doit toujours tenir
            logger.info("defective for %s/%s lowered to %d", product_id, variant_id, v.total_received)
            v = replace(v, defective=v.total_received)
        v = self._preorder.apply(v)
        logger.debug("decrement %s/%s -> %d", product_id, variant_id, v.receiving_now)
        return self._commit(v)


class DefectiveTracker(_Mutator):
    def set_defective(self, product_id: str, variant_id: str, value: int) -> VariantState:
        v = self._state.get(product_id, variant_id)
        try:
            _ensure_mutable(v)
            if v.total_received == 0:
                raise ValidationRejection(RejectionReason.nothing_received, "No units received yet")
            if value > v.total_received:
                raise OutOfRange(value, v.total_received)
        except ValidationRejection as e:
            logger.warning("defective rejected for %s/%s: %s", product_id, variant_id, e)
            raise

        if value < 0:
            logger.info("negative defective count %d for %s/%s clamped to 0", value, product_id, variant_id)
            value = 0

        logger.debug("defective %s/%s -> %d", product_id, variant_id, value)
        return self._commit(replace(v, defective=value))
