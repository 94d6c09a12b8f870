"""
Procurement service.

Orchestre une session de réception de PO :
chargement du snapshot -> mutations -> résumé -> envoi -> rechargement.

Aucune règle de calcul ici : tout est délégué à
    backend.services.reconciliation / receiving / progress / submission
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from backend.app.clients.commerce import OrderSnapshotLoader, OrderUpdateService
from backend.app.schemas.order_snapshot import OrderSnapshot
from backend.app.schemas.transaction import Transaction
from backend.services.errors import NothingToSubmit, SubmissionError
from backend.services.preorder import PreorderResolver
from backend.services.progress import OrderProgress, ProgressAggregator
from backend.services.reconciliation import ReconciliationState, VariantKey, VariantState
from backend.services.receiving import DefectiveTracker, QuantityAdjuster
from backend.services.submission import SubmissionBuilder

logger = logging.getLogger("receiving.session")


@dataclass(frozen=True)
class SubmissionSummary:
    units_added: int
    preorder_stopped: int
    over_received: list[VariantKey]

    def message(self) -> str:
        return (
            f"You are adding {self.units_added} to Inventory, and disabling "
            f"Continue to Sell for {self.preorder_stopped} items."
        )


class ReceivingSession:
    def __init__(
        self,
        snapshot: OrderSnapshot,
        *,
        loader: OrderSnapshotLoader | None = None,
        updater: OrderUpdateService | None = None,
    ):
        self._loader = loader
        self._updater = updater
        self._builder = SubmissionBuilder()
        self._reset(snapshot)

    @classmethod
    def open(
        cls,
        order_id: str,
        *,
        loader: OrderSnapshotLoader,
        updater: OrderUpdateService | None = None,
    ) -> "ReceivingSession":
        snapshot = loader.load(order_id)
        logger.info("receiving session opened for PO %s", snapshot.order_id)
        return cls(snapshot, loader=loader, updater=updater)

    def _reset(self, snapshot: OrderSnapshot) -> None:
        # jamais de fusion : l'état précédent est jeté en entier
        self.state = ReconciliationState.initialize(snapshot)
        self._aggregator = ProgressAggregator()
        preorder = PreorderResolver()
        self._adjuster = QuantityAdjuster(self.state, self._aggregator, preorder)
        self._defects = DefectiveTracker(self.state, self._aggregator, preorder)
        self._aggregator.recompute(self.state)

    # ---------- lecture ----------
    @property
    def order(self) -> OrderSnapshot:
        return self.state.order

    @property
    def progress(self) -> OrderProgress:
        return self._aggregator.current

    def variant(self, product_id: str, variant_id: str) -> VariantState:
        return self.state.get(product_id, variant_id)

    def summary(self) -> SubmissionSummary:
        p = self.progress
        return SubmissionSummary(
            units_added=p.receiving_now,
            preorder_stopped=p.preorder_stopped,
            over_received=p.over_received,
        )

    @property
    def can_submit(self) -> bool:
        return self.progress.receiving_now > 0

    # ---------- mutations ----------
    def increment(self, product_id: str, variant_id: str) -> VariantState:
        return self._adjuster.increment(product_id, variant_id)

    def decrement(self, product_id: str, variant_id: str) -> VariantState:
        return self._adjuster.decrement(product_id, variant_id)

    def set_defective(self, product_id: str, variant_id: str, value: int) -> VariantState:
        return self._defects.set_defective(product_id, variant_id, value)

    # ---------- envoi ----------
    def build_transaction(self) -> Transaction:
        return self._builder.build(self.state)

    def submit(self) -> dict[str, Any]:
        if not self.can_submit:
            raise NothingToSubmit()
        if self._updater is None:
            raise SubmissionError("No order update service configured")

        summary = self.summary()
        for product_id, variant_id in summary.over_received:
            logger.warning("PO %s: submitting over-received variant %s/%s", self.order.order_id, product_id, variant_id)

        transaction = self.build_transaction()
        try:
            result = self._updater.submit(transaction)
        except SubmissionError as e:
            # état conservé tel quel : l'opérateur peut renvoyer à la main
            logger.warning("PO %s: submission failed: %s", self.order.order_id, e)
            raise

        logger.info(
            "PO %s: submitted %d unit(s), %d preorder stop(s)",
            self.order.order_id,
            summary.units_added,
            summary.preorder_stopped,
        )
        if self._loader is not None:
            self.reload()
        return result

    def reload(self) -> None:
        if self._loader is None:
            raise RuntimeError("No snapshot loader configured")
        snapshot = self._loader.load(self.order.order_id)
        self._reset(snapshot)
        logger.info("PO %s reloaded", snapshot.order_id)


class ReceivingSessionRegistry:
    """Sessions en mémoire, une par PO (mono-utilisateur)."""

    def __init__(self):
        self._sessions: dict[str, ReceivingSession] = {}

    def put(self, order_id: str, session: ReceivingSession) -> None:
        self._sessions[order_id] = session

    def get(self, order_id: str) -> ReceivingSession | None:
        return self._sessions.get(order_id)

    def discard(self, order_id: str) -> bool:
        return self._sessions.pop(order_id, None) is not None

    def __contains__(self, order_id: str) -> bool:
        return order_id in self._sessions
