from __future__ import annotations

from dataclasses import replace

from backend.services.reconciliation import VariantState


class PreorderResolver:
    """
    Précommande + unités en cours de réception => couper le "continue selling".
    Fonction pure de l'état ; pre_order est déjà normalisé en bool à l'ingestion.
    """

    @staticmethod
    def resolve(variant: VariantState) -> bool:
        return variant.pre_order and variant.receiving_now > 0

    def apply(self, variant: VariantState) -> VariantState:
        stop = self.resolve(variant)
        if stop == variant.preorder_stop:
            return variant
        return replace(variant, preorder_stop=stop)
