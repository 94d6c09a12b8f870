"""
Construction de la transaction envoyée à l'Order Update Service.

Toutes les variantes sont émises (même intactes) pour donner au backend
une image complète ; update_flag indique celles qui ont réellement changé.
Aucun I/O réseau ici.
"""

from __future__ import annotations

from backend.app.schemas.transaction import ProductUpdate, Transaction, VariantUpdate
from backend.services.reconciliation import ReconciliationState, VariantState


def variant_update(v: VariantState) -> VariantUpdate:
    return VariantUpdate(
        variant_ref=v.variant_id,
        inventory_ref=v.inventory_ref,
        update_flag=v.receiving_now > 0 or v.defective > 0,
        quantity_delta=v.receiving_now,
        completed=v.total_received >= v.ordered,
        preorder_stop=v.preorder_stop,
        fulfillment_refs=v.fulfillment_label,
        cost=v.cost,
        name=v.name,
        defective=v.defective,
    )


class SubmissionBuilder:
    def build(self, state: ReconciliationState) -> Transaction:
        products: list[ProductUpdate] = []
        total_received = 0

        for product in state.order.products:
            updates = [variant_update(v) for v in state.product_variants(product.product_ref)]
            products.append(
                ProductUpdate(
                    product_ref=product.product_ref,
                    update_flag=any(u.update_flag for u in updates),
                    variants=updates,
                )
            )

        for v in state.variants():
            total_received += v.total_received

        return Transaction(
            order_id=state.order.order_id,
            season=state.order.season,
            total_received_so_far=total_received,
            products=products,
        )
