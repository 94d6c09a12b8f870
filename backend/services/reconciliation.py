"""
État de réconciliation d'une session de réception.

Source de vérité unique, indexée par (product_id, variant_id).
Les VariantState sont immuables : toute mutation remplace l'entrée
(jamais d'édition en place dans des listes imbriquées).

Aucune validation métier ici au-delà de la recherche par clé :
les règles vivent dans receiving.py / preorder.py.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterator

from pydantic import ValidationError

from backend.app.schemas.order_snapshot import OrderSnapshot
from backend.services.errors import InvalidSnapshot, VariantNotFound

logger = logging.getLogger("receiving.state")

VariantKey = tuple[str, str]


@dataclass(frozen=True)
class VariantState:
    product_id: str
    variant_id: str
    inventory_ref: str
    name: str
    ordered: int
    prior_received: int
    cost: Decimal = Decimal("0")
    color: str = ""
    size: str = ""
    sku: str = ""
    barcode: str = ""
    pre_order: bool = False
    canceled: bool = False
    locked: bool = False
    fulfillment_refs: tuple[str, ...] = field(default_factory=tuple)

    # ---------- session ----------
    receiving_now: int = 0
    defective: int = 0
    preorder_stop: bool = False

    @property
    def key(self) -> VariantKey:
        return (self.product_id, self.variant_id)

    @property
    def total_received(self) -> int:
        return self.prior_received + self.receiving_now

    @property
    def fulfillment_label(self) -> str:
        return " / ".join(self.fulfillment_refs)


def load_snapshot(payload: dict[str, Any]) -> OrderSnapshot:
    """Parse le JSON du backend ; toute erreur de forme -> InvalidSnapshot."""
    try:
        return OrderSnapshot.model_validate(payload)
    except ValidationError as e:
        raise InvalidSnapshot(f"Malformed purchase order: {e.error_count()} invalid field(s)") from e


class ReconciliationState:
    def __init__(self, order: OrderSnapshot, variants: dict[VariantKey, VariantState]):
        self.order = order
        self._variants = variants
        self.order_completed = bool(order.complete_receive)

    @classmethod
    def initialize(cls, order: OrderSnapshot) -> "ReconciliationState":
        variants: dict[VariantKey, VariantState] = {}
        seen_products: set[str] = set()

        for p_idx, product in enumerate(order.products):
            if not product.product_ref:
                raise InvalidSnapshot(f"Product #{p_idx} has no product reference")
            if product.product_ref in seen_products:
                raise InvalidSnapshot(f"Duplicate product {product.product_ref}")
            seen_products.add(product.product_ref)

            for v_idx, v in enumerate(product.variants):
                if not v.variant_ref or not v.inventory_ref:
                    raise InvalidSnapshot(
                        f"Variant #{v_idx} of product {product.product_ref} is missing identifiers"
                    )
                if v.ordered < 0:
                    raise InvalidSnapshot(f"Variant {v.variant_ref}: ordered quantity is negative ({v.ordered})")
                if v.prior_received < 0:
                    raise InvalidSnapshot(
                        f"Variant {v.variant_ref}: received quantity is negative ({v.prior_received})"
                    )

                key = (product.product_ref, v.variant_ref)
                if key in variants:
                    raise InvalidSnapshot(f"Duplicate variant {v.variant_ref} in product {product.product_ref}")

                variants[key] = VariantState(
                    product_id=product.product_ref,
                    variant_id=v.variant_ref,
                    inventory_ref=v.inventory_ref,
                    name=product.name,
                    ordered=v.ordered,
                    prior_received=v.prior_received,
                    cost=v.cost,
                    color=v.color,
                    size=v.size,
                    sku=v.sku,
                    barcode=v.barcode,
                    pre_order=v.pre_order,
                    canceled=product.canceled,
                    # déjà reçu en totalité au chargement -> verrouillé pour la session
                    locked=v.prior_received >= v.ordered,
                    fulfillment_refs=tuple(ref.label() for ref in v.fulfillment_refs),
                )

        logger.info(
            "initialized PO %s: %d product(s), %d variant(s)",
            order.order_id,
            len(order.products),
            len(variants),
        )
        return cls(order, variants)

    def get(self, product_id: str, variant_id: str) -> VariantState:
        try:
            return self._variants[(product_id, variant_id)]
        except KeyError:
            raise VariantNotFound(product_id, variant_id) from None

    def put(self, variant: VariantState) -> None:
        if variant.key not in self._variants:
            raise VariantNotFound(variant.product_id, variant.variant_id)
        self._variants[variant.key] = variant

    def variants(self) -> Iterator[VariantState]:
        # ordre du snapshot (dict insertion order)
        return iter(self._variants.values())

    def product_variants(self, product_id: str) -> list[VariantState]:
        return [v for v in self._variants.values() if v.product_id == product_id]

    def mark_completed(self) -> None:
        self.order_completed = True

    def __len__(self) -> int:
        return len(self._variants)
