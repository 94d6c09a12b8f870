"""
Taxonomie des erreurs du moteur de réception.

- ValidationRejection : mutation refusée, l'état reste inchangé.
- SnapshotError       : données de commande absentes ou invalides au chargement.
- SubmissionError     : échec réseau / backend à l'envoi de la transaction.

Le sur-reçu n'est PAS une erreur (simple alerte opérateur).
"""

from __future__ import annotations

from backend.app.core_types import RejectionReason


class ReceivingError(Exception):
    pass


class ValidationRejection(ReceivingError):
    def __init__(self, reason: RejectionReason, message: str | None = None):
        self.reason = reason
        super().__init__(message or reason.value)


class OutOfRange(ValidationRejection):
    def __init__(self, value: int, maximum: int):
        self.value = value
        self.maximum = maximum
        super().__init__(
            RejectionReason.out_of_range,
            f"Defective count {value} exceeds units received ({maximum})",
        )


class NothingToSubmit(ValidationRejection):
    def __init__(self):
        super().__init__(RejectionReason.nothing_to_submit, "No units are being received")


class VariantNotFound(ReceivingError):
    def __init__(self, product_id: str, variant_id: str):
        self.product_id = product_id
        self.variant_id = variant_id
        super().__init__(f"Variant {variant_id} not found in product {product_id}")


class SnapshotError(ReceivingError):
    pass


class InvalidSnapshot(SnapshotError):
    pass


class OrderNotFound(SnapshotError):
    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Purchase order {order_id} not found")


class SubmissionError(ReceivingError):
    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
