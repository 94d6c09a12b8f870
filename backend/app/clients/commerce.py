"""
Frontière avec le backend commerce : lecture du PO publié, envoi de la réception.

Le contexte (URL, token) est passé explicitement au constructeur ;
rien n'est lu dans un état global au moment de l'appel.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests

from backend.app.schemas.order_snapshot import OrderSnapshot
from backend.app.schemas.transaction import Transaction
from backend.services.errors import InvalidSnapshot, OrderNotFound, SnapshotError, SubmissionError
from backend.services.reconciliation import load_snapshot

logger = logging.getLogger("receiving.commerce")


@dataclass(frozen=True)
class CommerceContext:
    base_url: str
    base_path: str = ""
    token: str | None = None
    timeout: float = 10.0

    def url(self, endpoint: str) -> str:
        parts = [self.base_url.rstrip("/")]
        if self.base_path.strip("/"):
            parts.append(self.base_path.strip("/"))
        parts.append(endpoint.lstrip("/"))
        return "/".join(parts)

    def headers(self) -> dict[str, str]:
        h = {"Content-Type": "application/json"}
        if self.token:
            h["Authorization"] = f"Bearer {self.token}"
        return h


class _CommerceClient:
    def __init__(self, context: CommerceContext, http: requests.Session | None = None):
        self.context = context
        self._http = http or requests.Session()


class OrderSnapshotLoader(_CommerceClient):
    def load(self, order_id: str) -> OrderSnapshot:
        url = self.context.url(f"getPublishedOrderById/{order_id}")
        try:
            response = self._http.get(url, headers=self.context.headers(), timeout=self.context.timeout)
        except requests.RequestException as e:
            logger.warning("loading PO %s failed: %s", order_id, e)
            raise SnapshotError(f"Failed to fetch order details: {e}") from e

        if response.status_code == 404:
            raise OrderNotFound(order_id)
        if not response.ok:
            raise SnapshotError(f"Failed to fetch order details (HTTP {response.status_code})")

        try:
            payload = response.json()
        except ValueError as e:
            raise InvalidSnapshot("Order details are not valid JSON") from e
        if not isinstance(payload, dict):
            raise InvalidSnapshot("Order details must be a JSON object")

        return load_snapshot(payload)


class OrderUpdateService(_CommerceClient):
    """Un seul aller-retour, pas de commit partiel, pas de retry automatique."""

    def submit(self, transaction: Transaction) -> dict[str, Any]:
        url = self.context.url("receiveInventoryByPoId")
        try:
            response = self._http.post(
                url,
                json=transaction.to_wire(),
                headers=self.context.headers(),
                timeout=self.context.timeout,
            )
        except requests.RequestException as e:
            raise SubmissionError(f"Failed to update inventory: {e}") from e

        if not response.ok:
            raise SubmissionError("Failed to update inventory", status_code=response.status_code)

        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError:
            # 2xx sans JSON : la mise à jour est passée
            return {"raw": response.text}
        return body if isinstance(body, dict) else {"result": body}
