import pytest
from fastapi.testclient import TestClient

from backend.app.api.deps import get_registry, get_snapshot_loader, get_update_service
from backend.app.main import app
from backend.services.errors import OrderNotFound, SnapshotError, SubmissionError
from backend.services.procurement import ReceivingSessionRegistry

BASE = "/v1/receiving/PO-1001"
V1 = f"{BASE}/products/P1/variants/V1"


@pytest.fixture
def client(loader, updater):
    registry = ReceivingSessionRegistry()
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_snapshot_loader] = lambda: loader
    app.dependency_overrides[get_update_service] = lambda: updater
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/v1/health").json() == {"status": "ok"}


def test_open_session(client):
    r = client.post(BASE)
    assert r.status_code == 200
    body = r.json()
    assert body["order_id"] == "PO-1001"
    assert body["progress"]["total_quantity"] == 27
    assert body["summary"]["can_submit"] is False
    v2 = body["products"][0]["variants"][1]
    assert v2["variant_id"] == "V2"
    assert v2["locked"] is True
    assert v2["status"] == "LOCKED"
    assert v2["can_increment"] is False


def test_open_unknown_order(client, loader):
    loader.load.side_effect = OrderNotFound("PO-404")
    assert client.post("/v1/receiving/PO-404").status_code == 404


def test_actions_need_open_session(client):
    assert client.get(BASE).status_code == 404
    assert client.post(f"{V1}/increment").status_code == 404


def test_increment_decrement(client):
    client.post(BASE)

    r = client.post(f"{V1}/increment")
    assert r.status_code == 200
    assert r.json()["variant"]["receiving_now"] == 1
    assert r.json()["variant"]["status"] == "RECEIVING"
    assert r.json()["progress"]["receiving_now"] == 1

    r = client.post(f"{V1}/decrement")
    assert r.json()["variant"]["receiving_now"] == 0

    r = client.post(f"{V1}/decrement")
    assert r.status_code == 409
    assert r.json()["detail"]["reason"] == "NOTHING_TO_REMOVE"


def test_locked_and_unknown_variant(client):
    client.post(BASE)
    r = client.post(f"{BASE}/products/P1/variants/V2/increment")
    assert r.status_code == 409
    assert r.json()["detail"]["reason"] == "LOCKED"
    assert client.post(f"{BASE}/products/P1/variants/V9/increment").status_code == 404


def test_defective(client):
    client.post(BASE)
    client.post(f"{V1}/increment")

    r = client.put(f"{V1}/defective", json={"value": 2})
    assert r.status_code == 409
    assert r.json()["detail"]["reason"] == "OUT_OF_RANGE"

    r = client.put(f"{V1}/defective", json={"value": 1})
    assert r.status_code == 200
    assert r.json()["variant"]["defective"] == 1


def test_transaction_preview(client):
    client.post(BASE)
    client.post(f"{V1}/increment")
    wire = client.get(f"{BASE}/transaction").json()
    assert wire["purchaseOrderID"] == "PO-1001"
    assert wire["products"][0]["updateProductFlag"] is True


def test_submit(client, updater, loader):
    client.post(BASE)
    assert client.post(f"{BASE}/submit").status_code == 409

    client.post(f"{V1}/increment")
    r = client.post(f"{BASE}/submit")
    assert r.status_code == 200
    assert r.json()["result"] == {"status": "ok"}
    assert r.json()["session"]["progress"]["receiving_now"] == 0
    updater.submit.assert_called_once()
    assert loader.load.call_count == 2


def test_submit_failure_keeps_session(client, updater):
    updater.submit.side_effect = SubmissionError("Failed to update inventory")
    client.post(BASE)
    client.post(f"{V1}/increment")

    assert client.post(f"{BASE}/submit").status_code == 502
    assert client.get(BASE).json()["progress"]["receiving_now"] == 1


def test_abandon(client):
    client.post(BASE)
    assert client.delete(BASE).json() == {"order_id": "PO-1001", "discarded": True}
    assert client.delete(BASE).status_code == 404


def test_submit_then_reload_failure_drops_session(client, updater, loader, snapshot):
    loader.load.side_effect = [snapshot, SnapshotError("Failed to fetch order details (HTTP 500)")]
    client.post(BASE)
    client.post(f"{V1}/increment")

    r = client.post(f"{BASE}/submit")

    assert r.status_code == 502
    assert "reload failed" in r.json()["detail"]
    updater.submit.assert_called_once()
    # inventaire mis à jour : la session n'est plus fiable
    assert client.get(BASE).status_code == 404
