import copy
from unittest import mock

import pytest
import requests

from backend.services.procurement import ReceivingSession
from backend.services.reconciliation import ReconciliationState, load_snapshot


def make_variant(ref, ordered=10, received=0, pre_order=False, **extra):
    v = {
        "variantColor": "Ivory",
        "variantSize": "8",
        "variantQuantity": ordered,
        "variantQuantityReceived": received,
        "variantCost": 125.5,
        "variantRetail": 299,
        "variantSku": f"SKU-{ref}",
        "variantBarcode": f"0000{ref}",
        "variantPreOrder": pre_order,
        "variantShopifyProductGid": "gid://shopify/Product/1",
        "variantShopifyGid": ref,
        "variantShopifyInventoryItemGid": f"inv-{ref}",
        "ordersToFulfil": [],
    }
    v.update(extra)
    return v


def make_product(ref, variants, canceled=False, name="Gown"):
    return {
        "productName": name,
        "productType": "Dress",
        "productTags": "bridal, spring",
        "productCanceled": canceled,
        "productShopifyGid": ref,
        "productVariants": variants,
    }


BASE_ORDER = {
    "purchaseOrderID": "PO-1001",
    "brand": "Maison",
    "purchaseOrderSeason": "SS26",
    "createdDate": "2026-01-05",
    "startShipDate": "2026-03-01",
    "completedDate": None,
    "terms": "30/30/40",
    "depositPercent": 30,
    "onDeliverPercent": 30,
    "net30Percent": 40,
    "totalProductQuantity": 3,
    "totalVariantQuantity": 27,
    "totalVariantReceivedQuantity": 7,
    "purchaseOrderCompleteReceive": False,
    "products": [
        make_product("P1", [
            make_variant("V1", ordered=10, received=0),
            make_variant("V2", ordered=5, received=5),
        ]),
        make_product("P2", [
            make_variant(
                "V3",
                ordered=4,
                received=2,
                pre_order="true",
                ordersToFulfil=[
                    {"shopifyOrderNumber": "#1042", "shopifyCustomerName": "Ana"},
                    {"shopifyOrderNumber": "#1051", "shopifyCustomerName": "Lea"},
                ],
            ),
        ]),
        make_product("P3", [make_variant("V4", ordered=8, received=0)], canceled=True, name="Veil"),
    ],
}


@pytest.fixture
def order_payload():
    return copy.deepcopy(BASE_ORDER)


@pytest.fixture
def snapshot(order_payload):
    return load_snapshot(order_payload)


@pytest.fixture
def state(snapshot):
    return ReconciliationState.initialize(snapshot)


@pytest.fixture
def loader(snapshot):
    m = mock.Mock()
    m.load.return_value = snapshot
    return m


@pytest.fixture
def updater():
    m = mock.Mock()
    m.submit.return_value = {"status": "ok"}
    return m


@pytest.fixture
def session(snapshot, loader, updater):
    return ReceivingSession(snapshot, loader=loader, updater=updater)


def fake_response(status_code=200, json_body=None, content=b"{}"):
    r = mock.Mock(spec=requests.Response)
    r.status_code = status_code
    r.ok = 200 <= status_code < 400
    r.content = content
    r.text = content.decode("utf-8", "replace")
    if isinstance(json_body, Exception):
        r.json.side_effect = json_body
    else:
        r.json.return_value = json_body
    return r


@pytest.fixture
def make_response():
    return fake_response
