import pytest

from backend.app.core_types import VariantStatus
from backend.services.progress import ProgressAggregator, compute_progress
from backend.services.reconciliation import ReconciliationState, load_snapshot
from backend.services.receiving import QuantityAdjuster

from conftest import make_product, make_variant


def _state(order_payload, products):
    order_payload["products"] = products
    return ReconciliationState.initialize(load_snapshot(order_payload))


def test_order_totals(state):
    p = compute_progress(state)
    # commandé : 10 + 5 + 4 + 8 ; reçu : 0 + 5 + 2 + 0
    assert p.total_quantity == 27
    assert p.total_received_so_far == 7
    assert p.receiving_now == 0
    assert p.percentage == pytest.approx(100 * 7 / 27)
    assert p.completed is False


def test_percentage_is_zero_without_ordered_units(order_payload):
    state = _state(order_payload, [make_product("P1", [make_variant("V1", ordered=0)])])
    p = compute_progress(state)
    assert p.total_quantity == 0
    assert p.percentage == 0
    assert p.completed is False


def test_percentage_tracks_every_mutation(state):
    agg = ProgressAggregator()
    adjuster = QuantityAdjuster(state, agg)
    for n in range(1, 6):
        adjuster.increment("P1", "V1")
        total = sum(v.prior_received + v.receiving_now for v in state.variants())
        ordered = sum(v.ordered for v in state.variants())
        assert agg.current.percentage == pytest.approx(100 * total / ordered)
        assert agg.current.receiving_now == n


def test_percentage_not_clamped_on_over_receipt(order_payload):
    state = _state(order_payload, [make_product("P1", [make_variant("V1", ordered=2)])])
    agg = ProgressAggregator()
    adjuster = QuantityAdjuster(state, agg)
    for _ in range(3):
        adjuster.increment("P1", "V1")
    assert agg.current.percentage == pytest.approx(150.0)
    assert agg.current.over_received == [("P1", "V1")]
    assert agg.current.variants[("P1", "V1")].status == VariantStatus.over_received


def test_variant_statuses(state):
    agg = ProgressAggregator()
    adjuster = QuantityAdjuster(state, agg)
    adjuster.increment("P1", "V1")
    agg.recompute(state)

    variants = agg.current.variants
    assert variants[("P1", "V1")].status == VariantStatus.receiving
    assert variants[("P1", "V2")].status == VariantStatus.locked
    assert variants[("P2", "V3")].status == VariantStatus.not_started
    assert variants[("P3", "V4")].status == VariantStatus.canceled


def test_control_predicates(state):
    variants = compute_progress(state).variants
    v1 = variants[("P1", "V1")]
    assert v1.can_increment and not v1.can_decrement and not v1.can_set_defective
    v2 = variants[("P1", "V2")]
    assert not (v2.can_increment or v2.can_decrement or v2.can_set_defective)
    assert variants[("P2", "V3")].can_set_defective
    assert not variants[("P3", "V4")].can_increment


def test_product_rollup(state):
    products = {pp.product_id: pp for pp in compute_progress(state).products}
    assert products["P1"].ordered == 15
    assert products["P1"].total_received == 5
    assert products["P2"].total_received == 2


def test_order_completion_latches(order_payload):
    state = _state(order_payload, [make_product("P1", [make_variant("V1", ordered=1)])])
    agg = ProgressAggregator()
    adjuster = QuantityAdjuster(state, agg)

    adjuster.increment("P1", "V1")
    assert agg.current.completed is True

    adjuster.decrement("P1", "V1")
    # terminal une fois vrai
    assert agg.current.completed is True
    assert state.order_completed is True
