"""Tests for the Bordereau aggregate."""

import json

import pytest
from delivery.bordereau.bordereau import Bordereau, BordereauStatus
from delivery.bordereau.events import BordereauClaimed, BordereauCreated, BordereauReassigned
from delivery.errors import ClaimConflict
from delivery.order.order import DeliveryOrder, OrderStatus
from protean.exceptions import ValidationError


def _make_bordereau(order_ids=None, total_cents=15000):
    bordereau = Bordereau.create(
        code="BRD-1001",
        order_ids=order_ids or ["o-1", "o-2", "o-3"],
        total_cents=total_cents,
        organization_id="org-1",
    )
    bordereau._events.clear()
    return bordereau


def _order(status):
    order = DeliveryOrder.register(
        order_number=f"CMD-{status}",
        recipient={"name": "Sana", "phone": "+21650000000"},
        lines=[],
        total_cents=5000,
        status=OrderStatus.SHIPPED.value,
    )
    if status != OrderStatus.SHIPPED.value:
        order.claim("agent-1")
        if status != OrderStatus.ASSIGNED.value:
            order.apply_transition("agent-1", "delivery_man", status, note="done")
    return order


class TestCreation:
    def test_create_raises_event(self):
        bordereau = Bordereau.create(code="BRD-1001", order_ids=["o-1"], total_cents=5000)
        assert bordereau.status == BordereauStatus.PENDING.value
        assert bordereau.delivery_man_id is None
        event = bordereau._events[-1]
        assert isinstance(event, BordereauCreated)
        assert json.loads(event.order_ids) == ["o-1"]

    def test_order_ids_keep_manifest_order(self):
        bordereau = _make_bordereau(order_ids=["o-3", "o-1", "o-2"])
        assert bordereau.order_id_list == ["o-3", "o-1", "o-2"]

    def test_empty_bordereau_is_rejected(self):
        with pytest.raises(ValidationError):
            Bordereau.create(code="BRD-0", order_ids=[], total_cents=0)

    def test_duplicate_orders_are_rejected(self):
        with pytest.raises(ValidationError):
            Bordereau.create(code="BRD-0", order_ids=["o-1", "o-1"], total_cents=0)


class TestClaim:
    def test_claim_sets_agent_and_recomputed_total(self):
        bordereau = _make_bordereau(total_cents=0)
        assert bordereau.claim("agent-1", total_cents=15000) is True

        assert bordereau.delivery_man_id == "agent-1"
        assert bordereau.total_cents == 15000
        assert bordereau.status == BordereauStatus.IN_DELIVERY.value
        event = bordereau._events[-1]
        assert isinstance(event, BordereauClaimed)
        assert event.order_count == 3

    def test_reclaim_by_holder_is_noop(self):
        bordereau = _make_bordereau()
        bordereau.claim("agent-1", total_cents=15000)
        bordereau._events.clear()

        assert bordereau.claim("agent-1", total_cents=15000) is False
        assert bordereau._events == []

    def test_claim_by_other_agent_conflicts(self):
        bordereau = _make_bordereau()
        bordereau.claim("agent-1", total_cents=15000)
        with pytest.raises(ClaimConflict):
            bordereau.claim("agent-2", total_cents=15000)
        assert bordereau.delivery_man_id == "agent-1"


class TestReassign:
    def test_reassign_requires_claim(self):
        bordereau = _make_bordereau()
        with pytest.raises(ValidationError):
            bordereau.reassign("agent-2", "admin-1")

    def test_reassign_moves_holder(self):
        bordereau = _make_bordereau()
        bordereau.claim("agent-1", total_cents=15000)
        bordereau._events.clear()

        bordereau.reassign("agent-2", "admin-1")

        assert bordereau.delivery_man_id == "agent-2"
        assert isinstance(bordereau._events[-1], BordereauReassigned)


class TestResolution:
    def test_resolved_when_all_orders_terminal(self):
        orders = [_order(OrderStatus.DELIVERED.value), _order(OrderStatus.RETURNED.value)]
        assert Bordereau.is_resolved(orders) is True

    def test_not_resolved_while_an_order_is_active(self):
        orders = [_order(OrderStatus.DELIVERED.value), _order(OrderStatus.NOT_RESPONDING.value)]
        assert Bordereau.is_resolved(orders) is False

    def test_empty_list_is_not_resolved(self):
        assert Bordereau.is_resolved([]) is False
