"""Application tests for bordereau creation, claim and reassignment."""

import json

import pytest
from delivery.bordereau.bordereau import Bordereau, BordereauStatus
from delivery.bordereau.claim import ClaimBordereau
from delivery.bordereau.creation import CreateBordereau
from delivery.bordereau.reassignment import ReassignBordereau
from delivery.errors import ClaimConflict, Forbidden
from delivery.order.claim import ClaimOrder
from delivery.order.order import DeliveryOrder, OrderStatus
from delivery.order.transition import MarkDelivered
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


def _claim(code, agent_id, role="delivery_man"):
    return current_domain.process(
        ClaimBordereau(code=code, agent_id=agent_id, actor_role=role),
        asynchronous=False,
    )


def _orders_of(code):
    bordereau = current_domain.repository_for(Bordereau).get_by_code(code)
    repo = current_domain.repository_for(DeliveryOrder)
    return bordereau, [repo.get(order_id) for order_id in bordereau.order_id_list]


class TestCreateBordereau:
    def test_create_links_orders(self, create_bordereau):
        bordereau_id = create_bordereau("BRD-1000", ["CMD-1", "CMD-2"], totals=["40.00", "60.50"])

        bordereau, orders = _orders_of("BRD-1000")
        assert str(bordereau.id) == bordereau_id
        assert bordereau.total_cents == 10050
        assert bordereau.status == BordereauStatus.PENDING.value
        assert [o.order_number for o in orders] == ["CMD-1", "CMD-2"]
        assert all(str(o.bordereau_id) == bordereau_id for o in orders)

    def test_duplicate_code_rejected(self, create_bordereau, register_order):
        create_bordereau("BRD-1000", ["CMD-1"])
        register_order("CMD-2")

        with pytest.raises(ValidationError) as exc:
            current_domain.process(
                CreateBordereau(code="BRD-1000", order_identifiers=json.dumps(["CMD-2"]), actor_role="admin"),
                asynchronous=False,
            )
        assert "code" in exc.value.messages

    def test_order_cannot_join_two_bordereaux(self, create_bordereau):
        create_bordereau("BRD-1000", ["CMD-1"])

        with pytest.raises(ValidationError):
            current_domain.process(
                CreateBordereau(code="BRD-1001", order_identifiers=json.dumps(["CMD-1"]), actor_role="admin"),
                asynchronous=False,
            )

    def test_order_awaiting_confirmation_rejected(self, register_order):
        order_id = register_order("CMD-1", status=OrderStatus.PENDING.value)

        with pytest.raises(ValidationError) as exc:
            current_domain.process(
                CreateBordereau(code="BRD-1000", order_identifiers=json.dumps(["CMD-1"]), actor_role="admin"),
                asynchronous=False,
            )

        assert "orders" in exc.value.messages
        assert current_domain.repository_for(DeliveryOrder).get(order_id).bordereau_id is None

    def test_agents_cannot_create(self, register_order):
        register_order("CMD-1")
        with pytest.raises(Forbidden):
            current_domain.process(
                CreateBordereau(
                    code="BRD-1000",
                    order_identifiers=json.dumps(["CMD-1"]),
                    actor_role="delivery_man",
                ),
                asynchronous=False,
            )

    def test_unknown_order_rejected(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(
                CreateBordereau(code="BRD-1000", order_identifiers=json.dumps(["CMD-404"]), actor_role="admin"),
                asynchronous=False,
            )


class TestClaimBordereau:
    def test_one_scan_assigns_every_order(self, create_bordereau):
        create_bordereau("BRD-1001", ["CMD-1", "CMD-2", "CMD-3"])

        _claim("BRD-1001", "agent-7")

        bordereau, orders = _orders_of("BRD-1001")
        assert bordereau.delivery_man_id == "agent-7"
        assert bordereau.status == BordereauStatus.IN_DELIVERY.value
        assert bordereau.total_cents == 15000
        assert bordereau.claimed_at is not None
        for order in orders:
            assert order.assigned_agent_id == "agent-7"
            assert order.status == OrderStatus.ASSIGNED.value
            assert order.assigned_at is not None

    def test_reclaim_by_holder_is_a_no_op(self, create_bordereau):
        create_bordereau("BRD-1001", ["CMD-1"])
        _claim("BRD-1001", "agent-7")
        first, _ = _orders_of("BRD-1001")

        _claim("BRD-1001", "agent-7")

        again, _ = _orders_of("BRD-1001")
        assert again.claimed_at == first.claimed_at

    def test_second_agent_gets_conflict(self, create_bordereau):
        create_bordereau("BRD-1001", ["CMD-1", "CMD-2"])
        _claim("BRD-1001", "agent-7")

        with pytest.raises(ClaimConflict):
            _claim("BRD-1001", "agent-8")

        _, orders = _orders_of("BRD-1001")
        assert {o.assigned_agent_id for o in orders} == {"agent-7"}

    def test_pre_assigned_order_blocks_the_whole_manifest(self, create_bordereau):
        create_bordereau("BRD-1001", ["CMD-1", "CMD-2", "CMD-3"])
        current_domain.process(
            ClaimOrder(identifier="CMD-2", agent_id="agent-9", actor_role="delivery_man"),
            asynchronous=False,
        )

        with pytest.raises(ClaimConflict):
            _claim("BRD-1001", "agent-7")

        bordereau, orders = _orders_of("BRD-1001")
        assert bordereau.delivery_man_id is None
        assert bordereau.status == BordereauStatus.PENDING.value
        by_number = {o.order_number: o for o in orders}
        assert by_number["CMD-1"].assigned_agent_id is None
        assert by_number["CMD-2"].assigned_agent_id == "agent-9"
        assert by_number["CMD-3"].assigned_agent_id is None

    def test_unknown_code_is_not_found(self):
        with pytest.raises(ObjectNotFoundError):
            _claim("BRD-404", "agent-7")

    def test_only_agents_claim(self, create_bordereau):
        create_bordereau("BRD-1001", ["CMD-1"])
        with pytest.raises(Forbidden):
            _claim("BRD-1001", "manager-1", role="manager")


class TestReassignBordereau:
    def _reassign(self, code, agent_id, role="admin"):
        return current_domain.process(
            ReassignBordereau(code=code, agent_id=agent_id, actor_id="admin-1", actor_role=role),
            asynchronous=False,
        )

    def test_moves_open_orders_to_new_agent(self, create_bordereau):
        create_bordereau("BRD-1001", ["CMD-1", "CMD-2"])
        _claim("BRD-1001", "agent-7")
        _, orders = _orders_of("BRD-1001")
        current_domain.process(
            MarkDelivered(order_id=str(orders[0].id), actor_id="agent-7", actor_role="delivery_man"),
            asynchronous=False,
        )

        self._reassign("BRD-1001", "agent-8")

        bordereau, orders = _orders_of("BRD-1001")
        assert bordereau.delivery_man_id == "agent-8"
        by_number = {o.order_number: o for o in orders}
        # Delivered orders keep the agent who delivered them
        assert by_number["CMD-1"].assigned_agent_id == "agent-7"
        assert by_number["CMD-2"].assigned_agent_id == "agent-8"

    def test_unclaimed_bordereau_cannot_be_reassigned(self, create_bordereau):
        create_bordereau("BRD-1001", ["CMD-1"])
        with pytest.raises(ValidationError):
            self._reassign("BRD-1001", "agent-8")

    def test_resolved_bordereau_cannot_be_reassigned(self, create_bordereau):
        create_bordereau("BRD-1001", ["CMD-1"])
        _claim("BRD-1001", "agent-7")
        _, orders = _orders_of("BRD-1001")
        current_domain.process(
            MarkDelivered(order_id=str(orders[0].id), actor_id="agent-7", actor_role="delivery_man"),
            asynchronous=False,
        )

        with pytest.raises(ClaimConflict):
            self._reassign("BRD-1001", "agent-8")

    def test_agents_cannot_reassign(self, create_bordereau):
        create_bordereau("BRD-1001", ["CMD-1"])
        _claim("BRD-1001", "agent-7")
        with pytest.raises(Forbidden):
            self._reassign("BRD-1001", "agent-8", role="delivery_man")
