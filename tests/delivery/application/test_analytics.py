"""Tests for per-agent and fleet delivery analytics."""

from datetime import UTC, datetime, timedelta

import pytest
from delivery.analytics.stats import Period, agent_stats, fleet_stats, stats_for
from delivery.errors import Forbidden
from delivery.order.claim import ClaimOrder
from delivery.order.order import OrderStatus
from delivery.order.transition import ApplyTransition
from protean import current_domain


@pytest.fixture()
def assign(register_order):
    def _assign(order_number, agent_id, total="50.00", outcome=None, note=None):
        order_id = register_order(order_number, total=total)
        current_domain.process(
            ClaimOrder(identifier=order_number, agent_id=agent_id, actor_role="delivery_man"),
            asynchronous=False,
        )
        if outcome:
            current_domain.process(
                ApplyTransition(
                    order_id=order_id,
                    actor_id=agent_id,
                    actor_role="delivery_man",
                    target_status=outcome,
                    note=note,
                ),
                asynchronous=False,
            )
        return order_id

    return _assign


@pytest.fixture()
def workload(assign):
    assign("CMD-1", "agent-1", total="100.00", outcome=OrderStatus.DELIVERED.value)
    assign("CMD-2", "agent-1", total="60.00", outcome=OrderStatus.DELIVERED.value)
    assign("CMD-3", "agent-1", outcome=OrderStatus.RETURNED.value, note="Refused")
    assign("CMD-4", "agent-1")
    assign("CMD-5", "agent-2")
    assign("CMD-6", "agent-2", outcome=OrderStatus.NOT_RESPONDING.value, note="No answer")


class TestAgentStats:
    def test_counts_and_money(self, workload):
        stats = agent_stats("agent-1")

        assert stats.delivered == 2
        assert stats.returned == 1
        assert stats.pending == 1
        assert stats.total_assigned == 4
        assert str(stats.total_cash_collected) == "160.00"
        assert str(stats.total_shipping_earnings) == "14.00"
        assert stats.success_rate == pytest.approx(2 / 3)

    def test_rate_comes_from_environment(self, workload, monkeypatch):
        monkeypatch.setenv("DELIVERY_RATE_PER_ORDER", "8.50")
        assert str(agent_stats("agent-1").total_shipping_earnings) == "17.00"

    def test_no_outcomes_means_zero_success_rate(self, workload):
        stats = agent_stats("agent-2")
        assert stats.pending == 2
        assert stats.success_rate == 0.0

    def test_unknown_agent_has_empty_stats(self):
        stats = agent_stats("agent-404")
        assert stats.total_assigned == 0
        assert stats.cash_collected_cents == 0

    def test_period_filters_on_assignment_date(self, workload):
        today = datetime.now(UTC).date()
        assert agent_stats("agent-1", Period(start=today, end=today)).total_assigned == 4
        tomorrow = today + timedelta(days=1)
        assert agent_stats("agent-1", Period(start=tomorrow)).total_assigned == 0


class TestFleetStats:
    def test_one_row_per_agent_busiest_first(self, workload):
        rows = fleet_stats()
        assert [row.agent_id for row in rows] == ["agent-2", "agent-1"]


class TestStatsFor:
    def test_agent_sees_own_numbers(self, workload):
        assert stats_for("agent-1", "delivery_man").agent_id == "agent-1"

    def test_agent_cannot_see_another_agent(self, workload):
        with pytest.raises(Forbidden):
            stats_for("agent-1", "delivery_man", agent_id="agent-2")

    def test_staff_sees_one_agent(self, workload):
        assert stats_for("admin-1", "admin", agent_id="agent-2").agent_id == "agent-2"

    def test_staff_sees_fleet_by_default(self, workload):
        rows = stats_for("manager-1", "manager")
        assert {row.agent_id for row in rows} == {"agent-1", "agent-2"}
