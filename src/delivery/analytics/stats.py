"""Per-agent and fleet performance, computed on read.

Counts are taken over orders assigned to the agent, optionally limited to a
period on the assignment date:

    delivered              orders in Livré
    pending                orders in En cours de livraison or NRP
    returned               orders in Retour or Annulé
    totalAssigned          every order the agent holds or held
    totalShippingEarnings  delivered × per-order rate
    totalCashCollected     Σ totals of delivered orders
    successRate            delivered / (delivered + returned), 0 without outcomes
"""

import os
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from protean.utils.globals import current_domain

from delivery.access import is_staff
from delivery.errors import Forbidden
from delivery.money import from_cents, rate_to_cents
from delivery.order.order import ACTIVE_DELIVERY_STATUSES, DeliveryOrder, OrderStatus

DEFAULT_RATE_PER_ORDER = "7.00"

_RETURNED_STATUSES = {OrderStatus.RETURNED.value, OrderStatus.CANCELLED.value}
_PENDING_STATUSES = {s.value for s in ACTIVE_DELIVERY_STATUSES}


def rate_per_order_cents() -> int:
    return rate_to_cents(os.environ.get("DELIVERY_RATE_PER_ORDER", DEFAULT_RATE_PER_ORDER))


@dataclass(frozen=True)
class Period:
    start: date | None = None
    end: date | None = None

    def contains(self, order: DeliveryOrder) -> bool:
        if self.start is None and self.end is None:
            return True
        if order.assigned_at is None:
            return False
        day = order.assigned_at.date()
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True


@dataclass(frozen=True)
class AgentStats:
    agent_id: str
    delivered: int
    pending: int
    returned: int
    total_assigned: int
    shipping_earnings_cents: int
    cash_collected_cents: int

    @property
    def total_shipping_earnings(self) -> Decimal:
        return from_cents(self.shipping_earnings_cents)

    @property
    def total_cash_collected(self) -> Decimal:
        return from_cents(self.cash_collected_cents)

    @property
    def success_rate(self) -> float:
        outcomes = self.delivered + self.returned
        return self.delivered / outcomes if outcomes else 0.0


def _aggregate(agent_id: str, orders: list[DeliveryOrder], rate_cents: int) -> AgentStats:
    delivered = [o for o in orders if o.status == OrderStatus.DELIVERED.value]
    return AgentStats(
        agent_id=agent_id,
        delivered=len(delivered),
        pending=sum(1 for o in orders if o.status in _PENDING_STATUSES),
        returned=sum(1 for o in orders if o.status in _RETURNED_STATUSES),
        total_assigned=len(orders),
        shipping_earnings_cents=len(delivered) * rate_cents,
        cash_collected_cents=sum(o.total_cents for o in delivered),
    )


def agent_stats(agent_id: str, period: Period | None = None) -> AgentStats:
    period = period or Period()
    orders = current_domain.repository_for(DeliveryOrder).assigned_to(agent_id)
    return _aggregate(agent_id, [o for o in orders if period.contains(o)], rate_per_order_cents())


def fleet_stats(period: Period | None = None) -> list[AgentStats]:
    """Stats for every agent holding at least one order, busiest first."""
    period = period or Period()
    rate_cents = rate_per_order_cents()

    by_agent: dict[str, list[DeliveryOrder]] = {}
    for order in current_domain.repository_for(DeliveryOrder).with_any_agent():
        if period.contains(order):
            by_agent.setdefault(str(order.assigned_agent_id), []).append(order)

    stats = [_aggregate(agent_id, orders, rate_cents) for agent_id, orders in by_agent.items()]
    return sorted(stats, key=lambda s: (-s.pending, s.agent_id))


def stats_for(
    actor_id: str,
    actor_role: str | None,
    agent_id: str | None = None,
    period: Period | None = None,
) -> AgentStats | list[AgentStats]:
    """Authorized entry point used by the API.

    Agents only ever see their own numbers. Staff see a single agent when
    ``agent_id`` is given and the whole fleet otherwise.
    """
    if is_staff(actor_role):
        return agent_stats(agent_id, period) if agent_id else fleet_stats(period)

    if agent_id and str(agent_id) != str(actor_id):
        raise Forbidden({"agent_id": ["You may only view your own statistics"]})
    return agent_stats(str(actor_id), period)
