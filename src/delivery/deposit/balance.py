"""Agent financial snapshot, derived fresh from the ledger on every read.

    total_collected  Σ totals of the agent's delivered orders
    total_deposited  Σ confirmed deposits
    pending_amount   Σ deposits still awaiting a decision
    balance          total_collected − total_deposited

Pending deposits never reduce the balance.
"""

from dataclasses import dataclass
from decimal import Decimal

from protean.utils.globals import current_domain

from delivery.access import is_staff
from delivery.deposit.deposit import Deposit, DepositStatus
from delivery.errors import Forbidden
from delivery.money import from_cents
from delivery.order.order import DeliveryOrder, OrderStatus


@dataclass(frozen=True)
class AgentFinancialSnapshot:
    delivery_man_id: str
    collected_cents: int
    deposited_cents: int
    pending_cents: int

    @property
    def balance_cents(self) -> int:
        return self.collected_cents - self.deposited_cents

    @property
    def total_collected(self) -> Decimal:
        return from_cents(self.collected_cents)

    @property
    def total_deposited(self) -> Decimal:
        return from_cents(self.deposited_cents)

    @property
    def pending_amount(self) -> Decimal:
        return from_cents(self.pending_cents)

    @property
    def balance(self) -> Decimal:
        return from_cents(self.balance_cents)


def snapshot_for(delivery_man_id: str) -> AgentFinancialSnapshot:
    delivered = current_domain.repository_for(DeliveryOrder).find_many(
        assigned_agent_id=delivery_man_id,
        status=OrderStatus.DELIVERED.value,
    )
    deposits = current_domain.repository_for(Deposit).for_agent(delivery_man_id)

    return AgentFinancialSnapshot(
        delivery_man_id=delivery_man_id,
        collected_cents=sum(order.total_cents for order in delivered),
        deposited_cents=sum(d.amount_cents for d in deposits if d.status == DepositStatus.CONFIRMED.value),
        pending_cents=sum(d.amount_cents for d in deposits if d.status == DepositStatus.PENDING.value),
    )


def balance_for(actor_id: str, actor_role: str | None, delivery_man_id: str | None = None) -> AgentFinancialSnapshot:
    """Snapshot for ``delivery_man_id`` (defaults to the actor) if the actor may see it."""
    target = delivery_man_id or actor_id
    if str(target) != str(actor_id) and not is_staff(actor_role):
        raise Forbidden({"delivery_man_id": ["You may only view your own balance"]})
    return snapshot_for(str(target))
