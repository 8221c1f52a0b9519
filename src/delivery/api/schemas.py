"""Pydantic API schemas for the Delivery domain.

These are the external API contracts, exchanged as camelCase JSON and kept
separate from domain commands. Money travels as two-digit decimal strings.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from delivery.analytics.stats import AgentStats
from delivery.bordereau.bordereau import Bordereau
from delivery.deposit.balance import AgentFinancialSnapshot
from delivery.deposit.deposit import Deposit
from delivery.money import from_cents
from delivery.order.order import DeliveryOrder, PaymentMethod


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class RecipientRequest(CamelModel):
    name: str
    phone: str
    address: str | None = None
    city: str | None = None
    region: str | None = None


class OrderLineRequest(CamelModel):
    product_id: str
    label: str | None = None
    quantity: int = Field(ge=1)
    unit_price: Decimal = Field(ge=0)


class RegisterOrderRequest(CamelModel):
    order_number: str
    recipient: RecipientRequest
    lines: list[OrderLineRequest] = []
    total_amount: Decimal
    payment_method: str = PaymentMethod.CASH_ON_DELIVERY.value
    organization_id: str | None = None
    supplier_id: str | None = None
    status: str | None = None


class ClaimOrderRequest(CamelModel):
    order_identifier: str


class ClaimBordereauRequest(CamelModel):
    code: str


class CreateBordereauRequest(CamelModel):
    code: str
    order_identifiers: list[str]
    organization_id: str | None = None
    status: str | None = None


class ReassignBordereauRequest(CamelModel):
    delivery_man_id: str


class StatusUpdateRequest(CamelModel):
    status: str
    note: str | None = None


class DeliverRequest(CamelModel):
    note: str | None = None


class DepositRequest(CamelModel):
    amount: Decimal
    notes: str | None = None
    date: datetime | None = None
    delivery_man_id: str | None = None


class ResolveDepositRequest(CamelModel):
    status: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class IdResponse(CamelModel):
    id: str


class RecipientResponse(CamelModel):
    name: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    region: str | None = None


class StatusChangeResponse(CamelModel):
    from_status: str
    to_status: str
    note: str | None = None
    changed_by: str
    changed_at: datetime


class OrderResponse(CamelModel):
    id: str
    order_number: str
    status: str
    total_amount: Decimal
    payment_method: str | None = None
    recipient: RecipientResponse | None = None
    delivery_man_id: str | None = None
    assigned_at: datetime | None = None
    bordereau_id: str | None = None
    organization_id: str | None = None
    supplier_id: str | None = None
    last_note: str | None = None
    resolved_at: datetime | None = None
    status_history: list[StatusChangeResponse] = []

    @classmethod
    def from_aggregate(cls, order: DeliveryOrder) -> "OrderResponse":
        recipient = order.recipient
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            status=order.status,
            total_amount=from_cents(order.total_cents),
            payment_method=order.payment_method,
            recipient=RecipientResponse(
                name=recipient.name,
                phone=recipient.phone,
                address=recipient.address,
                city=recipient.city,
                region=recipient.region,
            )
            if recipient
            else None,
            delivery_man_id=str(order.assigned_agent_id) if order.assigned_agent_id else None,
            assigned_at=order.assigned_at,
            bordereau_id=str(order.bordereau_id) if order.bordereau_id else None,
            organization_id=str(order.organization_id) if order.organization_id else None,
            supplier_id=str(order.supplier_id) if order.supplier_id else None,
            last_note=order.last_note,
            resolved_at=order.resolved_at,
            status_history=[
                StatusChangeResponse(
                    from_status=change.from_status,
                    to_status=change.to_status,
                    note=change.note,
                    changed_by=str(change.changed_by),
                    changed_at=change.changed_at,
                )
                for change in sorted(order.status_history or [], key=lambda c: c.changed_at)
            ],
        )


class OrderEnvelope(CamelModel):
    order: OrderResponse


class OrderListResponse(CamelModel):
    orders: list[OrderResponse]


class BordereauResponse(CamelModel):
    id: str
    code: str
    status: str
    total_amount: Decimal
    delivery_man_id: str | None = None
    organization_id: str | None = None
    claimed_at: datetime | None = None
    resolved: bool = False
    orders: list[OrderResponse] = []

    @classmethod
    def from_aggregate(cls, bordereau: Bordereau, orders: list[DeliveryOrder]) -> "BordereauResponse":
        return cls(
            id=str(bordereau.id),
            code=bordereau.code,
            status=bordereau.status,
            total_amount=from_cents(bordereau.total_cents),
            delivery_man_id=str(bordereau.delivery_man_id) if bordereau.delivery_man_id else None,
            organization_id=str(bordereau.organization_id) if bordereau.organization_id else None,
            claimed_at=bordereau.claimed_at,
            resolved=Bordereau.is_resolved(orders),
            orders=[OrderResponse.from_aggregate(order) for order in orders],
        )


class BordereauEnvelope(CamelModel):
    bordereau: BordereauResponse


class DepositResponse(CamelModel):
    id: str
    delivery_man_id: str
    amount: Decimal
    status: str
    source: str
    date: datetime | None = None
    notes: str | None = None
    collected_by: str | None = None
    confirmed_by: str | None = None
    rejected_by: str | None = None
    resolved_at: datetime | None = None

    @classmethod
    def from_aggregate(cls, deposit: Deposit) -> "DepositResponse":
        return cls(
            id=str(deposit.id),
            delivery_man_id=str(deposit.delivery_man_id),
            amount=from_cents(deposit.amount_cents),
            status=deposit.status,
            source=deposit.source,
            date=deposit.date,
            notes=deposit.notes,
            collected_by=str(deposit.collected_by) if deposit.collected_by else None,
            confirmed_by=str(deposit.confirmed_by) if deposit.confirmed_by else None,
            rejected_by=str(deposit.rejected_by) if deposit.rejected_by else None,
            resolved_at=deposit.resolved_at,
        )


class DepositListResponse(CamelModel):
    deposits: list[DepositResponse]


class BalanceResponse(CamelModel):
    delivery_man_id: str
    total_collected: Decimal
    total_deposited: Decimal
    pending_amount: Decimal
    balance: Decimal

    @classmethod
    def from_snapshot(cls, snapshot: AgentFinancialSnapshot) -> "BalanceResponse":
        return cls(
            delivery_man_id=snapshot.delivery_man_id,
            total_collected=snapshot.total_collected,
            total_deposited=snapshot.total_deposited,
            pending_amount=snapshot.pending_amount,
            balance=snapshot.balance,
        )


class AgentStatsResponse(CamelModel):
    delivery_man_id: str
    delivered: int
    pending: int
    returned: int
    total_assigned: int
    total_shipping_earnings: Decimal
    total_cash_collected: Decimal
    success_rate: float

    @classmethod
    def from_stats(cls, stats: AgentStats) -> "AgentStatsResponse":
        return cls(
            delivery_man_id=stats.agent_id,
            delivered=stats.delivered,
            pending=stats.pending,
            returned=stats.returned,
            total_assigned=stats.total_assigned,
            total_shipping_earnings=stats.total_shipping_earnings,
            total_cash_collected=stats.total_cash_collected,
            success_rate=stats.success_rate,
        )


class FleetStatsResponse(CamelModel):
    agents: list[AgentStatsResponse]


class ScanResponse(CamelModel):
    kind: str
    code: str
    bordereau: BordereauResponse | None = None
    order: OrderResponse | None = None
