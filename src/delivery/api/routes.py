"""FastAPI routes for the Delivery domain."""

import json
from datetime import date

from fastapi import APIRouter, Depends, Query
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from delivery.access import require_staff
from delivery.analytics.stats import AgentStats, Period, stats_for
from delivery.api.auth import Actor, current_actor
from delivery.api.schemas import (
    AgentStatsResponse,
    BalanceResponse,
    BordereauEnvelope,
    BordereauResponse,
    ClaimBordereauRequest,
    ClaimOrderRequest,
    CreateBordereauRequest,
    DeliverRequest,
    DepositListResponse,
    DepositRequest,
    DepositResponse,
    FleetStatsResponse,
    IdResponse,
    OrderEnvelope,
    OrderListResponse,
    OrderResponse,
    ReassignBordereauRequest,
    RegisterOrderRequest,
    ResolveDepositRequest,
    ScanResponse,
    StatusUpdateRequest,
)
from delivery.bordereau.bordereau import Bordereau
from delivery.bordereau.claim import ClaimBordereau
from delivery.bordereau.creation import CreateBordereau
from delivery.bordereau.reassignment import ReassignBordereau
from delivery.deposit.balance import balance_for
from delivery.deposit.declaration import DeclareDeposit, RecordManualDeposit
from delivery.deposit.deposit import Deposit
from delivery.deposit.resolution import ResolveDeposit
from delivery.errors import Forbidden
from delivery.money import to_cents
from delivery.order.claim import ClaimOrder
from delivery.order.order import DeliveryOrder
from delivery.order.registration import RegisterOrder
from delivery.order.transition import ApplyTransition, MarkDelivered
from delivery.order.unassign import UnassignOrder
from delivery.scan.lookup import ScanKind, lookup


def _order_response(order_id: str) -> OrderEnvelope:
    order = current_domain.repository_for(DeliveryOrder).get(order_id)
    return OrderEnvelope(order=OrderResponse.from_aggregate(order))


def _bordereau_response(bordereau: Bordereau) -> BordereauResponse:
    order_repo = current_domain.repository_for(DeliveryOrder)
    orders = [order_repo.get(order_id) for order_id in bordereau.order_id_list]
    return BordereauResponse.from_aggregate(bordereau, orders)


# ---------------------------------------------------------------------------
# Order registration
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=IdResponse)
async def register_order(body: RegisterOrderRequest, actor: Actor = Depends(current_actor)) -> IdResponse:
    """Register a finished order with delivery (order-creation subsystem hook)."""
    require_staff(actor.role, "register orders")
    lines = [
        {
            "product_id": line.product_id,
            "label": line.label,
            "quantity": line.quantity,
            "unit_price_cents": to_cents(line.unit_price, field="unit_price", allow_zero=True),
        }
        for line in body.lines
    ]
    command = RegisterOrder(
        order_number=body.order_number,
        recipient=json.dumps(body.recipient.model_dump()),
        lines=json.dumps(lines),
        total_cents=to_cents(body.total_amount, field="total_amount", allow_zero=True),
        payment_method=body.payment_method,
        organization_id=body.organization_id or actor.organization_id,
        supplier_id=body.supplier_id,
        **({"status": body.status} if body.status else {}),
    )
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


# ---------------------------------------------------------------------------
# Internal delivery: claiming, outcomes, agent views, analytics
# ---------------------------------------------------------------------------
delivery_router = APIRouter(prefix="/internal-delivery", tags=["internal-delivery"])


@delivery_router.post("/assign", response_model=OrderEnvelope)
async def claim_order(body: ClaimOrderRequest, actor: Actor = Depends(current_actor)) -> OrderEnvelope:
    """Claim an order by scanning its number or id."""
    command = ClaimOrder(
        identifier=body.order_identifier,
        agent_id=actor.user_id,
        actor_role=actor.role,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return _order_response(order_id)


@delivery_router.put("/{order_id}/deliver", response_model=OrderEnvelope)
async def mark_delivered(
    order_id: str,
    body: DeliverRequest | None = None,
    actor: Actor = Depends(current_actor),
) -> OrderEnvelope:
    """Mark an order delivered."""
    command = MarkDelivered(
        order_id=order_id,
        actor_id=actor.user_id,
        actor_role=actor.role,
        note=body.note if body else None,
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id)


@delivery_router.put("/{order_id}/status", response_model=OrderEnvelope)
async def update_status(
    order_id: str,
    body: StatusUpdateRequest,
    actor: Actor = Depends(current_actor),
) -> OrderEnvelope:
    """Record a delivery outcome such as NRP or Retour."""
    command = ApplyTransition(
        order_id=order_id,
        actor_id=actor.user_id,
        actor_role=actor.role,
        target_status=body.status,
        note=body.note,
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id)


@delivery_router.put("/{order_id}/unassign", response_model=OrderEnvelope)
async def unassign_order(order_id: str, actor: Actor = Depends(current_actor)) -> OrderEnvelope:
    """Release an individually claimed order (admin override)."""
    command = UnassignOrder(order_id=order_id, actor_id=actor.user_id, actor_role=actor.role)
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id)


@delivery_router.get("/my-deliveries", response_model=OrderListResponse)
async def my_deliveries(actor: Actor = Depends(current_actor)) -> OrderListResponse:
    """Orders the caller is currently delivering."""
    orders = current_domain.repository_for(DeliveryOrder).active_for(actor.user_id)
    return OrderListResponse(orders=[OrderResponse.from_aggregate(o) for o in orders])


@delivery_router.get("/my-history", response_model=OrderListResponse)
async def my_history(actor: Actor = Depends(current_actor)) -> OrderListResponse:
    """Orders the caller has brought to a final outcome, most recent first."""
    orders = current_domain.repository_for(DeliveryOrder).history_for(actor.user_id)
    return OrderListResponse(orders=[OrderResponse.from_aggregate(o) for o in orders])


@delivery_router.get("/analytics", response_model=AgentStatsResponse | FleetStatsResponse)
async def analytics(
    delivery_man_id: str | None = Query(default=None, alias="deliveryManId"),
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    actor: Actor = Depends(current_actor),
) -> AgentStatsResponse | FleetStatsResponse:
    """Per-agent stats, or fleet stats for staff when no agent is given."""
    if start and end and start > end:
        raise ValidationError({"period": ["start must not be after end"]})
    result = stats_for(actor.user_id, actor.role, delivery_man_id, Period(start=start, end=end))
    if isinstance(result, AgentStats):
        return AgentStatsResponse.from_stats(result)
    return FleetStatsResponse(agents=[AgentStatsResponse.from_stats(s) for s in result])


# ---------------------------------------------------------------------------
# Bordereaux
# ---------------------------------------------------------------------------
bordereau_router = APIRouter(prefix="/bordereaux", tags=["bordereaux"])


@bordereau_router.post("", status_code=201, response_model=IdResponse)
async def create_bordereau(body: CreateBordereauRequest, actor: Actor = Depends(current_actor)) -> IdResponse:
    """Group orders under a scannable manifest code."""
    command = CreateBordereau(
        code=body.code,
        order_identifiers=json.dumps(body.order_identifiers),
        organization_id=body.organization_id or actor.organization_id,
        actor_role=actor.role,
        **({"status": body.status} if body.status else {}),
    )
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@bordereau_router.post("/assign", response_model=BordereauEnvelope)
async def claim_bordereau(body: ClaimBordereauRequest, actor: Actor = Depends(current_actor)) -> BordereauEnvelope:
    """Claim every order of a manifest in one scan."""
    command = ClaimBordereau(code=body.code, agent_id=actor.user_id, actor_role=actor.role)
    bordereau_id = current_domain.process(command, asynchronous=False)
    bordereau = current_domain.repository_for(Bordereau).get(bordereau_id)
    return BordereauEnvelope(bordereau=_bordereau_response(bordereau))


@bordereau_router.get("/code/{code}", response_model=BordereauEnvelope)
async def preview_bordereau(code: str, actor: Actor = Depends(current_actor)) -> BordereauEnvelope:
    """Preview a manifest before claiming it."""
    bordereau = current_domain.repository_for(Bordereau).get_by_code(code)
    return BordereauEnvelope(bordereau=_bordereau_response(bordereau))


@bordereau_router.put("/{code}/reassign", response_model=BordereauEnvelope)
async def reassign_bordereau(
    code: str,
    body: ReassignBordereauRequest,
    actor: Actor = Depends(current_actor),
) -> BordereauEnvelope:
    """Move a claimed manifest to another agent (admin override)."""
    command = ReassignBordereau(
        code=code,
        agent_id=body.delivery_man_id,
        actor_id=actor.user_id,
        actor_role=actor.role,
    )
    bordereau_id = current_domain.process(command, asynchronous=False)
    bordereau = current_domain.repository_for(Bordereau).get(bordereau_id)
    return BordereauEnvelope(bordereau=_bordereau_response(bordereau))


# ---------------------------------------------------------------------------
# Deposits
# ---------------------------------------------------------------------------
deposit_router = APIRouter(prefix="/deposits", tags=["deposits"])


@deposit_router.post("", status_code=201, response_model=DepositResponse)
async def create_deposit(body: DepositRequest, actor: Actor = Depends(current_actor)) -> DepositResponse:
    """Agents declare a pending deposit; staff record a confirmed one for an agent."""
    amount_cents = to_cents(body.amount)

    if body.delivery_man_id:
        if not actor.is_staff:
            raise Forbidden({"delivery_man_id": ["Only admins may record deposits for another agent"]})
        command = RecordManualDeposit(
            admin_id=actor.user_id,
            actor_role=actor.role,
            delivery_man_id=body.delivery_man_id,
            amount_cents=amount_cents,
            notes=body.notes,
            date=body.date,
            organization_id=actor.organization_id,
        )
    else:
        if actor.is_staff:
            raise ValidationError({"delivery_man_id": ["deliveryManId is required when recording a deposit"]})
        command = DeclareDeposit(
            delivery_man_id=actor.user_id,
            actor_role=actor.role,
            amount_cents=amount_cents,
            notes=body.notes,
            date=body.date,
            organization_id=actor.organization_id,
        )

    deposit_id = current_domain.process(command, asynchronous=False)
    deposit = current_domain.repository_for(Deposit).get(deposit_id)
    return DepositResponse.from_aggregate(deposit)


@deposit_router.get("", response_model=DepositListResponse)
async def list_deposits(
    delivery_man_id: str | None = Query(default=None, alias="deliveryManId"),
    status: str | None = Query(default=None),
    actor: Actor = Depends(current_actor),
) -> DepositListResponse:
    """All deposits, optionally for one agent or status (staff only)."""
    require_staff(actor.role, "list all deposits")
    deposits = current_domain.repository_for(Deposit).listing(delivery_man_id=delivery_man_id, status=status)
    return DepositListResponse(deposits=[DepositResponse.from_aggregate(d) for d in deposits])


@deposit_router.get("/my-deposits", response_model=DepositListResponse)
async def my_deposits(actor: Actor = Depends(current_actor)) -> DepositListResponse:
    deposits = current_domain.repository_for(Deposit).for_agent(actor.user_id)
    return DepositListResponse(deposits=[DepositResponse.from_aggregate(d) for d in deposits])


@deposit_router.get("/my-status", response_model=BalanceResponse)
async def my_balance(actor: Actor = Depends(current_actor)) -> BalanceResponse:
    """The caller's cash position."""
    return BalanceResponse.from_snapshot(balance_for(actor.user_id, actor.role))


@deposit_router.get("/status/{user_id}", response_model=BalanceResponse)
async def agent_balance(user_id: str, actor: Actor = Depends(current_actor)) -> BalanceResponse:
    """An agent's cash position (staff, or the agent themselves)."""
    return BalanceResponse.from_snapshot(balance_for(actor.user_id, actor.role, user_id))


@deposit_router.put("/{deposit_id}/confirm", response_model=DepositResponse)
async def resolve_deposit(
    deposit_id: str,
    body: ResolveDepositRequest,
    actor: Actor = Depends(current_actor),
) -> DepositResponse:
    """Confirm or reject a pending deposit."""
    command = ResolveDeposit(
        deposit_id=deposit_id,
        admin_id=actor.user_id,
        actor_role=actor.role,
        decision=body.status,
    )
    current_domain.process(command, asynchronous=False)
    deposit = current_domain.repository_for(Deposit).get(deposit_id)
    return DepositResponse.from_aggregate(deposit)


# ---------------------------------------------------------------------------
# Scan lookup
# ---------------------------------------------------------------------------
scan_router = APIRouter(prefix="/scan", tags=["scan"])


@scan_router.get("/{code}", response_model=ScanResponse)
async def scan(code: str, actor: Actor = Depends(current_actor)) -> ScanResponse:
    """Tell the scanner whether ``code`` is a bordereau or an order."""
    result = lookup(code)
    if result.kind == ScanKind.BORDEREAU:
        return ScanResponse(kind=result.kind, code=code, bordereau=_bordereau_response(result.bordereau))
    return ScanResponse(kind=result.kind, code=code, order=OrderResponse.from_aggregate(result.order))
