"""Forwards domain events to the socket transport.

Publishing is best effort: a failing adapter is logged and never undoes or
fails the command that raised the event.
"""

import structlog
from protean.utils.mixins import handle

from delivery.bordereau.bordereau import Bordereau
from delivery.bordereau.events import BordereauClaimed, BordereauReassigned
from delivery.deposit.deposit import Deposit
from delivery.deposit.events import DepositDeclared, DepositRecorded, DepositResolved
from delivery.domain import delivery
from delivery.money import from_cents
from delivery.order.events import (
    OrderClaimed,
    OrderReassigned,
    OrderRegistered,
    OrderStatusChanged,
    OrderUnassigned,
)
from delivery.order.order import DeliveryOrder
from delivery.realtime import get_publisher
from delivery.realtime.rooms import (
    DEPOSIT_UPDATED,
    NEW_ORDER,
    ORDER_READY,
    ORDER_STATUS_UPDATED,
    deposit_rooms,
    order_rooms,
)

logger = structlog.get_logger(__name__)


def _iso(value) -> str | None:
    return value.isoformat() if value else None


def _str(value) -> str | None:
    return str(value) if value else None


def publish(rooms: list[str], event: str, payload: dict) -> int:
    """Publish to each room; returns how many publications succeeded."""
    publisher = get_publisher()
    sent = 0
    for room in rooms:
        try:
            result = publisher.publish(room, event, payload)
        except Exception as exc:
            logger.error("Realtime publish failed", room=room, event_name=event, error=str(exc))
            continue
        if result.get("status") == "sent":
            sent += 1
        else:
            logger.warning(
                "Realtime publish not delivered",
                room=room,
                event_name=event,
                error=result.get("error", "Unknown publish error"),
            )
    return sent


@delivery.event_handler(part_of=DeliveryOrder)
class OrderRealtimeEmitter:
    @handle(OrderRegistered)
    def on_order_registered(self, event: OrderRegistered) -> None:
        publish(
            order_rooms(event.organization_id, event.supplier_id),
            NEW_ORDER,
            {
                "orderId": str(event.order_id),
                "orderNumber": event.order_number,
                "status": event.status,
                "totalAmount": str(from_cents(event.total_cents)),
                "createdAt": _iso(event.registered_at),
            },
        )

    @handle(OrderClaimed)
    def on_order_claimed(self, event: OrderClaimed) -> None:
        # Orders claimed through a bordereau are announced once by the bordereau
        if event.bordereau_id:
            return
        publish(
            order_rooms(event.organization_id, event.supplier_id, include_fleet=True),
            ORDER_READY,
            {
                "orderId": str(event.order_id),
                "orderNumber": event.order_number,
                "deliveryManId": str(event.agent_id),
                "claimedAt": _iso(event.claimed_at),
            },
        )

    @handle(OrderReassigned)
    def on_order_reassigned(self, event: OrderReassigned) -> None:
        publish(
            order_rooms(event.organization_id, include_fleet=True),
            ORDER_READY,
            {
                "orderId": str(event.order_id),
                "orderNumber": event.order_number,
                "deliveryManId": str(event.agent_id),
                "previousDeliveryManId": _str(event.previous_agent_id),
                "reassigned": True,
            },
        )

    @handle(OrderUnassigned)
    def on_order_unassigned(self, event: OrderUnassigned) -> None:
        publish(
            order_rooms(event.organization_id, include_fleet=True),
            ORDER_STATUS_UPDATED,
            {
                "orderId": str(event.order_id),
                "orderNumber": event.order_number,
                "deliveryManId": None,
                "previousDeliveryManId": str(event.previous_agent_id),
            },
        )

    @handle(OrderStatusChanged)
    def on_order_status_changed(self, event: OrderStatusChanged) -> None:
        publish(
            order_rooms(event.organization_id, event.supplier_id),
            ORDER_STATUS_UPDATED,
            {
                "orderId": str(event.order_id),
                "orderNumber": event.order_number,
                "from": event.from_status,
                "status": event.to_status,
                "note": event.note,
                "deliveryManId": _str(event.agent_id),
                "bordereauId": _str(event.bordereau_id),
                "bordereauResolved": bool(event.bordereau_resolved),
                "changedAt": _iso(event.changed_at),
            },
        )


@delivery.event_handler(part_of=Bordereau)
class BordereauRealtimeEmitter:
    @handle(BordereauClaimed)
    def on_bordereau_claimed(self, event: BordereauClaimed) -> None:
        publish(
            order_rooms(event.organization_id, include_fleet=True),
            ORDER_READY,
            {
                "bordereauId": str(event.bordereau_id),
                "code": event.code,
                "deliveryManId": str(event.agent_id),
                "orderCount": event.order_count,
                "totalAmount": str(from_cents(event.total_cents)),
                "claimedAt": _iso(event.claimed_at),
            },
        )

    @handle(BordereauReassigned)
    def on_bordereau_reassigned(self, event: BordereauReassigned) -> None:
        publish(
            order_rooms(event.organization_id, include_fleet=True),
            ORDER_READY,
            {
                "bordereauId": str(event.bordereau_id),
                "code": event.code,
                "deliveryManId": str(event.agent_id),
                "previousDeliveryManId": _str(event.previous_agent_id),
                "reassigned": True,
            },
        )


@delivery.event_handler(part_of=Deposit)
class DepositRealtimeEmitter:
    def _publish(self, event, status: str) -> None:
        publish(
            deposit_rooms(event.organization_id),
            DEPOSIT_UPDATED,
            {
                "depositId": str(event.deposit_id),
                "deliveryManId": str(event.delivery_man_id),
                "amount": str(from_cents(event.amount_cents)),
                "status": status,
            },
        )

    @handle(DepositDeclared)
    def on_deposit_declared(self, event: DepositDeclared) -> None:
        self._publish(event, "pending")

    @handle(DepositRecorded)
    def on_deposit_recorded(self, event: DepositRecorded) -> None:
        self._publish(event, "confirmed")

    @handle(DepositResolved)
    def on_deposit_resolved(self, event: DepositResolved) -> None:
        self._publish(event, event.status)
