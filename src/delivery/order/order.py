"""DeliveryOrder aggregate (CQRS): an order as seen by last-mile delivery.

Orders arrive from the order-creation subsystem in a pre-delivery status,
are claimed by exactly one delivery agent, and then move through delivery
outcomes until they reach a terminal status.

State Machine:
    En attente → Confirmé → En préparation → Expédié
    {Confirmé, En préparation, Expédié} → En cours de livraison   (claim only)
    Expédié → {Livré, Annulé, Remboursé}
    En cours de livraison → {Livré, NRP, Retour, Annulé}
    NRP → {En cours de livraison, Livré, Retour, Annulé}
    {En attente, Confirmé, En préparation} → Annulé
    Livré, Annulé, Retour, Remboursé are terminal.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text, ValueObject

from delivery.access import is_staff
from delivery.domain import delivery
from delivery.errors import ClaimConflict, Forbidden, InvalidTransition, TerminalStateError
from delivery.order.events import (
    OrderClaimed,
    OrderReassigned,
    OrderRegistered,
    OrderStatusChanged,
    OrderUnassigned,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "En attente"
    CONFIRMED = "Confirmé"
    PROCESSING = "En préparation"
    SHIPPED = "Expédié"
    ASSIGNED = "En cours de livraison"
    NOT_RESPONDING = "NRP"
    DELIVERED = "Livré"
    RETURNED = "Retour"
    CANCELLED = "Annulé"
    REFUNDED = "Remboursé"


class PaymentMethod(Enum):
    CASH_ON_DELIVERY = "cash_on_delivery"
    PREPAID = "prepaid"


TERMINAL_STATUSES = {
    OrderStatus.DELIVERED,
    OrderStatus.RETURNED,
    OrderStatus.CANCELLED,
    OrderStatus.REFUNDED,
}

# Statuses an order may be registered in
PRE_DELIVERY_STATUSES = {
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
}

# Statuses from which an unassigned order may be claimed
CLAIMABLE_STATUSES = {
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
}

# Orders an agent is currently working on
ACTIVE_DELIVERY_STATUSES = {
    OrderStatus.ASSIGNED,
    OrderStatus.NOT_RESPONDING,
}

# Outcomes that require the agent to explain what happened
_NOTE_REQUIRED = {
    OrderStatus.NOT_RESPONDING,
    OrderStatus.RETURNED,
}

_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.REFUNDED},
    OrderStatus.ASSIGNED: {
        OrderStatus.DELIVERED,
        OrderStatus.NOT_RESPONDING,
        OrderStatus.RETURNED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.NOT_RESPONDING: {
        OrderStatus.ASSIGNED,
        OrderStatus.DELIVERED,
        OrderStatus.RETURNED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.DELIVERED: set(),  # terminal
    OrderStatus.RETURNED: set(),  # terminal
    OrderStatus.CANCELLED: set(),  # terminal
    OrderStatus.REFUNDED: set(),  # terminal
}


def is_terminal(status: str) -> bool:
    return OrderStatus(status) in TERMINAL_STATUSES


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@delivery.value_object(part_of="DeliveryOrder")
class Recipient:
    """Who receives the parcel and where."""

    name = String(required=True, max_length=200)
    phone = String(required=True, max_length=30)
    address = String(max_length=500)
    city = String(max_length=100)
    region = String(max_length=100)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@delivery.entity(part_of="DeliveryOrder")
class OrderLine:
    product_id = Identifier(required=True)
    label = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price_cents = Integer(required=True, min_value=0)


@delivery.entity(part_of="DeliveryOrder")
class StatusChange:
    """One applied transition, kept for the order's audit trail."""

    from_status = String(required=True, max_length=50)
    to_status = String(required=True, max_length=50)
    note = String(max_length=1000)
    changed_by = Identifier(required=True)
    changed_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@delivery.aggregate
class DeliveryOrder:
    order_number = String(required=True, max_length=50, unique=True)
    recipient = ValueObject(Recipient)
    lines = HasMany(OrderLine)
    total_cents = Integer(required=True, min_value=0)
    payment_method = String(
        max_length=50,
        choices=PaymentMethod,
        default=PaymentMethod.CASH_ON_DELIVERY.value,
    )
    status = String(
        max_length=50,
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    assigned_agent_id = Identifier()
    assigned_at = DateTime()
    bordereau_id = Identifier()
    organization_id = Identifier()
    supplier_id = Identifier()
    last_note = Text()
    resolved_at = DateTime()
    status_history = HasMany(StatusChange)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def register(
        cls,
        order_number: str,
        recipient: dict,
        lines: list[dict],
        total_cents: int,
        payment_method: str = PaymentMethod.CASH_ON_DELIVERY.value,
        organization_id: str | None = None,
        supplier_id: str | None = None,
        status: str = OrderStatus.PENDING.value,
    ):
        """Register an order handed over by the order-creation subsystem."""
        if status not in {s.value for s in PRE_DELIVERY_STATUSES}:
            raise ValidationError({"status": [f"Orders cannot be registered as {status}"]})

        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            recipient=Recipient(**recipient),
            total_cents=total_cents,
            payment_method=payment_method,
            status=status,
            organization_id=organization_id,
            supplier_id=supplier_id,
            created_at=now,
            updated_at=now,
        )
        for line in lines:
            order.add_lines(OrderLine(**line))

        order.raise_(
            OrderRegistered(
                order_id=str(order.id),
                order_number=order_number,
                status=status,
                total_cents=total_cents,
                organization_id=organization_id,
                supplier_id=supplier_id,
                registered_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status)

    def is_held_by(self, agent_id: str) -> bool:
        return self.assigned_agent_id is not None and str(self.assigned_agent_id) == str(agent_id)

    def can_be_changed_by(self, actor_id: str, actor_role: str | None) -> bool:
        return is_staff(actor_role) or self.is_held_by(actor_id)

    # -------------------------------------------------------------------
    # Claiming
    # -------------------------------------------------------------------
    def assert_claimable_by(self, agent_id: str) -> None:
        """Raise ClaimConflict unless ``agent_id`` could take this order now."""
        if self.assigned_agent_id is not None and not self.is_held_by(agent_id):
            raise ClaimConflict({"order": [f"Order {self.order_number} is already assigned to another agent"]})
        if self.is_terminal:
            raise ClaimConflict({"order": [f"Order {self.order_number} has already been processed ({self.status})"]})
        if self.assigned_agent_id is None and OrderStatus(self.status) not in CLAIMABLE_STATUSES:
            raise ClaimConflict({"order": [f"Order {self.order_number} is not ready for delivery ({self.status})"]})

    def claim(self, agent_id: str, bordereau_id: str | None = None) -> bool:
        """Assign the order to ``agent_id``.

        Returns False, without raising an event, when the agent already holds
        the order.
        """
        self.assert_claimable_by(agent_id)
        if self.is_held_by(agent_id):
            return False

        now = datetime.now(UTC)
        previous = self.status
        self.assigned_agent_id = agent_id
        self.assigned_at = now
        if bordereau_id:
            self.bordereau_id = bordereau_id
        self._record_change(previous, OrderStatus.ASSIGNED.value, agent_id, None, now)
        self.raise_(
            OrderClaimed(
                order_id=str(self.id),
                order_number=self.order_number,
                agent_id=agent_id,
                previous_status=previous,
                bordereau_id=self.bordereau_id,
                organization_id=self.organization_id,
                supplier_id=self.supplier_id,
                claimed_at=now,
            )
        )
        return True

    def reassign(self, agent_id: str, reassigned_by: str) -> None:
        """Administrative override: move a non-terminal order to another agent."""
        if self.is_terminal:
            raise TerminalStateError({"status": [f"Order {self.order_number} is already {self.status}"]})
        if self.is_held_by(agent_id):
            return

        now = datetime.now(UTC)
        previous_agent = self.assigned_agent_id
        previous_status = self.status
        self.assigned_agent_id = agent_id
        self.assigned_at = now
        if OrderStatus(previous_status) not in ACTIVE_DELIVERY_STATUSES:
            self._record_change(previous_status, OrderStatus.ASSIGNED.value, reassigned_by, None, now)
        else:
            self.updated_at = now
        self.raise_(
            OrderReassigned(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_agent_id=previous_agent,
                agent_id=agent_id,
                bordereau_id=self.bordereau_id,
                organization_id=self.organization_id,
                reassigned_by=reassigned_by,
                reassigned_at=now,
            )
        )

    def unassign(self, unassigned_by: str) -> None:
        """Release the order back to the shipped pool."""
        if self.is_terminal:
            raise TerminalStateError({"status": [f"Order {self.order_number} is already {self.status}"]})
        if self.assigned_agent_id is None:
            raise InvalidTransition({"assigned_agent_id": [f"Order {self.order_number} is not assigned"]})
        if self.bordereau_id:
            raise InvalidTransition(
                {"bordereau": [f"Order {self.order_number} belongs to a bordereau; reassign the bordereau instead"]}
            )

        now = datetime.now(UTC)
        previous_agent = str(self.assigned_agent_id)
        self.assigned_agent_id = None
        self.assigned_at = None
        self._record_change(self.status, OrderStatus.SHIPPED.value, unassigned_by, None, now)
        self.raise_(
            OrderUnassigned(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_agent_id=previous_agent,
                organization_id=self.organization_id,
                unassigned_by=unassigned_by,
                unassigned_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target: OrderStatus, note: str | None) -> None:
        current = OrderStatus(self.status)
        if current in TERMINAL_STATUSES:
            raise TerminalStateError({"status": [f"Order {self.order_number} is already {current.value}"]})
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition({"status": [f"Cannot transition from {current.value} to {target.value}"]})
        if target in _NOTE_REQUIRED and not (note and note.strip()):
            raise InvalidTransition({"note": [f"A note is required when marking an order {target.value}"]})
        if target in ACTIVE_DELIVERY_STATUSES and self.assigned_agent_id is None:
            raise InvalidTransition({"status": [f"Order {self.order_number} has no delivery agent"]})

    def apply_transition(
        self,
        actor_id: str,
        actor_role: str | None,
        target_status: str,
        note: str | None = None,
        siblings_resolved: bool = False,
    ) -> bool:
        """Move the order to ``target_status`` on behalf of ``actor_id``.

        ``siblings_resolved`` tells the order whether every other order of
        its bordereau is already terminal, so the emitted event can flag the
        bordereau as resolved. Returns False for an idempotent resubmission
        of the current non-terminal status.
        """
        try:
            target = OrderStatus(target_status)
        except ValueError:
            raise InvalidTransition({"status": [f"Unknown status '{target_status}'"]}) from None

        if not self.can_be_changed_by(actor_id, actor_role):
            raise Forbidden({"order": [f"Order {self.order_number} is not assigned to you"]})

        current = OrderStatus(self.status)
        if current == target and current not in TERMINAL_STATUSES:
            return False
        self._assert_can_transition(target, note)

        now = datetime.now(UTC)
        self._record_change(current.value, target.value, actor_id, note, now)
        if note:
            self.last_note = note
        if target in TERMINAL_STATUSES:
            self.resolved_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                from_status=current.value,
                to_status=target.value,
                note=note,
                changed_by=actor_id,
                agent_id=self.assigned_agent_id,
                total_cents=self.total_cents,
                bordereau_id=self.bordereau_id,
                bordereau_resolved=bool(self.bordereau_id) and siblings_resolved and target in TERMINAL_STATUSES,
                organization_id=self.organization_id,
                supplier_id=self.supplier_id,
                changed_at=now,
            )
        )
        return True

    def _record_change(self, from_status: str, to_status: str, actor_id: str, note: str | None, at: datetime):
        self.status = to_status
        self.updated_at = at
        self.add_status_history(
            StatusChange(
                from_status=from_status,
                to_status=to_status,
                note=note,
                changed_by=actor_id,
                changed_at=at,
            )
        )
