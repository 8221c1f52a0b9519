"""Delivery outcomes recorded by agents and admins.

When the order belongs to a bordereau the handler derives, in the same unit
of work, whether this transition resolves the whole bordereau and lets the
emitted event carry that fact.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from delivery.domain import delivery
from delivery.order.order import DeliveryOrder, OrderStatus, is_terminal

logger = structlog.get_logger(__name__)


@delivery.command(part_of="DeliveryOrder")
class ApplyTransition:
    """Move an order to a new status (Livré, NRP, Retour, ...)."""

    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(max_length=50)
    target_status = String(required=True, max_length=50)
    note = Text()


@delivery.command(part_of="DeliveryOrder")
class MarkDelivered:
    """Shortcut for the most common outcome."""

    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(max_length=50)
    note = Text()


@delivery.command_handler(part_of=DeliveryOrder)
class TransitionHandler:
    @handle(ApplyTransition)
    def apply_transition(self, command):
        return _transition(command, command.target_status)

    @handle(MarkDelivered)
    def mark_delivered(self, command):
        return _transition(command, OrderStatus.DELIVERED.value)


def _transition(command, target_status: str) -> str:
    repo = current_domain.repository_for(DeliveryOrder)
    order = repo.get(command.order_id)

    siblings_resolved = False
    if order.bordereau_id:
        siblings = [o for o in repo.in_bordereau(str(order.bordereau_id)) if str(o.id) != str(order.id)]
        siblings_resolved = all(is_terminal(o.status) for o in siblings)

    changed = order.apply_transition(
        actor_id=str(command.actor_id),
        actor_role=command.actor_role,
        target_status=target_status,
        note=command.note,
        siblings_resolved=siblings_resolved,
    )
    if changed:
        repo.add(order)
        logger.info(
            "Order status changed",
            order_id=str(order.id),
            order_number=order.order_number,
            status=order.status,
            actor_id=str(command.actor_id),
        )
    return str(order.id)
