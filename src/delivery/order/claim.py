"""A delivery agent takes an order by scanning it.

The claim is a compare-and-set: the aggregate refuses an order held by
someone else, and the unit of work commits with a version check. A
concurrent claimant holding a stale copy has its command retried against
the fresh order, which then refuses it with ClaimConflict.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from delivery.access import require_delivery_man
from delivery.domain import delivery
from delivery.errors import ClaimConflict
from delivery.order.order import DeliveryOrder

logger = structlog.get_logger(__name__)


@delivery.command(part_of="DeliveryOrder")
class ClaimOrder:
    """Assign an order, identified by order number or id, to the scanning agent."""

    identifier = String(required=True, max_length=100)
    agent_id = Identifier(required=True)
    actor_role = String(max_length=50)


@delivery.command_handler(part_of=DeliveryOrder)
class ClaimOrderHandler:
    @handle(ClaimOrder)
    def claim_order(self, command):
        require_delivery_man(command.actor_role, "claim orders")

        repo = current_domain.repository_for(DeliveryOrder)
        order = repo.find_by_identifier(command.identifier)

        try:
            changed = order.claim(str(command.agent_id))
        except ClaimConflict:
            logger.info(
                "Order claim rejected",
                order_number=order.order_number,
                agent_id=str(command.agent_id),
                holder=str(order.assigned_agent_id) if order.assigned_agent_id else None,
                status=order.status,
            )
            raise

        if not changed:
            return str(order.id)

        repo.add(order)

        logger.info(
            "Order claimed",
            order_id=str(order.id),
            order_number=order.order_number,
            agent_id=str(command.agent_id),
        )
        return str(order.id)
