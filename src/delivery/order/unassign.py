"""Administrative release of an individually claimed order."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from delivery.access import require_staff
from delivery.domain import delivery
from delivery.order.order import DeliveryOrder

logger = structlog.get_logger(__name__)


@delivery.command(part_of="DeliveryOrder")
class UnassignOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(max_length=50)


@delivery.command_handler(part_of=DeliveryOrder)
class UnassignOrderHandler:
    @handle(UnassignOrder)
    def unassign_order(self, command):
        require_staff(command.actor_role, "unassign orders")

        repo = current_domain.repository_for(DeliveryOrder)
        order = repo.get(command.order_id)
        previous_agent = order.assigned_agent_id
        order.unassign(str(command.actor_id))
        repo.add(order)

        logger.info(
            "Order unassigned",
            order_id=str(order.id),
            previous_agent_id=str(previous_agent),
            actor_id=str(command.actor_id),
        )
        return str(order.id)
