"""One scan assigns every contained order to the agent.

All orders are checked before any is touched; the bordereau and its orders
are then written in the handler's single unit of work, so either the whole
manifest changes hands or nothing does.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from delivery.access import require_delivery_man
from delivery.bordereau.bordereau import Bordereau
from delivery.domain import delivery
from delivery.errors import ClaimConflict
from delivery.order.order import DeliveryOrder

logger = structlog.get_logger(__name__)


@delivery.command(part_of="Bordereau")
class ClaimBordereau:
    code = String(required=True, max_length=50)
    agent_id = Identifier(required=True)
    actor_role = String(max_length=50)


@delivery.command_handler(part_of=Bordereau)
class ClaimBordereauHandler:
    @handle(ClaimBordereau)
    def claim_bordereau(self, command):
        require_delivery_man(command.actor_role, "claim bordereaux")
        agent_id = str(command.agent_id)

        bordereau_repo = current_domain.repository_for(Bordereau)
        order_repo = current_domain.repository_for(DeliveryOrder)
        bordereau = bordereau_repo.get_by_code(command.code)

        if bordereau.is_held_by(agent_id):
            return str(bordereau.id)

        orders = [order_repo.get(order_id) for order_id in bordereau.order_id_list]
        for order in orders:
            if order.assigned_agent_id is not None:
                logger.info(
                    "Bordereau claim rejected: order already assigned",
                    code=bordereau.code,
                    order_number=order.order_number,
                    agent_id=agent_id,
                )
                raise ClaimConflict(
                    {"bordereau": [f"Order {order.order_number} of {bordereau.code} is already assigned"]}
                )
            order.assert_claimable_by(agent_id)

        bordereau.claim(agent_id, total_cents=sum(order.total_cents for order in orders))
        for order in orders:
            order.claim(agent_id, bordereau_id=str(bordereau.id))
            order_repo.add(order)
        bordereau_repo.add(bordereau)

        logger.info(
            "Bordereau claimed",
            code=bordereau.code,
            agent_id=agent_id,
            order_count=len(orders),
            total_cents=bordereau.total_cents,
        )
        return str(bordereau.id)
