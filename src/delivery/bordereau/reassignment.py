"""Administrative override moving a claimed bordereau to another agent."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from delivery.access import require_staff
from delivery.bordereau.bordereau import Bordereau
from delivery.domain import delivery
from delivery.errors import ClaimConflict
from delivery.order.order import DeliveryOrder

logger = structlog.get_logger(__name__)


@delivery.command(part_of="Bordereau")
class ReassignBordereau:
    code = String(required=True, max_length=50)
    agent_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(max_length=50)


@delivery.command_handler(part_of=Bordereau)
class ReassignBordereauHandler:
    @handle(ReassignBordereau)
    def reassign_bordereau(self, command):
        require_staff(command.actor_role, "reassign bordereaux")

        bordereau_repo = current_domain.repository_for(Bordereau)
        order_repo = current_domain.repository_for(DeliveryOrder)
        bordereau = bordereau_repo.get_by_code(command.code)
        orders = [order_repo.get(order_id) for order_id in bordereau.order_id_list]

        if Bordereau.is_resolved(orders):
            raise ClaimConflict({"bordereau": [f"Bordereau {bordereau.code} is already resolved"]})

        if not bordereau.reassign(str(command.agent_id), str(command.actor_id)):
            return str(bordereau.id)

        for order in orders:
            if not order.is_terminal:
                order.reassign(str(command.agent_id), str(command.actor_id))
                order_repo.add(order)
        bordereau_repo.add(bordereau)

        logger.info(
            "Bordereau reassigned",
            code=bordereau.code,
            agent_id=str(command.agent_id),
            actor_id=str(command.actor_id),
        )
        return str(bordereau.id)
