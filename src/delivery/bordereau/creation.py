"""The external batching step groups orders under a scannable code."""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from delivery.access import require_staff
from delivery.bordereau.bordereau import Bordereau, BordereauStatus
from delivery.domain import delivery
from delivery.order.order import CLAIMABLE_STATUSES, DeliveryOrder, OrderStatus

logger = structlog.get_logger(__name__)


@delivery.command(part_of="Bordereau")
class CreateBordereau:
    code = String(required=True, max_length=50)
    order_identifiers = Text(required=True)  # JSON list of order numbers or ids
    organization_id = Identifier()
    status = String(max_length=50, default=BordereauStatus.PENDING.value)
    actor_role = String(max_length=50)


@delivery.command_handler(part_of=Bordereau)
class CreateBordereauHandler:
    @handle(CreateBordereau)
    def create_bordereau(self, command):
        require_staff(command.actor_role, "create bordereaux")

        bordereau_repo = current_domain.repository_for(Bordereau)
        if bordereau_repo.find_by_code(command.code) is not None:
            raise ValidationError({"code": [f"Bordereau {command.code} already exists"]})

        order_repo = current_domain.repository_for(DeliveryOrder)
        identifiers = json.loads(command.order_identifiers)
        orders = [order_repo.find_by_identifier(identifier) for identifier in identifiers]

        for order in orders:
            if order.bordereau_id:
                raise ValidationError({"orders": [f"Order {order.order_number} already belongs to a bordereau"]})
            if order.assigned_agent_id or order.is_terminal:
                raise ValidationError({"orders": [f"Order {order.order_number} is no longer available for batching"]})
            if OrderStatus(order.status) not in CLAIMABLE_STATUSES:
                raise ValidationError(
                    {"orders": [f"Order {order.order_number} is not ready for delivery ({order.status})"]}
                )

        bordereau = Bordereau.create(
            code=command.code,
            order_ids=[str(order.id) for order in orders],
            total_cents=sum(order.total_cents for order in orders),
            organization_id=command.organization_id,
            status=command.status,
        )
        for order in orders:
            order.bordereau_id = str(bordereau.id)
            order_repo.add(order)
        bordereau_repo.add(bordereau)

        logger.info("Bordereau created", code=bordereau.code, order_count=len(orders))
        return str(bordereau.id)
