"""Hook through which finished orders reach delivery."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from delivery.domain import delivery
from delivery.order.order import DeliveryOrder, OrderStatus, PaymentMethod


@delivery.command(part_of="DeliveryOrder")
class RegisterOrder:
    """Register a finished order with the delivery ledger."""

    order_number = String(required=True, max_length=50)
    recipient = Text(required=True)  # JSON object: name, phone, address, city, region
    lines = Text()  # JSON list of line dicts
    total_cents = Integer(required=True, min_value=0)
    payment_method = String(max_length=50, default=PaymentMethod.CASH_ON_DELIVERY.value)
    organization_id = Identifier()
    supplier_id = Identifier()
    status = String(max_length=50, default=OrderStatus.PENDING.value)


@delivery.command_handler(part_of=DeliveryOrder)
class RegisterOrderHandler:
    @handle(RegisterOrder)
    def register_order(self, command):
        repo = current_domain.repository_for(DeliveryOrder)
        if repo.find_by_order_number(command.order_number) is not None:
            raise ValidationError({"order_number": [f"Order {command.order_number} is already registered"]})

        recipient = json.loads(command.recipient) if isinstance(command.recipient, str) else command.recipient
        lines = json.loads(command.lines) if command.lines else []
        order = DeliveryOrder.register(
            order_number=command.order_number,
            recipient=recipient,
            lines=lines,
            total_cents=command.total_cents,
            payment_method=command.payment_method,
            organization_id=command.organization_id,
            supplier_id=command.supplier_id,
            status=command.status,
        )
        repo.add(order)
        return str(order.id)
