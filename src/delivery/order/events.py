"""Order domain events: facts about assignment and delivery outcomes.

Events carry the tenant routing keys (organization, supplier) so that the
realtime emitter can address rooms without reloading the order.
"""

from protean.fields import Boolean, DateTime, Identifier, Integer, String

from delivery.domain import delivery


@delivery.event(part_of="DeliveryOrder")
class OrderRegistered:
    """A finished order was handed to delivery by the order-creation subsystem."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    status = String(required=True)
    total_cents = Integer(required=True)
    organization_id = Identifier()
    supplier_id = Identifier()
    registered_at = DateTime(required=True)


@delivery.event(part_of="DeliveryOrder")
class OrderClaimed:
    """A delivery agent took the order, individually or through a bordereau."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    agent_id = Identifier(required=True)
    previous_status = String(required=True)
    bordereau_id = Identifier()
    organization_id = Identifier()
    supplier_id = Identifier()
    claimed_at = DateTime(required=True)


@delivery.event(part_of="DeliveryOrder")
class OrderReassigned:
    """An administrator moved the order to another agent."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_agent_id = Identifier()
    agent_id = Identifier(required=True)
    bordereau_id = Identifier()
    organization_id = Identifier()
    reassigned_by = Identifier(required=True)
    reassigned_at = DateTime(required=True)


@delivery.event(part_of="DeliveryOrder")
class OrderUnassigned:
    """An administrator released the order back to the shipped pool."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_agent_id = Identifier(required=True)
    organization_id = Identifier()
    unassigned_by = Identifier(required=True)
    unassigned_at = DateTime(required=True)


@delivery.event(part_of="DeliveryOrder")
class OrderStatusChanged:
    """A delivery outcome or lifecycle transition was applied to the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    from_status = String(required=True)
    to_status = String(required=True)
    note = String()
    changed_by = Identifier(required=True)
    agent_id = Identifier()
    total_cents = Integer(required=True)
    bordereau_id = Identifier()
    bordereau_resolved = Boolean(default=False)
    organization_id = Identifier()
    supplier_id = Identifier()
    changed_at = DateTime(required=True)
