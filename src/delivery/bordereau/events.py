"""Bordereau domain events."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from delivery.domain import delivery


@delivery.event(part_of="Bordereau")
class BordereauCreated:
    """A batch of orders was grouped under a scannable manifest code."""

    __version__ = 1

    bordereau_id = Identifier(required=True)
    code = String(required=True)
    order_ids = Text(required=True)  # JSON list of order ids
    total_cents = Integer(required=True)
    organization_id = Identifier()
    created_at = DateTime(required=True)


@delivery.event(part_of="Bordereau")
class BordereauClaimed:
    """A delivery agent took every order of the manifest at once."""

    __version__ = 1

    bordereau_id = Identifier(required=True)
    code = String(required=True)
    agent_id = Identifier(required=True)
    order_ids = Text(required=True)  # JSON list of order ids
    order_count = Integer(required=True)
    total_cents = Integer(required=True)
    organization_id = Identifier()
    claimed_at = DateTime(required=True)


@delivery.event(part_of="Bordereau")
class BordereauReassigned:
    """An administrator moved the manifest to another agent."""

    __version__ = 1

    bordereau_id = Identifier(required=True)
    code = String(required=True)
    previous_agent_id = Identifier()
    agent_id = Identifier(required=True)
    reassigned_by = Identifier(required=True)
    organization_id = Identifier()
    reassigned_at = DateTime(required=True)
