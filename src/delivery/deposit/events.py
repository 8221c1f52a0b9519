"""Deposit domain events."""

from protean.fields import DateTime, Identifier, Integer, String

from delivery.domain import delivery


@delivery.event(part_of="Deposit")
class DepositDeclared:
    """An agent declared handing cash to the company; awaits approval."""

    __version__ = 1

    deposit_id = Identifier(required=True)
    delivery_man_id = Identifier(required=True)
    amount_cents = Integer(required=True)
    organization_id = Identifier()
    declared_at = DateTime(required=True)


@delivery.event(part_of="Deposit")
class DepositRecorded:
    """An administrator recorded cash received from an agent."""

    __version__ = 1

    deposit_id = Identifier(required=True)
    delivery_man_id = Identifier(required=True)
    amount_cents = Integer(required=True)
    collected_by = Identifier(required=True)
    organization_id = Identifier()
    recorded_at = DateTime(required=True)


@delivery.event(part_of="Deposit")
class DepositResolved:
    """A pending deposit was confirmed or rejected."""

    __version__ = 1

    deposit_id = Identifier(required=True)
    delivery_man_id = Identifier(required=True)
    amount_cents = Integer(required=True)
    status = String(required=True)
    resolved_by = Identifier(required=True)
    organization_id = Identifier()
    resolved_at = DateTime(required=True)
