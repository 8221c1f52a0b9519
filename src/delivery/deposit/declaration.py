"""Deposit declarations by agents and manual deposits recorded by admins."""

import structlog
from protean import handle
from protean.fields import DateTime, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from delivery.access import require_delivery_man, require_staff
from delivery.deposit.deposit import Deposit
from delivery.domain import delivery

logger = structlog.get_logger(__name__)


@delivery.command(part_of="Deposit")
class DeclareDeposit:
    delivery_man_id = Identifier(required=True)
    actor_role = String(max_length=50)
    amount_cents = Integer(required=True)
    notes = Text()
    date = DateTime()
    organization_id = Identifier()


@delivery.command(part_of="Deposit")
class RecordManualDeposit:
    admin_id = Identifier(required=True)
    actor_role = String(max_length=50)
    delivery_man_id = Identifier(required=True)
    amount_cents = Integer(required=True)
    notes = Text()
    date = DateTime()
    organization_id = Identifier()


@delivery.command_handler(part_of=Deposit)
class DepositDeclarationHandler:
    @handle(DeclareDeposit)
    def declare_deposit(self, command):
        require_delivery_man(command.actor_role, "declare deposits")

        deposit = Deposit.declare(
            delivery_man_id=str(command.delivery_man_id),
            amount_cents=command.amount_cents,
            notes=command.notes,
            date=command.date,
            organization_id=command.organization_id,
        )
        current_domain.repository_for(Deposit).add(deposit)
        logger.info(
            "Deposit declared",
            deposit_id=str(deposit.id),
            delivery_man_id=str(command.delivery_man_id),
            amount_cents=command.amount_cents,
        )
        return str(deposit.id)

    @handle(RecordManualDeposit)
    def record_manual_deposit(self, command):
        require_staff(command.actor_role, "record deposits on behalf of agents")

        deposit = Deposit.record_manual(
            admin_id=str(command.admin_id),
            delivery_man_id=str(command.delivery_man_id),
            amount_cents=command.amount_cents,
            notes=command.notes,
            date=command.date,
            organization_id=command.organization_id,
        )
        current_domain.repository_for(Deposit).add(deposit)
        logger.info(
            "Manual deposit recorded",
            deposit_id=str(deposit.id),
            delivery_man_id=str(command.delivery_man_id),
            admin_id=str(command.admin_id),
            amount_cents=command.amount_cents,
        )
        return str(deposit.id)
