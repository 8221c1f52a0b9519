"""An administrator confirms or rejects a declared deposit.

Two administrators resolving at once clash on the version check at commit;
the retried command sees the resolved deposit and raises AlreadyResolved.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from delivery.access import require_staff
from delivery.deposit.deposit import Deposit
from delivery.domain import delivery
from delivery.errors import AlreadyResolved

logger = structlog.get_logger(__name__)


@delivery.command(part_of="Deposit")
class ResolveDeposit:
    deposit_id = Identifier(required=True)
    admin_id = Identifier(required=True)
    actor_role = String(max_length=50)
    decision = String(required=True, max_length=20)


@delivery.command_handler(part_of=Deposit)
class ResolveDepositHandler:
    @handle(ResolveDeposit)
    def resolve_deposit(self, command):
        require_staff(command.actor_role, "resolve deposits")

        repo = current_domain.repository_for(Deposit)
        deposit = repo.get(command.deposit_id)
        try:
            deposit.resolve(str(command.admin_id), command.decision)
        except AlreadyResolved:
            logger.info(
                "Deposit resolution rejected: already resolved",
                deposit_id=str(deposit.id),
                status=deposit.status,
            )
            raise

        repo.add(deposit)

        logger.info(
            "Deposit resolved",
            deposit_id=str(deposit.id),
            status=deposit.status,
            admin_id=str(command.admin_id),
        )
        return str(deposit.id)
