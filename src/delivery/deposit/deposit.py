"""Cash an agent hands over to the company.

Declared deposits wait for an administrator's decision; manual deposits
recorded by an administrator are confirmed immediately. Either way the
amount is fixed at creation and the status changes at most once.

State Machine:
    pending → {confirmed, rejected}
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text

from delivery.deposit.events import DepositDeclared, DepositRecorded, DepositResolved
from delivery.domain import delivery
from delivery.errors import AlreadyResolved


class DepositStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"


class DepositSource(Enum):
    DECLARED = "declared"
    MANUAL = "manual"


_DECISIONS = {DepositStatus.CONFIRMED, DepositStatus.REJECTED}


@delivery.aggregate
class Deposit:
    delivery_man_id = Identifier(required=True)
    amount_cents = Integer(required=True, min_value=1)
    status = String(
        max_length=20,
        choices=DepositStatus,
        default=DepositStatus.PENDING.value,
    )
    source = String(
        max_length=20,
        choices=DepositSource,
        default=DepositSource.DECLARED.value,
    )
    date = DateTime()
    notes = Text()
    created_by = Identifier()
    collected_by = Identifier()
    confirmed_by = Identifier()
    rejected_by = Identifier()
    resolved_at = DateTime()
    organization_id = Identifier()
    created_at = DateTime()

    @classmethod
    def declare(
        cls,
        delivery_man_id: str,
        amount_cents: int,
        notes: str | None = None,
        date: datetime | None = None,
        organization_id: str | None = None,
    ):
        """A delivery agent declares a deposit; it stays pending until resolved."""
        now = datetime.now(UTC)
        deposit = cls(
            delivery_man_id=delivery_man_id,
            amount_cents=amount_cents,
            status=DepositStatus.PENDING.value,
            source=DepositSource.DECLARED.value,
            date=date or now,
            notes=notes,
            created_by=delivery_man_id,
            organization_id=organization_id,
            created_at=now,
        )
        deposit.raise_(
            DepositDeclared(
                deposit_id=str(deposit.id),
                delivery_man_id=delivery_man_id,
                amount_cents=amount_cents,
                organization_id=organization_id,
                declared_at=now,
            )
        )
        return deposit

    @classmethod
    def record_manual(
        cls,
        admin_id: str,
        delivery_man_id: str,
        amount_cents: int,
        notes: str | None = None,
        date: datetime | None = None,
        organization_id: str | None = None,
    ):
        """An administrator records cash received in person; confirmed at once."""
        now = datetime.now(UTC)
        deposit = cls(
            delivery_man_id=delivery_man_id,
            amount_cents=amount_cents,
            status=DepositStatus.CONFIRMED.value,
            source=DepositSource.MANUAL.value,
            date=date or now,
            notes=notes,
            created_by=admin_id,
            collected_by=admin_id,
            confirmed_by=admin_id,
            resolved_at=now,
            organization_id=organization_id,
            created_at=now,
        )
        deposit.raise_(
            DepositRecorded(
                deposit_id=str(deposit.id),
                delivery_man_id=delivery_man_id,
                amount_cents=amount_cents,
                collected_by=admin_id,
                organization_id=organization_id,
                recorded_at=now,
            )
        )
        return deposit

    @property
    def is_pending(self) -> bool:
        return self.status == DepositStatus.PENDING.value

    def resolve(self, admin_id: str, decision: str) -> None:
        """Confirm or reject a pending deposit. A second resolution fails."""
        try:
            target = DepositStatus(decision)
        except ValueError:
            raise ValidationError({"status": [f"Unknown decision '{decision}'"]}) from None
        if target not in _DECISIONS:
            raise ValidationError({"status": ["Decision must be 'confirmed' or 'rejected'"]})
        if not self.is_pending:
            raise AlreadyResolved({"deposit": [f"Deposit has already been {self.status}"]})

        now = datetime.now(UTC)
        self.status = target.value
        self.resolved_at = now
        if target == DepositStatus.CONFIRMED:
            self.confirmed_by = admin_id
        else:
            self.rejected_by = admin_id
        self.raise_(
            DepositResolved(
                deposit_id=str(self.id),
                delivery_man_id=str(self.delivery_man_id),
                amount_cents=self.amount_cents,
                status=target.value,
                resolved_by=admin_id,
                organization_id=self.organization_id,
                resolved_at=now,
            )
        )
