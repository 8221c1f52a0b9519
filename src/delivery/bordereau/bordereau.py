"""A manifest batching several orders for one agent.

A bordereau is claimed as a whole: the claim handler takes every contained
order to the same agent in one unit of work. Whether it is resolved (all
orders terminal) is derived from its orders on read and never stored.

State Machine:
    En attente → En livraison   (claim)
    Validé → En livraison       (claim)
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text

from delivery.bordereau.events import BordereauClaimed, BordereauCreated, BordereauReassigned
from delivery.domain import delivery
from delivery.errors import ClaimConflict

CODE_PREFIX = "BRD-"


class BordereauStatus(Enum):
    PENDING = "En attente"
    VALIDATED = "Validé"
    IN_DELIVERY = "En livraison"


_CLAIMABLE_STATUSES = {BordereauStatus.PENDING, BordereauStatus.VALIDATED}


@delivery.aggregate
class Bordereau:
    code = String(required=True, max_length=50, unique=True)
    order_ids = Text(required=True)  # JSON list of DeliveryOrder ids, in manifest order
    total_cents = Integer(default=0, min_value=0)
    status = String(
        max_length=50,
        choices=BordereauStatus,
        default=BordereauStatus.PENDING.value,
    )
    delivery_man_id = Identifier()
    organization_id = Identifier()
    claimed_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(
        cls,
        code: str,
        order_ids: list[str],
        total_cents: int,
        organization_id: str | None = None,
        status: str = BordereauStatus.PENDING.value,
    ):
        if not order_ids:
            raise ValidationError({"order_ids": ["A bordereau must contain at least one order"]})
        if len(set(order_ids)) != len(order_ids):
            raise ValidationError({"order_ids": ["A bordereau cannot list the same order twice"]})
        if status not in {s.value for s in _CLAIMABLE_STATUSES}:
            raise ValidationError({"status": [f"Bordereaux cannot be created as {status}"]})

        now = datetime.now(UTC)
        bordereau = cls(
            code=code,
            order_ids=json.dumps(order_ids),
            total_cents=total_cents,
            organization_id=organization_id,
            status=status,
            created_at=now,
            updated_at=now,
        )
        bordereau.raise_(
            BordereauCreated(
                bordereau_id=str(bordereau.id),
                code=code,
                order_ids=bordereau.order_ids,
                total_cents=total_cents,
                organization_id=organization_id,
                created_at=now,
            )
        )
        return bordereau

    @property
    def order_id_list(self) -> list[str]:
        return json.loads(self.order_ids) if self.order_ids else []

    def is_held_by(self, agent_id: str) -> bool:
        return self.delivery_man_id is not None and str(self.delivery_man_id) == str(agent_id)

    @staticmethod
    def is_resolved(orders) -> bool:
        """True when every contained order has reached a terminal status."""
        return bool(orders) and all(order.is_terminal for order in orders)

    def claim(self, agent_id: str, total_cents: int) -> bool:
        """Hand the manifest to ``agent_id``; False if the agent already holds it.

        ``total_cents`` is the sum of the contained orders at claim time.
        """
        if self.is_held_by(agent_id):
            return False
        if self.delivery_man_id is not None:
            raise ClaimConflict({"bordereau": [f"Bordereau {self.code} is already assigned to another agent"]})
        if BordereauStatus(self.status) not in _CLAIMABLE_STATUSES:
            raise ClaimConflict({"bordereau": [f"Bordereau {self.code} cannot be claimed ({self.status})"]})

        now = datetime.now(UTC)
        self.delivery_man_id = agent_id
        self.total_cents = total_cents
        self.status = BordereauStatus.IN_DELIVERY.value
        self.claimed_at = now
        self.updated_at = now
        self.raise_(
            BordereauClaimed(
                bordereau_id=str(self.id),
                code=self.code,
                agent_id=agent_id,
                order_ids=self.order_ids,
                order_count=len(self.order_id_list),
                total_cents=total_cents,
                organization_id=self.organization_id,
                claimed_at=now,
            )
        )
        return True

    def reassign(self, agent_id: str, reassigned_by: str) -> bool:
        if self.delivery_man_id is None:
            raise ValidationError({"bordereau": [f"Bordereau {self.code} has not been claimed yet"]})
        if self.is_held_by(agent_id):
            return False

        now = datetime.now(UTC)
        previous = str(self.delivery_man_id)
        self.delivery_man_id = agent_id
        self.updated_at = now
        self.raise_(
            BordereauReassigned(
                bordereau_id=str(self.id),
                code=self.code,
                previous_agent_id=previous,
                agent_id=agent_id,
                reassigned_by=reassigned_by,
                organization_id=self.organization_id,
                reassigned_at=now,
            )
        )
        return True
