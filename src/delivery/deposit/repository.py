"""Repository for the Deposit aggregate."""

from protean.exceptions import ValidationError

from delivery.deposit.deposit import Deposit, DepositStatus
from delivery.domain import delivery

PAGE_SIZE = 100


@delivery.repository(part_of=Deposit)
class DepositRepository:
    def find_many(self, **filters) -> list[Deposit]:
        """All deposits matching ``filters``, newest first."""
        results: list[Deposit] = []
        offset = 0
        while True:
            query = self._dao.query.filter(**filters) if filters else self._dao.query
            page = query.offset(offset).limit(PAGE_SIZE).all().items
            results.extend(page)
            if len(page) < PAGE_SIZE:
                break
            offset += PAGE_SIZE
        return sorted(results, key=lambda d: d.created_at, reverse=True)

    def for_agent(self, delivery_man_id: str, status: str | None = None) -> list[Deposit]:
        filters = {"delivery_man_id": delivery_man_id}
        if status:
            filters["status"] = status
        return self.find_many(**filters)

    def listing(self, delivery_man_id: str | None = None, status: str | None = None) -> list[Deposit]:
        filters = {}
        if delivery_man_id:
            filters["delivery_man_id"] = delivery_man_id
        if status:
            if status not in {s.value for s in DepositStatus}:
                raise ValidationError({"status": [f"Unknown deposit status '{status}'"]})
            filters["status"] = status
        return self.find_many(**filters)
