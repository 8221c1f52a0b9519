"""Repository for the DeliveryOrder aggregate with delivery-specific lookups."""

from protean.exceptions import ObjectNotFoundError

from delivery.domain import delivery
from delivery.order.order import (
    ACTIVE_DELIVERY_STATUSES,
    TERMINAL_STATUSES,
    DeliveryOrder,
)

PAGE_SIZE = 100


@delivery.repository(part_of=DeliveryOrder)
class DeliveryOrderRepository:
    def find_by_order_number(self, order_number: str) -> DeliveryOrder | None:
        return self._dao.query.filter(order_number=order_number).all().first

    def find_by_identifier(self, identifier: str) -> DeliveryOrder:
        """Resolve an order number or an internal id, raising ObjectNotFoundError."""
        order = self.find_by_order_number(identifier)
        if order is not None:
            return order
        try:
            return self.get(identifier)
        except ObjectNotFoundError:
            raise ObjectNotFoundError({"order": [f"Order '{identifier}' does not exist"]}) from None

    def find_many(self, **filters) -> list[DeliveryOrder]:
        """All orders matching ``filters``, read page by page."""
        results: list[DeliveryOrder] = []
        offset = 0
        while True:
            query = self._dao.query.filter(**filters) if filters else self._dao.query
            page = query.offset(offset).limit(PAGE_SIZE).all().items
            results.extend(page)
            if len(page) < PAGE_SIZE:
                return results
            offset += PAGE_SIZE

    def assigned_to(self, agent_id: str) -> list[DeliveryOrder]:
        return self.find_many(assigned_agent_id=agent_id)

    def active_for(self, agent_id: str) -> list[DeliveryOrder]:
        statuses = [s.value for s in ACTIVE_DELIVERY_STATUSES]
        orders = self.find_many(assigned_agent_id=agent_id, status__in=statuses)
        return sorted(orders, key=lambda o: o.assigned_at or o.created_at, reverse=True)

    def history_for(self, agent_id: str) -> list[DeliveryOrder]:
        statuses = [s.value for s in TERMINAL_STATUSES]
        orders = self.find_many(assigned_agent_id=agent_id, status__in=statuses)
        return sorted(orders, key=lambda o: o.resolved_at or o.updated_at, reverse=True)

    def with_any_agent(self) -> list[DeliveryOrder]:
        statuses = [s.value for s in ACTIVE_DELIVERY_STATUSES | TERMINAL_STATUSES]
        return [o for o in self.find_many(status__in=statuses) if o.assigned_agent_id]

    def in_bordereau(self, bordereau_id: str) -> list[DeliveryOrder]:
        return self.find_many(bordereau_id=bordereau_id)
