"""Room naming and wire event names for realtime publications."""

ADMIN_ROOM = "admin_group"
DELIVERY_ROOM = "delivery_group"

NEW_ORDER = "newOrder"
ORDER_READY = "orderReady"
ORDER_STATUS_UPDATED = "orderStatusUpdated"
DEPOSIT_UPDATED = "depositUpdated"


def organization_room(organization_id) -> str:
    return f"org_{organization_id}"


def supplier_room(supplier_id) -> str:
    return f"supplier_{supplier_id}"


def tenant_rooms(organization_id=None, supplier_id=None) -> list[str]:
    rooms = []
    if organization_id:
        rooms.append(organization_room(organization_id))
    if supplier_id:
        rooms.append(supplier_room(supplier_id))
    return rooms


def order_rooms(organization_id=None, supplier_id=None, include_fleet: bool = False) -> list[str]:
    """Admins always; the delivery fleet for dispatch-relevant changes; the order's tenants."""
    rooms = [ADMIN_ROOM]
    if include_fleet:
        rooms.append(DELIVERY_ROOM)
    return rooms + tenant_rooms(organization_id, supplier_id)


def deposit_rooms(organization_id=None) -> list[str]:
    return [ADMIN_ROOM] + tenant_rooms(organization_id)
