"""Actor roles and the authorization checks shared by command handlers."""

from enum import Enum

from delivery.errors import Forbidden


class Role(Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    DELIVERY_MAN = "delivery_man"
    SUPPLIER = "supplier"


_STAFF_ROLES = {Role.ADMIN.value, Role.MANAGER.value}


def is_staff(role: str | None) -> bool:
    """Admins and managers may act on any agent's orders and deposits."""
    return role in _STAFF_ROLES


def require_staff(role: str | None, action: str) -> None:
    if not is_staff(role):
        raise Forbidden({"role": [f"Only admins or managers may {action}"]})


def require_delivery_man(role: str | None, action: str) -> None:
    if role != Role.DELIVERY_MAN.value:
        raise Forbidden({"role": [f"Only delivery agents may {action}"]})
