"""Tells a scanning client what a code refers to.

Bordereau codes are checked first, then order numbers and order ids.
"""

from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from delivery.bordereau.bordereau import Bordereau
from delivery.order.order import DeliveryOrder


class ScanKind:
    BORDEREAU = "bordereau"
    ORDER = "order"


@dataclass(frozen=True)
class ScanResult:
    kind: str
    bordereau: Bordereau | None = None
    order: DeliveryOrder | None = None


def lookup(code: str) -> ScanResult:
    code = code.strip()
    bordereau = current_domain.repository_for(Bordereau).find_by_code(code)
    if bordereau is not None:
        return ScanResult(kind=ScanKind.BORDEREAU, bordereau=bordereau)

    try:
        order = current_domain.repository_for(DeliveryOrder).find_by_identifier(code)
    except ObjectNotFoundError:
        raise ObjectNotFoundError({"code": [f"No bordereau or order matches '{code}'"]}) from None
    return ScanResult(kind=ScanKind.ORDER, order=order)
