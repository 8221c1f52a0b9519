import json

import pytest
from delivery.bordereau.creation import CreateBordereau
from delivery.money import to_cents
from delivery.order.order import OrderStatus
from delivery.order.registration import RegisterOrder
from delivery.realtime import reset_publisher
from protean import current_domain
from protean.integrations.pytest import DomainFixture

RECIPIENT = {
    "name": "Amira Ben Salah",
    "phone": "+21698000111",
    "address": "12 Rue de Marseille",
    "city": "Tunis",
}


@pytest.fixture(scope="session")
def delivery_bed():
    from delivery.domain import delivery

    bed = DomainFixture(delivery)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(delivery_bed):
    with delivery_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def _publisher():
    reset_publisher()
    yield
    reset_publisher()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------
@pytest.fixture()
def register_order():
    """Register an order through the domain and return its id."""

    def _register(order_number, total="50.00", status=OrderStatus.SHIPPED.value, **overrides):
        fields = {
            "order_number": order_number,
            "recipient": json.dumps(RECIPIENT),
            "lines": json.dumps([{"product_id": "prod-1", "label": "Parcel", "quantity": 1, "unit_price_cents": 0}]),
            "total_cents": to_cents(total, allow_zero=True),
            "organization_id": "org-1",
            "supplier_id": "sup-1",
            "status": status,
        }
        fields.update(overrides)
        return current_domain.process(RegisterOrder(**fields), asynchronous=False)

    return _register


@pytest.fixture()
def create_bordereau(register_order):
    """Register orders, batch them under ``code`` and return the bordereau id."""

    def _create(code, order_numbers, totals=None):
        totals = totals or ["50.00"] * len(order_numbers)
        for number, total in zip(order_numbers, totals, strict=True):
            register_order(number, total=total)
        return current_domain.process(
            CreateBordereau(
                code=code,
                order_identifiers=json.dumps(order_numbers),
                organization_id="org-1",
                actor_role="admin",
            ),
            asynchronous=False,
        )

    return _create
