"""Faker-based data generators for Locust load test scenarios.

Payloads use the camelCase field names of the delivery API's request
schemas and money as two-decimal strings.
"""

import random
import uuid

from faker import Faker

fake = Faker("fr_FR")

SHIPPED = "Expédié"


def order_number() -> str:
    """Generate unique order numbers like 'CMD-LT-a1b2c3d4'."""
    return f"CMD-LT-{uuid.uuid4().hex[:8]}"


def bordereau_code() -> str:
    """Generate unique manifest codes like 'BRD-LT-a1b2c3'."""
    return f"BRD-LT-{uuid.uuid4().hex[:6]}"


def amount(low: float = 10.0, high: float = 250.0) -> str:
    return f"{random.uniform(low, high):.2f}"


def recipient_data() -> dict:
    return {
        "name": fake.name()[:200],
        "phone": f"+216{random.randint(20000000, 99999999)}",
        "address": fake.street_address()[:500],
        "city": fake.city()[:100],
    }


def register_order_data(number: str | None = None) -> dict:
    """Generate a RegisterOrderRequest payload for a parcel ready to ship."""
    quantity = random.randint(1, 3)
    unit_price = amount(5.0, 80.0)
    return {
        "orderNumber": number or order_number(),
        "recipient": recipient_data(),
        "lines": [
            {
                "productId": f"prod-{uuid.uuid4().hex[:6]}",
                "label": fake.word().capitalize(),
                "quantity": quantity,
                "unitPrice": unit_price,
            }
        ],
        "totalAmount": f"{quantity * float(unit_price):.2f}",
        "supplierId": f"sup-{random.randint(1, 5)}",
        "status": SHIPPED,
    }


def agent_headers(agent_id: str) -> dict:
    return {"X-User-Id": agent_id, "X-User-Role": "delivery_man"}


def admin_headers() -> dict:
    return {"X-User-Id": "admin-loadtest", "X-User-Role": "admin", "X-Organization-Id": "org-loadtest"}


def deposit_data(max_amount: str) -> dict:
    return {"amount": amount(1.0, max(float(max_amount), 1.0)), "notes": fake.sentence(nb_words=4)}
