"""Integration tests for deposit and balance endpoints."""

import pytest
from delivery.api import deposit_router, register_exception_handlers
from delivery.order.claim import ClaimOrder
from delivery.order.transition import MarkDelivered
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean import current_domain

ADMIN = {"X-User-Id": "admin-1", "X-User-Role": "admin"}
AGENT = {"X-User-Id": "agent-1", "X-User-Role": "delivery_man"}
OTHER_AGENT = {"X-User-Id": "agent-2", "X-User-Role": "delivery_man"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(deposit_router)
    register_exception_handlers(app)
    return TestClient(app)


@pytest.fixture()
def delivered(register_order):
    """agent-1 has delivered 500.00 worth of cash-on-delivery orders."""
    for number, total in (("CMD-1", "200.00"), ("CMD-2", "300.00")):
        order_id = register_order(number, total=total)
        current_domain.process(
            ClaimOrder(identifier=number, agent_id="agent-1", actor_role="delivery_man"),
            asynchronous=False,
        )
        current_domain.process(
            MarkDelivered(order_id=order_id, actor_id="agent-1", actor_role="delivery_man"),
            asynchronous=False,
        )


def _declare(client, amount, headers=AGENT):
    return client.post("/deposits", headers=headers, json={"amount": amount, "notes": "Evening drop"})


class TestDeclareEndpoint:
    def test_agent_declares_pending_deposit(self, client):
        response = _declare(client, "150.00")

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["amount"] == "150.00"
        assert data["deliveryManId"] == "agent-1"
        assert data["source"] == "declared"

    def test_non_positive_amount_is_400(self, client):
        assert _declare(client, "0").status_code == 400
        assert _declare(client, "-5.00").status_code == 400

    def test_oversized_amount_is_400(self, client):
        assert _declare(client, "123456789012345678901234567.123").status_code == 400

    def test_admin_records_manual_deposit(self, client):
        response = client.post("/deposits", headers=ADMIN, json={"amount": "80.00", "deliveryManId": "agent-1"})

        assert response.status_code == 201
        assert response.json()["status"] == "confirmed"
        assert response.json()["collectedBy"] == "admin-1"

    def test_admin_without_agent_is_400(self, client):
        assert _declare(client, "80.00", headers=ADMIN).status_code == 400

    def test_agent_recording_for_another_is_403(self, client):
        response = client.post("/deposits", headers=AGENT, json={"amount": "80.00", "deliveryManId": "agent-2"})
        assert response.status_code == 403


class TestResolveEndpoint:
    def test_confirm_then_second_resolution_is_409(self, client):
        deposit_id = _declare(client, "50.00").json()["id"]

        first = client.put(f"/deposits/{deposit_id}/confirm", headers=ADMIN, json={"status": "confirmed"})
        second = client.put(f"/deposits/{deposit_id}/confirm", headers=ADMIN, json={"status": "rejected"})

        assert first.status_code == 200
        assert first.json()["confirmedBy"] == "admin-1"
        assert second.status_code == 409

    def test_agent_cannot_resolve(self, client):
        deposit_id = _declare(client, "50.00").json()["id"]
        response = client.put(f"/deposits/{deposit_id}/confirm", headers=AGENT, json={"status": "confirmed"})
        assert response.status_code == 403

    def test_unknown_deposit_is_404(self, client):
        response = client.put("/deposits/nope/confirm", headers=ADMIN, json={"status": "confirmed"})
        assert response.status_code == 404


class TestListings:
    def test_my_deposits_only_lists_own(self, client):
        _declare(client, "10.00")
        _declare(client, "20.00", headers=OTHER_AGENT)

        deposits = client.get("/deposits/my-deposits", headers=AGENT).json()["deposits"]
        assert [d["amount"] for d in deposits] == ["10.00"]

    def test_staff_listing_filters_by_status(self, client):
        first = _declare(client, "10.00").json()["id"]
        _declare(client, "20.00")
        client.put(f"/deposits/{first}/confirm", headers=ADMIN, json={"status": "confirmed"})

        response = client.get("/deposits?status=pending", headers=ADMIN)

        assert response.status_code == 200
        assert [d["amount"] for d in response.json()["deposits"]] == ["20.00"]

    def test_unknown_status_filter_is_400(self, client):
        assert client.get("/deposits?status=lost", headers=ADMIN).status_code == 400

    def test_agents_cannot_list_everything(self, client):
        assert client.get("/deposits", headers=AGENT).status_code == 403


class TestBalanceEndpoints:
    def test_balance_scenario(self, client, delivered):
        confirmed = _declare(client, "300.00").json()["id"]
        client.put(f"/deposits/{confirmed}/confirm", headers=ADMIN, json={"status": "confirmed"})
        _declare(client, "50.00")

        response = client.get("/deposits/my-status", headers=AGENT)

        assert response.status_code == 200
        assert response.json() == {
            "deliveryManId": "agent-1",
            "totalCollected": "500.00",
            "totalDeposited": "300.00",
            "pendingAmount": "50.00",
            "balance": "200.00",
        }

    def test_staff_reads_agent_balance(self, client, delivered):
        response = client.get("/deposits/status/agent-1", headers=ADMIN)
        assert response.json()["balance"] == "500.00"

    def test_agent_reading_another_balance_is_403(self, client):
        assert client.get("/deposits/status/agent-1", headers=OTHER_AGENT).status_code == 403
