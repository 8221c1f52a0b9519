"""An agent's working day: claim, deliver, deposit, check the balance.

Exercises every write path of the ledger so that the balance endpoint is
read while deposits are being declared and resolved.
"""

import random
import uuid

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    admin_headers,
    agent_headers,
    deposit_data,
    register_order_data,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import AgentState

NRP = "NRP"
RETURNED = "Retour"


class DeliveryDayJourney(SequentialTaskSet):
    def on_start(self):
        self.state = AgentState(agent_id=f"agent-lt-{uuid.uuid4().hex[:6]}")
        self.headers = agent_headers(self.state.agent_id)

    @task
    def claim_orders(self):
        for _ in range(random.randint(1, 4)):
            payload = register_order_data()
            resp = self.client.post("/orders", json=payload, headers=admin_headers(), name="POST /orders")
            if resp.status_code != 201:
                continue
            with self.client.post(
                "/internal-delivery/assign",
                json={"orderIdentifier": payload["orderNumber"]},
                headers=self.headers,
                catch_response=True,
                name="POST /internal-delivery/assign",
            ) as claim:
                if claim.status_code == 200:
                    self.state.active_order_ids.append(claim.json()["order"]["id"])
                else:
                    claim.failure(f"Claim failed: {claim.status_code} {extract_error_detail(claim)}")
        if not self.state.active_order_ids:
            self.interrupt()

    @task
    def record_outcomes(self):
        for order_id in self.state.active_order_ids:
            roll = random.random()
            if roll < 0.15:
                self.client.put(
                    f"/internal-delivery/{order_id}/status",
                    json={"status": NRP, "note": "No answer"},
                    headers=self.headers,
                    name="PUT /internal-delivery/{id}/status",
                )
            if roll < 0.1:
                self.client.put(
                    f"/internal-delivery/{order_id}/status",
                    json={"status": RETURNED, "note": "Refused at door"},
                    headers=self.headers,
                    name="PUT /internal-delivery/{id}/status",
                )
                continue
            resp = self.client.put(
                f"/internal-delivery/{order_id}/deliver",
                json={},
                headers=self.headers,
                name="PUT /internal-delivery/{id}/deliver",
            )
            if resp.status_code == 200:
                self.state.delivered_total += float(resp.json()["order"]["totalAmount"])

    @task
    def declare_deposit(self):
        if self.state.delivered_total <= 0:
            return
        with self.client.post(
            "/deposits",
            json=deposit_data(f"{self.state.delivered_total:.2f}"),
            headers=self.headers,
            catch_response=True,
            name="POST /deposits",
        ) as resp:
            if resp.status_code == 201:
                self.state.deposit_ids.append(resp.json()["id"])
            else:
                resp.failure(f"Deposit failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def resolve_deposits(self):
        for deposit_id in self.state.deposit_ids:
            self.client.put(
                f"/deposits/{deposit_id}/confirm",
                json={"status": random.choice(["confirmed", "confirmed", "rejected"])},
                headers=admin_headers(),
                name="PUT /deposits/{id}/confirm",
            )

    @task
    def check_balance(self):
        self.client.get("/deposits/my-status", headers=self.headers, name="GET /deposits/my-status")
        self.client.get("/internal-delivery/analytics", headers=self.headers, name="GET /internal-delivery/analytics")
        self.interrupt()


class DeliveryDayUser(HttpUser):
    wait_time = between(1.0, 3.0)
    tasks = [DeliveryDayJourney]
