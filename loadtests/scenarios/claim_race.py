"""Claim race scenarios.

Dispatchers keep a pool of ready orders and bordereaux while many agents
scan the same codes at once. A 409 is the expected answer for every agent
but the first; any other outcome, or two agents holding the same order,
is a failure.
"""

import random
import uuid

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    admin_headers,
    agent_headers,
    bordereau_code,
    register_order_data,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import ManifestState, ready_orders


class DispatcherUser(HttpUser):
    """Registers parcels as they come off the packing line."""

    wait_time = between(0.2, 1.0)

    @task
    def register_order(self):
        payload = register_order_data()
        with self.client.post(
            "/orders",
            json=payload,
            headers=admin_headers(),
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                ready_orders.add(payload["orderNumber"])
            else:
                resp.failure(f"Register order failed: {resp.status_code} {extract_error_detail(resp)}")


class OrderClaimRaceUser(HttpUser):
    """Agents scanning whichever ready order they see first."""

    wait_time = between(0.05, 0.3)

    def on_start(self):
        self.agent_id = f"agent-lt-{uuid.uuid4().hex[:6]}"

    @task
    def scan_order(self):
        number = ready_orders.pick()
        if number is None:
            return
        with self.client.post(
            "/internal-delivery/assign",
            json={"orderIdentifier": number},
            headers=agent_headers(self.agent_id),
            catch_response=True,
            name="POST /internal-delivery/assign",
        ) as resp:
            if resp.status_code == 200:
                holder = resp.json()["order"]["deliveryManId"]
                if holder != self.agent_id:
                    resp.failure(f"Claim returned 200 but {number} is held by {holder}")
                else:
                    resp.success()
                    ready_orders.discard(number)
            elif resp.status_code == 409:
                resp.success()
                ready_orders.discard(number)
            else:
                resp.failure(f"Claim failed: {resp.status_code} {extract_error_detail(resp)}")


class BordereauRaceJourney(SequentialTaskSet):
    """Build a manifest, then let two agents scan it back to back."""

    def on_start(self):
        self.state = ManifestState()
        self.agents = [f"agent-lt-{uuid.uuid4().hex[:6]}" for _ in range(2)]

    @task
    def register_orders(self):
        for _ in range(random.randint(2, 5)):
            payload = register_order_data()
            resp = self.client.post("/orders", json=payload, headers=admin_headers(), name="POST /orders")
            if resp.status_code == 201:
                self.state.order_numbers.append(payload["orderNumber"])
        if not self.state.order_numbers:
            self.interrupt()

    @task
    def create_bordereau(self):
        code = bordereau_code()
        with self.client.post(
            "/bordereaux",
            json={"code": code, "orderIdentifiers": self.state.order_numbers},
            headers=admin_headers(),
            catch_response=True,
            name="POST /bordereaux",
        ) as resp:
            if resp.status_code == 201:
                self.state.code = code
            else:
                resp.failure(f"Create bordereau failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def race(self):
        winners = []
        for agent_id in self.agents:
            with self.client.post(
                "/bordereaux/assign",
                json={"code": self.state.code},
                headers=agent_headers(agent_id),
                catch_response=True,
                name="POST /bordereaux/assign",
            ) as resp:
                if resp.status_code == 200:
                    winners.append(agent_id)
                    resp.success()
                elif resp.status_code == 409:
                    resp.success()
                else:
                    resp.failure(f"Bordereau claim failed: {resp.status_code} {extract_error_detail(resp)}")
        if len(winners) != 1:
            self.client.get(
                f"/bordereaux/code/{self.state.code}",
                headers=admin_headers(),
                name=f"[RACE VIOLATION] {len(winners)} winners",
            )

    @task
    def verify(self):
        with self.client.get(
            f"/bordereaux/code/{self.state.code}",
            headers=admin_headers(),
            catch_response=True,
            name="GET /bordereaux/code/{code}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Preview failed: {resp.status_code} {extract_error_detail(resp)}")
            else:
                holders = {o["deliveryManId"] for o in resp.json()["bordereau"]["orders"]}
                if len(holders) != 1:
                    resp.failure(f"Orders of {self.state.code} are split across {holders}")
        self.interrupt()


class BordereauRaceUser(HttpUser):
    wait_time = between(0.5, 2.0)
    tasks = [BordereauRaceJourney]
