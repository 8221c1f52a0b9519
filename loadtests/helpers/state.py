"""Per-user state tracking for Locust load test scenarios.

Each Locust user keeps its own state. The only shared structure is the
pool of ready order numbers that racing agents draw from.
"""

import random
import threading
from dataclasses import dataclass, field


@dataclass
class AgentState:
    """Tracks a simulated delivery agent through a working day."""

    agent_id: str
    active_order_ids: list[str] = field(default_factory=list)
    delivered_total: float = 0.0
    deposit_ids: list[str] = field(default_factory=list)


@dataclass
class ManifestState:
    """Tracks a bordereau built by a dispatcher."""

    code: str | None = None
    order_numbers: list[str] = field(default_factory=list)


class ReadyPool:
    """Order numbers registered by dispatchers and not yet known to be taken."""

    def __init__(self, limit: int = 500):
        self._numbers: list[str] = []
        self._lock = threading.Lock()
        self._limit = limit

    def add(self, number: str) -> None:
        with self._lock:
            self._numbers.append(number)
            del self._numbers[: -self._limit]

    def pick(self) -> str | None:
        with self._lock:
            return random.choice(self._numbers) if self._numbers else None

    def discard(self, number: str) -> None:
        with self._lock:
            if number in self._numbers:
                self._numbers.remove(number)


ready_orders = ReadyPool()
