"""Realtime port: abstract interface for the socket transport.

The domain publishes named events to rooms; adapters deliver them to the
connected clients. Publishing is fire-and-forget from the domain's side.
"""

from abc import ABC, abstractmethod


class RealtimePort(ABC):
    """Abstract interface for realtime publish adapters."""

    @abstractmethod
    def publish(self, room: str, event: str, payload: dict) -> dict:
        """Publish ``event`` with ``payload`` to every client joined to ``room``.

        Returns:
            dict with keys: status ("sent" or "failed"), error (optional)
        """
        ...
