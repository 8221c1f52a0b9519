"""In-memory realtime adapter used in tests and development."""

from uuid import uuid4

from delivery.realtime.port import RealtimePort


class FakeRealtimeAdapter(RealtimePort):
    """Realtime adapter that keeps every publication for test assertions."""

    def __init__(self):
        self.published: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Realtime transport unavailable"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Realtime transport unavailable"):
        """Configure the fake adapter behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def publish(self, room: str, event: str, payload: dict) -> dict:
        if not self.should_succeed:
            return {"status": "failed", "error": self.failure_reason}

        message_id = f"rt-{uuid4().hex[:12]}"
        self.published.append(
            {
                "message_id": message_id,
                "room": room,
                "event": event,
                "payload": payload,
            }
        )
        return {"message_id": message_id, "status": "sent"}

    def events_in(self, room: str) -> list[dict]:
        return [p for p in self.published if p["room"] == room]

    def reset(self):
        """Clear publications (useful between tests)."""
        self.published.clear()
        self.should_succeed = True
        self.failure_reason = "Realtime transport unavailable"
