"""Pluggable socket transport for live updates."""

import os

_publisher_instance = None


def get_publisher():
    """Return the configured realtime adapter (singleton).

    Uses FakeRealtimeAdapter by default. Select another adapter with the
    REALTIME_ADAPTER environment variable.
    """
    global _publisher_instance
    if _publisher_instance is None:
        adapter = os.environ.get("REALTIME_ADAPTER", "fake")
        if adapter == "fake":
            from delivery.realtime.fake_adapter import FakeRealtimeAdapter

            _publisher_instance = FakeRealtimeAdapter()
        else:
            raise ValueError(f"Unknown realtime adapter: {adapter}")
    return _publisher_instance


def reset_publisher():
    """Reset the realtime singleton (useful for testing)."""
    global _publisher_instance
    _publisher_instance = None
