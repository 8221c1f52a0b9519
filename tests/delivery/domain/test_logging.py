"""Request-scoped logging context."""

import structlog
from delivery.utils.logging import bind_request, clear_context, get_log_level


class TestBindRequest:
    def teardown_method(self):
        clear_context()

    def test_forwarded_request_id_is_kept(self):
        assert bind_request("req-42", user_id="agent-1", role="delivery_man") == "req-42"

        assert structlog.contextvars.get_contextvars() == {
            "request_id": "req-42",
            "user_id": "agent-1",
            "role": "delivery_man",
        }

    def test_missing_request_id_is_generated(self):
        first = bind_request()
        second = bind_request()

        assert first and second and first != second
        assert structlog.contextvars.get_contextvars() == {"request_id": second}

    def test_previous_request_context_is_dropped(self):
        bind_request("req-1", user_id="admin-1", path="/deposits")
        bind_request("req-2", user_id="agent-7")

        assert structlog.contextvars.get_contextvars() == {"request_id": "req-2", "user_id": "agent-7"}

    def test_clear_context(self):
        bind_request("req-1")
        clear_context()

        assert structlog.contextvars.get_contextvars() == {}


class TestLogLevel:
    def test_environment_default(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("ENV", raising=False)
        monkeypatch.setenv("ENVIRONMENT", "production")

        assert get_log_level() == "INFO"

    def test_explicit_override(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")

        assert get_log_level() == "ERROR"
