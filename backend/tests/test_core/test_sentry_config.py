"""Tests for Sentry event scrubbing and sampling."""

from core.sentry_config import _before_send, _before_send_transaction, _traces_sampler


class TestBeforeSend:
    """PII scrubbing applied to every error event."""

    def test_strips_user_pii(self) -> None:
        event = {"user": {"id": 7, "email": "a@example.com", "username": "a"}}

        result = _before_send(event, {})  # type: ignore[arg-type]

        assert result is not None
        assert result["user"] == {"id": 7}

    def test_drops_cookies_and_masks_auth_header(self) -> None:
        event = {
            "request": {
                "cookies": {"refreshToken": "secret"},
                "headers": {"Authorization": "Bearer abc", "Accept": "*/*"},
            }
        }

        result = _before_send(event, {})  # type: ignore[arg-type]

        assert result is not None
        assert "cookies" not in result["request"]
        assert result["request"]["headers"]["Authorization"] == "[Filtered]"
        assert result["request"]["headers"]["Accept"] == "*/*"


class TestSampling:
    """Trace sampling decisions."""

    def test_health_transactions_are_dropped(self) -> None:
        assert _before_send_transaction({"transaction": "/health"}, {}) is None  # type: ignore[arg-type]

    def test_health_checks_are_never_traced(self) -> None:
        assert _traces_sampler({"asgi_scope": {"path": "/health"}}) == 0.0

    def test_auth_endpoints_are_sampled_more(self) -> None:
        assert _traces_sampler({"asgi_scope": {"path": "/api/v1/auth/login"}}) == 0.5
        assert _traces_sampler({"asgi_scope": {"path": "/api/v1/posts"}}) == 0.2

    def test_parent_sampled_is_respected(self) -> None:
        assert _traces_sampler({"parent_sampled": True}) == 1.0
