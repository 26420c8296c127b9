"""Tests for the bundled platforms: logging, JSONL and PostHog."""

from __future__ import annotations

import json
import logging

import pytest

from analytics_dispatch.core.dispatcher import Dispatcher
from analytics_dispatch.core.errors import DeliveryError, InitError
from analytics_dispatch.core.registry import PlatformRegistry
from analytics_dispatch.platforms.jsonl import JSONLPlatform
from analytics_dispatch.platforms.logging_platform import LoggingPlatform
from analytics_dispatch.platforms.posthog_platform import PostHogPlatform


def _started(platform, settings) -> Dispatcher:
    registry = PlatformRegistry()
    registry.register(platform, settings)
    d = Dispatcher(registry)
    d.start()
    return d


class TestLoggingPlatform:
    def test_events_logged_at_configured_level(self, caplog):
        d = _started(LoggingPlatform(), {"log_level": "warning"})
        with caplog.at_level(logging.WARNING, logger="analytics_dispatch.events"):
            d.track_event("Login", "Success", {"method": "sso"})
            d.track_view("Home")
            d.track_user("u1")

        messages = [r.getMessage() for r in caplog.records if r.name == "analytics_dispatch.events"]
        assert "Login - Success" in messages[0]
        assert "'method': 'sso'" in messages[0]
        assert messages[1] == "event=TrackView - Home"
        assert "email=unknown-email" in messages[2]

    def test_unknown_level_fails_init(self):
        registry = PlatformRegistry()
        state = registry.register(LoggingPlatform(), {"log_level": "chatty"})
        assert state.disabled


class TestJSONLPlatform:
    def test_writes_on_stop(self, tmp_path):
        platform = JSONLPlatform()
        d = _started(platform, {"directory": str(tmp_path / "out")})

        d.track_event("Login", "Success", {"a": 1})
        d.track_view("Home")
        d.track_user("u1", full_name="Ada")
        d.stop_tracking_user("u1")
        assert not platform.path.exists()

        d.stop()
        lines = [json.loads(line) for line in platform.path.read_text().splitlines()]
        assert [entry["type"] for entry in lines] == ["event", "view", "user", "stop_tracking_user"]
        assert lines[0]["event"] == "Login - Success"
        assert lines[0]["parameters"] == {"a": 1}
        assert lines[1]["event"] == "TrackView - Home"
        assert lines[2]["email"] == "unknown-email"

    def test_flush_at_threshold(self, tmp_path):
        platform = JSONLPlatform()
        d = _started(platform, {"directory": str(tmp_path), "flush_at": 2, "filename": "x.jsonl"})
        d.track_event("a", "1")
        d.track_event("a", "2")
        assert platform.path.name == "x.jsonl"
        assert len(platform.path.read_text().splitlines()) == 2

    def test_shutdown_flushes(self, tmp_path):
        platform = JSONLPlatform()
        d = _started(platform, {"directory": str(tmp_path)})
        d.track_event("a", "1")
        d.shutdown()
        assert len(platform.path.read_text().splitlines()) == 1

    def test_failed_flush_keeps_entries(self, tmp_path):
        platform = JSONLPlatform()
        d = _started(platform, {"directory": str(tmp_path), "flush_at": 100})
        d.track_event("a", "1")
        d.track_event("a", "2")
        # A directory in place of the file makes the append fail.
        platform.path.mkdir()
        with pytest.raises(DeliveryError):
            platform.flush()

        platform.path.rmdir()
        d.track_event("a", "3")
        d.shutdown()
        names = [json.loads(line)["name"] for line in platform.path.read_text().splitlines()]
        assert names == ["1", "2", "3"]

    def test_missing_directory_disables(self):
        registry = PlatformRegistry()
        state = registry.register(JSONLPlatform(), {})
        assert state.disabled
        assert "directory" in state.error


class TestPostHogPlatform:
    def test_requires_api_key(self, posthog_client):
        platform = PostHogPlatform(client=posthog_client)
        with pytest.raises(InitError, match="api_key"):
            platform.initialize({})

    def test_client_disabled_follows_lifecycle(self, posthog_client):
        platform = PostHogPlatform(client=posthog_client)
        platform.initialize({"api_key": "phc_test"})
        assert posthog_client.disabled is True
        platform.start()
        assert posthog_client.disabled is False
        platform.stop()
        assert posthog_client.disabled is True

    def test_opt_out_disables_client(self, posthog_client):
        platform = PostHogPlatform(client=posthog_client)
        d = _started(platform, {"api_key": "phc_test"})
        d.set_opt_out(True)
        assert posthog_client.disabled is True
        d.set_opt_out(False)
        assert posthog_client.disabled is False

    def test_capture_uses_display_names(self, posthog_client):
        platform = PostHogPlatform(client=posthog_client)
        d = _started(platform, {"api_key": "phc_test", "anonymous_id": "anon", "app_version": "1.2.3"})

        d.track_event("Login", "Success", {"method": "sso"})
        d.track_view("Home")

        first, second = posthog_client.captured
        assert first == {
            "distinct_id": "anon",
            "event": "Login - Success",
            "properties": {"app_version": "1.2.3", "method": "sso"},
        }
        assert second["event"] == "TrackView - Home"

    def test_user_identity_and_reset(self, posthog_client):
        platform = PostHogPlatform(client=posthog_client)
        d = _started(platform, {"api_key": "phc_test", "anonymous_id": "anon"})

        d.track_user("u1", None, "Ada", {"plan": "pro"})
        d.track_event("c", "n")
        d.stop_tracking_user("u1")
        d.track_event("c", "after")

        assert posthog_client.sets == [{
            "distinct_id": "u1",
            "properties": {"email": "unknown-email", "name": "Ada", "plan": "pro"},
        }]
        assert [c["distinct_id"] for c in posthog_client.captured] == ["u1", "anon"]

    def test_shutdown_flushes_client(self, posthog_client):
        d = _started(PostHogPlatform(client=posthog_client), {"api_key": "phc_test"})
        d.shutdown()
        assert posthog_client.shutdown_called
