"""Tests for the Platform base class — lifecycle guards and delivery containment."""

from __future__ import annotations

import pytest

from analytics_dispatch.core.errors import InitError, PlatformAlreadyInitializedError
from analytics_dispatch.core.models import EventRecord, LifecycleState, UserRecord, ViewRecord
from analytics_dispatch.platforms.in_memory import InMemoryPlatform
from analytics_dispatch.platforms.jsonl import JSONLPlatform

EVENT = EventRecord(category="Login", name="Success")


class TestInitialize:
    def test_initialize_moves_to_initialized(self):
        platform = InMemoryPlatform()
        platform.initialize({"token": "x"})
        assert platform.lifecycle is LifecycleState.INITIALIZED
        assert platform.settings == {"token": "x"}

    def test_second_initialize_fails_fast(self):
        platform = InMemoryPlatform()
        platform.initialize({})
        with pytest.raises(PlatformAlreadyInitializedError):
            platform.initialize({})
        assert platform.lifecycle is LifecycleState.INITIALIZED

    def test_setup_exception_wrapped_in_init_error(self):
        platform = InMemoryPlatform(fail_setup=True)
        with pytest.raises(InitError, match="setup refused"):
            platform.initialize({})
        assert platform.lifecycle is LifecycleState.UNINITIALIZED

    def test_missing_required_setting(self):
        platform = JSONLPlatform()
        with pytest.raises(InitError, match="directory"):
            platform.initialize({})


class TestStartStop:
    def test_start_before_initialize_is_noop(self):
        platform = InMemoryPlatform()
        platform.start()
        assert platform.lifecycle is LifecycleState.UNINITIALIZED

    def test_start_stop_cycle(self):
        platform = InMemoryPlatform()
        platform.initialize({})
        platform.start()
        assert platform.lifecycle is LifecycleState.STARTED
        platform.stop()
        assert platform.lifecycle is LifecycleState.STOPPED
        platform.start()
        assert platform.lifecycle is LifecycleState.STARTED

    def test_stop_never_started_is_noop(self):
        platform = InMemoryPlatform()
        platform.initialize({})
        platform.stop()
        assert platform.lifecycle is LifecycleState.INITIALIZED

    def test_start_while_opted_out_is_noop(self):
        platform = InMemoryPlatform()
        platform.initialize({})
        platform.opt_out = True
        platform.start()
        assert platform.lifecycle is LifecycleState.INITIALIZED

    def test_opting_out_stops(self):
        platform = InMemoryPlatform()
        platform.initialize({})
        platform.start()
        platform.opt_out = True
        assert platform.lifecycle is LifecycleState.STOPPED
        assert platform.opt_out_changes == [True]


class TestTrackingGuards:
    def test_track_before_start_does_not_reach_backend(self):
        platform = InMemoryPlatform()
        platform.initialize({})
        assert platform.track_event(EVENT) is False
        assert platform.events == []

    def test_track_when_started(self):
        platform = InMemoryPlatform()
        platform.initialize({})
        platform.start()
        assert platform.track_event(EVENT) is True
        assert platform.track_view(ViewRecord(title="Home")) is True
        assert platform.track_user(UserRecord(identifier="u1")) is True
        assert platform.stop_tracking_user("u1") is True
        assert platform.event_names == ["Login - Success"]
        assert platform.views[0].title == "Home"
        assert platform.users[0].identifier == "u1"
        assert platform.stopped_users == ["u1"]

    def test_track_after_stop_does_not_reach_backend(self):
        platform = InMemoryPlatform()
        platform.initialize({})
        platform.start()
        platform.stop()
        assert platform.track_event(EVENT) is False
        assert platform.events == []

    def test_backend_failure_is_contained(self):
        platform = InMemoryPlatform(fail_deliveries=True)
        platform.initialize({})
        platform.start()
        assert platform.track_event(EVENT) is False
        assert platform.track_view(ViewRecord(title="Home")) is False

    def test_failing_lifecycle_hook_does_not_raise(self, tmp_path):
        platform = JSONLPlatform()
        platform.initialize({"directory": str(tmp_path), "flush_at": 100})
        platform.start()
        platform.track_event(EVENT)
        # Make the flush target unwritable by turning it into a directory.
        platform.path.mkdir()
        platform.stop()
        assert platform.lifecycle is LifecycleState.STOPPED
