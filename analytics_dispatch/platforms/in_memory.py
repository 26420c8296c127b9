"""In-memory recording platform — test double and local inspection backend."""

from __future__ import annotations

from typing import Any, Mapping

from analytics_dispatch.core.errors import DeliveryError
from analytics_dispatch.core.models import EventRecord, UserRecord, ViewRecord
from analytics_dispatch.platforms.interface import Platform


class InMemoryPlatform(Platform):
    """Records every contract call and every delivery for assertions.

    ``calls`` lists each public operation invoked on the platform (whether
    or not it reached the backend); ``events``/``views``/``users``/
    ``stopped_users`` hold what was actually delivered.

    Usage::

        platform = InMemoryPlatform("test", max_parameters=10)
        registry.register(platform, {})
        ...
        assert platform.event_names == ["Login - Success"]
    """

    def __init__(
        self,
        key: str = "memory",
        *,
        max_parameters: int | None = None,
        fail_deliveries: bool = False,
        fail_setup: bool = False,
        raise_through: bool = False,
    ) -> None:
        super().__init__()
        self._key = key
        self.max_parameters = max_parameters
        self.fail_deliveries = fail_deliveries
        self.fail_setup = fail_setup
        # raise from the public track_* methods instead of the hooks
        self.raise_through = raise_through

        self.settings: dict[str, Any] = {}
        self.calls: list[str] = []
        self.events: list[EventRecord] = []
        self.views: list[ViewRecord] = []
        self.users: list[UserRecord] = []
        self.stopped_users: list[str | None] = []
        self.opt_out_changes: list[bool] = []
        self.shutdown_count = 0

    @property
    def key(self) -> str:
        return self._key

    @property
    def event_names(self) -> list[str]:
        return [e.display_event for e in self.events]

    # -- contract entry points (recorded) --------------------------------------

    def initialize(self, settings: Mapping[str, Any]) -> None:
        self.calls.append("initialize")
        super().initialize(settings)

    def start(self) -> None:
        self.calls.append("start")
        super().start()

    def stop(self) -> None:
        self.calls.append("stop")
        super().stop()

    def track_event(self, record: EventRecord) -> bool:
        self.calls.append("track_event")
        self._maybe_raise_through()
        return super().track_event(record)

    def track_view(self, record: ViewRecord) -> bool:
        self.calls.append("track_view")
        self._maybe_raise_through()
        return super().track_view(record)

    def track_user(self, record: UserRecord) -> bool:
        self.calls.append("track_user")
        self._maybe_raise_through()
        return super().track_user(record)

    def stop_tracking_user(self, identifier: str | None = None) -> bool:
        self.calls.append("stop_tracking_user")
        self._maybe_raise_through()
        return super().stop_tracking_user(identifier)

    def track_calls(self) -> list[str]:
        return [c for c in self.calls if c.startswith(("track_", "stop_tracking"))]

    # -- backend hooks ----------------------------------------------------------

    def setup(self, settings: Mapping[str, Any]) -> None:
        if self.fail_setup:
            raise ValueError("setup refused")
        self.settings = dict(settings)

    def send_event(self, record: EventRecord) -> None:
        self._maybe_fail()
        self.events.append(record)

    def send_view(self, record: ViewRecord) -> None:
        self._maybe_fail()
        self.views.append(record)

    def send_user(self, record: UserRecord) -> None:
        self._maybe_fail()
        self.users.append(record)

    def send_stop_tracking_user(self, identifier: str | None) -> None:
        self._maybe_fail()
        self.stopped_users.append(identifier)

    def on_opt_out_changed(self, opt_out: bool) -> None:
        self.opt_out_changes.append(opt_out)

    def shutdown(self) -> None:
        self.shutdown_count += 1

    def clear(self) -> None:
        self.calls.clear()
        self.events.clear()
        self.views.clear()
        self.users.clear()
        self.stopped_users.clear()

    def _maybe_fail(self) -> None:
        if self.fail_deliveries:
            raise DeliveryError(f"{self._key}: backend unavailable")

    def _maybe_raise_through(self) -> None:
        if self.raise_through:
            raise RuntimeError(f"{self._key}: broken adapter")
