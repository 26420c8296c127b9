"""Dispatcher — the single entry point the application reports through."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from pydantic import ValidationError

from analytics_dispatch.core.models import (
    EventRecord,
    ParameterPolicy,
    PlatformStatus,
    UserRecord,
    ViewRecord,
)
from analytics_dispatch.core.registry import PlatformRegistry, PlatformState
from analytics_dispatch.core.views import DefaultTitleResolver, ViewTitleResolver
from analytics_dispatch.platforms.interface import Platform

logger = logging.getLogger(__name__)

_SCALARS = (str, bool, int, float)


class Dispatcher:
    """Public API: ``dispatcher.track_event("Login", "Success", {...})``.

    ``track_*`` calls never raise and never block on a backend beyond the
    platform's own call. When opted out they return before touching the
    registry snapshot.
    """

    def __init__(
        self,
        registry: PlatformRegistry,
        title_resolver: ViewTitleResolver | None = None,
    ) -> None:
        self._registry = registry
        self._titles = title_resolver or DefaultTitleResolver()

    @property
    def registry(self) -> PlatformRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Tracking
    # ------------------------------------------------------------------

    def track_event(
        self,
        category: str,
        name: str,
        parameters: Mapping[str, Any] | None = None,
    ) -> None:
        if self._registry.opt_out:
            return
        try:
            record = EventRecord(
                category=category,
                name=name,
                parameters=_clean_parameters(parameters, f"{category} - {name}"),
            )
        except (ValidationError, TypeError, AttributeError) as exc:
            logger.warning("Dropped invalid event %r/%r: %s", category, name, exc)
            return

        for state in self._registry.snapshot():
            bounded = self._apply_ceiling(state, record)
            if bounded is None:
                continue
            self._deliver(state, "event", lambda p, r=bounded: p.track_event(r))

    def track_view(self, view_handle: Any) -> None:
        if self._registry.opt_out:
            return
        try:
            record = ViewRecord(title=self._titles.title_for(view_handle))
        except Exception as exc:
            logger.warning("Dropped view %r: %s", view_handle, exc)
            return
        self._fan_out("view", lambda p: p.track_view(record))

    def track_user(
        self,
        identifier: str,
        email: str | None = None,
        full_name: str | None = None,
        parameters: Mapping[str, Any] | None = None,
    ) -> None:
        if self._registry.opt_out:
            return
        try:
            record = UserRecord(
                identifier=identifier,
                email_address=email,
                full_name=full_name,
                parameters=_clean_parameters(parameters, f"user {identifier}"),
            )
        except (ValidationError, TypeError, AttributeError) as exc:
            logger.warning("Dropped invalid user %r: %s", identifier, exc)
            return
        self._fan_out("user", lambda p: p.track_user(record))

    def stop_tracking_user(self, identifier: str | None = None) -> None:
        if self._registry.opt_out:
            return
        self._fan_out("stop_tracking_user", lambda p: p.stop_tracking_user(identifier))

    # ------------------------------------------------------------------
    # Opt-out and lifecycle
    # ------------------------------------------------------------------

    @property
    def opt_out(self) -> bool:
        return self._registry.opt_out

    def get_opt_out(self) -> bool:
        return self._registry.opt_out

    def set_opt_out(self, value: bool) -> None:
        self._registry.set_opt_out(bool(value))

    def start(self) -> None:
        self._registry.start_all()

    def stop(self) -> None:
        self._registry.stop_all()

    def shutdown(self) -> None:
        self._registry.shutdown()

    def platform_statuses(self) -> list[PlatformStatus]:
        return [s.status() for s in self._registry.states()]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _apply_ceiling(self, state: PlatformState, record: EventRecord) -> EventRecord | None:
        limit = state.max_parameters
        params = record.parameters
        if limit is None or not params or len(params) <= limit:
            return record

        if state.policy is ParameterPolicy.STRICT:
            logger.warning(
                "platform=%s skipped %r: %d parameters exceed limit %d",
                state.key, record.display_event, len(params), limit,
            )
            self._registry.record(state, "rejected")
            return None

        kept = dict(list(params.items())[:limit])
        logger.warning(
            "platform=%s truncated %r parameters %d -> %d (dropped %s)",
            state.key, record.display_event, len(params), limit,
            sorted(set(params) - set(kept)),
        )
        self._registry.record(state, "truncated")
        return record.model_copy(update={"parameters": kept, "truncated": True})

    def _fan_out(self, kind: str, call: Callable[[Platform], bool]) -> None:
        for state in self._registry.snapshot():
            self._deliver(state, kind, call)

    def _deliver(self, state: PlatformState, kind: str, call: Callable[[Platform], bool]) -> None:
        try:
            delivered = call(state.platform)
        except Exception:
            logger.exception("platform=%s kind=%s raised during dispatch", state.key, kind)
            self._registry.record(state, "failed")
            return
        self._registry.record(state, "delivered" if delivered else "undelivered")


def _clean_parameters(parameters: Mapping[str, Any] | None, label: str) -> dict[str, Any] | None:
    """Drop entries a backend could not represent, keeping insertion order."""
    if parameters is None:
        return None
    cleaned: dict[str, Any] = {}
    for key, value in parameters.items():
        if isinstance(key, str) and isinstance(value, _SCALARS):
            cleaned[key] = value
        else:
            logger.warning("Dropped malformed parameter %r=%r on %s", key, value, label)
    return cleaned
