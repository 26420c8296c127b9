"""Platform registry — ownership, lifecycle transitions, and the opt-out flag."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Mapping

from analytics_dispatch.config.interface import ConfigResolver
from analytics_dispatch.config.resolvers import DictConfigResolver
from analytics_dispatch.core.models import LifecycleState, ParameterPolicy, PlatformStatus
from analytics_dispatch.platforms.interface import Platform

logger = logging.getLogger(__name__)

COUNTERS = ("delivered", "undelivered", "failed", "truncated", "rejected")


@dataclass
class PlatformState:
    """Registration record for a single platform. Owned by the registry."""

    platform: Platform
    max_parameters: int | None = None
    policy: ParameterPolicy = ParameterPolicy.TRUNCATE
    disabled: bool = False
    error: str | None = None
    # set by start_all, cleared by stop_all; opt-in restarts only these
    resume_on_opt_in: bool = False
    delivered: int = 0
    undelivered: int = 0
    failed: int = 0
    truncated: int = 0
    rejected: int = 0

    @property
    def key(self) -> str:
        return self.platform.key

    @property
    def lifecycle(self) -> LifecycleState:
        return self.platform.lifecycle

    def status(self) -> PlatformStatus:
        return PlatformStatus(
            key=self.key,
            lifecycle=self.lifecycle,
            disabled=self.disabled,
            error=self.error,
            max_parameters=self.max_parameters,
            policy=self.policy,
            **{name: getattr(self, name) for name in COUNTERS},
        )


class PlatformRegistry:
    """Central platform store with a single lock around every transition.

    ``opt_out`` is the one source of truth: changing it stops or starts
    every enabled platform before the lock is released, so a dispatch never
    observes a half-applied toggle. Opting back in restarts only the
    platforms the application asked to run through ``start_all``.
    ``shutdown`` is final; afterwards nothing can be started or dispatched.
    """

    def __init__(self, config_resolver: ConfigResolver | None = None, opt_out: bool = False) -> None:
        self._config = config_resolver or DictConfigResolver()
        self._lock = threading.RLock()
        self._states: dict[str, PlatformState] = {}
        self._opt_out = opt_out
        self._closed = False

    # -- registration -------------------------------------------------------

    def register(self, platform: Platform, settings: Mapping[str, Any] | None = None) -> PlatformState:
        key = platform.key
        with self._lock:
            if key in self._states:
                raise ValueError(f"Platform '{key}' is already registered")

            state = PlatformState(platform=platform, max_parameters=platform.max_parameters)
            self._states[key] = state

            if self._closed:
                state.disabled = True
                state.error = "registry is shut down"
                logger.warning("Platform %s registered after shutdown; disabled", key)
                return state

            try:
                resolved = dict(settings) if settings is not None else self._config.resolve(key)
                state.max_parameters = _read_ceiling(resolved, platform.max_parameters)
                state.policy = ParameterPolicy(resolved.get("parameter_policy", ParameterPolicy.TRUNCATE))
                platform.initialize(resolved)
                platform.opt_out = self._opt_out
            except Exception as exc:
                state.disabled = True
                state.error = str(exc)
                logger.error("Disabled platform %s: %s", key, exc)
                return state

            logger.info(
                "Registered platform %s (max_parameters=%s, policy=%s)",
                key, state.max_parameters, state.policy.value,
            )
            return state

    def unregister(self, key: str) -> None:
        with self._lock:
            state = self._states.pop(key, None)
            if state is None or state.disabled:
                return
            state.platform.stop()
            try:
                state.platform.shutdown()
            except Exception as exc:
                logger.warning("Shutdown of platform %s failed: %s", key, exc)
            logger.info("Unregistered platform %s", key)

    def get(self, key: str) -> PlatformState | None:
        return self._states.get(key)

    def states(self) -> list[PlatformState]:
        with self._lock:
            return list(self._states.values())

    def snapshot(self) -> tuple[PlatformState, ...]:
        """Started, enabled platforms in registration order."""
        with self._lock:
            if self._closed:
                return ()
            return tuple(
                s for s in self._states.values()
                if not s.disabled and s.lifecycle is LifecycleState.STARTED
            )

    # -- opt-out ------------------------------------------------------------

    @property
    def opt_out(self) -> bool:
        return self._opt_out

    @property
    def closed(self) -> bool:
        return self._closed

    def set_opt_out(self, value: bool) -> None:
        with self._lock:
            if self._closed or value == self._opt_out:
                return
            self._opt_out = value
            for state in self._enabled():
                # setting True stops the platform; setting False only clears the flag
                state.platform.opt_out = value
            if not value:
                for state in self._enabled():
                    if state.resume_on_opt_in:
                        state.platform.start()
            logger.info("Analytics opt-out set to %s", value)

    # -- bulk lifecycle -----------------------------------------------------

    def start_all(self) -> None:
        """Start every enabled platform; while opted out, only mark them for opt-in."""
        with self._lock:
            if self._closed:
                return
            for state in self._enabled():
                state.resume_on_opt_in = True
            if self._opt_out:
                return
            for state in self._enabled():
                state.platform.start()

    def stop_all(self) -> None:
        with self._lock:
            for state in self._enabled():
                state.resume_on_opt_in = False
                state.platform.stop()

    def shutdown(self) -> None:
        """Stop every platform and release backend resources. Final."""
        with self._lock:
            if self._closed:
                return
            self.stop_all()
            self._closed = True
            for state in self._enabled():
                try:
                    state.platform.shutdown()
                except Exception as exc:
                    logger.warning("Shutdown of platform %s failed: %s", state.key, exc)

    # -- counters -----------------------------------------------------------

    def record(self, state: PlatformState, counter: str, amount: int = 1) -> None:
        with self._lock:
            setattr(state, counter, getattr(state, counter) + amount)

    # -- internals ----------------------------------------------------------

    def _enabled(self) -> list[PlatformState]:
        return [s for s in self._states.values() if not s.disabled]


def _read_ceiling(settings: Mapping[str, Any], declared: int | None) -> int | None:
    value = settings.get("max_parameters", declared)
    if value is None:
        return None
    value = int(value)
    if value < 0:
        raise ValueError(f"max_parameters must be >= 0, got {value}")
    return value
