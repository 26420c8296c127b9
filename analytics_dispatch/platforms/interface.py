"""Platform ABC — the capability contract every analytics backend implements.

Public operations (``initialize``, ``start``, ``stop``, ``track_*``) are
concrete and guarded here; subclasses only fill in the backend hooks
(``setup``, ``send_*`` and the optional ``on_*`` callbacks).
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Mapping

from analytics_dispatch.core.errors import InitError, PlatformAlreadyInitializedError
from analytics_dispatch.core.models import EventRecord, LifecycleState, UserRecord, ViewRecord

logger = logging.getLogger(__name__)


class Platform(ABC):
    """One analytics backend.

    Lifecycle: ``uninitialized -> initialized -> started <-> stopped``.
    Every ``track_*`` call re-checks the lifecycle and opt-out flag under
    the platform lock, so a platform that was stopped (or opted out) while
    a dispatch was in flight never reaches its backend.
    """

    #: Backend ceiling on event parameters; ``None`` means unlimited.
    max_parameters: int | None = None
    #: Settings keys that must be present for ``initialize`` to succeed.
    required_settings: tuple[str, ...] = ()

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._lifecycle = LifecycleState.UNINITIALIZED
        self._opt_out = False

    # -- identity -----------------------------------------------------------

    @property
    @abstractmethod
    def key(self) -> str: ...

    @property
    def lifecycle(self) -> LifecycleState:
        return self._lifecycle

    @property
    def is_active(self) -> bool:
        return self._lifecycle is LifecycleState.STARTED and not self._opt_out

    # -- backend hooks --------------------------------------------------------

    @abstractmethod
    def setup(self, settings: Mapping[str, Any]) -> None:
        """Bring the backend SDK up, ready but not yet collecting."""

    @abstractmethod
    def send_event(self, record: EventRecord) -> None: ...

    @abstractmethod
    def send_view(self, record: ViewRecord) -> None: ...

    @abstractmethod
    def send_user(self, record: UserRecord) -> None: ...

    @abstractmethod
    def send_stop_tracking_user(self, identifier: str | None) -> None: ...

    def on_start(self) -> None:
        """Called after the platform enters ``started``."""

    def on_stop(self) -> None:
        """Called after the platform leaves ``started``."""

    def on_opt_out_changed(self, opt_out: bool) -> None:
        """Called whenever the opt-out flag changes value."""

    def shutdown(self) -> None:
        """Flush and release backend resources. Called once on teardown."""

    # -- lifecycle ------------------------------------------------------------

    def initialize(self, settings: Mapping[str, Any]) -> None:
        with self._lock:
            if self._lifecycle is not LifecycleState.UNINITIALIZED:
                raise PlatformAlreadyInitializedError(self.key)

            missing = [name for name in self.required_settings if settings.get(name) in (None, "")]
            if missing:
                raise InitError(self.key, f"missing settings: {', '.join(missing)}")

            try:
                self.setup(settings)
            except InitError:
                raise
            except Exception as exc:
                raise InitError(self.key, str(exc)) from exc

            self._lifecycle = LifecycleState.INITIALIZED
            logger.info("platform=%s initialized", self.key)

    def start(self) -> None:
        with self._lock:
            if self._opt_out:
                return
            if self._lifecycle not in (LifecycleState.INITIALIZED, LifecycleState.STOPPED):
                return
            self._lifecycle = LifecycleState.STARTED
            self._run_hook(self.on_start)
            logger.info("platform=%s started", self.key)

    def stop(self) -> None:
        with self._lock:
            if self._lifecycle is not LifecycleState.STARTED:
                return
            self._lifecycle = LifecycleState.STOPPED
            self._run_hook(self.on_stop)
            logger.info("platform=%s stopped", self.key)

    @property
    def opt_out(self) -> bool:
        return self._opt_out

    @opt_out.setter
    def opt_out(self, value: bool) -> None:
        with self._lock:
            if value == self._opt_out:
                return
            if value:
                self.stop()
            self._opt_out = value
            self._run_hook(self.on_opt_out_changed, value)

    # -- tracking -------------------------------------------------------------

    def track_event(self, record: EventRecord) -> bool:
        return self._deliver("event", self.send_event, record)

    def track_view(self, record: ViewRecord) -> bool:
        return self._deliver("view", self.send_view, record)

    def track_user(self, record: UserRecord) -> bool:
        return self._deliver("user", self.send_user, record)

    def stop_tracking_user(self, identifier: str | None = None) -> bool:
        return self._deliver("stop_tracking_user", self.send_stop_tracking_user, identifier)

    def _deliver(self, kind: str, hook: Callable[[Any], None], payload: Any) -> bool:
        """Run *hook* if the platform is active. Returns True on delivery."""
        with self._lock:
            if not self.is_active:
                return False
            try:
                hook(payload)
            except Exception as exc:
                logger.warning("platform=%s kind=%s delivery failed: %s", self.key, kind, exc)
                return False
            return True

    def _run_hook(self, hook: Callable[..., None], *args: Any) -> None:
        try:
            hook(*args)
        except Exception as exc:
            logger.warning("platform=%s %s failed: %s", self.key, hook.__name__, exc)
