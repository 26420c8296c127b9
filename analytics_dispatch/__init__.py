"""analytics_dispatch — fan analytics events out to independently configured platforms.

Usage::

    from analytics_dispatch import create_dispatcher

    dispatcher = create_dispatcher()
    dispatcher.track_event("Login", "Success", {"method": "password"})
    dispatcher.set_opt_out(True)   # nothing reaches any platform from here on
    dispatcher.shutdown()
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Sequence

from dotenv import load_dotenv

load_dotenv()  # reads .env into os.environ (no-op if file missing)

from analytics_dispatch.config.interface import ConfigResolver
from analytics_dispatch.config.resolvers import EnvConfigResolver
from analytics_dispatch.core.dispatcher import Dispatcher
from analytics_dispatch.core.models import EventRecord, LifecycleState, UserRecord, ViewRecord
from analytics_dispatch.core.registry import PlatformRegistry
from analytics_dispatch.core.views import ViewTitleResolver
from analytics_dispatch.platforms.interface import Platform
from analytics_dispatch.platforms.jsonl import JSONLPlatform
from analytics_dispatch.platforms.logging_platform import LoggingPlatform
from analytics_dispatch.platforms.posthog_platform import PostHogPlatform

logger = logging.getLogger(__name__)

__all__ = [
    "Dispatcher",
    "EventRecord",
    "LifecycleState",
    "Platform",
    "PlatformRegistry",
    "UserRecord",
    "ViewRecord",
    "PLATFORM_TYPES",
    "create_dispatcher",
]

PLATFORM_TYPES: dict[str, Callable[[], Platform]] = {
    "logging": LoggingPlatform,
    "jsonl": JSONLPlatform,
    "posthog": PostHogPlatform,
}


def create_dispatcher(
    *,
    platforms: Sequence[str | Platform] | None = None,
    config_resolver: ConfigResolver | None = None,
    title_resolver: ViewTitleResolver | None = None,
    opt_out: bool | None = None,
    start: bool = True,
) -> Dispatcher:
    """Wire a registry + dispatcher and register the requested platforms.

    Environment variables (all optional):
      ANALYTICS_PLATFORMS      — comma list of platform keys, default ``logging``
      ANALYTICS_OPT_OUT        — set to ``1`` to start opted out
      ANALYTICS_<KEY>_<NAME>   — per-platform settings, see EnvConfigResolver
    """
    if platforms is None:
        names = os.environ.get("ANALYTICS_PLATFORMS", "logging")
        platforms = [n.strip().lower() for n in names.split(",") if n.strip()]
    if opt_out is None:
        opt_out = os.environ.get("ANALYTICS_OPT_OUT") == "1"

    registry = PlatformRegistry(
        config_resolver=config_resolver or EnvConfigResolver(),
        opt_out=opt_out,
    )

    for entry in platforms:
        if isinstance(entry, Platform):
            registry.register(entry)
            continue
        factory = PLATFORM_TYPES.get(entry)
        if factory is None:
            logger.warning("Unknown analytics platform %r — skipped", entry)
            continue
        registry.register(factory())

    dispatcher = Dispatcher(registry, title_resolver=title_resolver)
    if start:
        dispatcher.start()
    return dispatcher
