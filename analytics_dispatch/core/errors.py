"""Exception taxonomy for platform lifecycle and delivery."""

from __future__ import annotations


class AnalyticsError(Exception):
    """Base class for every error raised by analytics_dispatch."""


class InitError(AnalyticsError):
    """A platform could not be initialized (missing or malformed settings)."""

    def __init__(self, platform_key: str, reason: str) -> None:
        super().__init__(f"Platform '{platform_key}' failed to initialize: {reason}")
        self.platform_key = platform_key
        self.reason = reason


class PlatformAlreadyInitializedError(AnalyticsError, RuntimeError):
    """``initialize`` was called on a platform that already ran it."""

    def __init__(self, platform_key: str) -> None:
        super().__init__(f"Platform '{platform_key}' is already initialized")
        self.platform_key = platform_key


class DeliveryError(AnalyticsError):
    """A backend rejected or failed a single delivery."""
