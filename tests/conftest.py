"""Shared fixtures for analytics_dispatch tests."""

from __future__ import annotations

import pytest

from analytics_dispatch.core.dispatcher import Dispatcher
from analytics_dispatch.core.registry import PlatformRegistry
from analytics_dispatch.platforms.in_memory import InMemoryPlatform


@pytest.fixture
def registry():
    return PlatformRegistry()


@pytest.fixture
def alpha():
    return InMemoryPlatform("alpha")


@pytest.fixture
def beta():
    return InMemoryPlatform("beta")


@pytest.fixture
def dispatcher(registry, alpha, beta):
    registry.register(alpha, {})
    registry.register(beta, {})
    d = Dispatcher(registry)
    d.start()
    return d


class FakePostHogClient:
    """Stands in for ``posthog.Posthog``; records calls."""

    def __init__(self) -> None:
        self.disabled = False
        self.captured: list[dict] = []
        self.sets: list[dict] = []
        self.shutdown_called = False

    def capture(self, **kwargs) -> None:
        self.captured.append(kwargs)

    def set(self, **kwargs) -> None:
        self.sets.append(kwargs)

    def shutdown(self) -> None:
        self.shutdown_called = True


@pytest.fixture
def posthog_client():
    return FakePostHogClient()
