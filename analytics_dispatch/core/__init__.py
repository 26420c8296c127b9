from analytics_dispatch.core.models import (
    UNKNOWN_EMAIL,
    EventRecord,
    LifecycleState,
    ParameterPolicy,
    PlatformStatus,
    UserRecord,
    ViewRecord,
)
from analytics_dispatch.core.errors import (
    AnalyticsError,
    DeliveryError,
    InitError,
    PlatformAlreadyInitializedError,
)
from analytics_dispatch.core.views import DefaultTitleResolver, ViewTitleResolver
from analytics_dispatch.core.registry import PlatformRegistry, PlatformState
from analytics_dispatch.core.dispatcher import Dispatcher

__all__ = [
    "AnalyticsError",
    "DefaultTitleResolver",
    "DeliveryError",
    "Dispatcher",
    "EventRecord",
    "InitError",
    "LifecycleState",
    "ParameterPolicy",
    "PlatformAlreadyInitializedError",
    "PlatformRegistry",
    "PlatformState",
    "PlatformStatus",
    "UNKNOWN_EMAIL",
    "UserRecord",
    "ViewRecord",
    "ViewTitleResolver",
]
