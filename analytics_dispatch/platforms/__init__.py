from analytics_dispatch.platforms.interface import Platform
from analytics_dispatch.platforms.in_memory import InMemoryPlatform
from analytics_dispatch.platforms.jsonl import JSONLPlatform
from analytics_dispatch.platforms.logging_platform import LoggingPlatform
from analytics_dispatch.platforms.posthog_platform import PostHogPlatform

__all__ = ["Platform", "InMemoryPlatform", "JSONLPlatform", "LoggingPlatform", "PostHogPlatform"]
