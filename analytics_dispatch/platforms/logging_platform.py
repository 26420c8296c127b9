"""Logging platform — writes every delivery to the ``logging`` tree."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from analytics_dispatch.core.models import EventRecord, UserRecord, ViewRecord
from analytics_dispatch.platforms.interface import Platform

events_logger = logging.getLogger("analytics_dispatch.events")


class LoggingPlatform(Platform):
    """Emits one log record per delivery on ``analytics_dispatch.events``.

    Settings:
      log_level  — level name or number, default ``INFO``
    """

    def __init__(self) -> None:
        super().__init__()
        self._level = logging.INFO

    @property
    def key(self) -> str:
        return "logging"

    def setup(self, settings: Mapping[str, Any]) -> None:
        level = settings.get("log_level", logging.INFO)
        if isinstance(level, str):
            resolved = logging.getLevelName(level.upper())
            if not isinstance(resolved, int):
                raise ValueError(f"unknown log_level {level!r}")
            level = resolved
        self._level = int(level)

    def send_event(self, record: EventRecord) -> None:
        if record.parameters:
            events_logger.log(
                self._level, "event=%s parameters=%s truncated=%s",
                record.display_event, record.parameters, record.truncated,
            )
        else:
            events_logger.log(self._level, "event=%s", record.display_event)

    def send_view(self, record: ViewRecord) -> None:
        events_logger.log(self._level, "event=%s", record.display_event)

    def send_user(self, record: UserRecord) -> None:
        events_logger.log(
            self._level, "user=%s email=%s name=%s",
            record.identifier, record.email_or_sentinel, record.full_name,
        )

    def send_stop_tracking_user(self, identifier: str | None) -> None:
        events_logger.log(self._level, "user=%s tracking stopped", identifier)
