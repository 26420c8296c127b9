"""JSONL file-based platform."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Mapping

from analytics_dispatch.core.errors import DeliveryError
from analytics_dispatch.core.models import EventRecord, UserRecord, ViewRecord
from analytics_dispatch.platforms.interface import Platform

logger = logging.getLogger(__name__)


class JSONLPlatform(Platform):
    """Appends deliveries to ``{directory}/{filename}`` as JSON lines.

    Entries are buffered in memory and written when the buffer reaches
    ``flush_at`` entries, when the platform stops, and on shutdown.

    Settings:
      directory  — required
      filename   — default ``events.jsonl``
      flush_at   — default 50
    """

    required_settings = ("directory",)

    def __init__(self) -> None:
        super().__init__()
        self._path: Path | None = None
        self._flush_at = 50
        self._buffer: list[dict[str, Any]] = []

    @property
    def key(self) -> str:
        return "jsonl"

    @property
    def path(self) -> Path | None:
        return self._path

    def setup(self, settings: Mapping[str, Any]) -> None:
        directory = Path(settings["directory"])
        directory.mkdir(parents=True, exist_ok=True)
        self._path = directory / settings.get("filename", "events.jsonl")
        self._flush_at = max(int(settings.get("flush_at", 50)), 1)

    def send_event(self, record: EventRecord) -> None:
        self._append({
            "type": "event",
            "event": record.display_event,
            "category": record.category,
            "name": record.name,
            "parameters": record.parameters,
            "truncated": record.truncated,
        })

    def send_view(self, record: ViewRecord) -> None:
        self._append({"type": "view", "event": record.display_event, "title": record.title})

    def send_user(self, record: UserRecord) -> None:
        self._append({
            "type": "user",
            "identifier": record.identifier,
            "email": record.email_or_sentinel,
            "full_name": record.full_name,
            "parameters": record.parameters,
        })

    def send_stop_tracking_user(self, identifier: str | None) -> None:
        self._append({"type": "stop_tracking_user", "identifier": identifier})

    def on_stop(self) -> None:
        self.flush()

    def shutdown(self) -> None:
        self.flush()

    def flush(self) -> None:
        """Write buffered entries; on failure they stay buffered for the next flush."""
        entries, self._buffer = self._buffer, []
        if not entries or self._path is None:
            return
        lines = "".join(json.dumps(entry, default=str) + "\n" for entry in entries)
        try:
            with open(self._path, "a") as f:
                f.write(lines)
        except OSError as exc:
            self._buffer = entries + self._buffer
            logger.warning("Kept %d buffered entries after failed write to %s", len(entries), self._path)
            raise DeliveryError(f"could not write {self._path}: {exc}") from exc

    def _append(self, entry: dict[str, Any]) -> None:
        self._buffer.append({"ts": time.time(), **entry})
        if len(self._buffer) >= self._flush_at:
            self.flush()
