"""PostHog platform adapter."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping

from analytics_dispatch.core.models import EventRecord, UserRecord, ViewRecord
from analytics_dispatch.platforms.interface import Platform

logger = logging.getLogger(__name__)


class PostHogPlatform(Platform):
    """Wraps the PostHog SDK behind the Platform contract.

    Events and views are captured under their display names against the
    current distinct id: the tracked user's identifier, or an anonymous id
    until ``track_user`` is called and again after ``stop_tracking_user``.
    The SDK client's own ``disabled`` switch follows start/stop and the
    opt-out flag.

    Settings:
      api_key       — required, PostHog project API key
      host          — optional, e.g. ``https://eu.i.posthog.com``
      app_version   — optional, attached to every capture as ``app_version``
      anonymous_id  — optional, distinct id used before a user is tracked
      debug         — optional bool, enables SDK debug logging
    """

    required_settings = ("api_key",)

    def __init__(self, client: Any | None = None) -> None:
        super().__init__()
        self._client = client
        self._base_properties: dict[str, Any] = {}
        self._anonymous_id = str(uuid.uuid4())
        self._distinct_id = self._anonymous_id

    @property
    def key(self) -> str:
        return "posthog"

    @property
    def distinct_id(self) -> str:
        return self._distinct_id

    def setup(self, settings: Mapping[str, Any]) -> None:
        if self._client is None:
            # Late import so the rest of the package works without posthog installed
            from posthog import Posthog

            kwargs: dict[str, Any] = {"debug": bool(settings.get("debug", False))}
            if settings.get("host"):
                kwargs["host"] = settings["host"]
            self._client = Posthog(settings["api_key"], **kwargs)

        # SDK stays disabled until start()
        self._client.disabled = True

        if settings.get("app_version"):
            self._base_properties["app_version"] = str(settings["app_version"])
        if settings.get("anonymous_id"):
            self._anonymous_id = str(settings["anonymous_id"])
            self._distinct_id = self._anonymous_id
        logger.info("PostHog platform configured (host=%s)", settings.get("host", "default"))

    def on_start(self) -> None:
        self._client.disabled = False

    def on_stop(self) -> None:
        self._client.disabled = True

    def on_opt_out_changed(self, opt_out: bool) -> None:
        if opt_out:
            self._client.disabled = True

    def send_event(self, record: EventRecord) -> None:
        self._capture(record.display_event, record.parameters)

    def send_view(self, record: ViewRecord) -> None:
        self._capture(record.display_event, None)

    def send_user(self, record: UserRecord) -> None:
        self._distinct_id = record.identifier
        properties: dict[str, Any] = {"email": record.email_or_sentinel}
        if record.full_name:
            properties["name"] = record.full_name
        if record.parameters:
            properties.update(record.parameters)
        self._client.set(distinct_id=record.identifier, properties=properties)

    def send_stop_tracking_user(self, identifier: str | None) -> None:
        self._distinct_id = self._anonymous_id

    def shutdown(self) -> None:
        if self._client is not None:
            self._client.shutdown()

    def _capture(self, event: str, parameters: Mapping[str, Any] | None) -> None:
        properties = {**self._base_properties, **(parameters or {})}
        self._client.capture(
            distinct_id=self._distinct_id,
            event=event,
            properties=properties,
        )
