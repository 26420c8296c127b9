"""In-memory and environment-variable config resolvers."""

from __future__ import annotations

import os
from typing import Any, Mapping

from analytics_dispatch.config.interface import ConfigResolver


class DictConfigResolver(ConfigResolver):
    """Dict-backed resolver: ``{"posthog": {"api_key": ...}, ...}``."""

    def __init__(self, config: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._config = {k.lower(): dict(v) for k, v in (config or {}).items()}

    def resolve(self, platform_key: str) -> dict[str, Any]:
        return dict(self._config.get(platform_key.lower(), {}))


class EnvConfigResolver(ConfigResolver):
    """Reads ``{prefix}{KEY}_{NAME}`` variables into ``{name: value}``.

    ``ANALYTICS_POSTHOG_API_KEY=phc_x`` resolves to
    ``{"api_key": "phc_x"}`` for the ``posthog`` platform. ``true``/``false``
    and integer strings are coerced.
    """

    def __init__(self, prefix: str = "ANALYTICS_", environ: Mapping[str, str] | None = None) -> None:
        self._prefix = prefix
        self._environ = environ if environ is not None else os.environ

    def resolve(self, platform_key: str) -> dict[str, Any]:
        head = f"{self._prefix}{platform_key.upper()}_"
        settings: dict[str, Any] = {}
        for name, raw in self._environ.items():
            if name.startswith(head) and len(name) > len(head):
                settings[name[len(head):].lower()] = _coerce(raw)
        return settings


def _coerce(raw: str) -> Any:
    lowered = raw.strip().lower()
    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False
    try:
        return int(raw)
    except ValueError:
        return raw
