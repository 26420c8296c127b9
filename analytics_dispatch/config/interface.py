"""ConfigResolver ABC — no internal deps."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ConfigResolver(ABC):
    """Maps a platform key to that platform's settings.

    Swap to a file/secret-store backed source by implementing this ABC.
    """

    @abstractmethod
    def resolve(self, platform_key: str) -> dict[str, Any]: ...
