"""ViewTitleResolver ABC + default attribute-based implementation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ViewTitleResolver(ABC):
    """Reduces an application view object to an opaque title string."""

    @abstractmethod
    def title_for(self, view_handle: Any) -> str: ...


class DefaultTitleResolver(ViewTitleResolver):
    """Strings pass through; objects use ``.title`` or their class name."""

    def title_for(self, view_handle: Any) -> str:
        if isinstance(view_handle, str):
            return view_handle
        title = getattr(view_handle, "title", None)
        if isinstance(title, str) and title:
            return title
        return type(view_handle).__name__
