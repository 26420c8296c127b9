"""Core data models — no internal dependencies, only Pydantic + stdlib."""

from __future__ import annotations

from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field

ParamValue = Union[bool, int, float, str]

UNKNOWN_EMAIL = "unknown-email"


# ---------------------------------------------------------------------------
# Records (application → dispatcher → platforms)
# ---------------------------------------------------------------------------

class EventRecord(BaseModel):
    """A single trackable fact, identified by ``category`` + ``name``."""
    model_config = ConfigDict(frozen=True)

    category: str = Field(min_length=1)
    name: str = Field(min_length=1)
    parameters: dict[str, ParamValue] | None = None
    truncated: bool = False

    @property
    def display_event(self) -> str:
        return f"{self.category} - {self.name}"


class ViewRecord(BaseModel):
    """A displayed screen, reduced to an opaque title."""
    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)

    @property
    def display_event(self) -> str:
        return f"TrackView - {self.title}"


class UserRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    identifier: str = Field(min_length=1)
    email_address: str | None = None
    full_name: str | None = None
    parameters: dict[str, ParamValue] | None = None

    @property
    def email_or_sentinel(self) -> str:
        """Email for backends that refuse an empty value."""
        return self.email_address or UNKNOWN_EMAIL


# ---------------------------------------------------------------------------
# Lifecycle / policy
# ---------------------------------------------------------------------------

class LifecycleState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    STARTED = "started"
    STOPPED = "stopped"


class ParameterPolicy(str, Enum):
    TRUNCATE = "truncate"  # keep the first N keys, mark the event truncated
    STRICT = "strict"  # skip the platform for this event


# ---------------------------------------------------------------------------
# Status snapshot (registry → surfaces)
# ---------------------------------------------------------------------------

class PlatformStatus(BaseModel):
    key: str
    lifecycle: LifecycleState
    disabled: bool = False
    error: str | None = None
    max_parameters: int | None = None
    policy: ParameterPolicy = ParameterPolicy.TRUNCATE
    delivered: int = 0
    undelivered: int = 0
    failed: int = 0
    truncated: int = 0
    rejected: int = 0
