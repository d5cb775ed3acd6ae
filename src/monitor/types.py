"""Domain types for the notification subsystem."""

from __future__ import annotations

import time
from enum import StrEnum

from pydantic import BaseModel, Field


class NotificationPermission(StrEnum):
    """Whether the user allowed push notifications. Mirrors the browser states."""

    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"


class Notification(BaseModel):
    """Push notification ready for dispatch to channels."""

    title: str
    body: str = ""
    tag: str = ""
    require_interaction: bool = False
    timestamp: float = Field(default_factory=time.time)
