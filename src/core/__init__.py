"""Core module — config, types, logging."""

from src.core.config import Settings, get_settings, load_settings, reset_settings
from src.core.logging import setup_logging
from src.core.types import (
    Alert,
    AlertSnapshot,
    ConnectionState,
    FeedPayload,
    FeedResponse,
    FetchResult,
    RawAlertRecord,
)

__all__ = [
    "Alert",
    "AlertSnapshot",
    "ConnectionState",
    "FeedPayload",
    "FeedResponse",
    "FetchResult",
    "RawAlertRecord",
    "Settings",
    "get_settings",
    "load_settings",
    "reset_settings",
    "setup_logging",
]
