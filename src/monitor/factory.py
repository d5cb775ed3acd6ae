"""Convenience factory for wiring the notification stack."""

from __future__ import annotations

import structlog

from src.core.config import NotificationsConfig
from src.monitor.channels import (
    DiscordChannel,
    NotificationChannel,
    TelegramChannel,
)
from src.monitor.dispatcher import NotificationDispatcher
from src.monitor.types import NotificationPermission

logger = structlog.get_logger(__name__)


def create_notification_stack(config: NotificationsConfig) -> NotificationDispatcher:
    """Build a dispatcher with the channels enabled in *config*.

    An unknown permission string falls back to DEFAULT (no notifications).
    """
    channels: list[NotificationChannel] = []

    if config.telegram.enabled:
        channels.append(TelegramChannel(config.telegram))

    if config.discord.enabled:
        channels.append(DiscordChannel(config.discord))

    try:
        permission = NotificationPermission(config.permission.strip().lower())
    except ValueError:
        logger.warning("unknown_notification_permission", value=config.permission)
        permission = NotificationPermission.DEFAULT

    return NotificationDispatcher(channels=channels, permission=permission)
