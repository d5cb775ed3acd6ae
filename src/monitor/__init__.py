"""Notification subsystem — permission gate, channels, message formatting."""

from src.monitor.channels import DiscordChannel, NotificationChannel, TelegramChannel
from src.monitor.dispatcher import NotificationDispatcher
from src.monitor.factory import create_notification_stack
from src.monitor.formatters import format_home_alert
from src.monitor.types import Notification, NotificationPermission

__all__ = [
    "DiscordChannel",
    "Notification",
    "NotificationChannel",
    "NotificationDispatcher",
    "NotificationPermission",
    "TelegramChannel",
    "create_notification_stack",
    "format_home_alert",
]
