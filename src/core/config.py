"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, SecretStr

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")

# The upstream rejects requests that do not look like they come from its own
# web client.
_DEFAULT_FEED_HEADERS: dict[str, str] = {
    "Accept": "application/json",
    "Accept-Language": "he-IL,he;q=0.9",
    "X-Requested-With": "XMLHttpRequest",
    "Referer": "https://www.oref.org.il/",
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
}


class FeedConfig(BaseModel):
    """Home Front Command alert feed configuration."""

    url: str = "https://www.oref.org.il/WarningMessages/alert/alerts.json"
    timeout_secs: float = 10.0
    headers: dict[str, str] = Field(default_factory=lambda: dict(_DEFAULT_FEED_HEADERS))


class PollerConfig(BaseModel):
    """Polling cadence configuration."""

    interval_secs: float = 5.0


class HomeConfig(BaseModel):
    """Home locality used for relevance filtering and notifications."""

    locality: str | None = None


class TelegramConfig(BaseModel):
    """Telegram Bot API channel."""

    enabled: bool = False
    bot_token: SecretStr = SecretStr("")
    chat_id: str = ""


class DiscordConfig(BaseModel):
    """Discord webhook channel."""

    enabled: bool = False
    webhook_url: SecretStr = SecretStr("")


class NotificationsConfig(BaseModel):
    """Notification delivery configuration."""

    permission: str = "default"
    telegram: TelegramConfig = TelegramConfig()
    discord: DiscordConfig = DiscordConfig()


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"


class Settings(BaseModel):
    """Root settings container."""

    feed: FeedConfig = FeedConfig()
    poller: PollerConfig = PollerConfig()
    home: HomeConfig = HomeConfig()
    notifications: NotificationsConfig = NotificationsConfig()
    logging: LoggingConfig = LoggingConfig()


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    _settings = Settings(**data)
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
