"""Notification channels — Telegram and Discord delivery."""

from __future__ import annotations

import abc
from html import escape as html_escape

import aiohttp
import structlog

from src.core.config import DiscordConfig, TelegramConfig
from src.monitor.types import Notification

logger = structlog.get_logger(__name__)

# Discord embed colours: red for alerts that demand action, grey otherwise.
_DISCORD_URGENT_COLOR = 0xE74C3C
_DISCORD_DEFAULT_COLOR = 0x95A5A6


class NotificationChannel(abc.ABC):
    """Base class for notification delivery channels."""

    @abc.abstractmethod
    async def send(self, msg: Notification) -> bool:
        """Send a notification. Returns True on success."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release resources (HTTP sessions, etc.)."""


class TelegramChannel(NotificationChannel):
    """Delivers notifications via the Telegram Bot API (HTML parse mode)."""

    def __init__(self, config: TelegramConfig) -> None:
        self._token = config.bot_token.get_secret_value()
        self._chat_id = config.chat_id
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def send(self, msg: Notification) -> bool:
        text_parts = [f"<b>{html_escape(msg.title)}</b>"]
        if msg.body:
            text_parts.append(html_escape(msg.body))
        text = "\n".join(text_parts)

        url = f"https://api.telegram.org/bot{self._token}/sendMessage"
        payload = {
            "chat_id": self._chat_id,
            "text": text,
            "parse_mode": "HTML",
            # Urgent notifications must make a sound.
            "disable_notification": not msg.require_interaction,
        }

        try:
            session = self._get_session()
            async with session.post(url, json=payload) as resp:
                if resp.status == 200:
                    return True
                body = await resp.text()
                logger.warning(
                    "telegram_send_failed",
                    status=resp.status,
                    body=body[:200],
                    tag=msg.tag,
                )
                return False
        except Exception:
            logger.exception("telegram_send_error", tag=msg.tag)
            return False

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None


class DiscordChannel(NotificationChannel):
    """Delivers notifications via a Discord webhook embed."""

    def __init__(self, config: DiscordConfig) -> None:
        self._webhook_url = config.webhook_url.get_secret_value()
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def send(self, msg: Notification) -> bool:
        embed: dict = {
            "title": msg.title,
            "color": _DISCORD_URGENT_COLOR if msg.require_interaction else _DISCORD_DEFAULT_COLOR,
        }
        if msg.body:
            embed["description"] = msg.body
        if msg.tag:
            embed["footer"] = {"text": msg.tag}

        payload = {"embeds": [embed]}

        try:
            session = self._get_session()
            async with session.post(self._webhook_url, json=payload) as resp:
                if resp.status in (200, 204):
                    return True
                body = await resp.text()
                logger.warning(
                    "discord_send_failed",
                    status=resp.status,
                    body=body[:200],
                    tag=msg.tag,
                )
                return False
        except Exception:
            logger.exception("discord_send_error", tag=msg.tag)
            return False

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
