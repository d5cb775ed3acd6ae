"""Tests for notification channels — HTTP mocking, error handling, session management."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from pydantic import SecretStr

from src.core.config import DiscordConfig, TelegramConfig
from src.monitor.channels import DiscordChannel, TelegramChannel
from src.monitor.types import Notification


# ── Helpers ─────────────────────────────────────────────────────


def _msg(**kw: object) -> Notification:
    defaults: dict[str, object] = {
        "title": "🚨 אזעקה באזור שלך!",
        "body": "ירי רקטות וטילים\nאשקלון\n30 שניות למרחב מוגן",
        "tag": "alert-1",
        "require_interaction": True,
        "timestamp": 1000.0,
    }
    defaults.update(kw)
    return Notification(**defaults)  # type: ignore[arg-type]


def _tg_config(**kw: object) -> TelegramConfig:
    defaults: dict[str, object] = {
        "enabled": True,
        "bot_token": SecretStr("fake-token"),
        "chat_id": "12345",
    }
    defaults.update(kw)
    return TelegramConfig(**defaults)  # type: ignore[arg-type]


def _dc_config(**kw: object) -> DiscordConfig:
    defaults: dict[str, object] = {
        "enabled": True,
        "webhook_url": SecretStr("https://discord.com/api/webhooks/fake"),
    }
    defaults.update(kw)
    return DiscordConfig(**defaults)  # type: ignore[arg-type]


def _mock_response(status: int = 200, text: str = "ok") -> AsyncMock:
    resp = AsyncMock()
    resp.status = status
    resp.text = AsyncMock(return_value=text)
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=False)
    return resp


def _mock_session(status: int = 200, text: str = "ok") -> MagicMock:
    mock_session = MagicMock()
    mock_session.post = MagicMock(return_value=_mock_response(status, text))
    mock_session.closed = False
    return mock_session


# ── TelegramChannel ────────────────────────────────────────────


class TestTelegramChannel:
    async def test_send_success(self) -> None:
        ch = TelegramChannel(_tg_config())
        mock_session = _mock_session(200)
        ch._session = mock_session

        result = await ch.send(_msg())
        assert result is True
        mock_session.post.assert_called_once()
        call_args = mock_session.post.call_args
        assert "fake-token" in call_args[0][0]
        payload = call_args[1]["json"]
        assert payload["chat_id"] == "12345"
        assert payload["parse_mode"] == "HTML"

    async def test_text_contains_title_and_body(self) -> None:
        ch = TelegramChannel(_tg_config())
        mock_session = _mock_session(200)
        ch._session = mock_session

        await ch.send(_msg())
        text = mock_session.post.call_args[1]["json"]["text"]
        assert "<b>🚨 אזעקה באזור שלך!</b>" in text
        assert "30 שניות למרחב מוגן" in text

    async def test_urgent_notification_is_loud(self) -> None:
        ch = TelegramChannel(_tg_config())
        mock_session = _mock_session(200)
        ch._session = mock_session

        await ch.send(_msg(require_interaction=True))
        assert mock_session.post.call_args[1]["json"]["disable_notification"] is False
        await ch.send(_msg(require_interaction=False))
        assert mock_session.post.call_args[1]["json"]["disable_notification"] is True

    async def test_send_failure_status(self) -> None:
        ch = TelegramChannel(_tg_config())
        ch._session = _mock_session(400, "bad request")

        result = await ch.send(_msg())
        assert result is False

    async def test_send_exception(self) -> None:
        ch = TelegramChannel(_tg_config())
        mock_session = MagicMock()
        mock_session.post = MagicMock(side_effect=ConnectionError("timeout"))
        mock_session.closed = False
        ch._session = mock_session

        result = await ch.send(_msg())
        assert result is False

    async def test_html_escaping(self) -> None:
        ch = TelegramChannel(_tg_config())
        mock_session = _mock_session(200)
        ch._session = mock_session

        await ch.send(_msg(title="<script>alert('xss')</script>", body="a & b"))
        payload = mock_session.post.call_args[1]["json"]
        assert "<script>" not in payload["text"]
        assert "&lt;script&gt;" in payload["text"]
        assert "&amp;" in payload["text"]

    async def test_close_session(self) -> None:
        ch = TelegramChannel(_tg_config())
        mock_session = AsyncMock()
        mock_session.closed = False
        ch._session = mock_session

        await ch.close()
        mock_session.close.assert_awaited_once()

    async def test_close_when_no_session(self) -> None:
        ch = TelegramChannel(_tg_config())
        await ch.close()  # should not raise

    async def test_lazy_session_creation(self) -> None:
        ch = TelegramChannel(_tg_config())
        assert ch._session is None
        session = ch._get_session()
        assert session is not None
        await ch.close()


# ── DiscordChannel ──────────────────────────────────────────────


class TestDiscordChannel:
    async def test_send_success(self) -> None:
        ch = DiscordChannel(_dc_config())
        mock_session = _mock_session(204)
        ch._session = mock_session

        result = await ch.send(_msg())
        assert result is True
        payload = mock_session.post.call_args[1]["json"]
        assert len(payload["embeds"]) == 1
        embed = payload["embeds"][0]
        assert embed["title"] == "🚨 אזעקה באזור שלך!"
        assert embed["footer"] == {"text": "alert-1"}

    async def test_send_200_also_success(self) -> None:
        ch = DiscordChannel(_dc_config())
        ch._session = _mock_session(200)
        assert await ch.send(_msg()) is True

    async def test_send_failure(self) -> None:
        ch = DiscordChannel(_dc_config())
        ch._session = _mock_session(429, "rate limited")
        assert await ch.send(_msg()) is False

    async def test_send_exception(self) -> None:
        ch = DiscordChannel(_dc_config())
        mock_session = MagicMock()
        mock_session.post = MagicMock(side_effect=ConnectionError("timeout"))
        mock_session.closed = False
        ch._session = mock_session

        assert await ch.send(_msg()) is False

    async def test_color_by_urgency(self) -> None:
        ch = DiscordChannel(_dc_config())
        for urgent, expected_color in [(True, 0xE74C3C), (False, 0x95A5A6)]:
            mock_session = _mock_session(204)
            ch._session = mock_session

            await ch.send(_msg(require_interaction=urgent))
            payload = mock_session.post.call_args[1]["json"]
            assert payload["embeds"][0]["color"] == expected_color

    async def test_embed_description_from_body(self) -> None:
        ch = DiscordChannel(_dc_config())
        mock_session = _mock_session(204)
        ch._session = mock_session

        await ch.send(_msg(body="detailed reason"))
        payload = mock_session.post.call_args[1]["json"]
        assert payload["embeds"][0]["description"] == "detailed reason"

    async def test_no_body_no_description(self) -> None:
        ch = DiscordChannel(_dc_config())
        mock_session = _mock_session(204)
        ch._session = mock_session

        await ch.send(_msg(body="", tag=""))
        embed = mock_session.post.call_args[1]["json"]["embeds"][0]
        assert "description" not in embed
        assert "footer" not in embed

    async def test_close_session(self) -> None:
        ch = DiscordChannel(_dc_config())
        mock_session = AsyncMock()
        mock_session.closed = False
        ch._session = mock_session

        await ch.close()
        mock_session.close.assert_awaited_once()

    async def test_webhook_url_used(self) -> None:
        ch = DiscordChannel(_dc_config())
        mock_session = _mock_session(204)
        ch._session = mock_session

        await ch.send(_msg())
        url = mock_session.post.call_args[0][0]
        assert url == "https://discord.com/api/webhooks/fake"
