"""Notification dispatcher — permission gate in front of the delivery channels."""

from __future__ import annotations

import structlog

from src.monitor.channels import NotificationChannel
from src.monitor.types import Notification, NotificationPermission

# Dedicated structured logger for dispatch decisions.
decision_logger = structlog.get_logger("decision_log")

logger = structlog.get_logger(__name__)


class NotificationDispatcher:
    """Sends notifications to every channel, but only with granted permission.

    - Every send attempt is logged via *decision_logger*, sent or not.
    - Without GRANTED permission nothing reaches the channels.
    - A failing channel is logged and does not stop the others.
    """

    def __init__(
        self,
        channels: list[NotificationChannel] | None = None,
        permission: NotificationPermission = NotificationPermission.DEFAULT,
    ) -> None:
        self._channels: list[NotificationChannel] = channels or []
        self._permission = permission

    # ── Permission ──────────────────────────────────────────────

    @property
    def permission(self) -> NotificationPermission:
        return self._permission

    @permission.setter
    def permission(self, value: NotificationPermission) -> None:
        if value != self._permission:
            logger.info(
                "notification_permission_changed",
                old=self._permission.value,
                new=value.value,
            )
        self._permission = value

    @property
    def permission_granted(self) -> bool:
        return self._permission == NotificationPermission.GRANTED

    def grant(self) -> None:
        self.permission = NotificationPermission.GRANTED

    def deny(self) -> None:
        self.permission = NotificationPermission.DENIED

    # ── Sending ─────────────────────────────────────────────────

    async def send_notification(self, msg: Notification) -> bool:
        """Dispatch *msg* to all channels.

        Returns True if permission was granted and at least one channel
        accepted the notification.
        """
        if not self.permission_granted:
            self._log_decision(msg, sent=False)
            return False

        self._log_decision(msg, sent=True)
        delivered = False
        for ch in self._channels:
            try:
                if await ch.send(msg):
                    delivered = True
            except Exception:
                logger.exception(
                    "channel_dispatch_error",
                    channel=type(ch).__name__,
                    tag=msg.tag,
                )
        return delivered

    def _log_decision(self, msg: Notification, sent: bool) -> None:
        decision_logger.info(
            "notification",
            sent=sent,
            permission=self._permission.value,
            title=msg.title,
            body=msg.body,
            tag=msg.tag,
            channels=[type(ch).__name__ for ch in self._channels],
        )

    # ── Lifecycle ───────────────────────────────────────────────

    async def close(self) -> None:
        for ch in self._channels:
            try:
                await ch.close()
            except Exception:
                logger.exception("channel_close_error", channel=type(ch).__name__)
