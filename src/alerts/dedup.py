"""Dedup & notification trigger — fire once per alert newly relevant to home."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable

import structlog

from src.alerts.relevance import RelevancePolicy, filter_relevant
from src.core.types import Alert
from src.monitor.dispatcher import NotificationDispatcher
from src.monitor.formatters import format_home_alert

logger = structlog.stdlib.get_logger()

# Type alias for "home alert observed" callbacks
HomeAlertCallback = Callable[[Alert], Awaitable[None] | None]


def diff_relevant(
    current_relevant: Iterable[Alert],
    seen: frozenset[str],
) -> tuple[list[Alert], frozenset[str]]:
    """Split *current_relevant* against the previous cycle's ids.

    Returns the alerts not in *seen* and the id set that replaces *seen*.
    The replacement is the current ids only, so an alert that drops out for
    one cycle counts as new when it comes back.
    """
    current = list(current_relevant)
    newly_appeared = [a for a in current if a.id not in seen]
    return newly_appeared, frozenset(a.id for a in current)


class NotificationTrigger:
    """Owns the seen-set of one poller and fires home-alert side effects.

    For each alert that becomes relevant to the home locality, every
    registered callback runs once and, when the dispatcher reports granted
    permission, one notification is sent.

    Usage::

        trigger = NotificationTrigger(dispatcher)
        trigger.on_home_alert(show_banner)
        new = await trigger.process(alerts, home_locality="שדרות")
    """

    def __init__(self, dispatcher: NotificationDispatcher | None = None) -> None:
        self._dispatcher = dispatcher
        self._callbacks: list[HomeAlertCallback] = []
        self._seen: frozenset[str] = frozenset()

    @property
    def seen(self) -> frozenset[str]:
        return self._seen

    def on_home_alert(self, callback: HomeAlertCallback) -> None:
        """Register a callback for alerts newly relevant to home."""
        self._callbacks.append(callback)

    def reset(self) -> None:
        """Forget every id seen so far."""
        self._seen = frozenset()

    async def process(
        self,
        alerts: Iterable[Alert],
        home_locality: str | None,
        is_current: Callable[[], bool] | None = None,
    ) -> list[Alert]:
        """Run one cycle's dedup pass. Returns the alerts that were triggered.

        *is_current* is checked before each alert's side effects. Once it
        returns False the pass stops and the seen-set is left untouched.
        """
        relevant = filter_relevant(alerts, home_locality, RelevancePolicy.NOTIFICATION)
        newly_appeared, next_seen = diff_relevant(relevant, self._seen)

        triggered: list[Alert] = []
        for alert in newly_appeared:
            if not self._still_current(is_current, newly_appeared, triggered):
                return triggered
            logger.info(
                "home_alert_triggered",
                alert_id=alert.id,
                title=alert.title,
                countdown=alert.shelter_countdown_seconds,
                home_locality=home_locality,
            )
            triggered.append(alert)
            await self._run_callbacks(alert)
            await self._notify(alert)

        if self._still_current(is_current, newly_appeared, triggered):
            self._seen = next_seen
        return triggered

    @staticmethod
    def _still_current(
        is_current: Callable[[], bool] | None,
        newly_appeared: list[Alert],
        triggered: list[Alert],
    ) -> bool:
        if is_current is None or is_current():
            return True
        logger.info(
            "home_alert_pass_abandoned",
            triggered=len(triggered),
            skipped=len(newly_appeared) - len(triggered),
        )
        return False

    async def _run_callbacks(self, alert: Alert) -> None:
        for cb in self._callbacks:
            try:
                result = cb(alert)
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                logger.exception("home_alert_callback_error", alert_id=alert.id)

    async def _notify(self, alert: Alert) -> None:
        if self._dispatcher is None or not self._dispatcher.permission_granted:
            return
        try:
            await self._dispatcher.send_notification(format_home_alert(alert))
        except Exception:
            logger.exception("home_alert_notification_error", alert_id=alert.id)
