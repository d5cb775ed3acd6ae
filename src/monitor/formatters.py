"""Pure functions that convert alerts into Notification objects."""

from __future__ import annotations

from src.core.types import Alert
from src.monitor.types import Notification

HOME_ALERT_TITLE = "🚨 אזעקה באזור שלך!"

# Localities listed in the notification body before the list is cut.
_MAX_LISTED_LOCALITIES = 3


def format_home_alert(alert: Alert) -> Notification:
    """Convert an alert relevant to home into a push notification.

    The tag is the alert id so a client replaces, not stacks, repeats.
    """
    lines = [alert.title]
    if alert.localities:
        lines.append(", ".join(alert.localities[:_MAX_LISTED_LOCALITIES]))
    lines.append(f"{alert.shelter_countdown_seconds} שניות למרחב מוגן")

    return Notification(
        title=HOME_ALERT_TITLE,
        body="\n".join(lines),
        tag=alert.id,
        require_interaction=True,
    )
