"""Raw feed records → canonical Alert entities."""

from __future__ import annotations

import datetime
import json
import uuid
from collections import Counter
from collections.abc import Sequence

import structlog

from src.alerts.countdown import AREA_COUNTDOWN, AreaCountdownTable
from src.core.types import Alert, FeedPayload, RawAlertRecord

logger = structlog.stdlib.get_logger()

DEFAULT_TITLE = "התראה"
DEFAULT_CATEGORY = "unknown"

# Namespace for ids derived from record content when the feed omits one.
_ID_NAMESPACE = uuid.UUID("6f1c2a52-3b8e-5d4a-9c1e-0a7b2f4e8d31")


def _canonical_json(record: RawAlertRecord) -> str:
    return json.dumps(
        record.model_dump(), sort_keys=True, ensure_ascii=False, separators=(",", ":"),
    )


def _derived_id(canonical: str, occurrence: int) -> str:
    """Stable id for a record without one.

    The n-th identical record in the same batch is salted with n so ids stay
    unique within a snapshot.
    """
    if occurrence:
        canonical = f"{canonical}#{occurrence}"
    return str(uuid.uuid5(_ID_NAMESPACE, canonical))


def _to_alert(
    record: RawAlertRecord,
    alert_id: str,
    observed_at: datetime.datetime,
    table: AreaCountdownTable,
) -> Alert:
    # Empty strings count as missing, the way the feed's own web client treats them.
    localities = tuple(record.data or ())
    return Alert(
        id=alert_id,
        title=record.title or DEFAULT_TITLE,
        localities=localities,
        observed_at=observed_at,
        shelter_countdown_seconds=table.lookup(localities),
        category=record.cat or DEFAULT_CATEGORY,
        description=record.desc or "",
    )


def normalize(
    records: RawAlertRecord | Sequence[RawAlertRecord],
    observed_at: datetime.datetime,
    table: AreaCountdownTable = AREA_COUNTDOWN,
) -> list[Alert]:
    """Convert raw records into canonical alerts stamped with *observed_at*.

    A bare record is treated as a one-element list. Output order follows
    input order. When the feed repeats an id, the first record wins.
    """
    if isinstance(records, RawAlertRecord):
        records = [records]

    alerts: list[Alert] = []
    seen_ids: set[str] = set()
    anonymous: Counter[str] = Counter()

    for record in records:
        if record.id:
            alert_id = record.id
        else:
            canonical = _canonical_json(record)
            alert_id = _derived_id(canonical, anonymous[canonical])
            anonymous[canonical] += 1

        if alert_id in seen_ids:
            logger.warning("duplicate_alert_id_dropped", alert_id=alert_id)
            continue
        seen_ids.add(alert_id)
        alerts.append(_to_alert(record, alert_id, observed_at, table))

    return alerts


def normalize_payload(
    payload: FeedPayload,
    observed_at: datetime.datetime,
    table: AreaCountdownTable = AREA_COUNTDOWN,
) -> list[Alert]:
    """Normalize whichever shape the feed returned."""
    return normalize(payload.records(), observed_at, table)
