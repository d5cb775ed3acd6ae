"""Domain types for the alert pipeline — raw feed records, canonical alerts, snapshots."""

from __future__ import annotations

import datetime
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ── Upstream Feed Types ─────────────────────────────────────────


def _number_as_text(value: Any) -> Any:
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    return value


class RawAlertRecord(BaseModel):
    """One alert object as sent by the upstream feed. Every field is optional.

    Example::

        {
            "id": "133961640700000000",
            "cat": "1",
            "title": "ירי רקטות וטילים",
            "data": ["שדרות", "נתיבות"],
            "desc": "היכנסו למרחב המוגן ושהו בו 10 דקות",
        }
    """

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    cat: str | None = None
    title: str | None = None
    data: list[str] | None = None
    desc: str | None = None

    @field_validator("id", "cat", "title", "desc", mode="before")
    @classmethod
    def _numbers_as_text(cls, value: Any) -> Any:
        # The feed has sent both "1" and 1 for the same field.
        return _number_as_text(value)

    @field_validator("data", mode="before")
    @classmethod
    def _locality_numbers_as_text(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [_number_as_text(item) for item in value]
        return value


class EmptyPayload(BaseModel):
    """No active alerts (empty body or an explicit empty marker)."""

    kind: Literal["empty"] = "empty"

    def records(self) -> list[RawAlertRecord]:
        return []


class SingleRecordPayload(BaseModel):
    """The feed returned one bare alert object."""

    kind: Literal["single"] = "single"
    record: RawAlertRecord

    def records(self) -> list[RawAlertRecord]:
        return [self.record]


class RecordListPayload(BaseModel):
    """The feed returned an array of alert objects."""

    kind: Literal["list"] = "list"
    items: list[RawAlertRecord] = Field(default_factory=list)

    def records(self) -> list[RawAlertRecord]:
        return list(self.items)


FeedPayload = EmptyPayload | SingleRecordPayload | RecordListPayload


class FetchResult(BaseModel):
    """Outcome of one feed fetch — records plus a health signal."""

    records: list[RawAlertRecord] = Field(default_factory=list)
    healthy: bool = False


# ── Canonical Alert Types ───────────────────────────────────────


class ConnectionState(StrEnum):
    """Health of the upstream feed as seen by one poller."""

    CHECKING = "checking"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class Alert(BaseModel):
    """Canonical civil-defense alert, rebuilt from scratch every cycle.

    Serialised with the field names the display layer already consumes
    (``cities``, ``time``, ``countdown``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str
    localities: tuple[str, ...] = Field(default=(), serialization_alias="cities")
    observed_at: datetime.datetime = Field(serialization_alias="time")
    shelter_countdown_seconds: int = Field(ge=0, serialization_alias="countdown")
    category: str = "unknown"
    description: str = ""


class AlertSnapshot(BaseModel):
    """Everything a completed poll cycle publishes to display collaborators."""

    alerts: list[Alert] = Field(default_factory=list)
    relevant_alerts: list[Alert] = Field(default_factory=list)
    connection_state: ConnectionState = ConnectionState.CHECKING
    last_update: datetime.datetime
    new_relevant_ids: list[str] = Field(default_factory=list)

    @property
    def has_relevant_alerts(self) -> bool:
        return len(self.relevant_alerts) > 0


class FeedResponse(BaseModel):
    """Output boundary of the pipeline: ``{"alerts": [...], "lastUpdate": ...}``."""

    model_config = ConfigDict(populate_by_name=True)

    alerts: list[Alert] = Field(default_factory=list)
    last_update: datetime.datetime = Field(serialization_alias="lastUpdate")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
