"""Home Front Command (Pikud HaOref) alert feed — polls the public alerts.json."""

from __future__ import annotations

import datetime
import json
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from src.alerts.normalizer import normalize
from src.core.config import FeedConfig, get_settings
from src.core.types import (
    EmptyPayload,
    FeedPayload,
    FeedResponse,
    FetchResult,
    RawAlertRecord,
    RecordListPayload,
    SingleRecordPayload,
)
from src.feeds.base import BaseFeed
from src.feeds.exceptions import (
    FeedConnectionError,
    FeedError,
    FeedParseError,
    FeedStatusError,
)

logger = structlog.stdlib.get_logger()

# Body text the upstream sends while no alert is active.
_EMPTY_MARKERS = frozenset({"", "[]", "{}", "null"})


def decode_payload(body: Any) -> FeedPayload:
    """Classify decoded JSON into one of the three payload shapes.

    ``None``, ``{}`` and ``[]`` mean no active alerts. Raises FeedParseError
    for anything that is not an alert object or an array of them.
    """
    if body is None or body == {} or body == []:
        return EmptyPayload()

    try:
        if isinstance(body, dict):
            return SingleRecordPayload(record=RawAlertRecord.model_validate(body))
        if isinstance(body, list):
            if not all(isinstance(item, dict) for item in body):
                raise FeedParseError("alert array contains non-object items")
            return RecordListPayload(
                items=[RawAlertRecord.model_validate(item) for item in body],
            )
    except ValidationError as exc:
        raise FeedParseError(f"invalid alert record: {exc.error_count()} errors") from exc

    raise FeedParseError(f"unexpected payload type {type(body).__name__}")


def _parse_body(text: str) -> FeedPayload:
    """Decode the response text into a payload shape.

    The upstream prefixes its JSON with a UTF-8 BOM and pads the empty
    response with whitespace.
    """
    stripped = text.lstrip("\ufeff").strip()
    if stripped in _EMPTY_MARKERS:
        return decode_payload(None)

    try:
        body: Any = json.loads(stripped)
    except ValueError as exc:
        raise FeedParseError("alert feed returned invalid JSON") from exc

    return decode_payload(body)


class OrefFeed(BaseFeed):
    """Remote feed adapter for the Home Front Command alerts endpoint.

    ``fetch_raw()`` never raises; failures come back as
    ``FetchResult(records=[], healthy=False)``.

    Usage::

        async with OrefFeed() as feed:
            result = await feed.fetch_raw()
            response = await feed.fetch_alerts()
    """

    def __init__(self, config: FeedConfig | None = None) -> None:
        self._config = config or get_settings().feed
        self._http: httpx.AsyncClient | None = None

    @property
    def connected(self) -> bool:
        """Whether the pooled HTTP client is active."""
        return self._http is not None and not self._http.is_closed

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self._config.timeout_secs),
            headers=self._config.headers,
        )

    async def connect(self) -> None:
        """Create the pooled httpx async client."""
        if not self.connected:
            self._http = self._new_client()

    async def close(self) -> None:
        """Close the pooled httpx async client."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def _request(self) -> str:
        """GET the feed and return its body text. Raises FeedError subclasses."""
        client = self._http
        owned = client is None
        if client is None:
            client = self._new_client()

        try:
            response = await client.get(self._config.url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FeedStatusError(exc.response.status_code) from exc
        except httpx.HTTPError as exc:
            raise FeedConnectionError(f"alert feed request failed: {exc!r}") from exc
        finally:
            if owned:
                await client.aclose()

        try:
            return response.content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise FeedParseError("alert feed body is not UTF-8") from exc

    async def fetch_payload(self) -> FeedPayload:
        """Fetch and decode the feed. Raises FeedError subclasses."""
        text = await self._request()
        return _parse_body(text)

    async def fetch_raw(self) -> FetchResult:
        """Fetch the current raw records plus a health flag. Never raises."""
        try:
            payload = await self.fetch_payload()
        except FeedStatusError as exc:
            logger.warning("oref_status_error", status=exc.status_code, url=self._config.url)
            return FetchResult(records=[], healthy=False)
        except FeedError as exc:
            logger.warning(
                "oref_fetch_failed",
                error_type=type(exc).__name__,
                error=str(exc),
                url=self._config.url,
            )
            return FetchResult(records=[], healthy=False)
        except Exception:
            logger.exception("oref_fetch_unexpected_error", url=self._config.url)
            return FetchResult(records=[], healthy=False)

        records = payload.records()
        if records:
            logger.info("oref_alerts_received", count=len(records), shape=payload.kind)
        return FetchResult(records=records, healthy=True)

    async def fetch_alerts(self, now: datetime.datetime | None = None) -> FeedResponse:
        """Fetch and normalize in one call: ``{"alerts": [...], "lastUpdate": now}``.

        Produced even when the upstream fails, with an empty alert list.
        """
        observed_at = now or datetime.datetime.now(datetime.UTC)
        result = await self.fetch_raw()
        alerts = normalize(result.records, observed_at)
        return FeedResponse(alerts=alerts, last_update=observed_at)
