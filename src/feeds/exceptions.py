"""Exception hierarchy for the alert feed adapter.

None of these escape ``OrefFeed.fetch_raw()``; they only mark which kind of
failure turned the connection state to disconnected.
"""

from __future__ import annotations


class FeedError(Exception):
    """Base exception for all feed errors."""


class FeedConnectionError(FeedError):
    """Transport failure — DNS, timeout, connection reset."""


class FeedStatusError(FeedError):
    """The upstream answered with a non-success status."""

    def __init__(self, status_code: int, message: str = "") -> None:
        self.status_code = status_code
        super().__init__(message or f"upstream returned {status_code}")


class FeedParseError(FeedError):
    """The upstream body could not be decoded into alert records."""
