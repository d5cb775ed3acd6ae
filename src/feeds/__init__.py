"""Alert feed adapters — fetch the upstream feed and absorb its failures."""

from src.feeds.base import BaseFeed
from src.feeds.exceptions import FeedConnectionError, FeedError, FeedParseError, FeedStatusError
from src.feeds.oref import OrefFeed

__all__ = [
    "BaseFeed",
    "FeedConnectionError",
    "FeedError",
    "FeedParseError",
    "FeedStatusError",
    "OrefFeed",
]
