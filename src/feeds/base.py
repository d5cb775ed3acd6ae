"""Abstract base feed — connection lifecycle and the fetch contract."""

from __future__ import annotations

import abc
from types import TracebackType

from src.core.types import FetchResult


class BaseFeed(abc.ABC):
    """Abstract base class for alert feeds.

    Subclasses implement ``connect()``, ``close()``, and ``fetch_raw()``.
    ``fetch_raw()`` must never raise: every failure is reported as an empty,
    unhealthy ``FetchResult``. Scheduling lives in ``AlertPoller``.

    Usage::

        async with OrefFeed() as feed:
            result = await feed.fetch_raw()
    """

    @abc.abstractmethod
    async def connect(self) -> None:
        """Open any pooled resources (HTTP clients)."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release pooled resources. Safe to call when not connected."""

    @abc.abstractmethod
    async def fetch_raw(self) -> FetchResult:
        """Fetch the current raw alert records."""

    async def __aenter__(self) -> BaseFeed:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
