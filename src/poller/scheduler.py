"""Alert poller — fixed-cadence fetch → normalize → dedup → publish loop."""

from __future__ import annotations

import asyncio
import datetime
from collections.abc import Awaitable, Callable
from types import TracebackType

import structlog

from src.alerts.dedup import HomeAlertCallback, NotificationTrigger
from src.alerts.normalizer import normalize
from src.alerts.relevance import RelevancePolicy, filter_relevant
from src.core.config import PollerConfig, get_settings
from src.core.types import AlertSnapshot, ConnectionState, FeedResponse, FetchResult
from src.feeds.base import BaseFeed
from src.monitor.dispatcher import NotificationDispatcher

logger = structlog.stdlib.get_logger()

# Type alias for snapshot subscribers
SnapshotCallback = Callable[[AlertSnapshot], Awaitable[None] | None]

Clock = Callable[[], datetime.datetime]


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


def _clean_home(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip()


class AlertPoller:
    """Polls one feed on a fixed cadence for one home locality.

    - ``start()`` runs a cycle immediately, then one every ``interval_secs``.
    - A tick that fires while a cycle is still in flight is dropped.
    - ``stop()`` lets an in-flight cycle finish but discards its result.
    - Connection state and the dedup seen-set belong to this instance only
      and are reset on stop.

    Usage::

        poller = AlertPoller(OrefFeed(), dispatcher=dispatcher, home_locality="אשקלון")
        poller.on_snapshot(render)
        poller.on_home_alert(sound_siren)
        async with poller:
            await asyncio.sleep(60)
    """

    def __init__(
        self,
        feed: BaseFeed,
        dispatcher: NotificationDispatcher | None = None,
        config: PollerConfig | None = None,
        home_locality: str | None = None,
        clock: Clock | None = None,
    ) -> None:
        cfg = config or get_settings().poller
        if cfg.interval_secs <= 0:
            raise ValueError("poll interval must be positive")
        self._feed = feed
        self._interval = cfg.interval_secs
        self._home = _clean_home(home_locality)
        self._clock = clock or _utcnow
        self._trigger = NotificationTrigger(dispatcher)
        self._callbacks: list[SnapshotCallback] = []
        self._state = ConnectionState.CHECKING
        self._running = False
        self._generation = 0
        self._ticker: asyncio.Task[None] | None = None
        self._cycle: asyncio.Task[AlertSnapshot | None] | None = None
        self._last_snapshot: AlertSnapshot | None = None
        self._skipped_ticks = 0
        self._error_count = 0

    # ── State ───────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._running

    @property
    def connection_state(self) -> ConnectionState:
        return self._state

    @property
    def home_locality(self) -> str | None:
        return self._home

    @property
    def is_loading(self) -> bool:
        """Whether a cycle is in flight."""
        return self._cycle is not None and not self._cycle.done()

    @property
    def last_snapshot(self) -> AlertSnapshot | None:
        return self._last_snapshot

    @property
    def last_update(self) -> datetime.datetime | None:
        return self._last_snapshot.last_update if self._last_snapshot else None

    @property
    def seen_alert_ids(self) -> frozenset[str]:
        return self._trigger.seen

    @property
    def skipped_ticks(self) -> int:
        return self._skipped_ticks

    @property
    def error_count(self) -> int:
        return self._error_count

    def response(self) -> FeedResponse:
        """Latest ``{"alerts", "lastUpdate"}`` view, empty before the first cycle."""
        if self._last_snapshot is None:
            return FeedResponse(alerts=[], last_update=self._clock())
        return FeedResponse(
            alerts=list(self._last_snapshot.alerts),
            last_update=self._last_snapshot.last_update,
        )

    def set_home_locality(self, value: str | None) -> None:
        """Change the home locality. A different home starts with an empty seen-set."""
        home = _clean_home(value)
        if home == self._home:
            return
        logger.info("home_locality_changed", old=self._home, new=home)
        self._home = home
        self._trigger.reset()

    # ── Subscriptions ───────────────────────────────────────────

    def on_snapshot(self, callback: SnapshotCallback) -> None:
        """Register a callback for every published snapshot."""
        self._callbacks.append(callback)

    def on_home_alert(self, callback: HomeAlertCallback) -> None:
        """Register a callback for alerts newly relevant to the home locality."""
        self._trigger.on_home_alert(callback)

    async def _emit(self, snapshot: AlertSnapshot, generation: int) -> None:
        for cb in self._callbacks:
            if not self._is_current(generation):
                logger.info("snapshot_publish_abandoned")
                return
            try:
                result = cb(snapshot)
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                logger.exception("snapshot_callback_error")

    # ── Lifecycle ───────────────────────────────────────────────

    async def start(self) -> None:
        """Connect the feed, run the first cycle now, then keep ticking."""
        if self._running:
            return
        self._running = True
        self._generation += 1
        self._state = ConnectionState.CHECKING
        await self._feed.connect()
        self._tick()
        self._ticker = asyncio.create_task(self._tick_loop())
        logger.info(
            "poller_started",
            interval_secs=self._interval,
            home_locality=self._home,
        )

    async def stop(self) -> None:
        """Stop ticking, let an in-flight cycle finish unpublished, close the feed."""
        if not self._running:
            return
        self._running = False
        if self._ticker is not None:
            self._ticker.cancel()
            try:
                await self._ticker
            except asyncio.CancelledError:
                pass
            self._ticker = None

        await self.drain()
        await self._feed.close()

        self._trigger.reset()
        self._state = ConnectionState.CHECKING
        logger.info("poller_stopped", skipped_ticks=self._skipped_ticks)

    async def drain(self) -> None:
        """Wait for the in-flight cycle, if any, to complete.

        Returns at once when called from inside that cycle (a callback).
        """
        cycle = self._cycle
        if cycle is None or cycle.done() or cycle is asyncio.current_task():
            return
        await asyncio.wait({cycle})

    async def refresh(self) -> AlertSnapshot | None:
        """Run a cycle now. Returns None if stopped or a cycle is already in flight."""
        if not self._running:
            logger.debug("refresh_ignored_not_running")
            return None
        cycle = self._tick()
        if cycle is None:
            return None
        await asyncio.wait({cycle})
        return cycle.result()

    # ── Scheduling ──────────────────────────────────────────────

    def _tick(self) -> asyncio.Task[AlertSnapshot | None] | None:
        """Start a cycle unless one is in flight."""
        if self.is_loading:
            self._skipped_ticks += 1
            logger.debug("poll_tick_skipped", skipped_ticks=self._skipped_ticks)
            return None
        self._cycle = asyncio.create_task(self._run_cycle(self._generation))
        return self._cycle

    async def _tick_loop(self) -> None:
        """Fire ticks on a fixed grid of ``interval_secs`` after start."""
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while self._running:
            # Realign instead of bursting when the loop was blocked past a tick.
            next_tick = max(next_tick + self._interval, loop.time())
            await asyncio.sleep(next_tick - loop.time())
            if self._running:
                self._tick()

    async def _run_cycle(self, generation: int) -> AlertSnapshot | None:
        """One fetch → normalize → filter → dedup → publish pass.

        Staleness is checked again after every suspension point: the fetch,
        each home-alert side effect and each snapshot callback.
        """
        try:
            result = await self._feed.fetch_raw()
        except Exception:
            logger.exception("feed_fetch_raised")
            result = FetchResult(records=[], healthy=False)

        if not self._is_current(generation):
            logger.info(
                "poll_result_discarded",
                records=len(result.records),
                healthy=result.healthy,
            )
            return None

        try:
            observed_at = self._clock()
            home = self._home
            alerts = normalize(result.records, observed_at)
            self._set_state(
                ConnectionState.CONNECTED if result.healthy else ConnectionState.DISCONNECTED,
            )
            relevant = filter_relevant(alerts, home, RelevancePolicy.DISPLAY)

            newly_relevant = await self._trigger.process(
                alerts, home, is_current=lambda: self._is_current(generation),
            )
            if not self._is_current(generation):
                logger.info("poll_result_discarded", alerts=len(alerts), stage="notify")
                return None
            if self._home != home:
                # Home changed while callbacks ran; ids gathered for the old home do not carry over.
                self._trigger.reset()

            snapshot = AlertSnapshot(
                alerts=alerts,
                relevant_alerts=relevant,
                connection_state=self._state,
                last_update=observed_at,
                new_relevant_ids=[a.id for a in newly_relevant],
            )
            self._last_snapshot = snapshot
            await self._emit(snapshot, generation)
        except Exception:
            self._error_count += 1
            logger.exception("poll_cycle_error", error_count=self._error_count)
            return None

        if alerts:
            logger.info(
                "poll_cycle_completed",
                alerts=len(alerts),
                relevant=len(relevant),
                newly_relevant=len(newly_relevant),
            )
        return snapshot

    def _is_current(self, generation: int) -> bool:
        """Whether a cycle started in *generation* may still publish."""
        return self._running and generation == self._generation

    def _set_state(self, state: ConnectionState) -> None:
        if state != self._state:
            logger.info(
                "connection_state_changed",
                old=self._state.value,
                new=state.value,
            )
        self._state = state

    async def __aenter__(self) -> AlertPoller:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.stop()
