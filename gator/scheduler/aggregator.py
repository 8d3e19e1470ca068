"""
Gator Aggregation Scheduler
===========================

Fixed-interval poll loop: each tick picks the stalest feed, marks it
fetched, downloads it and stores any new posts.

Features:
- One feed per tick, selected by oldest last fetch (never-fetched first)
- Per-cycle error isolation; a failing feed never stops the loop
- Graceful shutdown on SIGINT/SIGTERM between cycles
"""

import asyncio
import signal
from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional

from ..database.connection import DatabaseConnection
from ..processing.feed_fetcher import FeedFetcher
from ..processing.post_ingestor import IngestResult, PostIngestor
from ..storage.feed_repository import FeedRepository
from ..utils.logging import get_logger_for_component, PerformanceLogger

_STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


@dataclass
class CycleResult:
    """Outcome of one scrape cycle."""

    feed_id: str
    feed_name: str
    feed_url: str
    ingest: Optional[IngestResult] = None
    error: Optional[str] = None
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.error is None


class FeedScheduler:
    """
    Drives the aggregation loop over all stored feeds.

    Cycles never overlap: the next one starts one interval after the
    previous one started, or immediately if it ran longer than that.
    """

    def __init__(
        self,
        feed_repository: FeedRepository,
        fetcher: FeedFetcher,
        ingestor: PostIngestor,
    ):
        self.feed_repository = feed_repository
        self.fetcher = fetcher
        self.ingestor = ingestor
        self.logger = get_logger_for_component("scheduler")

    @classmethod
    def from_database(
        cls, db_connection: DatabaseConnection, user_agent: Optional[str] = None
    ) -> "FeedScheduler":
        """Build a scheduler with default components over one database."""
        return cls(
            feed_repository=FeedRepository(db_connection),
            fetcher=FeedFetcher(user_agent=user_agent),
            ingestor=PostIngestor(db_connection),
        )

    async def scrape_next_feed(self) -> Optional[CycleResult]:
        """Run one aggregation cycle.

        The selected feed is marked fetched before the network call, so a
        feed that keeps failing still rotates to the back of the queue.

        Returns:
            CycleResult for the feed processed, or None if there are no feeds
        """
        feed = self.feed_repository.get_next_feed_to_fetch()
        if feed is None:
            self.logger.info("No feeds to fetch")
            return None

        self.feed_repository.mark_feed_fetched(feed.id)

        result = CycleResult(feed_id=feed.id, feed_name=feed.name, feed_url=feed.url)
        perf = PerformanceLogger(
            self.logger, f"scrape of {feed.name}", feed_id=feed.id, feed_url=feed.url
        )
        try:
            with perf:
                channel = await self.fetcher.fetch_feed(feed.url)
                result.ingest = self.ingestor.ingest(feed.id, channel.items)
        except Exception as e:
            result.error = str(e)
            self.logger.error(
                f"Failed to scrape feed {feed.name} ({feed.url}): {e}",
                extra={"feed_id": feed.id, "feed_url": feed.url},
            )
        result.duration_seconds = perf.duration

        if result.ingest is not None:
            self.logger.info(
                f"Feed {feed.name}: {result.ingest.saved} new posts, "
                f"{result.ingest.skipped} already stored, {result.ingest.failed} failed"
            )
        return result

    async def run(
        self, interval: timedelta, stop_event: Optional[asyncio.Event] = None
    ) -> int:
        """Run cycles every ``interval`` until stopped.

        Args:
            interval: Time between cycle starts
            stop_event: Event that ends the loop; when omitted, one is
                created and set by SIGINT/SIGTERM

        Returns:
            Number of cycles run
        """
        loop = asyncio.get_running_loop()
        period = interval.total_seconds()

        installed: List[signal.Signals] = []
        if stop_event is None:
            stop_event = asyncio.Event()
            installed = self._install_signal_handlers(loop, stop_event)

        cycles = 0
        try:
            while not stop_event.is_set():
                started = loop.time()
                try:
                    await self.scrape_next_feed()
                except Exception as e:
                    # Selection or marking failed; the loop keeps going.
                    self.logger.error(f"Aggregation cycle failed: {e}", exc_info=True)
                cycles += 1

                remaining = period - (loop.time() - started)
                if remaining <= 0:
                    await asyncio.sleep(0)
                    continue
                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=remaining)
                except asyncio.TimeoutError:
                    pass
        finally:
            for sig in installed:
                loop.remove_signal_handler(sig)

        self.logger.info(f"Aggregation stopped after {cycles} cycles")
        return cycles

    def _install_signal_handlers(
        self, loop: asyncio.AbstractEventLoop, stop_event: asyncio.Event
    ) -> List[signal.Signals]:
        installed = []
        for sig in _STOP_SIGNALS:
            try:
                loop.add_signal_handler(sig, stop_event.set)
                installed.append(sig)
            except (NotImplementedError, RuntimeError):
                # Not available on this platform or outside the main thread
                self.logger.debug(f"Cannot install handler for {sig.name}")
        return installed
