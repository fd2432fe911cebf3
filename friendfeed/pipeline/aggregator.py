"""Aggregation pipeline: fetch, parse and merge every friend feed."""

import asyncio
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional

import structlog

from ..config.settings import Settings, settings
from ..config.sources import load_sources
from ..errors import FetchError
from ..ingestion.fetcher import FeedFetcher
from ..ingestion.interfaces import Entry, FetcherInterface, FetchOutcome, Source
from ..ingestion.parser import FeedParser
from ..ingestion.summary import SummaryExtractor

logger = structlog.get_logger()


class FeedAggregator:
    """Fan out one fetch+parse task per source and merge the results."""

    def __init__(
        self,
        fetcher: FetcherInterface,
        parser: FeedParser = None,
        max_entries: int = None,
        max_concurrency: int = None,
        on_source_complete: Callable = None,
    ):
        self.fetcher = fetcher
        self.parser = parser or FeedParser()
        self.max_entries = settings.max_entries if max_entries is None else max_entries
        self.semaphore = asyncio.Semaphore(max_concurrency or settings.max_concurrent_fetches)
        self.on_source_complete = on_source_complete  # Callback for diagnostics

    @classmethod
    def from_settings(cls, fetcher: FetcherInterface, config: Settings, **kwargs) -> "FeedAggregator":
        parser = FeedParser(
            days_limit=config.days_limit,
            summary_extractor=SummaryExtractor(limit=config.summary_char_limit),
        )
        return cls(
            fetcher,
            parser=parser,
            max_entries=config.max_entries,
            max_concurrency=config.max_concurrent_fetches,
            **kwargs,
        )

    async def aggregate(self, sources: List[Source], now: datetime = None) -> List[Entry]:
        """Return the newest entries across all sources, capped at max_entries."""
        outcomes = await self.collect(sources, now=now)
        entries = merge(outcomes, self.max_entries)

        failed = [o.source.name for o in outcomes if not o.ok]
        logger.info(
            "aggregation_complete",
            sources=len(sources),
            failed=len(failed),
            entries=len(entries),
        )
        return entries

    async def collect(self, sources: List[Source], now: datetime = None) -> List[FetchOutcome]:
        """Run every source to completion; failures become empty outcomes."""
        now = now or datetime.now(timezone.utc)

        tasks = [self._run_source(source, now) for source in sources]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        outcomes = []
        for source, result in zip(sources, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                error = str(result) or type(result).__name__
                logger.warning("feed_task_exception", feed=source.name, error=error)
                self._notify(source.name, error=error)
                result = FetchOutcome(source=source, error=error)
            outcomes.append(result)
        return outcomes

    async def _run_source(self, source: Source, now: datetime) -> FetchOutcome:
        async with self.semaphore:
            start_time = time.time()

            try:
                raw = await self.fetcher.fetch(source.feed_url)
            except FetchError as e:
                elapsed_ms = int((time.time() - start_time) * 1000)
                logger.warning("feed_fetch_failed", feed=source.name, url=e.url, error=e.detail)
                self._notify(source.name, error=e.detail, fetch_time_ms=elapsed_ms)
                return FetchOutcome(source=source, error=e.detail, elapsed_ms=elapsed_ms)

            entries = self.parser.parse(raw, source, now=now)
            elapsed_ms = int((time.time() - start_time) * 1000)
            logger.info("feed_fetched", feed=source.name, entries=len(entries), time_ms=elapsed_ms)
            self._notify(source.name, entries=len(entries), fetch_time_ms=elapsed_ms)
            return FetchOutcome(source=source, entries=entries, elapsed_ms=elapsed_ms)

    def _notify(self, feed_name: str, entries: int = 0, error: str = None, fetch_time_ms: int = 0):
        if self.on_source_complete:
            self.on_source_complete(
                feed_name=feed_name,
                entries=entries,
                error=error,
                fetch_time_ms=fetch_time_ms,
            )


def merge(outcomes: List[FetchOutcome], max_entries: int) -> List[Entry]:
    """Flatten outcomes in order, sort newest first (stable) and cap."""
    all_entries = [entry for outcome in outcomes for entry in outcome.entries]
    all_entries.sort(key=lambda e: e.published_at, reverse=True)
    return all_entries[:max_entries]


async def run_aggregation(config: Optional[Settings] = None) -> List[Entry]:
    """Load the source list and aggregate it with the given settings.

    Raises ConfigurationError or SourceListError; every per-source
    failure is absorbed.
    """
    config = config or settings
    url = config.require_source_list_url()

    async with FeedFetcher.from_settings(config) as fetcher:
        sources = await load_sources(fetcher.session, url, timeout_seconds=config.fetch_timeout_seconds)
        aggregator = FeedAggregator.from_settings(fetcher, config)
        return await aggregator.aggregate(sources)
