"""Feed ingestion - fetching, parsing and summarizing feeds."""

from .interfaces import Source, Entry, FetchOutcome, RetryPolicy, FetcherInterface, CacheInterface
from .fetcher import FeedFetcher
from .parser import FeedParser
from .summary import SummaryExtractor

__all__ = [
    "Source", "Entry", "FetchOutcome", "RetryPolicy",
    "FetcherInterface", "CacheInterface",
    "FeedFetcher", "FeedParser", "SummaryExtractor",
]
