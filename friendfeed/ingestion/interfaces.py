"""Interface definitions for feed ingestion."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List

UNTITLED = "Untitled"
NO_LINK = "#"


@dataclass(frozen=True)
class Source:
    """A friend site whose feed is aggregated."""
    name: str
    feed_url: str
    site_url: Optional[str] = None


@dataclass(frozen=True)
class RetryPolicy:
    """Retry behaviour for a single feed fetch."""
    max_attempts: int = 3  # initial attempt + 2 retries
    delay: float = 1.0     # seconds between attempts

    @classmethod
    def from_retries(cls, retries: int, delay: float) -> "RetryPolicy":
        return cls(max_attempts=retries + 1, delay=delay)


@dataclass(frozen=True)
class Entry:
    """A normalized post from one source feed."""
    title: str
    link: str
    published_at: datetime
    source_name: str
    summary: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to the wire representation."""
        return {
            "title": self.title,
            "link": self.link,
            "date": format_timestamp(self.published_at),
            "summary": self.summary,
            "source": {"name": self.source_name},
        }


@dataclass
class FetchOutcome:
    """Result of fetching and parsing one source."""
    source: Source
    entries: List[Entry] = field(default_factory=list)
    error: Optional[str] = None
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. 2024-01-01T10:00:00.000Z."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class FetcherInterface:
    """Interface for feed fetching."""

    async def fetch(self, url: str) -> bytes:
        """Fetch the raw document at url."""
        raise NotImplementedError


class CacheInterface:
    """Interface for the response cache."""

    async def get(self, key: str):
        """Return the cached response for key, or None."""
        raise NotImplementedError

    async def put(self, key: str, body: bytes, ttl_seconds: int) -> None:
        """Store body under key for ttl_seconds."""
        raise NotImplementedError
