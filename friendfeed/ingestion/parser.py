"""Feed parser: raw RSS/Atom documents to normalized entries."""

import io
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Union

import feedparser
import structlog

from .dialects import ClassicFeed, ClassicItem, FeedDocument, ModernEntry, ModernFeed, detect_dialect
from .interfaces import Entry, Source, NO_LINK, UNTITLED
from .summary import SummaryExtractor
from ..config.settings import settings
from ..errors import ParseError

logger = structlog.get_logger()


class FeedParser:
    """Turn a raw feed document into recent, normalized entries.

    Never raises: unknown formats and malformed documents produce an
    empty list, and items that cannot be normalized are skipped.
    """

    def __init__(self, days_limit: int = None, summary_extractor: SummaryExtractor = None):
        self.days_limit = settings.days_limit if days_limit is None else days_limit
        self.summary_extractor = summary_extractor or SummaryExtractor()

    def parse(
        self,
        raw: Union[bytes, str],
        source: Source,
        now: datetime = None,
    ) -> List[Entry]:
        """Parse a document fetched for source."""
        now = now or datetime.now(timezone.utc)

        try:
            document = self.load(raw)
        except ParseError as e:
            logger.warning("feed_parse_failed", feed=source.name, error=str(e))
            return []
        except Exception as e:
            logger.warning("feed_parse_exception", feed=source.name, error=str(e))
            return []

        if document is None:
            logger.info("feed_format_unknown", feed=source.name)
            return []

        entries = self.normalize(document, source, now)
        logger.info("feed_parsed", feed=source.name, entries=len(entries))
        return entries

    def load(self, raw: Union[bytes, str]) -> Optional[FeedDocument]:
        """Run feedparser and narrow the result to a dialect."""
        if isinstance(raw, str):
            raw = raw.encode("utf-8")
        # A stream keeps feedparser from treating the payload as a URL or path
        parsed = feedparser.parse(io.BytesIO(raw))
        return detect_dialect(parsed, raw)

    def normalize(self, document: FeedDocument, source: Source, now: datetime) -> List[Entry]:
        cutoff = now - timedelta(days=self.days_limit)

        if isinstance(document, ClassicFeed):
            items, convert = document.items, self._from_classic
        elif isinstance(document, ModernFeed):
            items, convert = document.entries, self._from_modern
        else:
            return []

        entries = []
        for item in items:
            try:
                entry = convert(item, source, now)
            except (TypeError, ValueError, AttributeError) as e:
                logger.debug("feed_item_skipped", feed=source.name, error=str(e))
                continue
            if entry.published_at < cutoff:
                continue
            entries.append(entry)
        return entries

    def _from_classic(self, item: ClassicItem, source: Source, now: datetime) -> Entry:
        return Entry(
            title=_title(item.title),
            link=item.link.strip() if item.link else NO_LINK,
            published_at=item.pub_date or item.alt_date or now,
            source_name=source.name,
            summary=self.summary_extractor.extract(item.summary_fields),
        )

    def _from_modern(self, item: ModernEntry, source: Source, now: datetime) -> Entry:
        return Entry(
            title=_title(item.title),
            link=_preferred_link(item),
            published_at=item.updated or item.published or now,
            source_name=source.name,
            summary=self.summary_extractor.extract(item.summary_fields),
        )


def _title(value: Optional[str]) -> str:
    title = value.strip() if value else ""
    return title or UNTITLED


def _preferred_link(item: ModernEntry) -> str:
    for link in item.links:
        if link.rel == "alternate":
            return link.href.strip()
    if item.links:
        return item.links[0].href.strip()
    return NO_LINK
