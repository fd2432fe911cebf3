"""Typed views over the two supported feed dialects.

feedparser returns loosely-typed dictionaries for every format it knows.
``detect_dialect`` narrows that result into either a ``ClassicFeed``
(RSS: a channel holding items) or a ``ModernFeed`` (Atom: a feed holding
entries), so the parser never has to probe for keys itself.
"""

import calendar
import xml.sax
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional, Union
from xml.etree import ElementTree

import structlog

from ..errors import ParseError

logger = structlog.get_logger()


@dataclass(frozen=True)
class SummaryFields:
    """Candidate sources for an entry summary, in priority order."""
    html_summary: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None


@dataclass(frozen=True)
class LinkRef:
    href: str
    rel: Optional[str] = None


@dataclass(frozen=True)
class ClassicItem:
    title: Optional[str]
    link: Optional[str]
    pub_date: Optional[datetime]
    alt_date: Optional[datetime]
    summary_fields: SummaryFields


@dataclass(frozen=True)
class ModernEntry:
    title: Optional[str]
    links: List[LinkRef]
    updated: Optional[datetime]
    published: Optional[datetime]
    summary_fields: SummaryFields


@dataclass(frozen=True)
class ClassicFeed:
    items: List[ClassicItem] = field(default_factory=list)


@dataclass(frozen=True)
class ModernFeed:
    entries: List[ModernEntry] = field(default_factory=list)


FeedDocument = Union[ClassicFeed, ModernFeed]

HTML_TYPES = {"text/html", "application/xhtml+xml", "html", "xhtml"}

# RDF-rooted RSS keeps its items outside the channel element
RDF_VERSIONS = {"rss090", "rss10"}


def detect_dialect(parsed: Any, raw: bytes = None) -> Optional[FeedDocument]:
    """Map a feedparser result onto a dialect, or None for any other shape.

    When the raw document is given, Atom links are read from it as
    written (see ``written_links``). Raises ParseError when the
    document is not well-formed XML.
    """
    exc = parsed.get("bozo_exception")
    if parsed.get("bozo") and isinstance(exc, xml.sax.SAXException):
        raise ParseError(f"malformed XML: {exc}")

    version = str(parsed.get("version") or "").lower()
    raw_entries = parsed.get("entries") or []
    if not isinstance(raw_entries, list):
        raise ParseError("entries is not a list")

    if version in RDF_VERSIONS:
        return None
    if version.startswith("rss"):
        return ClassicFeed(items=_collect(raw_entries, classic_item))
    if version.startswith("atom"):
        links = written_links(raw) if raw is not None else None
        if links is not None and len(links) != len(raw_entries):
            logger.debug("atom_links_mismatch", entries=len(raw_entries), link_sets=len(links))
            links = None
        return ModernFeed(entries=_collect(raw_entries, modern_entry, links))
    return None


def written_links(raw: bytes) -> Optional[List[List[LinkRef]]]:
    """Links of every Atom entry with rel exactly as the document wrote it.

    feedparser fills in rel="alternate" on links that carry no rel, so a
    link explicitly marked alternate cannot be told apart from an
    unmarked one in its output. Returns None when the document does not
    parse.
    """
    try:
        root = ElementTree.fromstring(raw)
    except (ElementTree.ParseError, ValueError) as e:
        logger.debug("atom_links_unavailable", error=str(e))
        return None

    link_sets = []
    for entry in root:
        if _local_name(entry.tag) != "entry":
            continue
        links = []
        for child in entry:
            if _local_name(child.tag) != "link":
                continue
            href = _text(child.get("href"))
            if href:
                links.append(LinkRef(href=href, rel=child.get("rel")))
        link_sets.append(links)
    return link_sets


def _local_name(tag: Any) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _collect(raw_entries: list, convert, links: Optional[list] = None) -> list:
    converted = []
    for index, raw in enumerate(raw_entries):
        try:
            if not isinstance(raw, dict):
                raise ParseError(f"unexpected item type {type(raw).__name__}")
            if links is None:
                converted.append(convert(raw))
            else:
                converted.append(convert(raw, links[index]))
        except (ParseError, AttributeError, TypeError, ValueError) as e:
            logger.debug("feed_item_skipped", error=str(e))
    return converted


def classic_item(raw: dict) -> ClassicItem:
    """Convert one RSS item (pubDate, dc:date, description, content:encoded)."""
    return ClassicItem(
        title=_text(raw.get("title")),
        link=_text(raw.get("link")),
        pub_date=_timestamp(_field(raw, "published_parsed")),
        alt_date=_timestamp(_field(raw, "updated_parsed")),
        summary_fields=SummaryFields(
            description=_text(raw.get("summary")),
            content=_first_content(raw),
        ),
    )


def modern_entry(raw: dict, links: Optional[List[LinkRef]] = None) -> ModernEntry:
    """Convert one Atom entry (updated, published, summary, content, links).

    ``links`` overrides the links feedparser reports for the entry.
    """
    summary = _text(raw.get("summary"))
    detail = raw.get("summary_detail") or {}
    is_html = str(detail.get("type") or "").lower() in HTML_TYPES

    if links is None:
        links = []
        for link in raw.get("links") or []:
            href = _text(link.get("href")) if isinstance(link, dict) else None
            if href:
                links.append(LinkRef(href=href, rel=link.get("rel")))

    return ModernEntry(
        title=_text(raw.get("title")),
        links=links,
        updated=_timestamp(_field(raw, "updated_parsed")),
        published=_timestamp(_field(raw, "published_parsed")),
        summary_fields=SummaryFields(
            html_summary=summary if is_html else None,
            summary=None if is_html else summary,
            content=_first_content(raw),
        ),
    )


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _field(raw: dict, key: str) -> Any:
    # Membership first: feedparser's get() aliases updated to published
    return raw[key] if key in raw else None


def _first_content(raw: dict) -> Optional[str]:
    content = raw.get("content")
    if isinstance(content, list):
        for block in content:
            if isinstance(block, dict):
                value = _text(block.get("value"))
                if value:
                    return value
    return None


def _timestamp(value: Any) -> Optional[datetime]:
    """feedparser dates are UTC struct_time values."""
    if value is None:
        return None
    try:
        return datetime.fromtimestamp(calendar.timegm(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None
