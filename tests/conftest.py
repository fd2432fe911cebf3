"""Pytest configuration and shared fixtures."""

import pytest
from datetime import datetime, timezone
from email.utils import format_datetime
from pathlib import Path

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def now():
    """A fixed processing time so recency filtering is deterministic."""
    return datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_source():
    """Provide a sample friend source."""
    from friendfeed.ingestion.interfaces import Source
    return Source(
        name="Alice",
        feed_url="https://alice.example/feed.xml",
        site_url="https://alice.example",
    )


@pytest.fixture
def rss_xml():
    """Build an RSS 2.0 document from (title, link, date, description) tuples."""
    def build(*items):
        parts = []
        for title, link, date, description in items:
            fields = []
            if title is not None:
                fields.append(f"<title>{title}</title>")
            if link is not None:
                fields.append(f"<link>{link}</link>")
            if date is not None:
                value = format_datetime(date, usegmt=True) if isinstance(date, datetime) else date
                fields.append(f"<pubDate>{value}</pubDate>")
            if description is not None:
                fields.append(f"<description><![CDATA[{description}]]></description>")
            parts.append("<item>" + "".join(fields) + "</item>")

        return (
            '<?xml version="1.0" encoding="UTF-8"?>'
            '<rss version="2.0"><channel>'
            "<title>Example RSS</title><link>https://example.com</link>"
            + "".join(parts)
            + "</channel></rss>"
        ).encode("utf-8")
    return build


@pytest.fixture
def atom_xml():
    """Build an Atom document from raw <entry> bodies."""
    def build(*entries):
        body = "".join(f"<entry>{entry}</entry>" for entry in entries)
        return (
            '<?xml version="1.0" encoding="UTF-8"?>'
            '<feed xmlns="http://www.w3.org/2005/Atom">'
            "<title>Example Atom</title><id>urn:example:feed</id>"
            "<updated>2024-06-15T00:00:00Z</updated>"
            + body
            + "</feed>"
        ).encode("utf-8")
    return build
