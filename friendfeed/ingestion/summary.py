"""Plain-text summary extraction for feed entries."""

import re
from typing import Optional

from bs4 import BeautifulSoup

from .dialects import SummaryFields
from ..config.settings import settings

ELLIPSIS = "......"

_WHITESPACE_RE = re.compile(r"\s+")


class SummaryExtractor:
    """Pick the best content field, strip markup and truncate.

    A limit of zero or less disables summaries entirely.
    """

    def __init__(self, limit: int = None):
        self.limit = settings.summary_char_limit if limit is None else limit

    def extract(self, fields: SummaryFields) -> Optional[str]:
        if self.limit <= 0:
            return None

        raw = pick_source_text(fields)
        if raw is None:
            return None

        text = clean_text(raw)
        if not text:
            return None
        return truncate(text, self.limit)


def pick_source_text(fields: SummaryFields) -> Optional[str]:
    """First non-blank of: html summary, plain summary, description, content."""
    for value in (fields.html_summary, fields.summary, fields.description, fields.content):
        if value and value.strip():
            return value
    return None


def clean_text(raw: str) -> str:
    """Drop script blocks and tags, then normalize whitespace."""
    soup = BeautifulSoup(raw, "html.parser")
    for script in soup.find_all("script"):
        script.decompose()
    text = soup.get_text()
    return _WHITESPACE_RE.sub(" ", text).strip()


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS
