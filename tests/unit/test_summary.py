"""Unit tests for summary extraction."""

import pytest

# Add project root to path
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from friendfeed.ingestion.dialects import SummaryFields
from friendfeed.ingestion.summary import SummaryExtractor, clean_text, pick_source_text, truncate


class TestPickSourceText:
    """Tests for the field priority chain."""

    def test_html_summary_wins(self):
        fields = SummaryFields(
            html_summary="<p>html</p>",
            summary="plain",
            description="desc",
            content="content",
        )
        assert pick_source_text(fields) == "<p>html</p>"

    def test_falls_through_in_order(self):
        assert pick_source_text(SummaryFields(summary="plain", content="c")) == "plain"
        assert pick_source_text(SummaryFields(description="desc", content="c")) == "desc"
        assert pick_source_text(SummaryFields(content="c")) == "c"

    def test_blank_fields_are_skipped(self):
        assert pick_source_text(SummaryFields(summary="   ", content="c")) == "c"

    def test_nothing_present(self):
        assert pick_source_text(SummaryFields()) is None


class TestCleanText:
    """Tests for markup stripping."""

    def test_strips_tags(self):
        assert clean_text("<p>Hello <b>world</b></p>") == "Hello world"

    def test_removes_script_blocks(self):
        assert clean_text("<p>Hi</p><script>alert('x')</script> there") == "Hi there"

    def test_collapses_whitespace(self):
        assert clean_text("  one \n\n two\t three  ") == "one two three"

    def test_decodes_entities(self):
        assert clean_text("Fish &amp; chips") == "Fish & chips"


class TestTruncate:
    """Tests for truncation."""

    def test_short_text_unchanged(self):
        assert truncate("Hello", 5) == "Hello"

    def test_long_text_cut_with_ellipsis(self):
        assert truncate("Hello world", 5) == "Hello......"


class TestSummaryExtractor:
    """Tests for SummaryExtractor."""

    def test_scenario_description_markup(self):
        """Markup in a description becomes plain text."""
        extractor = SummaryExtractor(limit=100)
        fields = SummaryFields(description="<p>Hello <b>world</b></p>")
        assert extractor.extract(fields) == "Hello world"

    def test_plain_text_passes_through(self):
        """Text without markup is returned unchanged."""
        text = "A plain sentence without any markup at all"
        extractor = SummaryExtractor(limit=100)
        assert extractor.extract(SummaryFields(summary=text)) == text

    def test_plain_text_truncated(self):
        text = "A plain sentence without any markup at all"
        extractor = SummaryExtractor(limit=7)
        assert extractor.extract(SummaryFields(summary=text)) == "A plain......"

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_limit_disables_summary(self, limit):
        """A zero or negative limit suppresses every summary."""
        extractor = SummaryExtractor(limit=limit)
        assert extractor.extract(SummaryFields(summary="Some text")) is None

    def test_missing_fields_give_none(self):
        assert SummaryExtractor(limit=100).extract(SummaryFields()) is None

    def test_markup_only_gives_none(self):
        """Nothing left after cleaning means no summary."""
        fields = SummaryFields(content="<script>track()</script><br/>")
        assert SummaryExtractor(limit=100).extract(fields) is None
