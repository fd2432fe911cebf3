"""Unit tests for FeedFetcher with a mocked aiohttp session."""

import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock

import aiohttp

# Add project root to path
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from friendfeed.config.settings import Settings
from friendfeed.errors import FetchError
from friendfeed.ingestion.fetcher import FeedFetcher
from friendfeed.ingestion.interfaces import RetryPolicy

FEED_URL = "https://alice.example/feed.xml"


def make_response(status=200, body=b"<rss/>"):
    response = MagicMock()
    response.status = status
    response.read = AsyncMock(return_value=body)
    return response


def make_session(*outcomes):
    """Session whose get() yields each outcome in turn (response or exception)."""
    contexts = []
    for outcome in outcomes:
        context = MagicMock()
        if isinstance(outcome, BaseException):
            context.__aenter__.side_effect = outcome
        else:
            context.__aenter__.return_value = outcome
        contexts.append(context)

    session = MagicMock()
    session.get.side_effect = contexts
    session.close = AsyncMock()
    return session


def make_fetcher(session, attempts=3):
    return FeedFetcher(
        timeout_seconds=1,
        retry_policy=RetryPolicy(max_attempts=attempts, delay=0),
        session=session,
        user_agent="test-agent",
    )


@pytest.mark.asyncio
class TestFeedFetcher:
    """Tests for FeedFetcher."""

    async def test_fetch_success(self):
        """Should return the body of a 200 response."""
        session = make_session(make_response(body=b"<rss>ok</rss>"))

        async with make_fetcher(session) as fetcher:
            body = await fetcher.fetch(FEED_URL)

        assert body == b"<rss>ok</rss>"
        assert session.get.call_count == 1
        assert session.get.call_args.args[0] == FEED_URL

    async def test_retry_after_timeout(self):
        """A timeout is retried and a later success is returned."""
        session = make_session(asyncio.TimeoutError(), make_response(body=b"second"))

        async with make_fetcher(session) as fetcher:
            body = await fetcher.fetch(FEED_URL)

        assert body == b"second"
        assert session.get.call_count == 2

    async def test_bad_status_exhausts_retries(self):
        """Non-success statuses count as failures and end in FetchError."""
        session = make_session(*(make_response(status=500) for _ in range(3)))

        async with make_fetcher(session) as fetcher:
            with pytest.raises(FetchError) as exc_info:
                await fetcher.fetch(FEED_URL)

        assert session.get.call_count == 3
        assert exc_info.value.url == FEED_URL
        assert exc_info.value.detail == "HTTP 500"

    async def test_connection_error_carries_detail(self):
        session = make_session(*(aiohttp.ClientConnectionError("refused") for _ in range(2)))

        async with make_fetcher(session, attempts=2) as fetcher:
            with pytest.raises(FetchError) as exc_info:
                await fetcher.fetch(FEED_URL)

        assert session.get.call_count == 2
        assert "refused" in exc_info.value.detail

    async def test_timeout_detail(self):
        session = make_session(asyncio.TimeoutError())

        async with make_fetcher(session, attempts=1) as fetcher:
            with pytest.raises(FetchError) as exc_info:
                await fetcher.fetch(FEED_URL)

        assert exc_info.value.detail == "timed out"

    async def test_invalid_url_becomes_fetch_error(self):
        """Errors outside the retry set fail at once but still as FetchError."""
        session = MagicMock()
        session.get.side_effect = ValueError("URL has an invalid label")
        session.close = AsyncMock()

        async with make_fetcher(session) as fetcher:
            with pytest.raises(FetchError) as exc_info:
                await fetcher.fetch("http://bad..host/feed")

        assert session.get.call_count == 1
        assert exc_info.value.url == "http://bad..host/feed"
        assert "invalid label" in exc_info.value.detail

    async def test_borrowed_session_not_closed(self):
        """Only sessions the fetcher created are closed on exit."""
        session = make_session(make_response())

        async with make_fetcher(session):
            pass

        session.close.assert_not_awaited()

    async def test_owned_session_lifecycle(self):
        fetcher = FeedFetcher(timeout_seconds=1, retry_policy=RetryPolicy(delay=0))

        async with fetcher:
            assert isinstance(fetcher.session, aiohttp.ClientSession)

        assert fetcher.session is None

    async def test_fetch_requires_session(self):
        with pytest.raises(RuntimeError):
            await FeedFetcher(timeout_seconds=1).fetch(FEED_URL)


class TestFetcherSettings:
    """Tests for building a fetcher from settings."""

    def test_from_settings(self):
        config = Settings(
            _env_file=None,
            fetch_timeout_millis=2500,
            fetch_max_retries=4,
            fetch_retry_delay_seconds=0.25,
            user_agent="custom/1.0",
        )

        fetcher = FeedFetcher.from_settings(config)

        assert fetcher.timeout_seconds == 2.5
        assert fetcher.retry_policy == RetryPolicy(max_attempts=5, delay=0.25)
        assert fetcher.user_agent == "custom/1.0"
