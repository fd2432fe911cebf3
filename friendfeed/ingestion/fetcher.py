"""Feed fetcher with per-request timeouts and bounded retries."""

import asyncio
from typing import Optional

import aiohttp
from tenacity import AsyncRetrying, RetryError, retry_if_exception_type, stop_after_attempt, wait_fixed
import structlog

from .interfaces import FetcherInterface, RetryPolicy
from ..config.settings import Settings, settings
from ..errors import FetchError

logger = structlog.get_logger()

# Failures that count towards the retry budget
RETRYABLE = (aiohttp.ClientError, asyncio.TimeoutError, FetchError)


class FeedFetcher(FetcherInterface):
    """Async feed fetcher with a timeout per attempt and fixed-delay retries."""

    def __init__(
        self,
        timeout_seconds: float = None,
        retry_policy: RetryPolicy = None,
        session: Optional[aiohttp.ClientSession] = None,
        user_agent: str = None,
    ):
        self.timeout_seconds = timeout_seconds or settings.fetch_timeout_seconds
        self.retry_policy = retry_policy or RetryPolicy.from_retries(
            settings.fetch_max_retries, settings.fetch_retry_delay_seconds
        )
        self.user_agent = user_agent or settings.user_agent
        self.session = session
        self._owns_session = session is None

    @classmethod
    def from_settings(cls, config: Settings, session: aiohttp.ClientSession = None) -> "FeedFetcher":
        return cls(
            timeout_seconds=config.fetch_timeout_seconds,
            retry_policy=RetryPolicy.from_retries(
                config.fetch_max_retries, config.fetch_retry_delay_seconds
            ),
            session=session,
            user_agent=config.user_agent,
        )

    async def __aenter__(self):
        if self.session is None:
            self.session = aiohttp.ClientSession(
                headers={"User-Agent": self.user_agent}
            )
            self._owns_session = True
        return self

    async def __aexit__(self, *args):
        if self.session and self._owns_session:
            await self.session.close()
            self.session = None

    async def fetch(self, url: str) -> bytes:
        """Fetch a feed document, retrying on timeouts, network errors and bad statuses.

        Every failure surfaces as a FetchError carrying the URL.
        """
        if self.session is None:
            raise RuntimeError("FeedFetcher must be used as an async context manager")

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.retry_policy.max_attempts),
            wait=wait_fixed(self.retry_policy.delay),
            retry=retry_if_exception_type(RETRYABLE),
            reraise=False,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    attempt_number = attempt.retry_state.attempt_number
                    if attempt_number > 1:
                        logger.debug("feed_fetch_retry", url=url, attempt=attempt_number)
                    return await self._fetch_once(url)
        except RetryError as e:
            last = e.last_attempt.exception()
            raise FetchError(url, _describe(last)) from last
        except Exception as e:
            # Not worth retrying (e.g. an invalid URL) but still a failed fetch
            raise FetchError(url, _describe(e)) from e

    async def _fetch_once(self, url: str) -> bytes:
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        async with self.session.get(url, timeout=timeout) as response:
            if not 200 <= response.status < 300:
                raise FetchError(url, f"HTTP {response.status}")
            return await response.read()


def _describe(error: BaseException) -> str:
    if isinstance(error, FetchError):
        return error.detail
    if isinstance(error, asyncio.TimeoutError):
        return "timed out"
    return str(error) or type(error).__name__
