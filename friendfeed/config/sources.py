"""Friend source list loader."""

import asyncio
from typing import List

import aiohttp
import structlog
import yaml

from ..errors import SourceListError
from ..ingestion.interfaces import Source

logger = structlog.get_logger()


async def load_sources(session: aiohttp.ClientSession, url: str, timeout_seconds: float = 10) -> List[Source]:
    """Fetch the YAML source list at url and parse it."""
    try:
        async with session.get(url, timeout=aiohttp.ClientTimeout(total=timeout_seconds)) as response:
            if not 200 <= response.status < 300:
                raise SourceListError(f"Failed to fetch source list: HTTP {response.status}")
            text = await response.text()
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise SourceListError(f"Failed to fetch source list: {str(e) or type(e).__name__}") from e

    sources = parse_sources(text)
    logger.info("sources_loaded", url=url, sources=len(sources))
    return sources


def parse_sources(text: str) -> List[Source]:
    """Parse a YAML list of friends into sources.

    Each friend is a mapping with ``name``, ``feed`` and optionally
    ``url``/``link``. Friends without a feed are skipped.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SourceListError(f"Invalid source list YAML: {e}") from e

    if data is None:
        return []
    if not isinstance(data, list):
        raise SourceListError(f"Source list must be a YAML list, got {type(data).__name__}")

    sources = []
    for friend in data:
        if not isinstance(friend, dict):
            logger.debug("source_skipped", reason="not_a_mapping")
            continue

        feed_url = friend.get("feed")
        if not isinstance(feed_url, str) or not feed_url.strip():
            continue
        feed_url = feed_url.strip()

        name = friend.get("name")
        site_url = friend.get("url") or friend.get("link")
        sources.append(Source(
            name=str(name).strip() if name else feed_url,
            feed_url=feed_url,
            site_url=str(site_url) if site_url else None,
        ))

    return sources
