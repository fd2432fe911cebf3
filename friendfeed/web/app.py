"""HTTP surface: one cached JSON endpoint with open CORS."""

import json
from datetime import datetime, timezone

from fastapi import BackgroundTasks, Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response
import structlog

from ..config.settings import Settings, settings
from ..errors import FriendFeedError, SourceListError
from ..ingestion.interfaces import CacheInterface
from ..pipeline.aggregator import run_aggregation
from ..storage.factory import get_response_cache

logger = structlog.get_logger()

app = FastAPI(title="Friend Feeds")

ERROR_TITLE = "Request processing failed"

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Max-Age": "86400",
}


def get_settings() -> Settings:
    return settings


def get_cache() -> CacheInterface:
    return get_response_cache()


def _error_status(exc: FriendFeedError) -> int:
    if isinstance(exc, SourceListError):
        return 502
    return 500


@app.exception_handler(FriendFeedError)
async def friendfeed_error_handler(request: Request, exc: FriendFeedError) -> JSONResponse:
    logger.error("request_failed", path=request.url.path, error=str(exc), kind=type(exc).__name__)
    return JSONResponse(
        status_code=_error_status(exc),
        content={"error": ERROR_TITLE, "message": str(exc)},
        headers={"Access-Control-Allow-Origin": "*"},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": ERROR_TITLE, "message": str(exc)},
        headers={"Access-Control-Allow-Origin": "*"},
    )


# ===== FEED ENDPOINT =====
@app.options("/")
async def feed_preflight() -> Response:
    """Answer CORS preflight requests for the feed."""
    return Response(status_code=200, headers=PREFLIGHT_HEADERS)


@app.get("/")
async def aggregated_feed(
    request: Request,
    background_tasks: BackgroundTasks,
    config: Settings = Depends(get_settings),
    cache: CacheInterface = Depends(get_cache),
) -> Response:
    """Merged, newest-first entries from every friend feed."""
    # Fail before touching the cache or the network
    config.require_source_list_url()

    # The endpoint takes no parameters; the query string never selects a response
    key = request.url.path
    cached = await cache.get(key)
    if cached is not None:
        logger.debug("cache_hit", key=key)
        return Response(
            content=cached.body,
            media_type="application/json",
            headers=_success_headers(cached.ttl_seconds),
        )

    entries = await run_aggregation(config)
    body = json.dumps([entry.to_dict() for entry in entries], ensure_ascii=False).encode("utf-8")

    background_tasks.add_task(store_response, cache, key, body, config.cache_ttl_seconds)
    return Response(
        content=body,
        media_type="application/json",
        headers=_success_headers(config.cache_ttl_seconds),
    )


async def store_response(cache: CacheInterface, key: str, body: bytes, ttl_seconds: int) -> None:
    """Write a finished response to the cache; failures are logged only."""
    try:
        await cache.put(key, body, ttl_seconds)
    except Exception as e:
        logger.warning("cache_write_failed", key=key, error=str(e))


def _success_headers(ttl_seconds: int) -> dict:
    return {
        "Cache-Control": f"public, max-age={ttl_seconds}",
        "Access-Control-Allow-Origin": "*",
    }


# ===== HEALTH CHECK ENDPOINT =====
@app.get("/health")
async def health_check():
    """Health check endpoint for load balancers."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
