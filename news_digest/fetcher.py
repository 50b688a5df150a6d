from __future__ import annotations

import logging

import httpx

from .exceptions import FeedFetchError

logger = logging.getLogger(__name__)


async def fetch_feed(client: httpx.AsyncClient, url: str) -> bytes:
    """
    Download a single feed URL and return its raw body.

    One attempt only. Raises FeedFetchError on transport errors, timeouts and
    any non-2xx status; the caller decides whether that is fatal.
    """
    logger.info("Fetching feed: %s", url)
    try:
        response = await client.get(url)
    except httpx.TimeoutException as e:
        raise FeedFetchError(url, f"timed out: {e!r}") from e
    except httpx.HTTPError as e:
        raise FeedFetchError(url, str(e) or e.__class__.__name__) from e

    if not response.is_success:
        # Keep a short slice of the body for diagnostics
        body = response.text[:200].strip()
        reason = f"HTTP {response.status_code}"
        if body:
            reason += f": {body}"
        raise FeedFetchError(url, reason)
    return response.content
