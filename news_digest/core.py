from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import AsyncIterator, Iterable, List, Optional

import httpx

from .dedup import deduplicate
from .exceptions import FeedFetchError, FeedParseError
from .fetcher import fetch_feed
from .models import FeedResult, NewsItem
from .normalizer import normalize_entries
from .parser import parse_feed

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0
DEFAULT_USER_AGENT = "news-digest/0.1"

# Unparseable timestamps sort after every real one
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def sort_key(item: NewsItem) -> datetime:
    """Timezone-aware publication time of ``item``; naive values are taken as UTC."""
    try:
        dt = datetime.fromisoformat(item.published)
    except (TypeError, ValueError):
        return _OLDEST
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def sort_newest_first(items: Iterable[NewsItem]) -> List[NewsItem]:
    # sorted() is stable with reverse=True, so ties keep source order
    return sorted(items, key=sort_key, reverse=True)


@dataclass
class AggregateOptions:
    timeout: float = DEFAULT_TIMEOUT
    deduplicate: bool = False
    user_agent: str = DEFAULT_USER_AGENT


class NewsAggregator:
    """
    High-level API: fetch RSS/Atom feeds and return one list of NewsItem.

    Pipeline per source: fetch → parse → normalize. Sources run concurrently;
    a failing source is logged and contributes nothing. The combined list is
    (optionally) deduplicated and sorted newest first.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        deduplicate: bool = False,
        user_agent: str = DEFAULT_USER_AGENT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.options = AggregateOptions(
            timeout=timeout,
            deduplicate=deduplicate,
            user_agent=user_agent,
        )
        self._client = client

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            # Caller owns the injected client
            yield self._client
            return
        async with httpx.AsyncClient(
            timeout=self.options.timeout,
            follow_redirects=True,
            headers={"User-Agent": self.options.user_agent},
        ) as client:
            yield client

    async def fetch_source(self, client: httpx.AsyncClient, url: str) -> FeedResult:
        """Run fetch → parse → normalize for one source, turning failures into a FeedResult."""
        try:
            raw = await fetch_feed(client, url)
            parsed = parse_feed(raw)
        except (FeedFetchError, FeedParseError) as e:
            logger.warning("Error fetching %s: %s", url, e)
            return FeedResult(source=url, error=str(e))

        items = normalize_entries(parsed, source=url)
        logger.info("Feed %s: %d items (%s dialect)", url, len(items), parsed.dialect.value)
        return FeedResult(source=url, items=items)

    async def collect(self, sources: Iterable[str]) -> List[FeedResult]:
        """Process every source concurrently; results come back in source order."""
        urls = [u.strip() for u in sources if u and u.strip()]
        if not urls:
            return []

        async with self._session() as client:
            results = await asyncio.gather(
                *(self.fetch_source(client, u) for u in urls),
                return_exceptions=True,
            )

        out: List[FeedResult] = []
        for url, result in zip(urls, results):
            if isinstance(result, FeedResult):
                out.append(result)
                continue
            if not isinstance(result, Exception):
                raise result
            logger.error("Unexpected error processing %s: %s", url, result, exc_info=result)
            out.append(FeedResult(source=url, error=f"unexpected error: {result!r}"))
        return out

    async def aggregate(self, sources: Iterable[str]) -> List[NewsItem]:
        results = await self.collect(sources)
        if not results:
            logger.info("No feed sources configured")
            return []

        items: List[NewsItem] = []
        for result in results:
            items.extend(result.items)

        failed = sum(1 for r in results if not r.ok)
        if failed:
            logger.warning("%d of %d feeds failed", failed, len(results))

        if self.options.deduplicate:
            before = len(items)
            items = deduplicate(items)
            logger.debug("Deduplicated %d -> %d items", before, len(items))

        return sort_newest_first(items)


async def aggregate(sources: Iterable[str], **options) -> List[NewsItem]:
    """Shortcut for ``NewsAggregator(**options).aggregate(sources)``."""
    return await NewsAggregator(**options).aggregate(sources)
