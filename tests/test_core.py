from __future__ import annotations

import httpx
import pytest

from news_digest.core import NewsAggregator, aggregate, sort_key, sort_newest_first
from news_digest.models import NewsItem

RSS_URL = "https://rss.example.com/feed"
ATOM_URL = "https://atom.example.com/feed"
BROKEN_URL = "https://broken.example.com/feed"


def _item(title: str, published: str) -> NewsItem:
    return NewsItem(
        title=title, link=f"https://example.com/{title}", published=published,
        content="", snippet="", creator="Unknown",
    )


def _assert_sorted(items):
    for a, b in zip(items, items[1:]):
        assert sort_key(a) >= sort_key(b)


class TestNewsAggregator:

    @pytest.mark.asyncio
    async def test_merges_and_sorts_newest_first(self, make_client, rss_feed, atom_feed):
        async with make_client({RSS_URL: rss_feed, ATOM_URL: atom_feed}) as client:
            items = await NewsAggregator(client=client).aggregate([RSS_URL, ATOM_URL])

        assert [i.title for i in items] == [
            "Newer RSS story",  # 2024-01-03
            "Atom story",  # 2024-01-02
            "Older RSS story",  # 2024-01-01
        ]
        assert {i.source for i in items} == {RSS_URL, ATOM_URL}
        _assert_sorted(items)

    @pytest.mark.asyncio
    async def test_http_500_source_is_skipped(self, make_client, rss_feed, atom_feed):
        routes = {RSS_URL: rss_feed, BROKEN_URL: 500, ATOM_URL: atom_feed}
        async with make_client(routes) as client:
            items = await NewsAggregator(client=client).aggregate([RSS_URL, BROKEN_URL, ATOM_URL])

        assert len(items) == 3
        assert BROKEN_URL not in {i.source for i in items}

    @pytest.mark.asyncio
    async def test_failure_does_not_corrupt_other_source(self, make_client, rss_feed):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client({RSS_URL: rss_feed, BROKEN_URL: refuse}) as client:
            items = await NewsAggregator(client=client).aggregate([BROKEN_URL, RSS_URL])

        # same order the source itself produces once sorted
        assert [i.title for i in items] == ["Newer RSS story", "Older RSS story"]

    @pytest.mark.asyncio
    async def test_timeout_is_a_per_source_failure(self, make_client, rss_feed):
        def slow(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with make_client({RSS_URL: rss_feed, BROKEN_URL: slow}) as client:
            results = await NewsAggregator(client=client).collect([RSS_URL, BROKEN_URL])

        assert results[0].ok and len(results[0].items) == 2
        assert not results[1].ok
        assert "timed out" in results[1].error

    @pytest.mark.asyncio
    async def test_unparseable_source_is_skipped(self, make_client, rss_feed):
        routes = {RSS_URL: rss_feed, BROKEN_URL: "<html><body><p>Oops</body>"}
        async with make_client(routes) as client:
            results = await NewsAggregator(client=client).collect([RSS_URL, BROKEN_URL])

        assert [r.ok for r in results] == [True, False]

    @pytest.mark.asyncio
    async def test_zero_sources(self):
        assert await NewsAggregator().aggregate([]) == []
        assert await aggregate([" ", ""]) == []

    @pytest.mark.asyncio
    async def test_all_sources_failing(self, make_client):
        async with make_client({RSS_URL: 500, ATOM_URL: 404}) as client:
            items = await NewsAggregator(client=client).aggregate([RSS_URL, ATOM_URL])

        assert items == []

    @pytest.mark.asyncio
    async def test_deduplicate_option(self, make_client, rss_feed):
        mirror = "https://mirror.example.com/feed"
        async with make_client({RSS_URL: rss_feed, mirror: rss_feed}) as client:
            plain = await NewsAggregator(client=client).aggregate([RSS_URL, mirror])
            deduped = await NewsAggregator(client=client, deduplicate=True).aggregate([RSS_URL, mirror])

        assert len(plain) == 4
        assert len(deduped) == 2
        assert {i.source for i in deduped} == {RSS_URL}


class TestSorting:

    def test_mixed_offsets(self):
        items = [
            _item("utc", "2024-01-01T10:00:00Z"),
            _item("plus2", "2024-01-01T11:00:00+02:00"),  # 09:00 UTC
            _item("naive", "2024-01-01T09:30:00"),
        ]
        assert [i.title for i in sort_newest_first(items)] == ["utc", "naive", "plus2"]

    def test_unparseable_sorts_last_and_stable(self):
        items = [
            _item("bad1", "not a date"),
            _item("good", "2020-01-01T00:00:00Z"),
            _item("bad2", ""),
        ]
        result = sort_newest_first(items)
        assert [i.title for i in result] == ["good", "bad1", "bad2"]
        _assert_sorted(result)

    def test_ties_keep_input_order(self):
        items = [_item(str(n), "2024-01-01T00:00:00Z") for n in range(5)]
        assert [i.title for i in sort_newest_first(items)] == ["0", "1", "2", "3", "4"]
