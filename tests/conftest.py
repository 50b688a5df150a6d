from __future__ import annotations

from typing import Callable, Dict, Union

import httpx
import pytest

RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title>Example RSS</title>
    <link>https://rss.example.com/</link>
    <item>
      <title>Older RSS story</title>
      <link>https://rss.example.com/1</link>
      <description><![CDATA[<p>First <b>body</b></p>]]></description>
      <pubDate>Mon, 01 Jan 2024 10:00:00 GMT</pubDate>
      <dc:creator>Alice</dc:creator>
    </item>
    <item>
      <title>Newer RSS story</title>
      <link>https://rss.example.com/2</link>
      <description>Second body</description>
      <pubDate>Wed, 03 Jan 2024 10:00:00 GMT</pubDate>
    </item>
  </channel>
</rss>
"""

ATOM_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Example Atom</title>
  <id>tag:atom.example.com,2024:feed</id>
  <updated>2024-01-02T12:00:00Z</updated>
  <entry>
    <title>Atom story</title>
    <id>tag:atom.example.com,2024:1</id>
    <link rel="alternate" href="https://atom.example.com/1"/>
    <published>2024-01-02T12:00:00Z</published>
    <updated>2024-01-02T12:30:00Z</updated>
    <summary>Atom summary</summary>
    <author><name>Bob</name></author>
  </entry>
</feed>
"""

Route = Union[str, int, Callable[[httpx.Request], httpx.Response]]


def make_transport(routes: Dict[str, Route]) -> httpx.MockTransport:
    """
    Build a MockTransport answering by URL.

    A str value is served as a 200 body, an int as an empty response with that
    status, a callable is invoked with the request.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        route = routes.get(str(request.url))
        if route is None:
            return httpx.Response(404, text="not found")
        if callable(route):
            return route(request)
        if isinstance(route, int):
            return httpx.Response(route, text="server error")
        return httpx.Response(200, content=route.encode("utf-8"))

    return httpx.MockTransport(handler)


@pytest.fixture
def rss_feed() -> str:
    return RSS_FEED


@pytest.fixture
def atom_feed() -> str:
    return ATOM_FEED


@pytest.fixture
def make_client() -> Callable[[Dict[str, Route]], httpx.AsyncClient]:
    def factory(routes: Dict[str, Route]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=make_transport(routes))

    return factory
