"""
news_digest

Fetches RSS/Atom feeds, normalizes every entry into one NewsItem shape, and posts
a language-model-written digest of the newest items to a Telegram chat.

Core ideas:
- Input: RSS/Atom feed URLs
- Process: fetch → parse → normalize → (deduplicate) → sort (newest first)
- Output: List[NewsItem], then digest → Telegram

Example
-------
import asyncio
from news_digest import NewsAggregator

news = asyncio.run(NewsAggregator(timeout=10).aggregate([
    "https://rss.nytimes.com/services/xml/rss/nyt/Economy.xml",
    "https://www.thenation.com/subject/politics/feed/",
]))

for item in news:
    print(item.published, item.creator, item.title)
"""
from .models import Dialect, NewsItem
from .core import NewsAggregator, aggregate
from .config import Settings
from .digest import DigestOptions

__all__ = [
    "Dialect",
    "NewsItem",
    "NewsAggregator",
    "aggregate",
    "Settings",
    "DigestOptions",
]
