from __future__ import annotations

import logging
import xml.sax
from typing import Any, Dict, List, Union

import feedparser

from .exceptions import FeedParseError
from .models import Dialect, ParsedFeed

logger = logging.getLogger(__name__)


def detect_dialect(parsed: Any) -> Dialect:
    """
    Detect the document shape from the version feedparser recognized.

    RSS flavours (0.9x, 1.0, 2.0) carry channel/item, Atom flavours carry
    feed/entry. Anything else (plain XML, HTML, JSON) is UNKNOWN.
    """
    version = str(parsed.get("version") or "").lower()
    if version.startswith("rss"):
        return Dialect.ITEM
    if version.startswith("atom"):
        return Dialect.ENTRY
    return Dialect.UNKNOWN


def _as_list(value: Any) -> List[Dict[str, Any]]:
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    return list(value)


def parse_feed(raw: Union[bytes, str]) -> ParsedFeed:
    """
    Parse a raw RSS/Atom body into a ParsedFeed.

    - Well-formed documents without items give an empty entry list.
    - Documents in neither dialect give Dialect.UNKNOWN with no entries.
    - Bodies that are not well-formed and in no known dialect raise
      FeedParseError.

    Slightly broken feeds that feedparser recovers (bozo, but a dialect was
    still recognized) are accepted.
    """
    if isinstance(raw, str):
        # Never let feedparser treat the body as a URL or file path
        raw = raw.encode("utf-8")
    if not raw.strip():
        raise FeedParseError("Empty feed body")

    try:
        parsed = feedparser.parse(raw)
    except Exception as e:  # pragma: no cover - feedparser reports problems via bozo
        raise FeedParseError(f"Unparseable feed body ({e})") from e

    dialect = detect_dialect(parsed)
    if getattr(parsed, "bozo", 0):
        exc = getattr(parsed, "bozo_exception", None)
        if dialect is Dialect.UNKNOWN and isinstance(exc, xml.sax.SAXException):
            raise FeedParseError(f"Invalid RSS/Atom document ({exc})")
        logger.debug("Recovered malformed %s document: %s", dialect.value, exc)

    if dialect is Dialect.UNKNOWN:
        return ParsedFeed(dialect=dialect, entries=[])
    return ParsedFeed(dialect=dialect, entries=_as_list(parsed.get("entries")))
