from __future__ import annotations

import re
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .models import Dialect, NewsItem, ParsedFeed

SNIPPET_LENGTH = 120

DEFAULT_TITLE = "No title"
DEFAULT_LINK = ""
DEFAULT_CONTENT = ""
DEFAULT_CREATOR = "Unknown"

_TAG_RE = re.compile(r"<[^>]*>")

Path = Tuple[Union[str, int], ...]

# Lookup order per canonical field: direct field first, then the
# dialect-specific alternate locations. Keys are feedparser's names
# (pubDate -> published, dc:creator -> author, <link href> -> link).
_RESOLUTION: Dict[Dialect, Dict[str, Sequence[Path]]] = {
    Dialect.ITEM: {
        "title": (("title",), ("title_detail", "value")),
        "link": (("link",), ("links", 0, "href")),
        "published": (("published",), ("updated",)),
        "content": (("description",), ("summary",), ("summary_detail", "value")),
        "creator": (("author",), ("author_detail", "name")),
    },
    Dialect.ENTRY: {
        "title": (("title",), ("title_detail", "value")),
        "link": (("link",), ("links", 0, "href")),
        "published": (("published",), ("updated",)),
        "content": (("summary",), ("content", 0, "value")),
        "creator": (("author",), ("author_detail", "name"), ("authors", 0, "name")),
    },
}
# Entries from documents of an unknown shape get every location tried
_RESOLUTION[Dialect.UNKNOWN] = {
    name: tuple(dict.fromkeys(_RESOLUTION[Dialect.ITEM][name] + _RESOLUTION[Dialect.ENTRY][name]))
    for name in _RESOLUTION[Dialect.ITEM]
}


def _lookup(entry: Any, path: Path) -> Any:
    node = entry
    for key in path:
        if isinstance(key, int):
            if not isinstance(node, (list, tuple)) or len(node) <= key:
                return None
            node = node[key]
        else:
            if not isinstance(node, dict):
                return None
            node = node.get(key)
        if node is None:
            return None
    return node


def resolve_field(entry: Dict[str, Any], paths: Sequence[Path], default: str) -> str:
    """Return the first non-empty string found along ``paths``, else ``default``."""
    for path in paths:
        value = _lookup(entry, path)
        if isinstance(value, str) and value.strip():
            return value
    return default


def _is_iso(value: str) -> bool:
    try:
        datetime.fromisoformat(value)
    except ValueError:
        return False
    return True


def _now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def resolve_title(entry: Dict[str, Any], dialect: Dialect) -> str:
    return resolve_field(entry, _RESOLUTION[dialect]["title"], DEFAULT_TITLE).strip()


def resolve_link(entry: Dict[str, Any], dialect: Dialect) -> str:
    return resolve_field(entry, _RESOLUTION[dialect]["link"], DEFAULT_LINK).strip()


def resolve_content(entry: Dict[str, Any], dialect: Dialect) -> str:
    return resolve_field(entry, _RESOLUTION[dialect]["content"], DEFAULT_CONTENT)


def resolve_creator(entry: Dict[str, Any], dialect: Dialect) -> str:
    return resolve_field(entry, _RESOLUTION[dialect]["creator"], DEFAULT_CREATOR).strip()


def resolve_published(entry: Dict[str, Any], dialect: Dialect, now: Optional[str] = None) -> str:
    """
    Resolve the publication timestamp as an ISO-8601 string.

    ISO values are returned verbatim. Other formats feedparser understood
    (RFC 822 pubDate) are rendered from its ``<key>_parsed`` struct as UTC.
    Values nobody could parse are kept raw and sort as oldest downstream.
    Absent timestamps fall back to ``now`` (current UTC time by default).
    """
    for path in _RESOLUTION[dialect]["published"]:
        raw = _lookup(entry, path)
        if not isinstance(raw, str) or not raw.strip():
            continue
        raw = raw.strip()
        if _is_iso(raw):
            return raw
        parsed = entry.get(f"{path[-1]}_parsed")
        if isinstance(parsed, time.struct_time):
            return time.strftime("%Y-%m-%dT%H:%M:%SZ", parsed)
        return raw
    return now or _now_iso()


def strip_html(text: str) -> str:
    return _TAG_RE.sub("", text or "")


def make_snippet(text: str, limit: int = SNIPPET_LENGTH) -> str:
    """Strip tags first, then hard-cut to ``limit`` characters."""
    return strip_html(text)[:limit]


def normalize_entry(entry: Dict[str, Any], dialect: Dialect, source: str = "") -> NewsItem:
    """
    Convert one raw item/entry into a NewsItem.

    Never fails: every missing field resolves to its default.
    """
    if not isinstance(entry, dict):
        entry = {}
    content = resolve_content(entry, dialect)
    return NewsItem(
        title=resolve_title(entry, dialect),
        link=resolve_link(entry, dialect),
        published=resolve_published(entry, dialect),
        content=content,
        snippet=make_snippet(content),
        creator=resolve_creator(entry, dialect),
        source=source,
    )


def normalize_entries(parsed: ParsedFeed, source: str = "") -> List[NewsItem]:
    return [normalize_entry(e, parsed.dialect, source=source) for e in parsed.entries]
