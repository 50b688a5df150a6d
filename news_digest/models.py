from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class Dialect(enum.Enum):
    """Syndication schema shape a parsed document was recognized as."""

    ITEM = "item"  # RSS: channel/item
    ENTRY = "entry"  # Atom: feed/entry
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class NewsItem:
    """
    Canonical record every feed entry is normalized into.

    WARNING: Do not change fields lightly. The digest prompt serializes this
    shape as-is. Every field is always a string; normalization supplies
    defaults instead of leaving anything missing.
    """
    title: str
    link: str
    published: str
    content: str
    snippet: str
    creator: str
    source: str = ""


@dataclass(frozen=True)
class ParsedFeed:
    dialect: Dialect
    entries: List[Dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class FeedResult:
    """
    Outcome of processing one feed source.

    Either ``items`` (possibly empty) on success, or ``error`` describing why the
    source contributed nothing.
    """
    source: str
    items: List[NewsItem] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
