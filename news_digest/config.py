from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import load_dotenv

from .exceptions import ConfigError

DEFAULT_FEEDS: Tuple[str, ...] = (
    "https://rss.nytimes.com/services/xml/rss/nyt/Economy.xml",
    "https://www.thenation.com/subject/politics/feed/",
    "https://moxie.foxnews.com/google-publisher/politics.xml",
)

PROVIDERS = ("openai", "gemini")


def _split_feeds(value: str) -> Tuple[str, ...]:
    return tuple(u for u in re.split(r"[,\s]+", value) if u)


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from e


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {value!r}") from e


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """
    Process-wide settings, built once at startup and passed down explicitly.

    Pipeline stages never read the environment themselves.
    """
    feeds: Tuple[str, ...] = DEFAULT_FEEDS
    telegram_bot_token: Optional[str] = field(default=None, repr=False)
    telegram_chat_id: Optional[str] = None
    provider: str = "openai"
    openai_api_key: Optional[str] = field(default=None, repr=False)
    google_api_key: Optional[str] = field(default=None, repr=False)
    model: Optional[str] = None
    language: str = "Russian"
    top_n: int = 20
    max_message_chars: int = 4096
    feed_timeout: float = 15.0
    llm_timeout: float = 60.0
    telegram_timeout: float = 30.0
    deduplicate: bool = False
    log_level: str = "info"

    @classmethod
    def from_env(cls, *, dotenv: bool = True) -> "Settings":
        """Read settings from the environment (and a .env file when present)."""
        if dotenv:
            load_dotenv()
        feeds_env = os.getenv("RSS_FEEDS")
        feeds = _split_feeds(feeds_env) if feeds_env and feeds_env.strip() else DEFAULT_FEEDS
        return cls(
            feeds=feeds,
            telegram_bot_token=os.getenv("TELEGRAM_BOT_TOKEN") or None,
            telegram_chat_id=os.getenv("TELEGRAM_CHAT_ID") or None,
            provider=(os.getenv("DIGEST_PROVIDER") or "openai").strip().lower(),
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            google_api_key=os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY") or None,
            model=os.getenv("DIGEST_MODEL") or None,
            language=os.getenv("DIGEST_LANGUAGE") or "Russian",
            top_n=_env_int("DIGEST_TOP_N", 20),
            max_message_chars=_env_int("MAX_MESSAGE_CHARS", 4096),
            feed_timeout=_env_float("FEED_TIMEOUT", 15.0),
            llm_timeout=_env_float("LLM_TIMEOUT", 60.0),
            telegram_timeout=_env_float("TELEGRAM_TIMEOUT", 30.0),
            deduplicate=_env_bool("DEDUPLICATE", False),
            log_level=os.getenv("LOG_LEVEL") or "info",
        )

    def validate(self, *, dry_run: bool = False) -> None:
        """Raise ConfigError when the settings cannot drive a full run."""
        if self.provider not in PROVIDERS:
            raise ConfigError(f"Unknown DIGEST_PROVIDER {self.provider!r}; expected one of {', '.join(PROVIDERS)}")
        if self.provider == "openai" and not self.openai_api_key:
            raise ConfigError("OPENAI_API_KEY not set.")
        if self.provider == "gemini" and not self.google_api_key:
            raise ConfigError("GOOGLE_API_KEY (or GEMINI_API_KEY) not set.")
        if not dry_run:
            if not self.telegram_bot_token:
                raise ConfigError("TELEGRAM_BOT_TOKEN not set.")
            if not self.telegram_chat_id:
                raise ConfigError("TELEGRAM_CHAT_ID not set.")
        for name in ("top_n", "max_message_chars", "feed_timeout", "llm_timeout", "telegram_timeout"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive")
