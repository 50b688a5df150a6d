from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence

import openai
from openai import AsyncOpenAI

from .config import Settings
from .exceptions import ConfigError, DigestError
from .models import NewsItem

logger = logging.getLogger(__name__)

# Fields of NewsItem shown to the model; raw HTML content stays out of the prompt
PROMPT_FIELDS = ("title", "link", "published", "snippet", "creator", "source")

DEFAULT_MODELS = {
    "openai": "gpt-3.5-turbo",
    "gemini": "gemini-1.5-flash",
}


class DigestRequester(Protocol):
    async def request_digest(self, items: Sequence[NewsItem], today: str) -> str:  # pragma: no cover - interface
        ...


@dataclass
class DigestOptions:
    provider: str = "openai"  # "openai" | "gemini"
    model: Optional[str] = None
    language: str = "Russian"
    max_stories: int = 8
    max_chars: int = 4096
    timeout_sec: float = 60.0
    temperature: float = 0.3
    max_tokens: int = 2000

    @property
    def model_name(self) -> str:
        return self.model or DEFAULT_MODELS.get(self.provider, DEFAULT_MODELS["openai"])


def _truncate(s: str, limit: int) -> str:
    if limit <= 0:
        return s
    if len(s) <= limit:
        return s
    return s[:limit]


def serialize_items(items: Sequence[NewsItem]) -> str:
    rows = [{name: getattr(it, name) for name in PROMPT_FIELDS} for it in items]
    return json.dumps(rows, ensure_ascii=False)


def build_prompt(items: Sequence[NewsItem], today: str, options: DigestOptions) -> str:
    """Build the single-message prompt asking the model to pick and format the digest."""
    return f"""Review this data: {serialize_items(items)}

### ROLE
You are a news aggregator journalist who assembles a short feed for a Telegram channel.

### CONTEXT
• The input holds news items from several sources
• All items are sorted chronologically (newest first)
• Today: {today}

### SELECTION RULES
1. Pick **up to {options.max_stories} of the most interesting** items by:
   • novelty • public significance • variety of topics
   (Take no more than 3 items on the same storyline)

### OUTPUT FORMAT (Telegram-ready, Markdown)
• `[HH:MM]`: time from "published", in UTC
• `SNIPPET`: short description (120 characters)
• Separate items with an empty line
• Use a **bold** title, an _italic_ snippet and a bare link
• The whole message must be at most {options.max_chars} characters

### STYLE & CONSTRAINTS
• No analysis, conclusions or opinions, only statements of fact
• Do not alter titles, no emoji other than 🗞 and 🔗
• Do not address the reader in the first person

### EXAMPLE
🗞 [09:01] **Tariffs or deals? Trump settles for punitive duties**
_The president's supporters portray him as a dealmaker. So far more partners have received harsh tariffs._
🔗 https://example.com/article

TRANSLATE EVERYTHING INTO {options.language.upper()}"""


def _finish(text: Optional[str], options: DigestOptions) -> str:
    content = (text or "").strip()
    if not content:
        raise DigestError("Language model returned an empty digest")
    if len(content) > options.max_chars:
        logger.warning("Digest is %d chars, cutting to %d", len(content), options.max_chars)
    return _truncate(content, options.max_chars)


class OpenAIDigestRequester:
    def __init__(self, *, api_key: Optional[str], options: DigestOptions, client: Optional[Any] = None) -> None:
        if client is None:
            if not api_key:
                raise ConfigError("OPENAI_API_KEY not set.")
            client = AsyncOpenAI(api_key=api_key)
        self._client = client
        self.options = options

    async def request_digest(self, items: Sequence[NewsItem], today: str) -> str:
        prompt = build_prompt(items, today, self.options)
        logger.info("Requesting digest from OpenAI (%s) for %d items", self.options.model_name, len(items))
        try:
            resp = await self._client.chat.completions.create(
                model=self.options.model_name,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self.options.max_tokens,
                temperature=self.options.temperature,
                timeout=self.options.timeout_sec,
            )
        except openai.OpenAIError as e:
            raise DigestError(f"OpenAI API error: {e}") from e

        content = resp.choices[0].message.content if resp and resp.choices else None
        return _finish(content, self.options)


class GeminiDigestRequester:
    def __init__(self, *, api_key: Optional[str], options: DigestOptions, model: Optional[Any] = None) -> None:
        if model is None:
            try:
                import google.generativeai as genai  # type: ignore
            except ImportError as e:  # pragma: no cover - optional dep
                raise ConfigError(
                    "google-generativeai package is required for Gemini digests. "
                    "Install with `pip install news-digest[gemini]`."
                ) from e
            if not api_key:
                raise ConfigError("GOOGLE_API_KEY (or GEMINI_API_KEY) not set.")
            genai.configure(api_key=api_key)
            model = genai.GenerativeModel(options.model_name)
        self._model = model
        self.options = options

    async def request_digest(self, items: Sequence[NewsItem], today: str) -> str:
        prompt = build_prompt(items, today, self.options)
        logger.info("Requesting digest from Gemini (%s) for %d items", self.options.model_name, len(items))
        try:
            resp = await self._model.generate_content_async(
                prompt,
                generation_config={
                    "temperature": self.options.temperature,
                    "max_output_tokens": self.options.max_tokens,
                },
                request_options={"timeout": self.options.timeout_sec},
            )
            # .text raises ValueError when the candidate was blocked
            text = resp.text
        except Exception as e:
            raise DigestError(f"Gemini API error: {e}") from e
        return _finish(text, self.options)


def options_from_settings(settings: Settings) -> DigestOptions:
    return DigestOptions(
        provider=settings.provider,
        model=settings.model,
        language=settings.language,
        max_chars=settings.max_message_chars,
        timeout_sec=settings.llm_timeout,
    )


def build_digest_requester(settings: Settings) -> DigestRequester:
    options = options_from_settings(settings)
    provider = (options.provider or "").lower()
    if provider == "openai":
        return OpenAIDigestRequester(api_key=settings.openai_api_key, options=options)
    if provider == "gemini":
        return GeminiDigestRequester(api_key=settings.google_api_key, options=options)
    raise ConfigError(f"Unknown digest provider: {settings.provider!r}")

