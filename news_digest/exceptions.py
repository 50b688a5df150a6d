class NewsDigestError(Exception):
    """Base class for all errors raised by news_digest."""


class FeedFetchError(NewsDigestError):
    """Raised when a feed cannot be downloaded (transport error, timeout or non-2xx status)."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch feed: {url} ({reason})")
        self.url = url
        self.reason = reason


class FeedParseError(NewsDigestError):
    """Raised when a feed body is not a parseable RSS/Atom document."""


class ConfigError(NewsDigestError):
    """Raised when required settings are missing or invalid."""


class DigestError(NewsDigestError):
    """Raised when the language model fails to produce a digest."""


class DeliveryError(NewsDigestError):
    """Raised when the digest cannot be delivered to the chat."""
