from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional, Protocol, Sequence

from .config import Settings
from .core import NewsAggregator
from .delivery import TelegramClient
from .digest import DigestRequester, build_digest_requester
from .exceptions import NewsDigestError
from .logging_config import configure_logger
from .models import NewsItem

logger = logging.getLogger(__name__)


class Aggregator(Protocol):
    async def aggregate(self, sources: Sequence[str]) -> List[NewsItem]:  # pragma: no cover - interface
        ...


class DeliveryClient(Protocol):
    async def send_message(self, text: str) -> dict:  # pragma: no cover - interface
        ...


def today_string() -> str:
    return datetime.now(timezone.utc).strftime("%d.%m.%Y")


async def run(
    settings: Settings,
    *,
    aggregator: Optional[Aggregator] = None,
    requester: Optional[DigestRequester] = None,
    delivery: Optional[DeliveryClient] = None,
    dry_run: bool = False,
    limit: Optional[int] = None,
) -> int:
    """
    Run one digest cycle: aggregate → digest → deliver.

    Returns 0 on success, including the "no news" case, where neither the
    language model nor Telegram is contacted. Digest and delivery errors
    propagate to the caller.
    """
    if aggregator is None:
        aggregator = NewsAggregator(timeout=settings.feed_timeout, deduplicate=settings.deduplicate)

    logger.info("Fetching %d RSS feeds...", len(settings.feeds))
    items = await aggregator.aggregate(settings.feeds)
    logger.info("Found %d news items", len(items))

    if not items:
        logger.info("No news found, exiting...")
        return 0

    top = items[: limit or settings.top_n]
    if requester is None:
        requester = build_digest_requester(settings)
    logger.info("Processing %d items with the language model...", len(top))
    message = await requester.request_digest(top, today_string())
    logger.info("Digest ready (%d chars)", len(message))

    if dry_run:
        print(message)
        return 0

    if delivery is None:
        delivery = TelegramClient(
            token=settings.telegram_bot_token or "",
            chat_id=settings.telegram_chat_id or "",
            timeout=settings.telegram_timeout,
        )
    logger.info("Sending to Telegram...")
    await delivery.send_message(message)
    logger.info("News digest completed successfully")
    return 0


def setup_argparser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="news-digest",
        description="Aggregate RSS/Atom feeds and post an AI-written digest to Telegram",
    )
    parser.add_argument("--dry-run", action="store_true", help="Print the digest instead of sending it")
    parser.add_argument("--limit", type=int, help="Number of newest items passed to the language model")
    parser.add_argument("--log-level", help="Override LOG_LEVEL (debug, info, warning, error)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = setup_argparser().parse_args(argv)
    if args.limit is not None and args.limit <= 0:
        configure_logger(args.log_level or "info")
        logger.error("--limit must be positive")
        return 1

    try:
        settings = Settings.from_env()
        configure_logger(args.log_level or settings.log_level)
        settings.validate(dry_run=args.dry_run)
        logger.info("Starting news digest...")
        return asyncio.run(run(settings, dry_run=args.dry_run, limit=args.limit))
    except NewsDigestError as e:
        configure_logger(args.log_level or "info")
        logger.error("Error in main process: %s", e)
        return 1
    except Exception:
        configure_logger(args.log_level or "info")
        logger.exception("Unexpected error in main process")
        return 1
