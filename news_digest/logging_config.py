import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logger(level: str = "info", name: str = "news_digest") -> logging.Logger:
    """Configure and return the package logger; module loggers propagate to it."""
    logger = logging.getLogger(name)
    log_level = getattr(logging, level.upper(), None)
    if not isinstance(log_level, int):
        log_level = logging.INFO
    logger.setLevel(log_level)

    # Only add handler if it doesn't already exist (avoid duplicate handlers)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    for handler in logger.handlers:
        handler.setLevel(log_level)

    # httpx logs request URLs at INFO; Telegram URLs embed the bot token
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return logger
