"""Structured logging for reconciliation and publish events (channel, subscribe, publish, poll)."""

import logging
import sys
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def get_logger(name: str, level: Union[int, str] = logging.INFO) -> logging.Logger:
    """Return a configured stdout logger; pass it into components instead of sharing a global."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(level.upper() if isinstance(level, str) else level)
    return logger


def child_logger(parent: Optional[logging.Logger], suffix: str) -> logging.Logger:
    """Component logger: a child of the injected parent, or a fresh hookdeck_pubsub logger."""
    if parent is None:
        return get_logger(f"hookdeck_pubsub.{suffix}")
    return parent.getChild(suffix)
