"""Observability: logging for the pub-sub layer."""

from hookdeck_pubsub.observability.logger import child_logger, get_logger

__all__ = ["get_logger", "child_logger"]
