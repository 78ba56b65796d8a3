"""Deterministic resource names derived from (channel name, destination URL)."""

import base64

CONNECTION_PREFIX = "conn"
DESTINATION_PREFIX = "dst"


def encode_url(url: str) -> str:
    """URL-safe base64 of the URL with the '=' padding stripped."""
    return base64.urlsafe_b64encode(url.encode("utf-8")).decode("ascii").rstrip("=")


def derive_name(prefix: str, channel_name: str, url: str) -> str:
    """
    Name used as the backend idempotency key for a subscription resource.
    The same (prefix, channel_name, url) always yields the same name; distinct urls never collide.
    """
    return f"{prefix}_{channel_name}_{encode_url(url)}"


def connection_name(channel_name: str, url: str) -> str:
    return derive_name(CONNECTION_PREFIX, channel_name, url)


def destination_name(channel_name: str, url: str) -> str:
    return derive_name(DESTINATION_PREFIX, channel_name, url)
