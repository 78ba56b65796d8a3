"""Channel: publish-capable handle over a Hookdeck source."""

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from hookdeck_pubsub.auth import auth_type, build_publish_headers
from hookdeck_pubsub.models import (
    DeliveryResult,
    PublishEvent,
    PublishInput,
    PublishTypedEvent,
    Source,
    VerificationConfig,
)
from hookdeck_pubsub.observability import child_logger

BASE_HEADERS = {"Content-Type": "application/json"}


def shape_event(event: PublishInput) -> Tuple[Any, Dict[str, str]]:
    """
    Return (wire payload, caller headers) for a typed or untyped event.
    A mapping carrying both 'type' and 'data' is treated as typed; otherwise 'body' is sent as-is.
    """
    if isinstance(event, PublishTypedEvent):
        return {"type": event.type, "data": event.data}, dict(event.headers)
    if isinstance(event, PublishEvent):
        return event.body, dict(event.headers)
    headers = dict(event.get("headers") or {})
    if "type" in event and "data" in event:
        return {"type": event["type"], "data": event["data"]}, headers
    return event.get("body"), headers


class Channel:
    """Named inbound endpoint; publish POSTs to the source URL with the publish auth applied."""

    def __init__(
        self,
        source: Source,
        publish_auth: Optional[VerificationConfig],
        transport: Any,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.source = source
        self._publish_auth = publish_auth
        self._transport = transport
        self._logger = logger or child_logger(None, "channel")

    @property
    def name(self) -> str:
        return self.source.name

    @property
    def url(self) -> Optional[str]:
        return self.source.url

    def build_headers(self, caller_headers: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        """Content-Type, then auth headers, then caller headers (caller wins)."""
        headers = build_publish_headers(self._publish_auth, BASE_HEADERS)
        headers.update(caller_headers or {})
        return headers

    async def publish(self, event: PublishInput) -> DeliveryResult:
        """Publish an event to the channel. Success only means the backend accepted the request."""
        if not self.source.url:
            result = DeliveryResult(ok=False, error=f"channel {self.name!r} has no source URL")
            self.on_publish(result)
            return result
        payload, caller_headers = shape_event(event)
        headers = self.build_headers(caller_headers)
        self._logger.debug(
            "publishing",
            extra={
                "channel": self.name,
                "auth_type": auth_type(self._publish_auth),
                "header_names": sorted(headers),
            },
        )
        result = await self._transport.post(self.source.url, headers, payload)
        self.on_publish(result)
        return result

    def on_publish(self, result: DeliveryResult) -> None:
        """Called after each publish attempt (for observability)."""
        if result.ok:
            self._logger.info(
                "published",
                extra={"channel": self.name, "status_code": result.status_code},
            )
        else:
            self._logger.warning(
                "publish_failed",
                extra={"channel": self.name, "status_code": result.status_code, "error": result.error},
            )

    def __repr__(self) -> str:
        return f"Channel(name={self.name!r}, source_id={self.source.id!r})"
