"""HookdeckPubSub: one entry point wiring registry, subscriptions, publish and history."""

import logging
from typing import Any, List, Optional

from hookdeck_pubsub.channel import Channel
from hookdeck_pubsub.client import HookdeckClient
from hookdeck_pubsub.config import DEFAULT_API_URL, DEFAULT_LOG_LEVEL, Settings
from hookdeck_pubsub.models import (
    DestinationAuthMethod,
    Event,
    EventAttempt,
    Subscription,
    VerificationConfig,
)
from hookdeck_pubsub.observability import get_logger
from hookdeck_pubsub.polling import EventHistory
from hookdeck_pubsub.registry import ChannelRegistry
from hookdeck_pubsub.subscriptions import SubscriptionManager
from hookdeck_pubsub.transport import HttpTransport


class HookdeckPubSub:
    """
    Pub/sub over Hookdeck: channels are sources, subscriptions are connections.

    client and transport default to HookdeckClient/HttpTransport; tests inject fakes.
    """

    def __init__(
        self,
        api_key: str,
        publish_auth: Optional[VerificationConfig] = None,
        log_level: str = DEFAULT_LOG_LEVEL,
        api_url: str = DEFAULT_API_URL,
        client: Any = None,
        transport: Any = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if logger is None:
            logger = get_logger(self.__class__.__name__)
            logger.setLevel(log_level.upper())
        self._logger = logger
        self._owned = []
        if client is None:
            client = HookdeckClient(api_key, base_url=api_url)
            self._owned.append(client)
        if transport is None:
            transport = HttpTransport()
            self._owned.append(transport)
        self._client = client
        self._transport = transport
        self.channels = ChannelRegistry(
            self._client,
            self._transport,
            publish_auth=publish_auth,
            logger=self._logger.getChild("registry"),
        )
        self.subscriptions = SubscriptionManager(self._client, logger=self._logger.getChild("subscriptions"))
        self.history = EventHistory(self._client, logger=self._logger.getChild("history"))

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "HookdeckPubSub":
        return cls(
            api_key=settings.api_key,
            publish_auth=settings.publish_auth,
            log_level=settings.log_level,
            api_url=settings.api_url,
            **kwargs,
        )

    async def channel(self, name: str) -> Channel:
        """Get a channel, creating the underlying source if it does not exist."""
        return await self.channels.get_or_create_channel(name)

    async def subscribe(
        self,
        channel_name: str,
        url: str,
        auth: Optional[DestinationAuthMethod] = None,
    ) -> Subscription:
        return await self.subscriptions.subscribe(channel_name, url, auth)

    async def unsubscribe(self, subscription_id: str) -> None:
        await self.subscriptions.unsubscribe(subscription_id)

    async def get_subscriptions(
        self,
        channel_name: Optional[str] = None,
        subscription_id: Optional[str] = None,
    ) -> List[Subscription]:
        return await self.subscriptions.list_subscriptions(subscription_id=subscription_id, channel_name=channel_name)

    async def get_events(self, subscription_id: str, include_body: bool = False) -> List[Event]:
        return await self.history.get_events(subscription_id, include_body=include_body)

    async def get_delivery_attempts(self, event_id: str, include_body: bool = False) -> List[EventAttempt]:
        return await self.history.get_delivery_attempts(event_id, include_body=include_body)

    async def aclose(self) -> None:
        """Close the client and transport this instance created; injected ones are left open."""
        for resource in self._owned:
            await resource.aclose()

    async def __aenter__(self) -> "HookdeckPubSub":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
