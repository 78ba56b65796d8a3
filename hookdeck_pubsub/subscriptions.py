"""Subscription manager: idempotent connection upserts keyed on derived names."""

import logging
from typing import Any, Dict, List, Optional

from hookdeck_pubsub.identity import connection_name, destination_name
from hookdeck_pubsub.models import DestinationAuthMethod, Subscription
from hookdeck_pubsub.observability import child_logger


def build_upsert_request(
    channel_name: str,
    url: str,
    auth: Optional[DestinationAuthMethod] = None,
) -> Dict[str, Any]:
    """
    Connection upsert body for (channel_name, url). The source carries no verification
    (inbound auth belongs to ChannelRegistry); auth_method is omitted entirely when auth
    is None so the backend applies its default signature scheme.
    """
    destination: Dict[str, Any] = {
        "name": destination_name(channel_name, url),
        "url": url,
    }
    if auth is not None:
        destination["auth_method"] = auth.to_dict()
    return {
        "name": connection_name(channel_name, url),
        "source": {"name": channel_name},
        "destination": destination,
    }


class SubscriptionManager:
    """Creates, deletes and lists subscriptions (Hookdeck connections)."""

    def __init__(self, client: Any, logger: Optional[logging.Logger] = None) -> None:
        self._client = client
        self._logger = logger or child_logger(None, "subscriptions")

    async def subscribe(
        self,
        channel_name: str,
        url: str,
        auth: Optional[DestinationAuthMethod] = None,
    ) -> Subscription:
        """Subscribe url to channel_name. Repeating the same pair updates the same connection."""
        request = build_upsert_request(channel_name, url, auth)
        connection = await self._client.connection.upsert(request)
        self._logger.info(
            "subscribed",
            extra={
                "channel": channel_name,
                "subscription_id": connection.id,
                "connection_name": request["name"],
            },
        )
        return Subscription.from_connection(connection)

    async def unsubscribe(self, subscription_id: str) -> None:
        """Delete the connection; NotFoundError propagates if it is already gone."""
        await self._client.connection.delete(subscription_id)
        self._logger.info("unsubscribed", extra={"subscription_id": subscription_id})

    async def list_subscriptions(
        self,
        subscription_id: Optional[str] = None,
        channel_name: Optional[str] = None,
    ) -> List[Subscription]:
        """
        List subscriptions, optionally by id and/or channel name (fuzzy match done by the backend).
        Connections without a destination URL are skipped.
        """
        connections = await self._client.connection.list(id=subscription_id, full_name=channel_name)
        subscriptions: List[Subscription] = []
        for connection in connections:
            if connection.destination.url is None:
                self._logger.debug(
                    "skipping_connection_without_url",
                    extra={"destination": connection.destination.name},
                )
                continue
            subscriptions.append(Subscription.from_connection(connection))
        return subscriptions
