"""Pub-Sub on top of Hookdeck: channels are sources, subscriptions are connections."""

from hookdeck_pubsub._version import __version__
from hookdeck_pubsub.channel import Channel
from hookdeck_pubsub.errors import (
    AuthMismatchError,
    ConfigurationError,
    NotFoundError,
    PollCancelledError,
    PollTimeoutError,
    PubSubError,
    TransportError,
)
from hookdeck_pubsub.models import (
    DeliveryResult,
    DestinationAuthMethod,
    PublishEvent,
    PublishTypedEvent,
    Subscription,
    VerificationConfig,
)
from hookdeck_pubsub.polling import EventHistory, poll_until
from hookdeck_pubsub.pubsub import HookdeckPubSub
from hookdeck_pubsub.registry import ChannelRegistry
from hookdeck_pubsub.subscriptions import SubscriptionManager

__all__ = [
    "__version__",
    "HookdeckPubSub",
    "Channel",
    "ChannelRegistry",
    "SubscriptionManager",
    "EventHistory",
    "poll_until",
    "Subscription",
    "VerificationConfig",
    "DestinationAuthMethod",
    "PublishEvent",
    "PublishTypedEvent",
    "DeliveryResult",
    "PubSubError",
    "ConfigurationError",
    "AuthMismatchError",
    "TransportError",
    "NotFoundError",
    "PollTimeoutError",
    "PollCancelledError",
]
