"""Example: channel, subscribe, publish, then wait for the event and its delivery attempt."""

import asyncio
import logging

from dotenv import load_dotenv

from hookdeck_pubsub import HookdeckPubSub
from hookdeck_pubsub.config import Settings

logging.basicConfig(level=logging.INFO)


async def main() -> None:
    load_dotenv()
    settings = Settings.from_env()
    async with HookdeckPubSub.from_settings(settings) as pubsub:
        channel = await pubsub.channel("events")
        subscription = await pubsub.subscribe("events", "https://example.com/webhooks")

        result = await channel.publish({"type": "user.signup", "data": {"user_id": 101}})
        print("published:", result.ok, result.status_code)

        events = await pubsub.history.wait_for_events(subscription.id, include_body=True)
        print("event body:", events[0].body)

        attempts = await pubsub.history.wait_for_delivery_attempts(events[0].id)
        print("attempt status:", attempts[0].status)

        await pubsub.unsubscribe(subscription.id)


if __name__ == "__main__":
    asyncio.run(main())
