"""Bounded polling for events and delivery attempts that appear asynchronously after a publish."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Sequence, TypeVar

from hookdeck_pubsub.errors import PollCancelledError, PollTimeoutError
from hookdeck_pubsub.models import Event, EventAttempt
from hookdeck_pubsub.observability import child_logger

T = TypeVar("T")

DEFAULT_TIMEOUT_TICKS = 15
DEFAULT_TICK_INTERVAL = 1.0


async def poll_until(
    fetch: Callable[[], Awaitable[T]],
    is_ready: Callable[[T], bool],
    timeout_ticks: int = DEFAULT_TIMEOUT_TICKS,
    tick_interval: float = DEFAULT_TICK_INTERVAL,
    cancel: Optional[asyncio.Event] = None,
    what: str = "result",
    logger: Optional[logging.Logger] = None,
) -> T:
    """
    Every tick_interval seconds await fetch() and return the first result is_ready accepts.
    Attempts are sequential. Raises PollTimeoutError after timeout_ticks unready attempts,
    or PollCancelledError once cancel is set.
    """
    logger = logger or child_logger(None, "polling")
    for attempt in range(1, timeout_ticks + 1):
        if cancel is None:
            await asyncio.sleep(tick_interval)
        else:
            try:
                await asyncio.wait_for(cancel.wait(), timeout=tick_interval)
            except asyncio.TimeoutError:
                pass
            else:
                logger.info("poll_cancelled", extra={"what": what, "attempt": attempt})
                raise PollCancelledError(attempt - 1, what)
        result = await fetch()
        if is_ready(result):
            logger.debug("poll_ready", extra={"what": what, "attempt": attempt})
            return result
        logger.debug("poll_not_ready", extra={"what": what, "attempt": attempt})
    raise PollTimeoutError(timeout_ticks, what)


async def hydrate(items: Sequence[T], retrieve: Callable[[str], Awaitable[T]]) -> List[T]:
    """Re-fetch each item by id so its body is populated. One retrieval per item, in order."""
    return [await retrieve(item.id) for item in items]  # type: ignore[attr-defined]


def non_empty(result: Sequence[Any]) -> bool:
    return len(result) > 0


class EventHistory:
    """Reads events and delivery attempts recorded by the backend, optionally with bodies."""

    def __init__(self, client: Any, logger: Optional[logging.Logger] = None) -> None:
        self._client = client
        self._logger = logger or child_logger(None, "history")

    async def get_events(self, subscription_id: str, include_body: bool = False) -> List[Event]:
        """Events routed through the subscription's connection."""
        events = await self._client.event.list(webhook_id=subscription_id)
        if include_body:
            events = await hydrate(events, self._client.event.retrieve)
        return list(events)

    async def get_delivery_attempts(self, event_id: str, include_body: bool = False) -> List[EventAttempt]:
        """Delivery attempts for an event."""
        attempts = await self._client.attempt.list(event_id=event_id)
        if include_body:
            attempts = await hydrate(attempts, self._client.attempt.retrieve)
        return list(attempts)

    async def wait_for_events(
        self,
        subscription_id: str,
        include_body: bool = False,
        timeout_ticks: int = DEFAULT_TIMEOUT_TICKS,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        cancel: Optional[asyncio.Event] = None,
    ) -> List[Event]:
        """Poll until at least one event exists for the subscription."""
        return await poll_until(
            lambda: self.get_events(subscription_id, include_body=include_body),
            non_empty,
            timeout_ticks=timeout_ticks,
            tick_interval=tick_interval,
            cancel=cancel,
            what="events",
            logger=self._logger,
        )

    async def wait_for_delivery_attempts(
        self,
        event_id: str,
        include_body: bool = False,
        timeout_ticks: int = DEFAULT_TIMEOUT_TICKS,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        cancel: Optional[asyncio.Event] = None,
    ) -> List[EventAttempt]:
        """Poll until at least one delivery attempt exists for the event."""
        return await poll_until(
            lambda: self.get_delivery_attempts(event_id, include_body=include_body),
            non_empty,
            timeout_ticks=timeout_ticks,
            tick_interval=tick_interval,
            cancel=cancel,
            what="attempts",
            logger=self._logger,
        )
