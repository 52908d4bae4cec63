"""Change notifications that drive recomputation of derived views."""

import asyncio
import logging
from dataclasses import dataclass
from enum import StrEnum
from types import TracebackType
from uuid import UUID

_logger = logging.getLogger(__name__)


class Topic(StrEnum):
    """Source whose rows changed."""

    PROFILE = "profile"
    SELECTION = "selection"
    ENERGY = "energy"
    MEALS = "meals"
    WATER = "water"
    SLEEP = "sleep"
    FAVORITES = "favorites"


@dataclass(frozen=True)
class ChangeEvent:
    """A change to one source of one profile."""

    profile_id: UUID | None
    topic: Topic


class Subscription:
    """Queue of change events for one consumer.

    A scoped subscription only receives events for its profile; an unscoped
    one receives everything. Must be used on the event loop that publishes.
    """

    def __init__(self, notifier: "ChangeNotifier", profile_id: UUID | None) -> None:
        self.profile_id = profile_id
        self._notifier = notifier
        self._queue: asyncio.Queue[ChangeEvent] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        """True once the subscription was detached from its notifier."""
        return self._closed

    def accepts(self, event: ChangeEvent) -> bool:
        """Return True when the event is in this subscription's scope."""
        return self.profile_id is None or event.profile_id == self.profile_id

    def offer(self, event: ChangeEvent) -> None:
        """Enqueue an event if it is in scope."""
        if self._closed or not self.accepts(event):
            return
        self._queue.put_nowait(event)

    async def next_batch(self) -> list[ChangeEvent]:
        """Wait for at least one event, then drain everything already queued."""
        batch = [await self._queue.get()]
        while True:
            try:
                batch.append(self._queue.get_nowait())
            except asyncio.QueueEmpty:
                return batch

    def pending(self) -> int:
        """Number of queued events."""
        return self._queue.qsize()

    def close(self) -> None:
        """Detach from the notifier; queued events are dropped."""
        if self._closed:
            return
        self._closed = True
        self._notifier.remove(self)

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class ChangeNotifier:
    """Fan-out of change events to live subscriptions."""

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []

    def subscribe(self, profile_id: UUID | None = None) -> Subscription:
        """Register a subscription; pass a profile id to scope it."""
        subscription = Subscription(self, profile_id)
        self._subscriptions.append(subscription)
        return subscription

    def remove(self, subscription: Subscription) -> None:
        """Unregister a subscription."""
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def publish(self, profile_id: UUID | None, *topics: Topic) -> None:
        """Deliver one event per topic to every subscription in scope."""
        for topic in topics:
            event = ChangeEvent(profile_id=profile_id, topic=topic)
            for subscription in list(self._subscriptions):
                subscription.offer(event)
        _logger.debug(
            "Published changes: profile=%s topics=%s",
            profile_id,
            ",".join(topics),
        )

    @property
    def subscriber_count(self) -> int:
        """Number of live subscriptions."""
        return len(self._subscriptions)
