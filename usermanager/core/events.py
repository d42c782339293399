"""In-process publish/subscribe for domain events."""
import asyncio
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, List, Set

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], Awaitable[None]]

# Topics
USERS_INACTIVE = "users.inactive"


class EventBus:
    """Fire-and-forget event bus.

    Each subscriber runs in its own task, so a slow subscriber never blocks
    the publisher and a failing one never raises into it. Delivery is
    at-most-once: when `max_pending` deliveries are already in flight, new
    deliveries are dropped and logged.
    """

    def __init__(self, max_pending: int = 100):
        self.max_pending = max_pending
        self._subscribers: Dict[str, List[EventHandler]] = defaultdict(list)
        self._pending: Set[asyncio.Task] = set()

    def subscribe(self, topic: str, handler: EventHandler) -> None:
        """Register `handler` for `topic`."""
        self._subscribers[topic].append(handler)

    async def publish(self, topic: str, payload: Any) -> int:
        """Schedule delivery to every subscriber; returns deliveries scheduled."""
        scheduled = 0
        for handler in self._subscribers.get(topic, []):
            if len(self._pending) >= self.max_pending:
                logger.warning(
                    "Event bus saturated, dropping %s delivery to %s",
                    topic, getattr(handler, "__qualname__", repr(handler))
                )
                continue

            task = asyncio.create_task(self._deliver(topic, handler, payload))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
            scheduled += 1
        return scheduled

    async def _deliver(self, topic: str, handler: EventHandler, payload: Any) -> None:
        try:
            await handler(payload)
        except Exception:
            logger.exception(
                "Subscriber %s failed handling %s",
                getattr(handler, "__qualname__", repr(handler)), topic
            )

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for in-flight deliveries to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
