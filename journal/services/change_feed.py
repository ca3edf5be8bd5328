"""In-process change notifications for the trades table.

Every insert, update and delete publishes a small event. Subscribers (the
``/api/trades/changes`` WebSocket) treat any event as a signal to re-fetch the
full ledger; events carry no row data and are never merged.

Publishers may run in the threadpool (sync route handlers), so delivery is
handed to each subscriber's event loop.
"""

import asyncio
import logging

logger = logging.getLogger(__name__)

QUEUE_SIZE = 100


class ChangeFeed:
    def __init__(self, table: str):
        self.table = table
        self._subscribers: dict[asyncio.Queue, asyncio.AbstractEventLoop] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue:
        """Register a queue bound to the calling event loop."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=QUEUE_SIZE)
        self._subscribers[queue] = asyncio.get_running_loop()
        return queue

    def unsubscribe(self, queue: asyncio.Queue):
        self._subscribers.pop(queue, None)

    def publish(self, event: str, row_id: int | None = None):
        """Fan an event out to all subscribers without blocking."""
        message = {"table": self.table, "event": event, "id": row_id}
        for queue, loop in list(self._subscribers.items()):
            if loop.is_closed():
                self.unsubscribe(queue)
                continue
            loop.call_soon_threadsafe(self._deliver, queue, message)

    def _deliver(self, queue: asyncio.Queue, message: dict):
        try:
            queue.put_nowait(message)
        except asyncio.QueueFull:
            # Slow subscriber; the next event still triggers a full re-fetch
            logger.warning(f"Dropping {message['event']} event for a slow {self.table} subscriber")


trade_changes = ChangeFeed("trades")
