"""Callback-to-stream bridge.

An unbounded single-producer/single-consumer queue. The producer calls
``push`` from a progress callback, the consumer pulls with ``await next()``
or ``async for``. Once closed, pending and future pulls report done instead
of waiting forever.
"""

import asyncio
from collections import deque
from typing import Any, AsyncIterator, Generic, NamedTuple, TypeVar

T = TypeVar("T")


class QueueItem(NamedTuple):
    """Result of one pull: a value, or ``done=True`` once the queue is drained."""

    value: Any
    done: bool


class EventQueue(Generic[T]):
    """Unbounded async queue with push/close/next semantics."""

    def __init__(self) -> None:
        self._items: deque[T] = deque()
        self._waiters: deque[asyncio.Future[QueueItem]] = deque()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, item: T) -> None:
        """Add an item. No-op after close."""
        if self._closed:
            return

        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(QueueItem(item, False))
                return

        self._items.append(item)

    def close(self) -> None:
        """Close the queue and wake every waiting consumer."""
        if self._closed:
            return
        self._closed = True

        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(QueueItem(None, True))

    async def next(self) -> QueueItem:
        """Pull the next item, waiting if the queue is empty and still open."""
        if self._items:
            return QueueItem(self._items.popleft(), False)
        if self._closed:
            return QueueItem(None, True)

        waiter: asyncio.Future[QueueItem] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        return await waiter

    def __len__(self) -> int:
        return len(self._items)

    def __aiter__(self) -> AsyncIterator[T]:
        return self

    async def __anext__(self) -> T:
        item = await self.next()
        if item.done:
            raise StopAsyncIteration
        return item.value  # type: ignore[return-value]
