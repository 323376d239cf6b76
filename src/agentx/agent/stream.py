"""Streaming wrapper around a background run.

The run executes as an asyncio task. Its progress callback pushes into an
EventQueue that the consumer drains with ``async for``; the final value is
merged back through ``await stream.result()``.

Usage:
    stream = orchestrator.stream(system_prompt, messages)
    async for event in stream:
        ...
    result = await stream.result()
"""

import asyncio
from typing import Any, Awaitable, Callable, Generic, TypeVar

from agentx.core.bridge import EventQueue
from agentx.core.events import Event, ProgressCallback

T = TypeVar("T")

Runner = Callable[[ProgressCallback], Awaitable[T]]


class AgenticStream(Generic[T]):
    """Async iterator over progress events of a background run."""

    def __init__(self, runner: Runner[T], on_progress: ProgressCallback | None = None) -> None:
        """
        Args:
            runner: Coroutine function that performs the run, reporting through
                the progress callback it receives
            on_progress: Extra callback that sees every event as well
        """
        self._runner = runner
        self._on_progress = on_progress
        self._queue: EventQueue[Event] = EventQueue()
        self._task: asyncio.Task[T] | None = None

    def start(self) -> "AgenticStream[T]":
        """Start the background run (idempotent; needs a running event loop)."""
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._run())
        return self

    async def _run(self) -> T:
        try:
            return await self._runner(self._push)
        finally:
            self._queue.close()

    def _push(self, event: Event) -> None:
        if self._on_progress is not None:
            self._on_progress(event)
        self._queue.push(event)

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    def __aiter__(self) -> "AgenticStream[T]":
        self.start()
        return self

    async def __anext__(self) -> Event:
        self.start()
        item = await self._queue.next()
        if item.done:
            # Surface a failed run to the consumer
            await self._wait()
            raise StopAsyncIteration
        return item.value

    async def _wait(self) -> T:
        assert self._task is not None
        return await self._task

    async def result(self) -> T:
        """Wait for the run and return its value. Re-raises the run's exception."""
        self.start()
        return await self._wait()

    def cancel(self) -> None:
        """Cancel the background run."""
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def collect(self) -> tuple[list[Event], T]:
        """Drain every event, then return them with the final value."""
        events = [event async for event in self]
        return events, await self.result()

    def __repr__(self) -> str:
        state: Any = "pending" if self._task is None else ("done" if self._task.done() else "running")
        return f"<AgenticStream {state} queued={len(self._queue)}>"
