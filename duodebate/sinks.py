"""Event sinks: where the orchestrator pushes progress events."""

import asyncio
import contextlib
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from typing import TYPE_CHECKING

from duodebate.models import DebateEvent

if TYPE_CHECKING:
    from duodebate.orchestrator import DebateOrchestrator

logger = logging.getLogger(__name__)


class SinkError(Exception):
    """Raised when an event cannot be delivered to its consumer."""


class EventSink(ABC):
    @abstractmethod
    async def accept(self, event: DebateEvent) -> None:
        """Deliver one event. Raises SinkError if delivery fails."""
        ...


class BufferingSink(EventSink):
    """Collects events in memory; used by the synchronous access pattern."""

    def __init__(self) -> None:
        self.events: list[DebateEvent] = []

    async def accept(self, event: DebateEvent) -> None:
        self.events.append(event)


class CallbackSink(EventSink):
    """Hands each event to a synchronous callable, e.g. a console renderer."""

    def __init__(self, callback: Callable[[DebateEvent], None]) -> None:
        self._callback = callback

    async def accept(self, event: DebateEvent) -> None:
        try:
            self._callback(event)
        except Exception as exc:
            raise SinkError(f"Event callback failed: {exc}") from exc


class QueueSink(EventSink):
    """Puts events on a bounded asyncio.Queue for a consumer on another task.

    A full queue is waited on for at most put_timeout_sec; events are never
    dropped. Once closed, every accept fails.
    """

    def __init__(self, queue: asyncio.Queue, put_timeout_sec: float = 30.0) -> None:
        self._queue = queue
        self._put_timeout_sec = put_timeout_sec
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    async def accept(self, event: DebateEvent) -> None:
        if self._closed:
            raise SinkError("Event consumer disconnected")
        try:
            await asyncio.wait_for(self._queue.put(event), timeout=self._put_timeout_sec)
        except TimeoutError as exc:
            raise SinkError(
                f"Event consumer did not drain the queue within {self._put_timeout_sec}s"
            ) from exc


async def stream_debate(
    orchestrator: "DebateOrchestrator",
    prompt: str,
    max_iterations: int,
    queue_size: int = 32,
    put_timeout_sec: float = 30.0,
) -> AsyncIterator[DebateEvent]:
    """Run a debate on its own task and yield its events in emission order.

    Closing the iterator early (consumer gone) closes the sink and cancels
    the debate task, including any in-flight agent call.
    """
    queue: asyncio.Queue[DebateEvent | None] = asyncio.Queue(maxsize=queue_size)
    sink = QueueSink(queue, put_timeout_sec)

    async def _produce() -> None:
        try:
            await orchestrator.run_debate_streaming(prompt, max_iterations, sink)
        finally:
            if not sink.closed:
                # end-of-stream marker
                await queue.put(None)

    task = asyncio.create_task(_produce())
    try:
        while True:
            event = await queue.get()
            if event is None:
                break
            yield event
        await task
    finally:
        sink.close()
        if not task.done():
            logger.info("Event consumer went away, cancelling debate task")
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
