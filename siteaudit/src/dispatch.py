"""Message dispatcher interface and a local asyncio queue backend."""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Protocol

from .logging_setup import get_logger

logger = get_logger("dispatch")


class MessageDispatcher(Protocol):
    """Queueing backend collaborator."""

    async def send(self, queue_url: str, payload: dict[str, Any]) -> str: ...


@dataclass
class QueuedMessage:
    """Envelope stored by the local dispatcher."""

    message_id: str
    queue_url: str
    payload: dict[str, Any]
    enqueued_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


Consumer = Callable[[QueuedMessage], Awaitable[None]]


class LocalQueueDispatcher:
    """In-process queue standing in for the real queueing backend.

    Without a consumer, messages stay queued until ``receive`` pops them.
    With a consumer, ``start`` runs a worker loop that hands each message to
    it in enqueue order.
    """

    def __init__(self, consumer: Consumer | None = None) -> None:
        self.queue: asyncio.Queue[QueuedMessage] = asyncio.Queue()
        self._consumer = consumer
        self._worker_task: asyncio.Task | None = None

    async def start(self) -> None:
        if self._consumer is not None and self._worker_task is None:
            self._worker_task = asyncio.create_task(
                self._worker(self._consumer)
            )

    async def stop(self) -> None:
        if self._worker_task:
            self._worker_task.cancel()
            try:
                await self._worker_task
            except asyncio.CancelledError:  # pragma: no cover - shutdown path
                pass
            self._worker_task = None

    async def send(self, queue_url: str, payload: dict[str, Any]) -> str:
        message = QueuedMessage(
            message_id=uuid.uuid4().hex, queue_url=queue_url, payload=payload
        )
        await self.queue.put(message)
        logger.info(
            "message_queued",
            message_id=message.message_id,
            queue_url=queue_url,
            type=payload.get("type"),
        )
        return message.message_id

    async def receive(self) -> QueuedMessage:
        message = await self.queue.get()
        self.queue.task_done()
        return message

    def drain(self) -> list[QueuedMessage]:
        """Pop every queued message without waiting."""
        messages: list[QueuedMessage] = []
        while not self.queue.empty():
            messages.append(self.queue.get_nowait())
            self.queue.task_done()
        return messages

    def pending(self) -> int:
        return self.queue.qsize()

    async def _worker(self, consumer: Consumer) -> None:
        """Background loop delivering queued messages to ``consumer``."""
        while True:
            message = await self.queue.get()
            try:
                await consumer(message)
            except Exception:  # pragma: no cover - guard rail
                logger.exception(
                    "consumer_failed", message_id=message.message_id
                )
            finally:
                self.queue.task_done()
