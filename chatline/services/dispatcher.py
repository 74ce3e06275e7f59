"""Bounded broadcast queue drained by a fixed pool of worker tasks.

Policy when the queue is full: the job is dropped, counted and logged. The
producer is never blocked.

Jobs for the same connection may be taken by different workers, so frames to
one socket are only as ordered as the workers happen to run them.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Any, Protocol

from ..schemas import BroadcastPayload
from .errors import QueueFull

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 1000


class Sendable(Protocol):
    id: str
    user_id: str

    async def send_payload(self, payload: BroadcastPayload) -> None:
        ...


@dataclass(frozen=True)
class BroadcastJob:
    payload: BroadcastPayload
    connection: Sendable


_STOP = object()


class BroadcastDispatcher:
    def __init__(self, capacity: int = DEFAULT_QUEUE_SIZE, workers: int | None = None) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.worker_count = workers or os.cpu_count() or 1
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=capacity)
        self._workers: list[asyncio.Task[None]] = []
        self.sent_jobs = 0
        self.failed_jobs = 0
        self.dropped_jobs = 0

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._workers)

    def start(self) -> None:
        if self.running:
            return
        self._workers = [
            asyncio.create_task(self._worker(index), name=f"broadcast-worker-{index}")
            for index in range(self.worker_count)
        ]
        logger.info("Started %d broadcast workers (queue capacity %d)", self.worker_count, self.capacity)

    def enqueue(self, payload: BroadcastPayload, connection: Sendable) -> bool:
        """Queue one send without blocking; return ``False`` if it was dropped."""

        try:
            self._put(BroadcastJob(payload=payload, connection=connection))
        except QueueFull:
            self.dropped_jobs += 1
            logger.warning(
                "Broadcast queue full, dropped job for %r (%d dropped so far)",
                connection,
                self.dropped_jobs,
            )
            return False
        return True

    def _put(self, job: BroadcastJob) -> None:
        try:
            self._queue.put_nowait(job)
        except asyncio.QueueFull as exc:
            raise QueueFull() from exc

    async def join(self) -> None:
        """Wait until every queued job has been attempted."""

        await self._queue.join()

    async def close(self) -> None:
        """Let the workers finish pending jobs, then stop them."""

        if not self._workers:
            return
        for _ in self._workers:
            await self._queue.put(_STOP)
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        logger.info("Broadcast workers stopped (sent=%d, failed=%d, dropped=%d)", self.sent_jobs, self.failed_jobs, self.dropped_jobs)

    def stats(self) -> dict[str, int]:
        return {
            "queued": self._queue.qsize(),
            "capacity": self.capacity,
            "workers": len(self._workers),
            "sent": self.sent_jobs,
            "failed": self.failed_jobs,
            "dropped": self.dropped_jobs,
        }

    async def _worker(self, index: int) -> None:
        logger.debug("Broadcast worker %d started", index)
        while True:
            job = await self._queue.get()
            try:
                if job is _STOP:
                    return
                await job.connection.send_payload(job.payload)
                self.sent_jobs += 1
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                self.failed_jobs += 1
                logger.warning("Broadcast to %r failed: %s", job.connection, exc)
            finally:
                self._queue.task_done()


__all__ = ["BroadcastDispatcher", "BroadcastJob", "DEFAULT_QUEUE_SIZE", "Sendable"]
