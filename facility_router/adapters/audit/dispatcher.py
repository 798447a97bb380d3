"""AuditDispatcher — asyncio.Queue + background worker behind DecisionLogger."""

from __future__ import annotations

import asyncio
import logging

from facility_router.application.ports.decision_logger import (
    DecisionItem,
    DecisionLogger,
    DecisionSink,
)

logger = logging.getLogger(__name__)
error_logger = logging.getLogger("facility_router.audit.errors")


class AuditDispatcher(DecisionLogger):
    """Fire-and-forget delivery of decision items to a list of sinks.

    ``submit`` only enqueues. A single worker task drains the queue and writes
    every item to each sink in order; a failing sink is logged and counted but
    neither blocks the other sinks nor reaches the classification path.
    """

    def __init__(self, sinks: list[DecisionSink], maxsize: int = 1000):
        self._sinks = list(sinks)
        self._queue: asyncio.Queue[DecisionItem] = asyncio.Queue(maxsize=maxsize)
        self._worker: asyncio.Task | None = None
        self.delivered = 0
        self.dropped = 0
        self.failures = 0

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def start(self) -> None:
        if self.running:
            return
        self._worker = asyncio.create_task(self._run(), name="audit-dispatcher")
        logger.info("Audit dispatcher started with %d sink(s)", len(self._sinks))

    async def stop(self) -> None:
        """Deliver what is already queued, then stop the worker."""
        if self._worker is None:
            return
        await self._queue.join()
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        logger.info(
            "Audit dispatcher stopped: %d delivered, %d dropped, %d sink failures",
            self.delivered, self.dropped, self.failures,
        )

    def submit(self, item: DecisionItem) -> None:
        try:
            self._queue.put_nowait(item)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(
                "Audit queue full, dropping %s for ticket %s",
                type(item).__name__, item.ticket_id,
            )

    async def drain(self) -> None:
        """Wait until every queued item has been handed to the sinks."""
        await self._queue.join()

    async def _run(self) -> None:
        while True:
            item = await self._queue.get()
            try:
                await self._deliver(item)
            finally:
                self._queue.task_done()

    async def _deliver(self, item: DecisionItem) -> None:
        for sink in self._sinks:
            try:
                await sink.write(item)
            except Exception:
                self.failures += 1
                error_logger.exception(
                    "Sink %s failed for %s (ticket %s)",
                    type(sink).__name__, type(item).__name__, item.ticket_id,
                )
        self.delivered += 1
