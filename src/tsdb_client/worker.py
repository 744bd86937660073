"""
Background write worker.

One daemon thread drains the bounded queue and posts what it finds through the
client's synchronous write path, so producers never wait on the network.
Failures are logged and counted here: the caller that enqueued a write has
already returned and never observes its outcome.
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from loguru import logger

from .metrics import QUEUE_DEPTH, QUEUE_DROPPED_TOTAL, WORKER_FLUSHES_TOTAL
from .models import SeriesPayload
from .queue import BoundedQueue, OverflowStrategy

if TYPE_CHECKING:
    from .client import Client


@dataclass(frozen=True)
class QueueEntry:
    payload: SeriesPayload
    time_precision: str


class WriteWorker:
    def __init__(
        self,
        client: "Client",
        *,
        capacity: int = 10_000,
        overflow_strategy: OverflowStrategy = "drop_oldest",
        max_post_points: int = 1000,
        poll_interval: float = 0.5,
        start: bool = True,
    ):
        self._client = client
        self._max_post_points = max_post_points
        self._poll_interval = poll_interval
        self.queue = BoundedQueue[QueueEntry](
            capacity,
            overflow_strategy=overflow_strategy,
            on_high=self._on_high,
            on_low=self._on_low,
            drop_callback=self._on_drop,
        )
        self._stopping = threading.Event()
        self._thread: Optional[threading.Thread] = None
        if start:
            self.start()

    # --------------------------- lifecycle

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("worker already started")
        self._thread = threading.Thread(target=self._run, name="tsdb-write-worker", daemon=True)
        self._thread.start()
        logger.debug("Spawned background write worker")

    @property
    def alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def stop(self, timeout: float | None = None) -> bool:
        """
        Flush what is queued, then exit. Returns True if the worker exited
        within `timeout`.
        """
        self._stopping.set()
        self.queue.close()
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    # --------------------------- producer side

    def push(self, payload: SeriesPayload, time_precision: str) -> None:
        self.queue.put(QueueEntry(payload, time_precision))
        QUEUE_DEPTH.set(self.queue.size)

    # --------------------------- consumer side

    def _run(self) -> None:
        while not self._client.stopped:
            batch = self.queue.get_batch(self._max_post_points, timeout=self._poll_interval)
            QUEUE_DEPTH.set(self.queue.size)
            if batch:
                logger.debug(f"Found data in the queue! ({len(batch)} entries)")
                self._flush(batch)
            elif self._stopping.is_set():
                break

        left = self.queue.size
        if left:
            logger.warning(f"Client stopped; abandoning {left} queued writes")
        logger.debug("Background write worker exiting")

    def _flush(self, batch: list[QueueEntry]) -> None:
        # one POST per run of consecutive entries sharing a precision keeps FIFO order
        for precision, group in itertools.groupby(batch, key=lambda e: e.time_precision):
            payloads = [e.payload for e in group]
            try:
                self._client._write(payloads, precision)
                WORKER_FLUSHES_TOTAL.labels("success").inc()
            except Exception as exc:
                WORKER_FLUSHES_TOTAL.labels("failure").inc()
                logger.exception(f"Cannot write {len(payloads)} queued series: {exc!r}")

    # --------------------------- queue signals

    def _on_drop(self, entry: QueueEntry) -> None:
        QUEUE_DROPPED_TOTAL.inc()
        logger.warning(f"Write queue full; dropped oldest entry for series {entry.payload.name!r}")

    def _on_high(self) -> None:
        logger.warning(f"Write queue above high watermark ({self.queue.size}/{self.queue.capacity})")

    def _on_low(self) -> None:
        logger.info(f"Write queue recovered ({self.queue.size}/{self.queue.capacity})")
