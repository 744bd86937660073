from __future__ import annotations

import threading
from collections import deque
from time import monotonic
from typing import Callable, Generic, Literal, Optional, TypeVar

from .errors import QueueClosedError, QueueFullError

T = TypeVar("T")
OverflowStrategy = Literal["block", "drop_oldest", "error"]


class BoundedQueue(Generic[T]):
    """Thread-safe bounded FIFO with high/low watermarks and overflow strategies."""

    def __init__(
        self,
        capacity: int,
        high_watermark: int | None = None,
        low_watermark: int | None = None,
        *,
        overflow_strategy: OverflowStrategy = "block",
        on_high: Optional[Callable[[], None]] = None,
        on_low: Optional[Callable[[], None]] = None,
        drop_callback: Optional[Callable[[T], None]] = None,
    ):
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        if overflow_strategy not in ("block", "drop_oldest", "error"):
            raise ValueError(f"unknown overflow strategy: {overflow_strategy}")

        self._capacity = capacity
        self._items: deque[T] = deque()
        self._cond = threading.Condition()
        self._closed = False

        self._high_wm = (
            high_watermark if high_watermark is not None else max(1, int(0.8 * capacity))
        )
        self._low_wm = low_watermark if low_watermark is not None else int(0.5 * capacity)
        self._overflow = overflow_strategy
        self._on_high = on_high
        self._on_low = on_low
        self._drop_cb = drop_callback

        self._high_fired = False  # avoid duplicate signals

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def size(self) -> int:
        with self._cond:
            return len(self._items)

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def __len__(self) -> int:
        return self.size

    def put(self, item: T, timeout: float | None = None) -> None:
        """Put item according to overflow policy; emits high watermark once."""
        dropped = []
        with self._cond:
            if self._closed:
                raise QueueClosedError("BoundedQueue is closed")
            if len(self._items) >= self._capacity:
                if self._overflow == "error":
                    raise QueueFullError("BoundedQueue is full")
                if self._overflow == "drop_oldest":
                    dropped.append(self._items.popleft())
                else:
                    deadline = None if timeout is None else monotonic() + timeout
                    while len(self._items) >= self._capacity:
                        if self._closed:
                            raise QueueClosedError("queue closed while waiting for capacity")
                        remaining = None if deadline is None else deadline - monotonic()
                        if remaining is not None and remaining <= 0:
                            raise QueueFullError("timed out waiting for queue capacity")
                        self._cond.wait(remaining)

            self._items.append(item)
            fire_high = self._crossed_high()
            self._cond.notify_all()

        if dropped and self._drop_cb:
            self._drop_cb(dropped[0])
        if fire_high and self._on_high:
            self._on_high()

    def get_batch(self, max_items: int, timeout: float | None = None) -> list[T]:
        """
        Take up to max_items in FIFO order, waiting up to `timeout` for the first.

        Returns an empty list on timeout, or immediately once the queue is
        closed and empty.
        """
        with self._cond:
            if not self._items and not self._closed:
                self._cond.wait_for(lambda: self._items or self._closed, timeout)

            batch = []
            while self._items and len(batch) < max_items:
                batch.append(self._items.popleft())

            fire_low = self._crossed_low()
            if batch:
                self._cond.notify_all()  # wake blocked producers

        if fire_low and self._on_low:
            self._on_low()
        return batch

    def close(self) -> None:
        """
        Refuse further puts and wake every waiter. Blocked producers raise
        QueueClosedError; remaining items can still be taken.
        """
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def _crossed_high(self) -> bool:
        if not self._high_fired and len(self._items) >= self._high_wm:
            self._high_fired = True
            return True
        return False

    def _crossed_low(self) -> bool:
        if self._high_fired and len(self._items) <= self._low_wm:
            self._high_fired = False
            return True
        return False
