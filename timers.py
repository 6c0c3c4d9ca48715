# SPDX-License-Identifier: GPL-3.0-or-later
"""
Deferred-callback facilities for the playback scheduler.

Both implementations fire callbacks on the thread that drives them and
never block the caller of schedule_after():

- TkTimer   rides the Tk event loop (widget.after / after_cancel)
- HeapTimer keeps a min-heap of deadlines and is driven explicitly with
            run_until() / run_until_idle(); clock and sleep are injectable
"""
import heapq
import itertools
import logging
import time
from typing import Any, Callable, List, Optional, Protocol

logger = logging.getLogger(__name__)


class Timer(Protocol):
    def schedule_after(self, delay: float, callback: Callable[[], None]) -> Any: ...
    def cancel(self, handle: Any) -> None: ...


class TkTimer:
    """Timer facility on top of a Tk widget's event loop."""
    def __init__(self, widget) -> None:
        self._widget = widget

    def schedule_after(self, delay: float, callback: Callable[[], None]) -> str:
        ms = max(0, int(round(delay * 1000)))
        return self._widget.after(ms, callback)

    def cancel(self, handle: str) -> None:
        self._widget.after_cancel(handle)


class TimerHandle:
    __slots__ = ("deadline", "seq", "callback", "cancelled")

    def __init__(self, deadline: float, seq: int, callback: Callable[[], None]) -> None:
        self.deadline = deadline
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def __lt__(self, other: "TimerHandle") -> bool:
        return (self.deadline, self.seq) < (other.deadline, other.seq)


class HeapTimer:
    """
    Min-heap of deadlines. Callbacks due at the same instant fire in
    registration order.
    """
    def __init__(self, clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep) -> None:
        self._clock = clock
        self._sleep = sleep
        self._heap: List[TimerHandle] = []
        self._seq = itertools.count()

    def schedule_after(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(self._clock() + max(0.0, delay), next(self._seq), callback)
        heapq.heappush(self._heap, handle)
        return handle

    def cancel(self, handle: TimerHandle) -> None:
        handle.cancelled = True

    @property
    def pending(self) -> int:
        return sum(1 for h in self._heap if not h.cancelled)

    def _next_live(self) -> Optional[TimerHandle]:
        while self._heap and self._heap[0].cancelled:
            heapq.heappop(self._heap)
        return self._heap[0] if self._heap else None

    def _fire_next(self, limit: Optional[float]) -> bool:
        head = self._next_live()
        if head is None or (limit is not None and head.deadline > limit):
            return False
        wait = head.deadline - self._clock()
        if wait > 0:
            self._sleep(wait)
        heapq.heappop(self._heap)
        # A callback can cancel entries further down the heap; those are
        # skipped lazily by _next_live().
        head.callback()
        return True

    def run_until(self, deadline: float) -> None:
        """Fire everything due up to `deadline` (absolute clock time)."""
        while self._fire_next(deadline):
            pass
        wait = deadline - self._clock()
        if wait > 0:
            self._sleep(wait)

    def run_for(self, seconds: float) -> None:
        self.run_until(self._clock() + seconds)

    def run_until_idle(self) -> None:
        """Fire callbacks until nothing is pending (an infinite loop keeps it busy)."""
        while self._fire_next(None):
            pass
        logger.debug("timer idle")
