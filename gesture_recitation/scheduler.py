"""
Single-threaded deferred timers driven by the frame loop.
"""
import heapq
import itertools
import logging
import time
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


def monotonic_ms() -> int:
    """Current monotonic time in milliseconds."""
    return int(time.monotonic() * 1000)


class ManualClock:
    """Clock that only moves when told to. Useful for tests and replays."""

    def __init__(self, start_ms: int = 0):
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


class TimerHandle:
    """Handle to a scheduled callback."""

    def __init__(self, due_ms: int, seq: int, callback: Callable[[], None]):
        self.due_ms = due_ms
        self.seq = seq
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        """Cancel the callback. Calling it again, or after firing, does nothing."""
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def __lt__(self, other: "TimerHandle") -> bool:
        return (self.due_ms, self.seq) < (other.due_ms, other.seq)


class Scheduler:
    """
    Deferred callback queue.

    Nothing runs on its own: the owner calls run_due() from its loop, so
    callbacks execute on the same thread as frame processing, in due-time order.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None):
        self.clock = clock or monotonic_ms
        self._queue: List[TimerHandle] = []
        self._seq = itertools.count()
        # Due time of the callback being fired, so chained timers keep exact spacing
        self._firing_at: Optional[int] = None

    def now_ms(self) -> int:
        if self._firing_at is not None:
            return self._firing_at
        return self.clock()

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """Schedule callback to run delay_ms from now."""
        handle = TimerHandle(self.now_ms() + max(0, int(delay_ms)), next(self._seq), callback)
        heapq.heappush(self._queue, handle)
        return handle

    def run_due(self, now_ms: Optional[int] = None) -> int:
        """
        Fire every active callback due at or before now.

        Callbacks may schedule new timers; ones already due fire in this pass.

        Returns:
            Number of callbacks fired
        """
        now = self.now_ms() if now_ms is None else now_ms
        fired = 0
        while self._queue and self._queue[0].due_ms <= now:
            handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            handle.fired = True
            self._firing_at = handle.due_ms
            try:
                handle.callback()
            finally:
                self._firing_at = None
            fired += 1
        return fired

    @property
    def pending(self) -> int:
        """Number of active timers still queued."""
        return sum(1 for handle in self._queue if handle.active)

    def cancel_all(self) -> None:
        for handle in self._queue:
            handle.cancel()
        self._queue.clear()
