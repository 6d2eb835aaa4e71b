# timeline/timers.py
import heapq, itertools, time
from typing import Callable, List, Optional, Tuple

class TimerHandle:
    __slots__ = ("deadline", "callback", "cancelled", "fired")

    def __init__(self, deadline: float, callback: Callable[[], None]):
        self.deadline = deadline    # clock seconds
        self.callback = callback
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def __repr__(self):
        state = "cancelled" if self.cancelled else "fired" if self.fired else "pending"
        return f"<TimerHandle {self.deadline:.3f} {state}>"


class TimerQueue:
    """Cancellable delayed callbacks, pumped from the main loop.

    Nothing runs on its own: ``pump()`` fires what is due at that moment.
    Cancellation only flips a flag, so a handle that is already due but not
    yet pumped is skipped as well.
    """
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._heap: List[Tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()

    def schedule(self, delay_ms: float, callback: Callable[[], None], now: Optional[float] = None) -> TimerHandle:
        base = self.clock() if now is None else now
        h = TimerHandle(base + max(0.0, delay_ms) / 1000.0, callback)
        heapq.heappush(self._heap, (h.deadline, next(self._seq), h))
        return h

    def cancel(self, handle: TimerHandle):
        handle.cancelled = True

    def pump(self, now: Optional[float] = None) -> int:
        now = self.clock() if now is None else now
        fired = 0
        while self._heap and self._heap[0][0] <= now:
            _, _, h = heapq.heappop(self._heap)
            if h.cancelled:
                continue
            h.fired = True
            h.callback()
            fired += 1
        return fired

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h in self._heap if h.active)

    def clear(self):
        for _, _, h in self._heap:
            h.cancelled = True
        self._heap.clear()
