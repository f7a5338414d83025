"""
Delayed-callback scheduler for the single-threaded event loop.

Fixed pauses (wake pause, highlight delay, settle delay, restart backoff) are
deadlines here instead of sleeps, so the loop never blocks on them. The clock
is injectable; tests drive it with ManualClock.
"""
import heapq
import itertools
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from nullistant.core.logger import get_logger


@dataclass(order=True)
class ScheduledCall:
    """A callback due at `deadline` (seconds on the scheduler clock)"""
    deadline: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    label: str = field(default="", compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualClock:
    """Clock that only moves when told to"""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000.0


class Scheduler:
    """Min-heap of pending callbacks keyed on deadline, FIFO among equal deadlines"""

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self.logger = get_logger()
        self.clock = clock or time.monotonic
        self._heap: List[ScheduledCall] = []
        self._seq = itertools.count()

    def call_later(self, delay_ms: float, callback: Callable[[], None], label: str = "") -> ScheduledCall:
        """Schedule `callback` to run `delay_ms` from now"""
        call = ScheduledCall(
            deadline=self.clock() + max(0.0, delay_ms) / 1000.0,
            seq=next(self._seq),
            callback=callback,
            label=label,
        )
        heapq.heappush(self._heap, call)
        self.logger.debug(f"[SCHED] +{delay_ms:.0f}ms {label or callback}")
        return call

    def cancel(self, call: Optional[ScheduledCall]) -> None:
        if call is not None:
            call.cancel()

    def cancel_label(self, label: str) -> int:
        """Cancel every pending call with this label"""
        count = 0
        for call in self._heap:
            if call.label == label and not call.cancelled:
                call.cancel()
                count += 1
        return count

    def pending(self, label: Optional[str] = None) -> List[ScheduledCall]:
        calls = [c for c in self._heap if not c.cancelled]
        if label is not None:
            calls = [c for c in calls if c.label == label]
        return sorted(calls)

    def next_delay(self) -> Optional[float]:
        """Seconds until the next live deadline, or None if nothing is scheduled"""
        while self._heap and self._heap[0].cancelled:
            heapq.heappop(self._heap)
        if not self._heap:
            return None
        return max(0.0, self._heap[0].deadline - self.clock())

    def run_due(self) -> int:
        """
        Run every callback whose deadline has passed.

        Callbacks scheduled by a running callback with zero delay also run in
        this pass. Returns the number of callbacks run.
        """
        ran = 0
        while self._heap:
            head = self._heap[0]
            if head.cancelled:
                heapq.heappop(self._heap)
                continue
            if head.deadline > self.clock():
                break
            heapq.heappop(self._heap)
            self.logger.debug(f"[SCHED] run {head.label or head.callback}")
            head.callback()
            ran += 1
        return ran

    def clear(self) -> None:
        for call in self._heap:
            call.cancel()
        self._heap.clear()
