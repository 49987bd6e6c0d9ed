import threading
import time
from collections import deque
from typing import Callable, Deque, Generic, Optional, TypeVar

T = TypeVar("T")


class LatestValueChannel(Generic[T]):
    """
    A bounded, thread-safe channel that keeps at most `capacity` values.
    Publishers never block: when the channel is full the oldest value is dropped.
    Consumers only ever care about the most recent value, see `take_latest`.
    """

    def __init__(self, capacity: int) -> None:
        assert capacity > 0

        self.capacity = capacity
        self.buffer: Deque[T] = deque(maxlen=capacity)
        self.dropped = 0
        "Number of values discarded without being consumed."
        self._lock = threading.Lock()

    def publish(self, value: T) -> None:
        """
        Add a value to the channel (non-blocking).
        """
        with self._lock:
            if len(self.buffer) == self.capacity:
                self.dropped += 1
            self.buffer.append(value)

    def take_latest(self) -> Optional[T]:
        """
        Return the most recent value and discard everything that was queued before it.
        Returns None if nothing was published since the last call.
        """
        with self._lock:
            if len(self.buffer) == 0:
                return None
            latest = self.buffer[-1]
            self.dropped += len(self.buffer) - 1
            self.buffer.clear()
            return latest

    def clear(self) -> None:
        with self._lock:
            self.buffer.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self.buffer)


class TickSampler(Generic[T]):
    """
    Fixed-tick keep-latest sampler over a `LatestValueChannel`.
    At most one value is handed out per `interval` seconds; values published in between
    are collapsed into the most recent one.
    """

    def __init__(
        self,
        channel: LatestValueChannel[T],
        interval: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        assert interval >= 0

        self.channel = channel
        self.interval = interval
        self.clock = clock
        self._last_tick = -float("inf")

    def poll(self, now: Optional[float] = None) -> Optional[T]:
        """
        Return the latest value if a tick has elapsed and a value is pending, None otherwise.
        The tick only advances when a value is actually delivered.
        """
        now = self.clock() if now is None else now
        if now - self._last_tick < self.interval:
            return None

        value = self.channel.take_latest()
        if value is not None:
            self._last_tick = now
        return value
