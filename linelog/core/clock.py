"""
now() provides the timestamp stamped on every event at emit time.
SystemClock follows the wall clock; ManualClock is driven by hand and used
wherever output must be reproducible (tests, golden files).
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

from linelog.types.types import Millis

# -------- Exceptions -----------------------------------------------------------


class ClockError(RuntimeError):
    """Raised when a clock operation would violate its invariants
    (e.g., going backward).
    """


# -------- Interface -----------------------------------------------------------


class Clock(ABC):
    """
    Time source interface. All timestamps are UTC epoch milliseconds (int).
    """

    @abstractmethod
    def now(self) -> Millis:
        """Current time in UTC epoch milliseconds."""
        raise NotImplementedError

    @property
    @abstractmethod
    def is_realtime(self) -> bool:
        """True for SystemClock; False for ManualClock."""
        raise NotImplementedError


# -------- SystemClock ---------------------------------------------------------


class SystemClock(Clock):
    """
    Wall-clock time at millisecond resolution. Follows OS clock adjustments,
    which is what a log timestamp should show.
    """

    @property
    def is_realtime(self) -> bool:
        return True

    def now(self) -> Millis:
        return time.time_ns() // 1_000_000


# -------- ManualClock ---------------------------------------------------------


@dataclass
class ManualClock(Clock):
    """
    Deterministic clock. Time only moves through set() / advance(), and
    never backward.
    """

    current_ms: Millis = 0

    def __post_init__(self) -> None:
        if self.current_ms < 0:
            raise ClockError("ManualClock: start time must be non-negative")

    @property
    def is_realtime(self) -> bool:
        return False

    def now(self) -> Millis:
        return self.current_ms

    def set(self, ts_ms: Millis) -> None:
        if ts_ms < self.current_ms:
            raise ClockError(
                f"ManualClock: cannot move backward ({ts_ms} < {self.current_ms})"
            )
        self.current_ms = ts_ms

    def advance(self, delta_ms: Millis) -> Millis:
        if delta_ms < 0:
            raise ClockError("ManualClock: delta_ms must be non-negative")
        self.current_ms += delta_ms
        return self.current_ms
