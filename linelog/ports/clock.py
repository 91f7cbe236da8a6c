"""Clock Port Interface.

Contract: Provides the current wall-clock instant stamped on every event.
"""

from __future__ import annotations

from typing import Protocol

from linelog.types.types import Millis


class Clock(Protocol):
    def now(self) -> Millis:
        """Return current UTC time in epoch milliseconds."""
        ...
