"""EventObserver Port Interface.

Contract: Callback invoked synchronously with every event that passed the
severity filter, after its line was written.
"""

from __future__ import annotations

from typing import Protocol

from linelog.types.types import LogEvent


class EventObserver(Protocol):
    def __call__(self, event: LogEvent) -> None: ...
