"""OutputStream Port Interface.

Contract: Line sink the logger writes rendered events to. One write per
event, the text already newline-terminated. Errors raised by write()
propagate to the caller of emit().
"""

from __future__ import annotations

from typing import Any, Protocol


class OutputStream(Protocol):
    def write(self, text: str) -> Any: ...

    def flush(self) -> None: ...
