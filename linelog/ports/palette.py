"""Palette Port Interface.

Contract: Map a display role to a styling function. Roles are the severity
names (DEBUG, INFO, WARN, ERROR) plus "timestamp", "key" and "error".
Unknown roles get a neutral style; style() never raises.
"""

from __future__ import annotations

from typing import Callable, Protocol

Style = Callable[[str], str]


class Palette(Protocol):
    def style(self, role: str) -> Style: ...
