"""
Severity ordering used by the emit filter.
"""

from __future__ import annotations

from typing import Any, Final

from linelog.errors.errors import InvalidSeverityError
from linelog.types.types import Severity

LEVEL_RANK: Final[dict[Severity, int]] = {
    Severity.DEBUG: 1,
    Severity.INFO: 2,
    Severity.WARN: 3,
    Severity.ERROR: 4,
}

_ALIASES: Final[dict[str, Severity]] = {"WARNING": Severity.WARN}


def parse_severity(value: Any) -> Severity:
    """
    Accept a Severity member or its (case-insensitive) name.
    Raises InvalidSeverityError for anything else; never defaults a rank.
    """
    if isinstance(value, Severity):
        return value
    if isinstance(value, str):
        name = value.strip().upper()
        if name in Severity.__members__:
            return Severity[name]
        if name in _ALIASES:
            return _ALIASES[name]
    raise InvalidSeverityError("unknown severity", value=value, component="severity")


def rank(severity: Severity | str) -> int:
    return LEVEL_RANK[parse_severity(severity)]


def passes(severity: Severity | str, minimum: Severity | str) -> bool:
    """True when severity is at or above minimum."""
    return rank(severity) >= rank(minimum)
