"""
define canonical types
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

# -------- Aliases (clarify intent) --------
Millis = int  # Milliseconds since epoch (UTC)
Data = dict[str, Any]

# Reserved context key holding the error of an event
ERROR_KEY = "error"

# -------- Enums --------


class Severity(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"

    def __str__(self) -> str:
        return self.value


class OutputFormat(str, Enum):
    """
    Rendering modes. STRUCTURED is an alias of JSON.
    """

    JSON = "JSON"
    STRUCTURED = "JSON"
    TEXT = "TEXT"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Any) -> OutputFormat:
        """Member or case-insensitive name ("json", "Structured", "TEXT")."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value.strip().upper() in cls.__members__:
            return cls[value.strip().upper()]
        raise ValueError(f"unknown format {value!r}; expected JSON, STRUCTURED or TEXT")


# -------- Error slot --------


@dataclass(frozen=True, slots=True)
class ErrorInfo:
    """
    Normalized error carried under the reserved "error" key.
    name and message are always present; stack only when known.
    """

    name: str
    message: str
    stack: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("ErrorInfo.name must be a non-empty string.")
        if not isinstance(self.message, str):
            raise ValueError("ErrorInfo.message must be a string.")

    @classmethod
    def from_exception(cls, exc: BaseException) -> ErrorInfo:
        stack = None
        if exc.__traceback__ is not None:
            stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return cls(name=type(exc).__name__, message=str(exc), stack=stack)

    @classmethod
    def coerce(cls, value: Any) -> ErrorInfo:
        """
        Accepts an ErrorInfo, an exception instance, or a mapping with
        "name" and "message" keys (an optional "stack" is kept).
        """
        if isinstance(value, ErrorInfo):
            return value
        if isinstance(value, BaseException):
            return cls.from_exception(value)
        if isinstance(value, Mapping):
            if "name" not in value or "message" not in value:
                raise ValueError("error mapping requires 'name' and 'message' keys.")
            stack = value.get("stack")
            return cls(
                name=str(value["name"]),
                message=str(value["message"]),
                stack=None if stack is None else str(stack),
            )
        raise ValueError(f"cannot interpret {type(value).__name__} as an error.")

    def to_dict(self) -> dict[str, str]:
        out = {"name": self.name, "message": self.message}
        if self.stack is not None:
            out["stack"] = self.stack
        return out

    def __str__(self) -> str:
        return f"{self.name}: {self.message}"


# -------- Event --------


@dataclass(frozen=True, slots=True)
class LogEvent:
    """
    A single log event. Built once per emit() call and never mutated;
    data is a private snapshot of the caller's context.
    """

    level: Severity
    message: str
    timestamp: Millis
    data: Data = field(default_factory=dict)

    def __post_init__(self) -> None:
        data = dict(self.data or {})
        if ERROR_KEY in data:
            if data[ERROR_KEY] is None:
                del data[ERROR_KEY]
            else:
                data[ERROR_KEY] = ErrorInfo.coerce(data[ERROR_KEY])
        # frozen: replace the caller's mapping with our own snapshot
        object.__setattr__(self, "data", data)

    @property
    def error(self) -> Optional[ErrorInfo]:
        err = self.data.get(ERROR_KEY)
        return err if isinstance(err, ErrorInfo) else None

    def to_dict(self) -> dict[str, Any]:
        # key order is part of the JSON line contract
        return {
            "level": self.level.value,
            "message": self.message,
            "data": self.data,
            "timestamp": self.timestamp,
        }
