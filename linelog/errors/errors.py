"""
Custom exceptions for the logging pipeline.

Exception hierarchy:
- LineLogError (base)
  - InvalidSeverityError: unknown severity handed to emit()
  - ConfigurationError: invalid logger options
  - InterceptorError: stdout interception already active / not installed
  - RenderError: event could not be rendered (unserializable context)
"""

from __future__ import annotations

from typing import Any, Optional


class LineLogError(Exception):
    """Base exception for all logger errors."""

    def __init__(
        self,
        message: str,
        *,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.component = component
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.component:
            parts.append(f"[component={self.component}]")
        if self.details:
            parts.append(f"[details={self.details}]")
        return " ".join(parts)


class InvalidSeverityError(LineLogError, ValueError):
    """Raised when a severity is not one of DEBUG, INFO, WARN, ERROR."""

    def __init__(
        self,
        message: str,
        *,
        value: Optional[Any] = None,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.value = value
        details = details or {}
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, component=component, details=details)


class ConfigurationError(LineLogError):
    """Raised when logger configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        issues: Optional[list[dict[str, Any]]] = None,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.field = field
        self.value = value
        self.issues = issues or []
        details = details or {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        if issues:
            details["issues"] = issues
        super().__init__(message, component=component, details=details)


class InterceptorError(LineLogError):
    """Raised when stdout interception is installed twice or restored while inactive."""


class RenderError(LineLogError):
    """Raised when an event cannot be rendered into a line."""

    def __init__(
        self,
        message: str,
        *,
        level: Optional[str] = None,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.level = level
        details = details or {}
        if level:
            details["level"] = level
        super().__init__(message, component=component, details=details)
