from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from linelog.core.severity import parse_severity
from linelog.errors.errors import ConfigurationError, InvalidSeverityError
from linelog.types.types import OutputFormat, Severity

"""
Logger options. Set once at Logger construction, immutable afterwards.
"""


class LoggerOptions(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    min_level: Severity = Field(
        default=Severity.DEBUG, description="events below this severity are dropped"
    )
    format: OutputFormat = Field(default=OutputFormat.JSON, description="JSON (STRUCTURED) or TEXT")
    intercept_vendor_output: bool = Field(
        default=False, description="re-emit raw sys.stdout writes as DEBUG events"
    )
    utc_timestamps: bool = Field(default=False, description="TEXT timestamps in UTC, not local")
    colors: bool = Field(default=True, description="ANSI colors in TEXT mode")

    @field_validator("min_level", mode="before")
    @classmethod
    def _parse_min_level(cls, value: Any) -> Severity:
        try:
            return parse_severity(value)
        except InvalidSeverityError as exc:
            # pydantic turns ValueError into a validation issue
            raise ValueError(f"unknown severity {value!r}") from exc

    @field_validator("format", mode="before")
    @classmethod
    def _parse_format(cls, value: Any) -> OutputFormat:
        return OutputFormat.parse(value)

    @classmethod
    def build(cls, options: Any = None, **overrides: Any) -> LoggerOptions:
        """
        Merge overrides over options over defaults. Validation failures
        surface as ConfigurationError with the parsed pydantic issues.
        """
        if isinstance(options, LoggerOptions):
            if not overrides:
                return options
            merged: dict[str, Any] = options.model_dump()
        elif options is None:
            merged = {}
        elif isinstance(options, dict):
            merged = dict(options)
        else:
            raise ConfigurationError(
                "options must be a mapping or LoggerOptions",
                value=type(options).__name__,
                component="config",
            )
        merged.update(overrides)
        try:
            return cls(**merged)
        except ValidationError as exc:
            raise ConfigurationError(
                "invalid logger options", issues=option_issues(exc), component="config"
            ) from exc


def option_issues(error: ValidationError) -> list[dict[str, Any]]:
    """
    One entry per failed option: which option, what was given, and why it
    was refused. `error_type` is pydantic's code (e.g. "extra_forbidden").
    """
    issues: list[dict[str, Any]] = []
    for err in error.errors():
        option = ".".join(map(str, err["loc"])) or "options"
        issues.append(
            {
                "component": "config.options",
                "path": option,
                "value": err.get("input"),
                "message": err["msg"],
                "error_type": err["type"],
            }
        )
    return issues
