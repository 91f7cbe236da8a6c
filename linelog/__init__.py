"""
Structured event logger.

Accepts log events (severity, message, context fields), filters them by
minimum severity, renders them as JSON lines or colored text, and writes
one line per event to standard output. Optionally captures raw writes to
sys.stdout made by third-party code and re-emits them as DEBUG events.

Components:
- Logger: options, severity filter, rendering, the single write, observers
- Log: context handle accumulating fields across calls
- render: JSON / TEXT rendering of a LogEvent
- StdoutInterceptor: install/restore of the sys.stdout redirection

Usage:
    from linelog import configure

    logger = configure(min_level="INFO", format="TEXT")
    logger.with_field("request_id", "abc").info("handling")
    logger.error("failed", OSError("disk full"))
"""

from linelog.adapters.palette import ColoramaPalette, PlainPalette
from linelog.config.config_loader import load_options_file, options_from_env, resolve_options
from linelog.config.configs import LoggerOptions
from linelog.core.clock import ManualClock, SystemClock
from linelog.core.interceptor import StdoutInterceptor, active_interceptor
from linelog.core.logger import Log, Logger, configure
from linelog.core.render import format_timestamp, render
from linelog.core.severity import LEVEL_RANK, parse_severity, passes, rank
from linelog.errors.errors import (
    ConfigurationError,
    InterceptorError,
    InvalidSeverityError,
    LineLogError,
    RenderError,
)
from linelog.types.types import ERROR_KEY, ErrorInfo, LogEvent, OutputFormat, Severity

__version__ = "0.1.0"

__all__ = [
    # Main entry points
    "configure",
    "Logger",
    "Log",
    "LoggerOptions",
    # Configuration
    "load_options_file",
    "options_from_env",
    "resolve_options",
    # Types
    "Severity",
    "OutputFormat",
    "LogEvent",
    "ErrorInfo",
    "ERROR_KEY",
    # Pipeline pieces
    "render",
    "format_timestamp",
    "LEVEL_RANK",
    "rank",
    "passes",
    "parse_severity",
    "StdoutInterceptor",
    "active_interceptor",
    # Collaborators
    "SystemClock",
    "ManualClock",
    "ColoramaPalette",
    "PlainPalette",
    # Errors
    "LineLogError",
    "InvalidSeverityError",
    "ConfigurationError",
    "InterceptorError",
    "RenderError",
]
