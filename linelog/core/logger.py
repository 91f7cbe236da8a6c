"""
Logger (event emitter) and Log (context handle).

Write path of one event:
    parse severity -> build LogEvent (clock.now()) -> severity filter
    -> render -> [lock] one write of "<line>\\n" to the real stream
    -> observers notified with the event [unlock]

Everything runs synchronously on the caller's thread. Filtering is the
only silent path; every other failure (unknown severity, unserializable
data, stream errors, observer errors) propagates to the caller.
"""

from __future__ import annotations

import logging
import sys
import threading
from datetime import timezone
from typing import Any, Mapping, Optional

from linelog.adapters.palette import ColoramaPalette, PlainPalette
from linelog.config.configs import LoggerOptions
from linelog.core.clock import SystemClock
from linelog.core.interceptor import StdoutInterceptor
from linelog.core.render import render
from linelog.core.severity import parse_severity, passes
from linelog.ports.clock import Clock
from linelog.ports.event_observer import EventObserver
from linelog.ports.output_stream import OutputStream
from linelog.ports.palette import Palette
from linelog.types.types import ERROR_KEY, ErrorInfo, LogEvent, Severity

_LOGGER = logging.getLogger(__name__)


class Logger:
    """
    Owns the options, the real output stream and the observer list.

    Collaborators are injectable: stream (defaults to sys.stdout as it is at
    construction), clock (SystemClock), palette (ColoramaPalette, or
    PlainPalette when colors are off) and interceptor.

    With intercept_vendor_output=True the interceptor is installed during
    construction; the stream it replaced stays this logger's sink, so
    rendered lines bypass the interception. Call close() (or use the
    logger as a context manager) to put sys.stdout back.
    """

    def __init__(
        self,
        options: LoggerOptions | Mapping[str, Any] | None = None,
        *,
        stream: Optional[OutputStream] = None,
        clock: Optional[Clock] = None,
        palette: Optional[Palette] = None,
        interceptor: Optional[StdoutInterceptor] = None,
        **overrides: Any,
    ) -> None:
        self.options = LoggerOptions.build(
            dict(options) if isinstance(options, Mapping) else options, **overrides
        )
        self._stream: OutputStream = stream if stream is not None else sys.stdout
        self._clock: Clock = clock or SystemClock()
        if palette is None:
            palette = ColoramaPalette() if self.options.colors else PlainPalette()
        self._palette = palette
        self._tz = timezone.utc if self.options.utc_timestamps else None

        # re-entrant: an observer printing through an intercepted stdout
        # re-enters emit() on the same thread
        self._lock = threading.RLock()
        self._observers: list[EventObserver] = []
        self._interceptor: Optional[StdoutInterceptor] = None
        self._closed = False

        if self.options.intercept_vendor_output:
            interceptor = interceptor or StdoutInterceptor()
            real_stream = interceptor.install(self._on_vendor_line)
            if stream is None:
                self._stream = real_stream
            self._interceptor = interceptor

    # --- Properties ---

    @property
    def stream(self) -> OutputStream:
        return self._stream

    @property
    def intercepting(self) -> bool:
        return self._interceptor is not None and self._interceptor.installed

    # --- Core write path ---

    def emit(
        self,
        severity: Severity | str,
        message: Any,
        data: Optional[Mapping[str, Any]] = None,
    ) -> Optional[LogEvent]:
        """
        Emit one event. Returns the event, or None when it was filtered out.
        """
        level = parse_severity(severity)
        event = LogEvent(
            level=level,
            message=str(message),
            timestamp=self._clock.now(),
            data=dict(data) if data else {},
        )
        if not passes(level, self.options.min_level):
            return None

        # render before taking the lock: a RenderError must not leave a partial line
        line = render(event, self.options.format, self._palette, self._tz)
        with self._lock:
            self._stream.write(f"{line}\n")
            self._stream.flush()
            for observer in list(self._observers):
                observer(event)
        return event

    def log(
        self,
        level: Severity | str,
        message: Any,
        data: Optional[Mapping[str, Any]] = None,
    ) -> Optional[LogEvent]:
        return self.emit(level, message, data)

    def debug(self, message: Any) -> Optional[LogEvent]:
        return self.emit(Severity.DEBUG, message)

    def info(self, message: Any) -> Optional[LogEvent]:
        return self.emit(Severity.INFO, message)

    def warn(self, message: Any) -> Optional[LogEvent]:
        return self.emit(Severity.WARN, message)

    warning = warn

    def error(self, message: Any, err: Any = None) -> Optional[LogEvent]:
        data = {ERROR_KEY: err} if err is not None else None
        return self.emit(Severity.ERROR, message, data)

    # --- Context handles ---

    def with_field(self, key: str, value: Any) -> Log:
        return Log(self, {key: value})

    def with_error(self, err: Any) -> Log:
        return Log(self, {ERROR_KEY: ErrorInfo.coerce(err)})

    def with_fields(self, fields: Mapping[str, Any]) -> Log:
        return Log(self, fields)

    # --- Observers ---

    def subscribe(self, handler: EventObserver) -> EventObserver:
        """
        Register handler for every event that passes the filter. Returns the
        handler so it can be used as a decorator.
        """
        with self._lock:
            self._observers.append(handler)
        _LOGGER.debug(
            "observer_subscribed",
            extra={"event": "observer_subscribed", "observers": len(self._observers)},
        )
        return handler

    def unsubscribe(self, handler: EventObserver) -> None:
        with self._lock:
            try:
                self._observers.remove(handler)
            except ValueError as exc:
                raise ValueError("handler is not subscribed") from exc
        _LOGGER.debug(
            "observer_unsubscribed",
            extra={"event": "observer_unsubscribed", "observers": len(self._observers)},
        )

    # --- Lifecycle ---

    def close(self) -> None:
        """Restore sys.stdout if this logger intercepted it. Idempotent."""
        if self._closed:
            return
        interceptor, self._interceptor = self._interceptor, None
        if interceptor is not None and interceptor.installed:
            # stdout is back even if this raises; a later close() finishes up
            interceptor.restore()
        self._closed = True
        _LOGGER.debug("logger_closed", extra={"event": "logger_closed"})

    def __enter__(self) -> Logger:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _on_vendor_line(self, line: str) -> None:
        self.debug(line)


class Log:
    """
    Context handle: accumulates fields and forwards emit calls to its
    Logger. with_field()/with_error() mutate this handle and return it;
    every emit takes a snapshot, so later mutations never reach events
    already emitted. Handles never share their field dict.
    """

    def __init__(self, logger: Logger, init_data: Optional[Mapping[str, Any]] = None) -> None:
        self.logger = logger
        self._data: dict[str, Any] = dict(init_data or {})
        self._lock = threading.Lock()

    @property
    def data(self) -> dict[str, Any]:
        return self._snapshot()

    def with_field(self, key: str, value: Any) -> Log:
        with self._lock:
            self._data[key] = value
        return self

    def with_error(self, err: Any) -> Log:
        info = ErrorInfo.coerce(err)
        with self._lock:
            self._data[ERROR_KEY] = info
        return self

    def debug(self, message: Any) -> Optional[LogEvent]:
        return self.logger.emit(Severity.DEBUG, message, self._snapshot())

    def info(self, message: Any) -> Optional[LogEvent]:
        return self.logger.emit(Severity.INFO, message, self._snapshot())

    def warn(self, message: Any) -> Optional[LogEvent]:
        return self.logger.emit(Severity.WARN, message, self._snapshot())

    warning = warn

    def error(self, message: Any, err: Any = None) -> Optional[LogEvent]:
        data = self._snapshot()
        if err is not None:
            data[ERROR_KEY] = err
        return self.logger.emit(Severity.ERROR, message, data)

    def _snapshot(self) -> dict[str, Any]:
        with self._lock:
            return dict(self._data)


def configure(
    options: LoggerOptions | Mapping[str, Any] | None = None, **kwargs: Any
) -> Logger:
    """
    Build a Logger: options merged over defaults, keyword overrides on top.
    Collaborators (stream, clock, palette, interceptor) pass through kwargs.
    """
    return Logger(options, **kwargs)
