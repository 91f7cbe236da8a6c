"""
Stdout interception.

Rebinds sys.stdout to a proxy that turns every line written by third-party
code into a callback (the Logger binds it to debug()). The logger keeps its
own reference to the real stream, taken before install(), so rendered lines
never pass back through the proxy. Bytes written through sys.stdout.buffer
are decoded with the real stream's encoding and buffered the same way.

Process-wide side effect: at most one interceptor may be active at a time.
A second install() raises InterceptorError instead of double-wrapping.
"""

from __future__ import annotations

import codecs
import logging
import sys
import threading
from typing import Any, Callable, Iterable, Optional, TextIO

from linelog.errors.errors import InterceptorError

_LOGGER = logging.getLogger(__name__)

LineCallback = Callable[[str], Any]

_GUARD = threading.Lock()
_ACTIVE: Optional["StdoutInterceptor"] = None


def active_interceptor() -> Optional["StdoutInterceptor"]:
    """Return the interceptor currently bound to sys.stdout, if any."""
    return _ACTIVE


class _InterceptedStdout:
    """
    Line-buffering stand-in for sys.stdout.

    print() issues separate writes for the text and the newline, so writes
    are buffered until a newline arrives; each complete line (newline
    stripped) goes to the callback. Writes made while the callback is
    running on the same thread (e.g., an observer calling print()) go to
    the real stream to avoid feeding the logger its own output.
    """

    def __init__(self, original: TextIO, on_line: LineCallback) -> None:
        self._original = original
        self._on_line = on_line
        self._buffer = ""
        self._lock = threading.Lock()
        self._local = threading.local()
        self._bytes_proxy: Optional[_InterceptedBuffer] = None

    def write(self, text: str) -> int:
        if not isinstance(text, str):
            raise TypeError(f"write() argument must be str, not {type(text).__name__}")
        if getattr(self._local, "dispatching", False):
            return self._original.write(text)

        lines: list[str] = []
        with self._lock:
            self._buffer += text
            while "\n" in self._buffer:
                line, _, self._buffer = self._buffer.partition("\n")
                lines.append(line)
        # dispatch outside the buffer lock; emit() takes the logger's own lock
        self._dispatch(lines)
        return len(text)

    def writelines(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.write(line)

    def flush(self) -> None:
        """Emit a pending partial line, then flush the real stream."""
        if getattr(self._local, "dispatching", False):
            self._original.flush()
            return
        with self._lock:
            pending, self._buffer = self._buffer, ""
        if pending:
            self._dispatch([pending])
        self._original.flush()

    @property
    def pending(self) -> str:
        return self._buffer

    def _dispatch(self, lines: list[str]) -> None:
        if not lines:
            return
        self._local.dispatching = True
        try:
            for line in lines:
                self._on_line(line)
        finally:
            self._local.dispatching = False

    @property
    def buffer(self) -> _InterceptedBuffer:
        # AttributeError when the real stream has no binary layer (StringIO)
        raw = self._original.buffer
        if self._bytes_proxy is None:
            encoding = getattr(self._original, "encoding", None) or "utf-8"
            self._bytes_proxy = _InterceptedBuffer(self, raw, encoding)
        return self._bytes_proxy

    def __getattr__(self, name: str) -> Any:
        # encoding, isatty, fileno, ... come from the real stream
        return getattr(self._original, name)


class _InterceptedBuffer:
    """
    Binary side of the proxy: decodes writes incrementally so a multi-byte
    character split across two writes still arrives whole.
    """

    def __init__(self, text: _InterceptedStdout, raw: Any, encoding: str) -> None:
        self._text = text
        self._raw = raw
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._lock = threading.Lock()

    def write(self, data: bytes) -> int:
        if isinstance(data, str):
            raise TypeError("a bytes-like object is required, not 'str'")
        with self._lock:
            text = self._decoder.decode(bytes(data))
        if text:
            self._text.write(text)
        return len(data)

    def writelines(self, chunks: Iterable[bytes]) -> None:
        for chunk in chunks:
            self.write(chunk)

    def flush(self) -> None:
        self._text.flush()

    def __getattr__(self, name: str) -> Any:
        return getattr(self._raw, name)


class StdoutInterceptor:
    """
    Explicit install/restore lifecycle around the sys.stdout rebind.
    """

    def __init__(self) -> None:
        self._original: Optional[TextIO] = None
        self._proxy: Optional[_InterceptedStdout] = None

    @property
    def installed(self) -> bool:
        return _ACTIVE is self

    @property
    def original(self) -> Optional[TextIO]:
        """The stream sys.stdout pointed to before install()."""
        return self._original

    def install(self, on_line: LineCallback) -> TextIO:
        """
        Bind sys.stdout to the proxy and return the real stream it replaced.
        """
        global _ACTIVE
        with _GUARD:
            if _ACTIVE is not None:
                raise InterceptorError(
                    "stdout interception is already active in this process",
                    component="interceptor",
                )
            self._original = sys.stdout
            self._proxy = _InterceptedStdout(self._original, on_line)
            sys.stdout = self._proxy
            _ACTIVE = self

        _LOGGER.debug("stdout_intercepted", extra={"event": "stdout_intercepted"})
        return self._original

    def restore(self) -> None:
        """
        Flush any buffered partial line and put the real stream back.

        The real stream is rebound even when emitting the partial line
        fails; the sink's exception propagates afterwards.
        """
        global _ACTIVE
        with _GUARD:
            if _ACTIVE is not self or self._proxy is None or self._original is None:
                raise InterceptorError(
                    "stdout interceptor is not installed", component="interceptor"
                )
            proxy = self._proxy
            try:
                proxy.flush()
            finally:
                if sys.stdout is proxy:
                    sys.stdout = self._original
                else:
                    # someone rebound sys.stdout after us; leave their binding alone
                    _LOGGER.warning(
                        "stdout_rebound_externally",
                        extra={"event": "stdout_rebound_externally"},
                    )
                _ACTIVE = None
                self._proxy = None

        _LOGGER.debug("stdout_restored", extra={"event": "stdout_restored"})
