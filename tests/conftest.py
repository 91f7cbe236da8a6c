import io
import sys
from contextlib import contextmanager
from typing import Callable, ContextManager, Iterator, Optional, TextIO

import pytest

from linelog.adapters.palette import PlainPalette
from linelog.core.clock import ManualClock
from linelog.core.interceptor import active_interceptor
from linelog.core.logger import Logger

# 2023-11-14T22:13:20.123 UTC
T0_MS = 1_700_000_000_123


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(current_ms=T0_MS)


@pytest.fixture
def stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def make_logger(stream: io.StringIO, clock: ManualClock) -> Callable[..., Logger]:
    """
    Factory for loggers writing into the per-test StringIO with a fixed clock
    and no colors. Keyword arguments are logger options / collaborators.
    """

    def _make(**kwargs) -> Logger:
        kwargs.setdefault("stream", stream)
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("palette", PlainPalette())
        return Logger(**kwargs)

    return _make


@pytest.fixture
def fake_stdout(
    monkeypatch: pytest.MonkeyPatch,
) -> Callable[..., ContextManager[TextIO]]:
    """
    Context manager standing in for the process stdout inside the test body.

    pytest's capture rebinds sys.stdout when the test call starts, so the swap
    cannot happen during fixture setup. Any interceptor still active when the
    block exits is restored before the real stdout comes back.
    """

    @contextmanager
    def _swap(fake: Optional[TextIO] = None) -> Iterator[TextIO]:
        fake = fake if fake is not None else io.StringIO()
        with monkeypatch.context() as m:
            m.setattr(sys, "stdout", fake)
            try:
                yield fake
            finally:
                interceptor = active_interceptor()
                if interceptor is not None and interceptor.installed:
                    try:
                        interceptor.restore()
                    except Exception:
                        pass

    return _swap


@pytest.fixture(autouse=True)
def _release_interceptor() -> Iterator[None]:
    # Keep the process-wide interceptor from leaking between tests.
    yield
    interceptor = active_interceptor()
    if interceptor is not None:
        interceptor.restore()
