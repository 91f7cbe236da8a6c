"""
Unit tests for the Logger write path.
"""

import io
import json
import threading

import pytest

from linelog.adapters.palette import ColoramaPalette, PlainPalette
from linelog.core.clock import ManualClock
from linelog.core.logger import Log, Logger, configure
from linelog.errors.errors import ConfigurationError, InvalidSeverityError, RenderError
from linelog.types.types import ErrorInfo, LogEvent, OutputFormat, Severity

ORDER = [Severity.DEBUG, Severity.INFO, Severity.WARN, Severity.ERROR]


def _lines(stream: io.StringIO) -> list[str]:
    return stream.getvalue().splitlines()


class TestFiltering:
    """Tests for the severity filter."""

    @pytest.mark.parametrize("severity", ORDER)
    @pytest.mark.parametrize("minimum", ORDER)
    def test_writes_iff_rank_passes(self, make_logger, stream, severity, minimum) -> None:
        """Test emit writes exactly when rank(severity) >= rank(minimum)."""
        logger = make_logger(min_level=minimum)
        result = logger.emit(severity, "msg")
        written = stream.getvalue() != ""
        assert written is (ORDER.index(severity) >= ORDER.index(minimum))
        assert (result is not None) is written

    def test_filtered_event_has_no_effect(self, make_logger, stream) -> None:
        """Test INFO below WARN: no write, no notification."""
        logger = make_logger(min_level="WARN")
        seen: list[LogEvent] = []
        logger.subscribe(seen.append)

        assert logger.emit(Severity.INFO, "started", {}) is None
        assert stream.getvalue() == ""
        assert seen == []


class TestEmit:
    """Tests for rendering, writing and notification."""

    def test_one_line_per_event(self, make_logger, stream) -> None:
        """Test each passing event is one newline-terminated JSON line."""
        logger = make_logger()
        logger.info("a")
        logger.warn("b")
        assert stream.getvalue().count("\n") == 2
        assert [json.loads(line)["message"] for line in _lines(stream)] == ["a", "b"]

    def test_returns_emitted_event(self, make_logger, clock) -> None:
        """Test emit returns the event it wrote."""
        event = make_logger().emit("info", "hello", {"k": 1})
        assert event == LogEvent(Severity.INFO, "hello", clock.now(), {"k": 1})

    def test_timestamp_taken_per_call(self, make_logger, stream, clock) -> None:
        """Test every call stamps the clock's current instant."""
        logger = make_logger()
        logger.info("first")
        clock.advance(5)
        logger.info("second")
        first, second = (json.loads(line) for line in _lines(stream))
        assert second["timestamp"] - first["timestamp"] == 5

    def test_observer_runs_after_write(self, make_logger, stream) -> None:
        """Test observers see the raw event after its line was written."""
        logger = make_logger()
        written_at_notify: list[str] = []

        @logger.subscribe
        def observer(event: LogEvent) -> None:
            written_at_notify.append(stream.getvalue())
            assert event.message == "ready"

        logger.info("ready")
        assert written_at_notify == [stream.getvalue()]
        assert written_at_notify[0].endswith("\n")

    def test_multiple_observers_and_unsubscribe(self, make_logger) -> None:
        """Test every observer is notified until it unsubscribes."""
        logger = make_logger()
        a: list[LogEvent] = []
        b: list[LogEvent] = []
        logger.subscribe(a.append)
        logger.subscribe(b.append)
        logger.info("one")
        logger.unsubscribe(a.append)
        logger.info("two")
        assert [e.message for e in a] == ["one"]
        assert [e.message for e in b] == ["one", "two"]

    def test_unsubscribe_unknown_handler_raises(self, make_logger) -> None:
        """Test removing a handler that was never registered."""
        with pytest.raises(ValueError):
            make_logger().unsubscribe(print)

    def test_observer_error_propagates(self, make_logger, stream) -> None:
        """Test observer exceptions reach the caller after the write."""
        logger = make_logger()

        def broken(event: LogEvent) -> None:
            raise RuntimeError("observer failed")

        logger.subscribe(broken)
        with pytest.raises(RuntimeError):
            logger.info("x")
        assert len(_lines(stream)) == 1

    def test_message_converted_to_str(self, make_logger, stream) -> None:
        """Test non-string messages are stringified."""
        make_logger().info(42)
        assert json.loads(stream.getvalue())["message"] == "42"


class TestConvenienceMethods:
    """Tests for debug/info/warn/error and handle factories."""

    def test_fixed_severities(self, make_logger, stream) -> None:
        """Test each convenience method emits its severity."""
        logger = make_logger()
        logger.debug("d")
        logger.info("i")
        logger.warn("w")
        logger.warning("w2")
        logger.error("e")
        levels = [json.loads(line)["level"] for line in _lines(stream)]
        assert levels == ["DEBUG", "INFO", "WARN", "WARN", "ERROR"]

    def test_error_places_err_under_error_key(self, make_logger, stream) -> None:
        """Test error(message, err) stores the normalized error."""
        make_logger().error("failed", OSError("disk full"))
        parsed = json.loads(stream.getvalue())
        assert parsed["data"] == {"error": {"name": "OSError", "message": "disk full"}}

    def test_error_without_err_has_empty_data(self, make_logger, stream) -> None:
        """Test error(message) emits no error key."""
        make_logger().error("failed")
        assert json.loads(stream.getvalue())["data"] == {}

    def test_error_text_mode_two_lines(self, make_logger, stream) -> None:
        """Test the documented TEXT error example."""
        logger = make_logger(format="TEXT", utc_timestamps=True)
        logger.emit("ERROR", "failed", {"error": {"name": "IOError", "message": "disk full"}})
        assert _lines(stream) == [
            "[2023-11-14T22:13:20.123] ERROR MSG: failed",
            "\tIOError: disk full",
        ]

    def test_with_field_structured_example(self, make_logger, stream, clock) -> None:
        """Test the documented with_field(...).debug(...) JSON line."""
        make_logger().with_field("requestId", "abc").debug("handling")
        assert stream.getvalue() == (
            '{"level":"DEBUG","message":"handling","data":{"requestId":"abc"},'
            f'"timestamp":{clock.now()}}}\n'
        )

    def test_handle_factories_do_not_touch_logger(self, make_logger, stream) -> None:
        """Test with_field/with_error return new handles and leave the logger bare."""
        logger = make_logger()
        handle = logger.with_field("k", "v")
        err_handle = logger.with_error(ValueError("nope"))
        assert isinstance(handle, Log) and isinstance(err_handle, Log)
        assert handle is not err_handle
        assert err_handle.data["error"] == ErrorInfo("ValueError", "nope")
        logger.info("bare")
        assert json.loads(stream.getvalue())["data"] == {}

    def test_with_fields_seeds_many(self, make_logger, stream) -> None:
        """Test with_fields seeds a handle with several fields."""
        make_logger().with_fields({"a": 1, "b": 2}).info("x")
        assert json.loads(stream.getvalue())["data"] == {"a": 1, "b": 2}


class TestFailures:
    """Tests for the error taxonomy at emit()."""

    def test_invalid_severity_rejected_before_write(self, make_logger, stream) -> None:
        """Test unknown severities fail fast."""
        logger = make_logger()
        seen: list[LogEvent] = []
        logger.subscribe(seen.append)
        with pytest.raises(InvalidSeverityError):
            logger.emit("TRACE", "x")
        assert stream.getvalue() == ""
        assert seen == []

    def test_render_error_writes_nothing(self, make_logger, stream) -> None:
        """Test an unserializable value aborts the call without output."""
        logger = make_logger()
        seen: list[LogEvent] = []
        logger.subscribe(seen.append)
        with pytest.raises(RenderError):
            logger.emit("INFO", "x", {"bad": object()})
        assert stream.getvalue() == ""
        assert seen == []

    def test_stream_failure_propagates(self, clock) -> None:
        """Test a failing sink raises to the caller, no retry."""

        class BrokenStream:
            calls = 0

            def write(self, text: str) -> int:
                BrokenStream.calls += 1
                raise OSError("pipe closed")

            def flush(self) -> None:
                pass

        logger = Logger(stream=BrokenStream(), clock=clock, palette=PlainPalette())
        with pytest.raises(OSError):
            logger.info("x")
        assert BrokenStream.calls == 1

    def test_invalid_error_value_rejected(self, make_logger, stream) -> None:
        """Test error values without name/message are rejected."""
        with pytest.raises(ValueError):
            make_logger().error("x", {"message": "no name"})
        assert stream.getvalue() == ""

    def test_unknown_format_rejected_at_construction(self, make_logger) -> None:
        """Test format is validated when the logger is built."""
        with pytest.raises(ConfigurationError):
            make_logger(format="XML")


class TestConfiguration:
    """Tests for construction and collaborators."""

    def test_defaults(self, stream) -> None:
        """Test default options: DEBUG minimum, JSON, no interception."""
        logger = configure(stream=stream)
        assert logger.options.min_level is Severity.DEBUG
        assert logger.options.format is OutputFormat.JSON
        assert logger.intercepting is False

    def test_options_mapping_and_overrides(self, stream) -> None:
        """Test keyword overrides win over the options mapping."""
        logger = configure({"min_level": "WARN", "format": "TEXT"}, stream=stream, min_level="ERROR")
        assert logger.options.min_level is Severity.ERROR
        assert logger.options.format is OutputFormat.TEXT

    def test_colors_flag_selects_palette(self, stream) -> None:
        """Test colors=False renders plain text."""
        clock = ManualClock(current_ms=0)
        plain = Logger(stream=stream, clock=clock, format="TEXT", colors=False)
        plain.info("x")
        assert "\x1b[" not in stream.getvalue()
        colored_stream = io.StringIO()
        Logger(stream=colored_stream, clock=clock, format="TEXT", palette=ColoramaPalette()).info("x")
        assert "\x1b[" in colored_stream.getvalue()

    def test_identical_options_identical_output(self, clock) -> None:
        """Test two loggers with the same options and stubs render the same lines."""
        outputs = []
        for _ in range(2):
            out = io.StringIO()
            logger = Logger(
                {"format": "TEXT", "utc_timestamps": True},
                stream=out,
                clock=clock,
                palette=PlainPalette(),
            )
            logger.with_field("a", 1).debug("same")
            outputs.append(out.getvalue())
        assert outputs[0] == outputs[1]

    def test_close_is_idempotent(self, make_logger) -> None:
        """Test close() can be called repeatedly and as a context manager."""
        with make_logger() as logger:
            logger.info("x")
        logger.close()


class TestConcurrency:
    """Tests for the write+notify critical section."""

    def test_lines_never_interleave(self, make_logger, stream) -> None:
        """Test concurrent emits produce whole lines, notified in write order."""
        logger = make_logger()
        notified: list[str] = []
        logger.subscribe(lambda event: notified.append(event.message))

        def worker(n: int) -> None:
            for i in range(50):
                logger.with_field("worker", n).info(f"{n}-{i}")

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        lines = _lines(stream)
        assert len(lines) == 400
        written = [json.loads(line)["message"] for line in lines]
        assert written == notified
