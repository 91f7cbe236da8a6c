"""
Turns a LogEvent into the single string written to the output stream.

JSON: one compact object per line, keys level, message, data, timestamp
(in that order). Downstream consumers parse these lines, so the shape is
a contract.

TEXT: colored header line, plus an indented error line when the event
carries an error, plus one indented key/value line per context field for
DEBUG events.
"""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import datetime, tzinfo
from typing import Any, Optional

import orjson

from linelog.adapters.palette import PlainPalette
from linelog.errors.errors import RenderError
from linelog.ports.palette import Palette
from linelog.types.types import ErrorInfo, LogEvent, Millis, OutputFormat, Severity

_PLAIN = PlainPalette()


def format_timestamp(ts_ms: Millis, tz: Optional[tzinfo] = None) -> str:
    """
    YYYY-MM-DDTHH:mm:ss.SSS. tz=None renders in local time.
    """
    seconds, millis = divmod(ts_ms, 1000)
    dt = datetime.fromtimestamp(seconds, tz=tz)
    return f"{dt:%Y-%m-%dT%H:%M:%S}.{millis:03d}"


# --- JSON ---


def _json_default(obj: Any) -> Any:
    if isinstance(obj, ErrorInfo):
        return obj.to_dict()
    if isinstance(obj, BaseException):
        return ErrorInfo.from_exception(obj).to_dict()
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    raise TypeError(f"Type is not JSON serializable: {type(obj).__name__}")


def render_json(event: LogEvent) -> str:
    try:
        payload = orjson.dumps(
            event.to_dict(),
            default=_json_default,
            option=orjson.OPT_PASSTHROUGH_DATACLASS,
        )
    except orjson.JSONEncodeError as exc:
        raise RenderError(
            f"event data is not serializable: {exc}",
            level=event.level.value,
            component="render.json",
        ) from exc
    return payload.decode("utf-8")


# --- TEXT ---


def render_text(event: LogEvent, palette: Palette, tz: Optional[tzinfo] = None) -> str:
    ts = palette.style("timestamp")(format_timestamp(event.timestamp, tz))
    level_style = palette.style(event.level.value)
    ret = (
        f"[{ts}] {level_style(event.level.value)} {level_style('MSG:')} "
        f"{level_style(event.message)}"
    )

    err = event.error
    if err is not None:
        ret = f"{ret}\n\t{palette.style('error')(f'{err.name}: {err.message}')}"

    if event.level is Severity.DEBUG and event.data:
        key_style = palette.style("key")
        lines = "".join(f"\n\t{key_style(f'{k}:')} {v}" for k, v in event.data.items())
        ret = f"{ret}{lines}"
    return ret


def render(
    event: LogEvent,
    fmt: OutputFormat | str,
    palette: Optional[Palette] = None,
    tz: Optional[tzinfo] = None,
) -> str:
    """
    Render event in the given format. Accepts the same spellings as
    LoggerOptions.format; unknown formats fall back to str(event).
    """
    try:
        fmt = OutputFormat.parse(fmt)
    except ValueError:
        return str(event)
    if fmt is OutputFormat.JSON:
        return render_json(event)
    return render_text(event, palette or _PLAIN, tz)
