"""linelog CLI entrypoint.

Subcommands:
    emit  - emit a single event
    pipe  - read stdin line by line, emit each non-empty line as an event

Options resolve as defaults < --config file < LINELOG_* env < flags.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import IO, Any, Mapping, Optional

from linelog.config.config_loader import load_options_file, options_from_env, resolve_options
from linelog.core.logger import Logger
from linelog.core.severity import parse_severity
from linelog.errors.errors import LineLogError
from linelog.ports.clock import Clock
from linelog.types.types import ErrorInfo, Severity

EXIT_OK = 0
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    """
    Return the top-level CLI argument parser.
    """
    p = argparse.ArgumentParser(prog="linelog")
    sub = p.add_subparsers(dest="command", required=True)

    def add_common(sp: argparse.ArgumentParser) -> None:
        """Add formatting arguments shared across all subcommands."""
        sp.add_argument("--level", default="INFO", help="Severity of emitted events")
        sp.add_argument("--format", dest="fmt", default=None, help="JSON, STRUCTURED or TEXT")
        sp.add_argument("--min-level", default=None, help="Drop events below this severity")
        sp.add_argument("--utc", action="store_true", help="TEXT timestamps in UTC")
        sp.add_argument("--no-color", action="store_true", help="Disable ANSI colors")
        sp.add_argument("--config", type=Path, required=False, help="TOML options file")

    emit = sub.add_parser("emit", help="Emit a single event")
    add_common(emit)
    emit.add_argument("message", help="Event message")
    emit.add_argument(
        "--field",
        dest="fields",
        action="append",  # builds a list with each key=value
        default=[],
        metavar="KEY=VALUE",
        help="Attach a context field (may be repeated)",
    )
    emit.add_argument("--error", default=None, metavar="NAME:MESSAGE", help="Attach an error")

    pipe = sub.add_parser("pipe", help="Emit every stdin line as an event")
    add_common(pipe)
    return p


def _parse_fields(pairs: list[str]) -> dict[str, str]:
    fields: dict[str, str] = {}
    for item in pairs:
        key, sep, value = item.partition("=")
        if sep == "" or not key:
            raise ValueError(f"--field requires KEY=VALUE format (got {item!r})")
        fields[key] = value
    return fields


def _parse_error(raw: str) -> ErrorInfo:
    name, sep, message = raw.partition(":")
    if sep == "" or not name.strip():
        raise ValueError(f"--error requires NAME:MESSAGE format (got {raw!r})")
    return ErrorInfo(name=name.strip(), message=message.strip())


def _cli_overrides(args: argparse.Namespace) -> Mapping[str, Any]:
    overrides: dict[str, Any] = {}
    if args.fmt is not None:
        overrides["format"] = args.fmt
    if args.min_level is not None:
        overrides["min_level"] = args.min_level
    if args.utc:
        overrides["utc_timestamps"] = True
    if args.no_color:
        overrides["colors"] = False
    return overrides


def build_logger(
    args: argparse.Namespace,
    stream: IO[str],
    clock: Optional[Clock] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Logger:
    file_cfg = load_options_file(args.config) if args.config else None
    options = resolve_options(
        file_cfg=file_cfg,
        env_cfg=options_from_env(environ),
        overrides=_cli_overrides(args),
    )
    return Logger(options, stream=stream, clock=clock)


def run_emit(logger: Logger, level: Severity, args: argparse.Namespace) -> int:
    data: dict[str, Any] = _parse_fields(args.fields)
    if args.error:
        data["error"] = _parse_error(args.error)
    logger.emit(level, args.message, data)
    return EXIT_OK


def run_pipe(logger: Logger, level: Severity, stdin: IO[str]) -> int:
    for raw in stdin:
        line = raw.rstrip("\n")
        if line:
            logger.emit(level, line)
    return EXIT_OK


def main(
    argv: list[str] | None = None,
    *,
    stdin: Optional[IO[str]] = None,
    stdout: Optional[IO[str]] = None,
    clock: Optional[Clock] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """CLI entrypoint wrapper compatible with setuptools scripts."""
    parser = build_parser()
    args = parser.parse_args(argv)
    out = stdout if stdout is not None else sys.stdout

    try:
        level = parse_severity(args.level)
        with build_logger(args, out, clock, environ) as logger:
            if args.command == "emit":
                return run_emit(logger, level, args)
            return run_pipe(logger, level, stdin if stdin is not None else sys.stdin)
    except (LineLogError, ValueError, FileNotFoundError) as exc:
        print(f"linelog: {exc}", file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
