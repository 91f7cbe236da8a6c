"""
Purpose:
    - Load logger options from a TOML file and from environment variables
    - Resolve layers with precedence: defaults < file < env < explicit overrides
"""

import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Mapping, Optional

from linelog.config.configs import LoggerOptions
from linelog.errors.errors import ConfigurationError

_LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "LINELOG_"
FILE_SECTION = "linelog"


def load_options_file(path: Path | str) -> dict[str, Any]:
    """
    Read a TOML file. Uses the [linelog] table when present (e.g. inside a
    pyproject-style file), otherwise the top-level table.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(
            f"invalid TOML in {path}", field="config", component="config.file"
        ) from exc

    section = data.get(FILE_SECTION, data)
    if not isinstance(section, dict):
        raise ConfigurationError(
            f"[{FILE_SECTION}] must be a table", field=FILE_SECTION, component="config.file"
        )
    return dict(section)


def options_from_env(
    environ: Optional[Mapping[str, str]] = None, prefix: str = ENV_PREFIX
) -> dict[str, Any]:
    """
    LINELOG_MIN_LEVEL=WARN -> {"min_level": "WARN"}. Only known option names
    are picked up; string values are left for pydantic to coerce.
    """
    if not prefix:
        raise ValueError("Environment prefix must be a non-empty string")
    environ = os.environ if environ is None else environ

    out: dict[str, Any] = {}
    for name in LoggerOptions.model_fields:
        env_var = f"{prefix}{name.upper()}"
        if env_var in environ:
            out[name] = environ[env_var]

    if out:
        _LOGGER.debug(
            "options_from_env",
            extra={"event": "options_from_env", "keys": sorted(out)},
        )
    return out


def _apply_layer(resolved: dict[str, Any], layer: Any, source: str) -> dict[str, Any]:
    # options are flat, so a layer replaces whole values; unknown keys are
    # kept for LoggerOptions to reject with the layer's other issues
    if not isinstance(layer, Mapping):
        raise ConfigurationError(
            f"{source} options must be a mapping",
            field=source,
            value=type(layer).__name__,
            component="config.layers",
        )
    out = dict(resolved)
    out.update(layer)
    return out


def resolve_options(
    defaults: Optional[Mapping[str, Any]] = None,
    file_cfg: Optional[Mapping[str, Any]] = None,
    env_cfg: Optional[Mapping[str, Any]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> LoggerOptions:
    """
    Apply layers sequentially, later layers winning, then validate once.
    """
    resolved: dict[str, Any] = LoggerOptions().model_dump()
    layers = (
        ("defaults", defaults),
        ("file", file_cfg),
        ("env", env_cfg),
        ("overrides", overrides),
    )
    for source, layer in layers:
        if layer is not None:
            resolved = _apply_layer(resolved, layer, source)
    return LoggerOptions.build(resolved)
