"""Palette adapters.

ColoramaPalette wraps text in ANSI color codes from colorama; PlainPalette
leaves text untouched (pipes, files, --no-color).
"""

from __future__ import annotations

from typing import Final, Mapping

from colorama import Fore, Style

from linelog.ports.palette import Style as StyleFn

DEFAULT_COLORS: Final[dict[str, str]] = {
    "DEBUG": Fore.MAGENTA,
    "INFO": Fore.CYAN,
    "WARN": Fore.YELLOW,
    "ERROR": Fore.RED,
    "timestamp": Fore.LIGHTGREEN_EX,
    "key": Fore.BLUE,
    "error": Fore.RED,
}
NEUTRAL_COLOR: Final[str] = Fore.WHITE


def _plain(text: str) -> str:
    return text


class PlainPalette:
    def style(self, role: str) -> StyleFn:
        return _plain


class ColoramaPalette:
    def __init__(self, colors: Mapping[str, str] | None = None) -> None:
        base = dict(DEFAULT_COLORS)
        if colors:
            base.update(colors)
        self._colors = base

    def style(self, role: str) -> StyleFn:
        color = self._colors.get(str(role), NEUTRAL_COLOR)

        def paint(text: str) -> str:
            return f"{color}{text}{Style.RESET_ALL}"

        return paint
