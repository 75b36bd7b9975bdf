"""ANSI styling for pcaplens reports.

Text is styled by role rather than by colour. Capture warnings are graded:
anything that lost records (a truncated tail, a snaplen stop) is an alert,
the rest are notices.
"""
from __future__ import annotations

import os
import sys
from typing import TextIO

RESET = "\x1b[0m"

ROLE_CODES = {
    "title": "1;36",
    "field": "1;34",
    "notice": "33",
    "alert": "1;31",
}

_DATA_LOSS_MARKERS = ("truncated", "stopping")

_override: bool | None = None


def set_color_override(enabled: bool | None) -> None:
    global _override
    _override = enabled


def color_enabled(stream: TextIO | None = None) -> bool:
    if _override is not None:
        return _override
    if "NO_COLOR" in os.environ:
        return False
    stream = sys.stdout if stream is None else stream
    isatty = getattr(stream, "isatty", None)
    try:
        return bool(isatty and isatty())
    except ValueError:  # closed stream
        return False


def style(text: str, role: str) -> str:
    if not color_enabled():
        return text
    return f"\x1b[{ROLE_CODES[role]}m{text}{RESET}"


def header(text: str) -> str:
    return style(text, "title")


def label(text: str) -> str:
    return style(text, "field")


def warning_severity(message: str) -> str:
    lowered = message.lower()
    if any(marker in lowered for marker in _DATA_LOSS_MARKERS):
        return "alert"
    return "notice"


def styled_warning(message: str) -> str:
    return style(f"- {message}", warning_severity(message))
