"""Monospace formatting helpers shared by the module line builders."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional

from evaterm.terminal.constants import LINE_WIDTH

ELLIPSIS = "…"
BULLET = "•"
SECTION_BREAK = "—"

_FRACTION_RE = re.compile(r"([T ]\d{2}:\d{2}:\d{2})\.(\d+)")


def clamp(value: str, length: int) -> str:
    if len(value) > length:
        return value[: length - 1] + ELLIPSIS
    return value


def divider(char: str, width: int = LINE_WIDTH) -> str:
    return "+{0}+".format(char * width)


def box_row(value: str, width: int = LINE_WIDTH) -> str:
    return "| {0} |".format(value.ljust(width))


def _pad_fraction(match: "re.Match[str]") -> str:
    # fromisoformat before 3.11 only takes 3 or 6 fractional digits.
    return "{0}.{1}".format(match.group(1), match.group(2)[:6].ljust(6, "0"))


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(_pad_fraction, text)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_date(value: Optional[str]) -> Optional[str]:
    """``2025-11-15T12:00:00Z`` -> ``Nov 15, 2025``; ``None`` when unparsable."""

    parsed = parse_timestamp(value)
    if parsed is None:
        return None
    return "{0} {1}, {2}".format(parsed.strftime("%b"), parsed.day, parsed.year)


def format_date_time(value: Optional[str]) -> Optional[str]:
    parsed = parse_timestamp(value)
    if parsed is None:
        return None
    return "{0} {1}, {2}".format(parsed.strftime("%b"), parsed.day, parsed.strftime("%I:%M %p"))


def pluralize(count: int, noun: str) -> str:
    return "{0} {1}{2}".format(count, noun, "" if count == 1 else "s")
