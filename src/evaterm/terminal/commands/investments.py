from __future__ import annotations

import math
from typing import List, Optional, Sequence

from evaterm.terminal.commands.layout import format_date_time, parse_timestamp
from evaterm.terminal.schemas import InvestmentRecord
from evaterm.terminal.types import ResponseLine, Segment, line


def format_perf(value: Optional[float]) -> Optional[str]:
    """Signed percentage; whole numbers once the magnitude reaches 10."""

    if value is None or math.isnan(value):
        return None
    sign = "+" if value >= 0 else ""
    magnitude = "{0:.0f}".format(value) if abs(value) >= 10 else "{0:.2f}".format(value)
    return "{0}{1}%".format(sign, magnitude)


def perf_kind(value: Optional[float]) -> str:
    if format_perf(value) is None:
        return "muted"
    if value > 0:
        return "gain"
    if value < 0:
        return "loss"
    return "flat"


def latest_fetch(entries: Sequence[InvestmentRecord]) -> Optional[str]:
    latest: Optional[str] = None
    for entry in entries:
        fetched = parse_timestamp(entry.perf_last_fetched)
        if fetched is None:
            continue
        current = parse_timestamp(latest)
        if current is None or fetched > current:
            latest = entry.perf_last_fetched
    return latest


def build_investments_lines(entries: Sequence[InvestmentRecord]) -> List[ResponseLine]:
    last_sync = format_date_time(latest_fetch(entries)) or "Awaiting data"
    lines = [
        line("RETRIEVING INVESTMENTS MODULE:", "system"),
        line("Last sync: {0}".format(last_sync), "muted"),
    ]

    for entry in entries:
        label = entry.label or entry.ticker
        ticker = entry.ticker.upper()
        lines.append(
            line(
                "{0}: {1}".format(ticker, label),
                "output",
                segments=[
                    Segment(text="{0}:".format(ticker), kind="accent"),
                    Segment(text=" {0}".format(label), kind="output"),
                ],
            )
        )
        perf_text = format_perf(entry.perf6m_percent) or "Pending data"
        lines.append(
            line(
                "6M: {0}".format(perf_text),
                "output",
                segments=[
                    Segment(text="6M: ", kind="output"),
                    Segment(text=perf_text, kind=perf_kind(entry.perf6m_percent)),
                ],
            )
        )

    return lines


def build_investments_error_lines(message: str) -> List[ResponseLine]:
    return [
        line("Investments module returned an error.", "error"),
        line(message, "muted"),
    ]
