"""Presentation helpers for eva-terminal output."""

from __future__ import annotations

import io
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, TextIO, Tuple

from rich import box
from rich.console import Console
from rich.style import Style
from rich.table import Table
from rich.text import Text

from evaterm.terminal.constants import MENU_OPTIONS
from evaterm.terminal.types import HudItem, Line, TypingState

KIND_STYLES: Dict[str, str] = {
    "system": "bold #ff9f1c",
    "user": "#8ecae6",
    "output": "#f1f1f1",
    "error": "bold #f25f5c",
    "muted": "#8d8d8d",
    "accent": "#c77dff",
    "gain": "#62d26f",
    "loss": "#f25f5c",
    "flat": "#bdbdbd",
}
TYPING_CURSOR = "▌"

Run = Tuple[str, str, Optional[str]]
LinkStyle = Callable[[str], Style]


def kind_style(kind: Optional[str]) -> str:
    return KIND_STYLES.get(kind or "output", KIND_STYLES["output"])


def segment_runs(line: Line) -> List[Run]:
    """Split a line into ``(text, kind, href)`` runs.

    Segments are stripped by the sanitizer, so whitespace that separated
    them in the plain-text fallback is recovered from ``line.text``.
    """

    if not line.segments:
        return [(line.text, line.kind, None)]

    runs: List[Run] = []
    cursor = 0
    for segment in line.segments:
        found = line.text.find(segment.text, cursor)
        if found > cursor and not line.text[cursor:found].strip():
            runs.append((line.text[cursor:found], line.kind, None))
        if found >= 0:
            cursor = found + len(segment.text)
        runs.append((segment.text, segment.kind or line.kind, segment.href))
    return runs


def _default_link_style(href: str) -> Style:
    if href.startswith(("http://", "https://", "mailto:")):
        return Style(underline=True, link=href)
    return Style(underline=True)


def line_to_text(line: Line, link_style: Optional[LinkStyle] = None) -> Text:
    styler = link_style or _default_link_style
    text = Text()
    for chunk, kind, href in segment_runs(line):
        style = Style.parse(kind_style(kind))
        if href:
            style = style + styler(href)
        text.append(chunk, style=style)
    return text


def typing_to_text(typing: TypingState) -> Text:
    text = Text(typing.visible_text, style=kind_style(typing.kind))
    text.append(TYPING_CURSOR, style="blink {0}".format(kind_style(typing.kind)))
    return text


def plain_line(line: Line) -> str:
    return "".join(chunk for chunk, _kind, _href in segment_runs(line))


def render_notice(level: str, message: str) -> str:
    prefix_map = {
        "info": "Info",
        "warn": "Warning",
        "error": "Error",
        "success": "Success",
    }
    return "{0}: {1}".format(prefix_map.get(level, "Info"), message)


def render_hud_markup(items: Iterable[HudItem]) -> str:
    parts = ["[b]{0}[/b] {1}".format(item.label, _escape(item.value)) for item in items]
    return "  [dim]|[/dim]  ".join(parts)


def _escape(value: str) -> str:
    return value.replace("[", "\\[")


def _is_tty(stream: TextIO, forced: Optional[bool]) -> bool:
    if forced is not None:
        return forced
    isatty = getattr(stream, "isatty", None)
    if callable(isatty):
        try:
            return bool(isatty())
        except (OSError, ValueError):
            return False
    return False


def render_transcript(
    lines: Sequence[Line],
    stream: TextIO,
    is_tty: Optional[bool] = None,
) -> None:
    if _is_tty(stream, is_tty):
        console = Console(file=stream, highlight=False, soft_wrap=True)
        for line in lines:
            console.print(line_to_text(line))
        return

    for line in lines:
        stream.write(plain_line(line) + "\n")
    stream.flush()


def render_menu(stream: TextIO, is_tty: Optional[bool] = None) -> None:
    if _is_tty(stream, is_tty):
        table = Table(title="EVA TERMINAL :: COMMAND MATRIX", box=box.SIMPLE_HEAD)
        table.add_column("Command", style=KIND_STYLES["accent"], no_wrap=True)
        table.add_column("Module", style=KIND_STYLES["system"])
        table.add_column("Summary", style=KIND_STYLES["muted"])
        for option in MENU_OPTIONS:
            table.add_row("/{0}".format(option.id), option.label.upper(), option.summary)
        Console(file=stream, highlight=False).print(table)
        return

    for option in MENU_OPTIONS:
        stream.write("/{0}\t{1}\t{2}\n".format(option.id, option.label.upper(), option.summary))
    stream.flush()


def preview_transcript(lines: Sequence[Line]) -> str:
    """Deterministic plain-text snapshot of a transcript."""

    stream = io.StringIO()
    render_transcript(lines, stream=stream, is_tty=False)
    return stream.getvalue()


def render_status_text(report: Dict[str, Any]) -> str:
    logs = report.get("logs")
    if not isinstance(logs, dict):
        logs = {}
    lines = [
        "Status Report",
        "core_version={0}".format(report.get("core_version", "")),
        "project_root={0}".format(report.get("project_root", "")),
        "config_root={0}".format(report.get("config_root", "")),
        "",
        "API",
        "api_base_url={0}".format(report.get("api_base_url", "")),
        "api_timeout_sec={0}".format(report.get("api_timeout_sec", "")),
        "registry_status={0}".format(report.get("registry_status", "")),
        "",
        "Logs",
        "logs_enabled={0}".format(bool(report.get("logs_enabled"))),
        "logs_redaction={0}".format(logs.get("redaction", "")),
        "logs_active_file={0}".format(report.get("logs_active_file", "")),
        "logs_active_size_bytes={0}".format(int(report.get("logs_active_size_bytes") or 0)),
        "logs_write_errors={0}".format(int(report.get("logs_write_errors") or 0)),
    ]
    return "\n".join(lines)
