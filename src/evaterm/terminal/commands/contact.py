from __future__ import annotations

from typing import List, Optional

from evaterm.terminal.commands.layout import box_row, divider
from evaterm.terminal.schemas import ContactInfo
from evaterm.terminal.types import ResponseLine, Segment, line


def _format_field(label: str, value: str) -> str:
    prefix = "{0}:".format(label.upper()).ljust(10)
    return box_row("{0}{1}".format(prefix, value))


def _segments(label: str, value: str, href: Optional[str] = None) -> List[Segment]:
    return [
        Segment(text="{0}:".format(label.upper()), kind="system"),
        Segment(text=" {0}".format(value), kind="output", href=href),
    ]


def build_contact_lines(info: ContactInfo) -> List[ResponseLine]:
    lines = [
        line("RETRIEVING ADMIN CONTACT DETAILS...", "system"),
        line(divider("-"), "system"),
        line(
            _format_field("Email", info.email),
            "output",
            segments=_segments("Email", info.email, "mailto:{0}".format(info.email)),
        ),
    ]
    if info.phone:
        lines.append(
            line(_format_field("Phone", info.phone), "output", segments=_segments("Phone", info.phone))
        )
    if info.discord:
        lines.append(
            line(
                _format_field("Discord", info.discord),
                "output",
                segments=_segments("Discord", info.discord),
            )
        )
    lines.append(line(divider("-"), "system"))
    # Filtered by the sanitizer's tip rule; visible only in raw dumps.
    lines.append(line(box_row("Tip: Command copies email to clipboard automatically."), "muted"))
    lines.append(line(divider("="), "system"))
    return lines


def build_contact_error_lines(message: str) -> List[ResponseLine]:
    return [
        line("Contact module failed to load.", "error"),
        line(message, "muted"),
    ]
