from __future__ import annotations

from typing import List, Optional

from evaterm.terminal.commands.layout import BULLET, SECTION_BREAK, clamp
from evaterm.terminal.constants import LABEL_WIDTH, LINE_WIDTH, VALUE_WIDTH
from evaterm.terminal.schemas import BioBulletItem, BioFieldItem, BioSection, BioSnapshot
from evaterm.terminal.types import ResponseLine, line

HEADER_TITLE = "MAGI ADMIN CREDENTIALS:"


def _section_title(label: str) -> str:
    return "{0}:".format(label.upper())


def _format_field(label: str, value: str) -> str:
    return "{0}: {1}".format(label.upper()[:LABEL_WIDTH], clamp(value, VALUE_WIDTH))


def _format_content(value: str) -> str:
    return clamp(value, LINE_WIDTH)


def _format_bullet(value: str) -> str:
    return _format_content("{0} {1}".format(BULLET, value))


def _section_block(section: BioSection) -> List[ResponseLine]:
    lines = [line(_section_title(section.title), "system")]
    if not section.items:
        lines.append(
            line(_format_content("No entries found. Add content in the admin console."), "muted")
        )
        return lines
    for item in section.items:
        if isinstance(item, BioFieldItem):
            lines.append(line(_format_field(item.label, item.value), "output"))
        else:
            lines.append(line(_format_bullet(item.text), "muted"))
    return lines


def build_bio_lines(
    snapshot: Optional[BioSnapshot],
    error_message: Optional[str] = None,
) -> List[ResponseLine]:
    """Render the bio dossier.

    The first section is treated as the stat sheet: its fields print without
    a heading and any bullets follow under a section break.
    """

    lines = [line(HEADER_TITLE, "system")]
    if error_message:
        lines.append(line(_format_content(error_message), "error"))

    if snapshot is None or not snapshot.sections:
        lines.append(
            line(
                _format_content(
                    "Bio content has not been configured. Add entries via the admin console."
                ),
                "muted",
            )
        )
        return lines

    if snapshot.warnings:
        for warning in snapshot.warnings:
            lines.append(line(_format_content("Warning: {0}".format(warning)), "muted"))
        lines.append(line(SECTION_BREAK, "system"))

    for index, section in enumerate(snapshot.sections):
        if index == 0 and section.items:
            stats = [item for item in section.items if isinstance(item, BioFieldItem)]
            if stats:
                for item in stats:
                    lines.append(line(_format_field(item.label, item.value), "output"))
                bullets = [item for item in section.items if isinstance(item, BioBulletItem)]
                if bullets:
                    lines.append(line(SECTION_BREAK, "system"))
                    lines.append(line(_section_title(section.title), "system"))
                    for item in bullets:
                        lines.append(line(_format_bullet(item.text), "muted"))
                continue
        lines.extend(_section_block(section))

    return lines
