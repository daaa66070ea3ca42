from __future__ import annotations

from typing import List, Optional, Tuple

from evaterm.terminal.commands.layout import BULLET, box_row, divider
from evaterm.terminal.schemas import CurrentlySection, CurrentlySnapshot
from evaterm.terminal.types import ResponseLine, line

FALLBACK_SECTIONS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Playing", ("Armored Core VI",)),
    ("Watching", ("Shin Evangelion",)),
    ("Listening", ("Nujabes live loops",)),
    ("Reading", ("Creative Selection",)),
)
FALLBACK_WARNING = "Currently data unavailable. Rendering fallback copy."


def fallback_body() -> str:
    blocks = []
    for title, items in FALLBACK_SECTIONS:
        rows = ["### {0}".format(title)] + ["- {0}".format(item) for item in items]
        blocks.append("\n".join(rows))
    return "\n\n".join(blocks)


def build_fallback_snapshot(snapshot: Optional[CurrentlySnapshot] = None) -> CurrentlySnapshot:
    """Fallback copy that keeps any warnings and timestamps already reported."""

    warnings = list(snapshot.warnings) if snapshot is not None else []
    warnings.append(FALLBACK_WARNING)
    return CurrentlySnapshot(
        sections=[
            CurrentlySection(title=title, items=list(items)) for title, items in FALLBACK_SECTIONS
        ],
        warnings=warnings,
        updated_at=snapshot.updated_at if snapshot is not None else None,
        raw_body=(snapshot.raw_body if snapshot is not None else None) or fallback_body(),
    )


def build_currently_error_lines(message: str) -> List[ResponseLine]:
    return [
        line("Currently panel cannot be rendered.", "error"),
        line(message, "muted"),
    ]


def build_currently_lines(snapshot: CurrentlySnapshot) -> List[ResponseLine]:
    lines: List[ResponseLine] = []
    for index, section in enumerate(snapshot.sections):
        if index > 0:
            lines.append(line(divider("-"), "system"))
        lines.append(line(box_row(section.title.upper()), "system"))
        for item in section.items:
            lines.append(line(box_row("{0} {1}".format(BULLET, item)), "output"))
    lines.append(line(divider("-"), "system"))
    return lines
