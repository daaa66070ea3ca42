from __future__ import annotations

from typing import List, Sequence, Tuple

from evaterm.terminal.commands.layout import box_row, divider
from evaterm.terminal.constants import REEL_ANCHOR
from evaterm.terminal.schemas import ReelItem
from evaterm.terminal.types import ResponseLine, Segment, line

FALLBACK_ITEMS: Tuple[Tuple[str, str], ...] = (
    (
        "https://images.unsplash.com/photo-1500530855697-b586d89ba3ee",
        "Interface explorations - EVA chroma set",
    ),
    (
        "https://images.unsplash.com/photo-1477959858617-67f85cf4f1df",
        "Motion studies for Reel transitions",
    ),
)
VIEWER_PROMPT = "Click to open Reel Viewer. Use arrow keys or click thumbnails."
MAX_LISTED = 6


def fallback_items() -> List[ReelItem]:
    return [
        ReelItem(id="fallback-{0:02d}".format(index + 1), url=url, caption=caption, order=index)
        for index, (url, caption) in enumerate(FALLBACK_ITEMS)
    ]


def build_reel_prompt_lines() -> List[ResponseLine]:
    return [
        line("RETRIEVING VISUAL MODULE...", "system"),
        line(
            VIEWER_PROMPT,
            "muted",
            segments=[Segment(text=VIEWER_PROMPT, kind="muted", href=REEL_ANCHOR)],
        ),
    ]


def build_reel_lines(items: Sequence[ReelItem]) -> List[ResponseLine]:
    """Boxed caption listing used by text-only reel viewers."""

    lines = [
        line(divider("="), "system"),
        line(box_row("VISUAL REEL // EVA TERMINAL"), "system"),
        line(divider("-"), "system"),
    ]
    if not items:
        lines.append(line(box_row("No captures yet. Upload images via /admin."), "muted"))
        lines.append(line(divider("="), "system"))
        return lines

    ordered = sorted(items, key=lambda item: item.order)
    for index, item in enumerate(ordered[:MAX_LISTED]):
        label = "{0:02d}. {1}".format(index + 1, item.caption or item.url)
        lines.append(line(box_row(label), "output", segments=[Segment(text=label, href=item.url)]))
    lines.append(line(divider("-"), "system"))
    lines.append(line(box_row("Reel viewer opened. Use arrow keys or click thumbnails."), "muted"))
    lines.append(line(divider("="), "system"))
    return lines


def build_reel_error_lines(message: str) -> List[ResponseLine]:
    return [
        line("Reel module offline.", "error"),
        line(message, "muted"),
    ]
