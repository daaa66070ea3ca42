from __future__ import annotations

from typing import Dict, List, Sequence

from evaterm.terminal.schemas import LinkRecord
from evaterm.terminal.types import ResponseLine, Segment, line

CATEGORY_ORDER = ("social", "site", "other")
FALLBACK_NOTE = "Links are using fallback data while Supabase is offline."


def build_links_initializing_lines() -> List[ResponseLine]:
    return [line("RETRIEVING LINK MATRIX...", "system")]


def build_links_error_lines(message: str) -> List[ResponseLine]:
    return [
        line("Link registry unavailable.", "error"),
        line(message, "muted"),
    ]


def group_by_category(links: Sequence[LinkRecord]) -> Dict[str, List[LinkRecord]]:
    grouped: Dict[str, List[LinkRecord]] = {category: [] for category in CATEGORY_ORDER}
    for link in links:
        grouped.setdefault(link.category, []).append(link)
    return grouped


def build_links_success_lines(links: Sequence[LinkRecord]) -> List[ResponseLine]:
    if not links:
        return [line("No outbound links are configured yet. Check back soon!", "muted")]

    lines: List[ResponseLine] = []
    for entries in group_by_category(links).values():
        for entry in entries:
            lines.append(
                line(
                    "{0}: {1}".format(entry.label, entry.url),
                    "output",
                    segments=[
                        Segment(text="{0}: ".format(entry.label), kind="output"),
                        Segment(text=entry.url, kind="accent", href=entry.url),
                    ],
                )
            )
    return lines
