from __future__ import annotations

from typing import List, Sequence

from evaterm.terminal.commands.layout import format_date
from evaterm.terminal.schemas import WritingSummary
from evaterm.terminal.types import ResponseLine, Segment, line

FALLBACK_NOTE = "Writing archive is using fallback data until Supabase is back online."


def article_url(site_url: str, slug: str) -> str:
    return "{0}/articles/{1}".format(site_url.rstrip("/"), slug)


def build_writing_list_lines(
    entries: Sequence[WritingSummary],
    site_url: str,
) -> List[ResponseLine]:
    lines = [line("RETRIEVING ARTICLE DOSSIER...", "system")]
    if not entries:
        lines.append(line("No published articles yet. Check back soon!", "muted"))
        return lines

    for index, entry in enumerate(entries):
        rank = "{0:02d}".format(index + 1)
        lines.append(
            line(
                "{0}. {1}".format(rank, entry.title),
                "output",
                segments=[
                    Segment(text="{0}. ".format(rank), kind="accent"),
                    Segment(text=entry.title, kind="output", href=article_url(site_url, entry.slug)),
                ],
            )
        )
        subtitle = (entry.subtitle or "").strip()
        if subtitle:
            lines.append(line(subtitle, "muted"))
        lines.append(
            line("Updated: {0}".format(format_date(entry.published_at) or "Unknown"), "accent")
        )

    return lines
