from __future__ import annotations

from typing import List

from evaterm.terminal.commands.layout import format_date
from evaterm.terminal.schemas import CvMetadata
from evaterm.terminal.types import ResponseLine, line

DOCUMENT_HEADING = "DOCUMENT REQUESTED"


def _format_field(label: str, value: str) -> str:
    return "{0}: {1}".format(label.upper(), value)


def build_cv_initializing_lines() -> List[ResponseLine]:
    return [
        line("Routing request to MAGI archive...", "system"),
        line("Stand by while the dossier channel establishes a secure link.", "muted"),
    ]


def build_cv_success_lines(meta: CvMetadata) -> List[ResponseLine]:
    # Rendered instantly: the download opens as soon as these are queued.
    return [
        line(DOCUMENT_HEADING, "system", instant=True),
        line(_format_field("File", meta.file_name), "output", instant=True),
        line(
            _format_field("Updated", format_date(meta.last_updated) or "Pending"),
            "muted",
            instant=True,
        ),
    ]


def build_cv_error_lines(message: str) -> List[ResponseLine]:
    return [
        line("CV archive is offline - unable to retrieve download coordinates.", "error"),
        line(message, "muted"),
        line("Check Supabase storage or configure CV metadata, then retry option 2.", "muted"),
    ]
