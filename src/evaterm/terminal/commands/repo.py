from __future__ import annotations

from typing import List

from evaterm.terminal.constants import REPO_URL
from evaterm.terminal.types import ResponseLine, Segment, line


def build_repo_lines(url: str = REPO_URL) -> List[ResponseLine]:
    return [
        line("REPOSITORY LINK :: EVA-TERMINAL", "system"),
        line(url, "accent", segments=[Segment(text=url, kind="accent", href=url)]),
        line("Click above to open in a new tab.", "muted"),
    ]
