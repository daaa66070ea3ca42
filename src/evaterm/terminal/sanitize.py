"""Normalization and filtering of handler output before it is queued."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple

from evaterm.terminal.types import Segment

_BORDER_RE = re.compile(r"^\+[=\-\s]+\+$")
_BAR_RULE_RE = re.compile(r"^\|[=\-\s]*\|$")
# Boxed ASCII rows (tables) keep only their inner text.
_BOX_RE = re.compile(r"^\|\s*(.*?)\s*\|$")
_SEPARATOR_RE = re.compile(r"\s+::\s+")
_SPACE_RUN_RE = re.compile(r"\s{2,}")
_FILTERED_PREFIX_RE = re.compile(r"^tip[:\s]", re.IGNORECASE)
_ALLOWED_HREF_RE = re.compile(r"^(https?://|mailto:|#|/)", re.IGNORECASE)


def is_decorative_border(text: str) -> bool:
    stripped = text.strip()
    return bool(_BORDER_RE.match(stripped) or _BAR_RULE_RE.match(stripped))


def is_box_wrapped(text: str) -> bool:
    return bool(_BOX_RE.match(text))


def _unwrap_box(text: str) -> str:
    return _BOX_RE.sub(r"\1", text, count=1)


def is_filtered_prefix(text: str) -> bool:
    return bool(_FILTERED_PREFIX_RE.match(text))


def is_allowed_href(href: object) -> bool:
    return isinstance(href, str) and bool(_ALLOWED_HREF_RE.match(href.strip()))


def sanitize_text(value: object) -> Optional[str]:
    """Return the display form of ``value`` or ``None`` when it must be dropped."""

    if not isinstance(value, str):
        return None
    trimmed_end = value.rstrip()
    if not trimmed_end.strip():
        return None
    if is_decorative_border(trimmed_end):
        return None

    normalized = trimmed_end
    if is_box_wrapped(normalized):
        normalized = _unwrap_box(normalized)
    normalized = _SEPARATOR_RE.sub(": ", normalized)
    normalized = _SPACE_RUN_RE.sub(" ", normalized).strip()
    if not normalized:
        return None
    if is_filtered_prefix(normalized):
        return None
    return normalized


def sanitize_segments(
    segments: Optional[Iterable[Segment]],
    fallback_kind: Optional[str] = None,
) -> Optional[Tuple[Segment, ...]]:
    if not segments:
        return None

    sanitized: List[Segment] = []
    for segment in segments:
        text = sanitize_text(segment.text)
        if not text:
            continue
        href = segment.href.strip() if is_allowed_href(segment.href) else None
        sanitized.append(
            Segment(
                text=text,
                kind=segment.kind or fallback_kind,
                href=href,
            )
        )
    return tuple(sanitized) if sanitized else None
