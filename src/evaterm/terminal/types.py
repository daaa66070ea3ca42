"""Typed models shared by the typewriter, dispatcher and session."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Tuple, Union

LINE_KINDS: Tuple[str, ...] = (
    "system",
    "user",
    "output",
    "error",
    "muted",
    "accent",
    "gain",
    "loss",
    "flat",
)


@dataclass(frozen=True)
class Segment:
    """Sub-run of a line with its own kind and optional link target."""

    text: str
    kind: Optional[str] = None
    href: Optional[str] = None


@dataclass(frozen=True)
class Line:
    """A completed unit of terminal output.

    When ``segments`` is non-empty it is authoritative for rendering and
    ``text`` holds the concatenated plain-text fallback.
    """

    id: str
    kind: str
    text: str
    segments: Optional[Tuple[Segment, ...]] = None


@dataclass(frozen=True)
class QueueItem:
    id: str
    kind: str
    text: str
    segments: Optional[Tuple[Segment, ...]] = None
    speed: Optional[float] = None
    instant: bool = False

    def to_line(self) -> Line:
        return Line(id=self.id, kind=self.kind, text=self.text, segments=self.segments)


@dataclass
class TypingState:
    id: str
    kind: str
    full_text: str
    visible_text: str
    speed: float
    segments: Optional[Tuple[Segment, ...]] = None

    @property
    def complete(self) -> bool:
        return len(self.visible_text) >= len(self.full_text)

    def to_line(self) -> Line:
        return Line(id=self.id, kind=self.kind, text=self.full_text, segments=self.segments)

    def copy(self) -> "TypingState":
        return replace(self)


@dataclass
class ResponseLine:
    """Line descriptor produced by a command handler, before sanitizing."""

    text: str
    kind: Optional[str] = None
    instant: Optional[bool] = None
    segments: Optional[List[Segment]] = None


@dataclass
class CommandResponse:
    lines: List[ResponseLine] = field(default_factory=list)
    side_effect: Optional[Callable[[], None]] = None


Handler = Callable[[], Union[Awaitable[None], None]]
CommandRegistry = Dict[int, Handler]


class RegistryStatus(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass
class HudItem:
    label: str
    value: str


def line(text: str, kind: Optional[str] = None, **extra) -> ResponseLine:
    """Shorthand used by line builders."""

    return ResponseLine(text=text, kind=kind, **extra)
