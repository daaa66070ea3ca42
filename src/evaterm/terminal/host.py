"""Side-effect surface a session needs from whatever front end hosts it."""

from __future__ import annotations

from typing import Protocol, Sequence

from evaterm.terminal.schemas import ReelItem


class SessionHost(Protocol):
    def open_url(self, url: str) -> None: ...

    def navigate(self, path: str) -> None: ...

    def set_theme(self, theme_id: str) -> None: ...

    def set_reduce_motion(self, enabled: bool) -> None: ...

    def open_onepager(self) -> None: ...

    def copy_to_clipboard(self, text: str) -> None: ...

    def open_reel(self, items: Sequence[ReelItem]) -> None: ...


class NullHost:
    """Host that ignores every side effect (headless runs)."""

    def open_url(self, url: str) -> None:
        return None

    def navigate(self, path: str) -> None:
        return None

    def set_theme(self, theme_id: str) -> None:
        return None

    def set_reduce_motion(self, enabled: bool) -> None:
        return None

    def open_onepager(self) -> None:
        return None

    def copy_to_clipboard(self, text: str) -> None:
        return None

    def open_reel(self, items: Sequence[ReelItem]) -> None:
        return None
