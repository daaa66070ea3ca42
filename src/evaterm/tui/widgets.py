"""Textual widgets for the EVA terminal UI."""

from __future__ import annotations

from typing import List, Optional, Sequence

from evaterm.terminal.schemas import ReelItem
from evaterm.terminal.types import HudItem
from evaterm.ui.render import render_hud_markup

try:  # pragma: no cover - runtime dependency
    from textual.binding import Binding
    from textual.containers import Vertical, VerticalScroll
    from textual.message import Message
    from textual.screen import ModalScreen
    from textual.widgets import Button, Input, Static

    _HAS_TEXTUAL = True
except Exception:  # pragma: no cover - imported lazily
    _HAS_TEXTUAL = False


def reel_item_label(index: int, item: ReelItem) -> str:
    caption = (item.caption or "").strip() or item.id
    return "{0:02d}  {1}".format(index + 1, caption)


if _HAS_TEXTUAL:

    class StatusBar(Static):
        """Top HUD bar: theme | motion | typewriter | last interaction."""

        def set_hud(self, items: Sequence[HudItem]) -> None:
            self.update(render_hud_markup(items))


    class CommandInput(Input):
        """Single-line command input that routes arrow keys to history."""

        BINDINGS = [
            Binding("up", "history(-1)", "History", show=False),
            Binding("down", "history(1)", "History", show=False),
        ]

        class HistoryRequested(Message):
            def __init__(self, direction: int) -> None:
                super().__init__()
                self.direction = direction

        def action_history(self, direction: int) -> None:
            self.post_message(self.HistoryRequested(direction))


    class ReelScreen(ModalScreen[Optional[str]]):
        """Modal list of reel items; dismisses with the chosen URL."""

        BINDINGS = [("escape", "close", "Close")]

        def __init__(self, items: Sequence[ReelItem]) -> None:
            super().__init__()
            self._items: List[ReelItem] = list(items)

        def compose(self):
            buttons = [
                Button(reel_item_label(index, item), id="reel-{0}".format(index))
                for index, item in enumerate(self._items)
            ]
            yield Vertical(
                Static("[b]REEL VIEWER[/b]  [dim]Enter opens, Esc closes[/dim]"),
                VerticalScroll(*buttons, id="reel-items"),
                id="reel-body",
            )

        def action_close(self) -> None:
            self.dismiss(None)

        def on_button_pressed(self, event: Button.Pressed) -> None:
            button_id = event.button.id or ""
            try:
                index = int(button_id.rsplit("-", 1)[-1])
            except ValueError:
                self.dismiss(None)
                return
            item = self._items[index] if 0 <= index < len(self._items) else None
            self.dismiss(item.url if item is not None else None)


    class OnepagerScreen(ModalScreen[bool]):
        """Condensed one-pager overlay; dismisses True to open the site."""

        BINDINGS = [
            ("escape", "close", "Close"),
            ("o", "open_site", "Open site"),
        ]

        def __init__(self, site_url: str) -> None:
            super().__init__()
            self._site_url = site_url

        def compose(self):
            yield Vertical(
                Static("[b]ONE-PAGER VIEW[/b]"),
                Static("Profile, projects and contact on a single page."),
                Static("[dim]{0}[/dim]".format(self._site_url)),
                Button("Open in browser", variant="primary", id="open-site"),
                id="onepager-body",
            )

        def action_close(self) -> None:
            self.dismiss(False)

        def action_open_site(self) -> None:
            self.dismiss(True)

        def on_button_pressed(self, event: Button.Pressed) -> None:
            self.dismiss(event.button.id == "open-site")

else:

    class StatusBar:  # pragma: no cover - fallback class when Textual is missing
        pass


    class CommandInput:  # pragma: no cover - fallback class when Textual is missing
        pass


    class ReelScreen:  # pragma: no cover - fallback class when Textual is missing
        pass


    class OnepagerScreen:  # pragma: no cover - fallback class when Textual is missing
        pass
