"""Textual application for the interactive EVA terminal."""

from __future__ import annotations

import time
from typing import List, Optional

from rich.style import Style
from rich.text import Text

from evaterm.config import THEME_IDS
from evaterm.terminal.constants import theme_label
from evaterm.terminal.dispatcher import known_commands
from evaterm.terminal.schemas import ReelItem
from evaterm.terminal.types import HudItem
from evaterm.tui.controller import TerminalController
from evaterm.tui.widgets import CommandInput, OnepagerScreen, ReelScreen, StatusBar
from evaterm.ui.render import line_to_text, typing_to_text

try:  # pragma: no cover - runtime dependency
    from textual.app import App, ComposeResult
    from textual.binding import Binding
    from textual.containers import Vertical
    from textual.suggester import SuggestFromList
    from textual.widgets import Footer, Input, RichLog, Static

    _HAS_TEXTUAL = True
    _TEXTUAL_IMPORT_ERROR: Optional[Exception] = None
except Exception as exc:  # pragma: no cover - when textual is missing
    _HAS_TEXTUAL = False
    _TEXTUAL_IMPORT_ERROR = exc


def textual_available() -> bool:
    return _HAS_TEXTUAL


def textual_import_error() -> Optional[Exception]:
    return _TEXTUAL_IMPORT_ERROR


# One frame at roughly 60 fps; the typewriter catches up on late frames.
TICK_INTERVAL_SEC = 1 / 60

_DEFAULT_INPUT_HINT = (
    "Enter: run  |  Up/Down: history  |  Ctrl+S: skip  |  Ctrl+F: fast-forward  "
    "|  Ctrl+L: clear  |  Ctrl+D: exit"
)


def theme_class(theme_id: str) -> str:
    return "theme-{0}".format(theme_id)


def click_link_style(href: str) -> Style:
    return Style(underline=True, meta={"@click": "app.open_link({0!r})".format(href)})


if _HAS_TEXTUAL:

    class EvaTerminalApp(App[None]):
        """NERV-styled command terminal with a typewriter output stream."""

        CSS = """
        Screen {
            layout: vertical;
            background: #0b0b0b;
            color: #f1f1f1;
        }

        #status {
            height: 1;
            padding: 0 1;
            background: #1d1d1d;
            color: #dddddd;
        }

        #chat-log {
            height: 1fr;
            border: round #ff9f1c;
            padding: 0 1;
            scrollbar-size: 1 1;
        }

        #typing-line {
            height: auto;
            padding: 0 2;
        }

        #command-input {
            border: round #3a3a3a;
            margin: 1 0 0 0;
        }

        #input-hint {
            height: auto;
            color: #8d8d8d;
            padding: 0 1;
        }

        #reel-body, #onepager-body {
            width: 72;
            max-width: 90%;
            height: auto;
            max-height: 80%;
            border: round #4a4a4a;
            background: #171717;
            padding: 1 2;
        }

        App.theme-eva01 #chat-log {
            border: round #9b5de5;
        }

        App.theme-eva02 #chat-log {
            border: round #e63946;
        }

        App.theme-eva00 #chat-log {
            border: round #4ea8de;
        }
        """

        BINDINGS = [
            Binding("ctrl+s", "skip_typing", "Skip", priority=True),
            Binding("ctrl+f", "fast_forward", "Fast-forward", priority=True),
            Binding("ctrl+l", "clear_output", "Clear", priority=True),
            Binding("ctrl+d", "request_exit", "Exit", priority=True),
        ]

        def __init__(self, controller: TerminalController) -> None:
            super().__init__()
            self._controller = controller
            self._session = controller.session
            self._rendered_ids: List[str] = []
            self._dirty = True
            self._last_tick = time.monotonic()
            self._last_hud: List[HudItem] = []
            self._unsubscribe = self._session.typewriter.subscribe(self._mark_dirty)

        def compose(self) -> ComposeResult:
            yield Vertical(
                StatusBar(id="status"),
                RichLog(id="chat-log", highlight=False, markup=False, wrap=True),
                Static("", id="typing-line"),
                CommandInput(
                    placeholder="Type /start for the menu",
                    suggester=SuggestFromList(known_commands(), case_sensitive=False),
                    id="command-input",
                ),
                Static(_DEFAULT_INPUT_HINT, id="input-hint"),
                Footer(),
            )

        async def on_mount(self) -> None:
            self.title = "EVA Terminal"
            self.sub_title = self._controller.settings.api_base_url
            self.apply_theme(self._session.theme)
            self._controller.host.bind(self)
            await self._session.start()
            self._last_tick = time.monotonic()
            self.set_interval(TICK_INTERVAL_SEC, self._tick)
            self._refresh_view()
            self.query_one("#command-input", CommandInput).focus()

        async def on_unmount(self) -> None:
            self._unsubscribe()
            await self._controller.aclose()

        def on_input_submitted(self, message: Input.Submitted) -> None:
            message.stop()
            value = message.value
            message.input.value = ""
            self._session.submit(value)
            self._refresh_view()

        def on_input_changed(self, message: Input.Changed) -> None:
            self._session.input = message.value

        def on_command_input_history_requested(
            self, message: CommandInput.HistoryRequested
        ) -> None:
            message.stop()
            if message.direction < 0:
                value = self._session.history_up()
                if value is None:
                    return
            else:
                value = self._session.history_down()
            widget = self.query_one("#command-input", CommandInput)
            widget.value = value
            widget.cursor_position = len(value)

        def action_skip_typing(self) -> None:
            self._session.skip_typing()
            self._session.set_last_interaction("Skipped typing")
            self._refresh_view()

        def action_fast_forward(self) -> None:
            self._session.fast_forward()
            self._session.set_last_interaction("Fast-forward typing")
            self._refresh_view()

        def action_clear_output(self) -> None:
            self._session.clear_all()
            self._session.set_last_interaction("Output cleared")
            self._refresh_view()

        def action_request_exit(self) -> None:
            self.exit()

        def action_open_link(self, href: str) -> None:
            if not self._session.activate_link(href):
                self.notify("Link unavailable: {0}".format(href), severity="warning", timeout=3)

        def apply_theme(self, theme_id: str) -> None:
            for known in THEME_IDS:
                self.remove_class(theme_class(known))
            self.add_class(theme_class(theme_id))
            self.sub_title = "{0}  |  {1}".format(
                theme_label(theme_id),
                self._controller.settings.api_base_url,
            )

        def apply_reduce_motion(self, enabled: bool) -> None:
            self.animation_level = "none" if enabled else "full"

        def show_reel(self, items: List[ReelItem]) -> None:
            self.push_screen(ReelScreen(items), self._on_reel_closed)

        def show_onepager(self, site_url: str) -> None:
            def on_closed(open_site: Optional[bool]) -> None:
                if open_site:
                    self.open_url(site_url)

            self.push_screen(OnepagerScreen(site_url), on_closed)

        def _on_reel_closed(self, url: Optional[str]) -> None:
            if url:
                self.open_url(url)

        def _mark_dirty(self) -> None:
            self._dirty = True

        def _tick(self) -> None:
            now = time.monotonic()
            elapsed_ms = (now - self._last_tick) * 1000.0
            self._last_tick = now
            self._session.typewriter.tick(elapsed_ms)
            if self._dirty:
                self._refresh_view()
                return
            hud = self._session.hud()
            if hud != self._last_hud:
                self._set_hud(hud)

        def _refresh_view(self) -> None:
            self._dirty = False
            log = self.query_one("#chat-log", RichLog)
            lines = self._session.lines
            rendered = len(self._rendered_ids)
            prefix = [entry.id for entry in lines[:rendered]]
            if rendered > len(lines) or prefix != self._rendered_ids:
                log.clear()
                self._rendered_ids = []
                rendered = 0
            for entry in lines[rendered:]:
                log.write(line_to_text(entry, link_style=click_link_style), scroll_end=True)
                self._rendered_ids.append(entry.id)

            typing = self._session.typing_line
            self.query_one("#typing-line", Static).update(
                typing_to_text(typing) if typing is not None else Text("")
            )
            self._set_hud(self._session.hud())

        def _set_hud(self, hud: List[HudItem]) -> None:
            self._last_hud = hud
            self.query_one("#status", StatusBar).set_hud(hud)

else:

    class EvaTerminalApp:  # pragma: no cover - instantiated only when textual import failed
        def __init__(self, *args, **kwargs) -> None:
            raise RuntimeError("Textual failed to initialize: {0}".format(_TEXTUAL_IMPORT_ERROR))
