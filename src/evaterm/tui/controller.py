"""Controller layer for the EVA terminal Textual UI."""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Tuple

from evaterm.config import Settings
from evaterm.kernel.runtime import Runtime
from evaterm.terminal.registry import Fetch
from evaterm.terminal.schemas import ReelItem
from evaterm.terminal.session import TerminalSession


class TuiHost:
    """Session host that forwards side effects to the running Textual app.

    Calls made before an app is bound are recorded and replayed on bind.
    """

    def __init__(self, site_url: str) -> None:
        self._site_url = site_url.rstrip("/")
        self._app: Any = None
        self._pending: List[Tuple[str, Tuple[Any, ...]]] = []

    @property
    def site_url(self) -> str:
        return self._site_url

    def bind(self, app: Any) -> None:
        self._app = app
        pending, self._pending = self._pending, []
        for name, args in pending:
            getattr(self, name)(*args)

    def unbind(self) -> None:
        self._app = None

    def resolve_url(self, path: str) -> str:
        if path.startswith("/"):
            return self._site_url + path
        return path

    def open_url(self, url: str) -> None:
        if self._defer("open_url", url):
            return
        self._app.open_url(url)

    def navigate(self, path: str) -> None:
        self.open_url(self.resolve_url(path))

    def set_theme(self, theme_id: str) -> None:
        if self._defer("set_theme", theme_id):
            return
        self._app.apply_theme(theme_id)

    def set_reduce_motion(self, enabled: bool) -> None:
        if self._defer("set_reduce_motion", enabled):
            return
        self._app.apply_reduce_motion(enabled)

    def open_onepager(self) -> None:
        if self._defer("open_onepager"):
            return
        self._app.show_onepager(self._site_url)

    def copy_to_clipboard(self, text: str) -> None:
        if self._defer("copy_to_clipboard", text):
            return
        self._app.copy_to_clipboard(text)
        self._app.notify("Copied to clipboard.", timeout=3)

    def open_reel(self, items: Sequence[ReelItem]) -> None:
        if self._defer("open_reel", list(items)):
            return
        self._app.show_reel(list(items))

    def _defer(self, name: str, *args: Any) -> bool:
        if self._app is not None:
            return False
        self._pending.append((name, args))
        return True


class TerminalController:
    """Owns runtime/session lifecycle for one TUI process."""

    def __init__(self, settings: Settings, fetch: Optional[Fetch] = None) -> None:
        self._settings = settings
        self._host = TuiHost(settings.api_base_url)
        self._runtime = Runtime(settings, host=self._host, fetch=fetch)
        self._closed = False

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def host(self) -> TuiHost:
        return self._host

    @property
    def runtime(self) -> Runtime:
        return self._runtime

    @property
    def session(self) -> TerminalSession:
        return self._runtime.session

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._host.unbind()
        await self._runtime.aclose()


def start_tui(settings: Settings) -> int:
    """Start the Textual terminal. Raises RuntimeError when Textual is unavailable."""

    try:
        from evaterm.tui.app import (
            EvaTerminalApp,
            textual_available,
            textual_import_error,
        )
    except Exception as exc:  # pragma: no cover - import path is validated in integration tests
        raise RuntimeError(
            "Textual is required for interactive mode: `python3 -m pip install textual`."
        ) from exc

    if not textual_available():
        raise RuntimeError(
            "Textual failed to initialize: {0}. Run `python3 -m pip install textual`.".format(
                textual_import_error()
            )
        )

    controller = TerminalController(settings)
    app = EvaTerminalApp(controller=controller)
    app.run()
    return 0
