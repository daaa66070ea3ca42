"""Terminal session controller.

A session owns the input buffer, command history, status line and the
numbered-module registry, and feeds every response through the sanitizer
into its :class:`~evaterm.terminal.typewriter.Typewriter`. All work happens on
the caller's asyncio loop; commands run as tasks so input is never blocked.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Awaitable, Callable, Coroutine, Dict, List, Optional, Set, Tuple

from evaterm.config import ProjectConfig
from evaterm.kernel.debug_log import DebugLogWriter
from evaterm.terminal.constants import (
    ADMIN_LOGIN_PATH,
    BOOT_STATUS,
    build_boot_lines,
    build_help_lines,
    build_menu_lines,
    theme_label,
)
from evaterm.terminal.dispatcher import (
    ControlToken,
    match_control,
    normalize_input,
    parse_numeric_command,
    resolve,
)
from evaterm.terminal.host import NullHost, SessionHost
from evaterm.terminal.registry import (
    CommandDependencies,
    Fetch,
    HttpFetcher,
    load_command_registry,
)
from evaterm.terminal.sanitize import is_allowed_href, sanitize_segments, sanitize_text
from evaterm.terminal.types import (
    CommandRegistry,
    CommandResponse,
    HudItem,
    Line,
    QueueItem,
    RegistryStatus,
    TypingState,
    line,
)
from evaterm.terminal.typewriter import Typewriter

RegistryLoader = Callable[[CommandDependencies], Awaitable[CommandRegistry]]

INITIALIZING_TEXT = "Initializing terminal modules..."
PLACEHOLDER_TEXT = "Module placeholder – wiring coming in later milestones."
LOAD_FAILED_LINES = (
    ("Terminal command modules failed to load.", "error"),
    ("Refresh the page or retry /start after a moment.", "muted"),
)


class TerminalSession:
    def __init__(
        self,
        *,
        config: Optional[ProjectConfig] = None,
        host: Optional[SessionHost] = None,
        fetch: Optional[Fetch] = None,
        loader: Optional[RegistryLoader] = None,
        typewriter: Optional[Typewriter] = None,
        debug_log: Optional[DebugLogWriter] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self._config = config or ProjectConfig()
        self.typewriter = typewriter or Typewriter(self._config.typewriter)
        self._host: SessionHost = host or NullHost()
        self._owned_fetcher: Optional[HttpFetcher] = None
        if fetch is None:
            self._owned_fetcher = HttpFetcher(
                base_url=self._config.api_base_url,
                timeout_sec=self._config.api_timeout_sec,
            )
            fetch = self._owned_fetcher
        self._fetch: Fetch = fetch
        self._loader: RegistryLoader = loader or load_command_registry
        self._debug_log = debug_log or DebugLogWriter.disabled()
        self._new_id = id_factory or (lambda: uuid.uuid4().hex)
        self.session_id = uuid.uuid4().hex

        self.input = ""
        self._history: List[str] = []
        self._history_cursor: Optional[int] = None
        self._last_interaction = BOOT_STATUS
        self._streaming_enabled = bool(self._config.streaming)
        self._theme = self._config.theme
        self._reduce_motion = bool(self._config.reduce_motion)
        self._boot_shown = False

        self._registry: Optional[CommandRegistry] = None
        self._registry_status = RegistryStatus.UNINITIALIZED
        self._registry_task: Optional["asyncio.Task[RegistryStatus]"] = None
        self._deferred: List[int] = []
        self._tasks: Set["asyncio.Task[None]"] = set()
        self._anchors: Dict[str, Callable[[], None]] = {}

    # -- read access -------------------------------------------------------

    @property
    def lines(self) -> Tuple[Line, ...]:
        return self.typewriter.lines

    @property
    def typing_line(self) -> Optional[TypingState]:
        return self.typewriter.typing_line

    @property
    def is_busy(self) -> bool:
        return self.typewriter.is_typing

    @property
    def history(self) -> Tuple[str, ...]:
        return tuple(self._history)

    @property
    def history_cursor(self) -> Optional[int]:
        return self._history_cursor

    @property
    def last_interaction(self) -> str:
        return self._last_interaction

    @property
    def streaming_enabled(self) -> bool:
        return self._streaming_enabled

    @property
    def theme(self) -> str:
        return self._theme

    @property
    def reduce_motion(self) -> bool:
        return self._reduce_motion

    @property
    def registry_status(self) -> RegistryStatus:
        return self._registry_status

    @property
    def boot_shown(self) -> bool:
        return self._boot_shown

    def hud(self) -> List[HudItem]:
        return [
            HudItem("Theme", theme_label(self._theme)),
            HudItem("Motion", "Reduced" if self._reduce_motion else "Full"),
            HudItem("Typewriter", "Active" if self.typewriter.is_typing else "Idle"),
            HudItem("Last", self._last_interaction),
        ]

    # -- lifecycle ---------------------------------------------------------

    async def start(self) -> None:
        """Print the boot banner and begin loading the module registry."""

        self.boot()
        self.ensure_registry()

    def boot(self) -> bool:
        if self._boot_shown:
            return False
        self._boot_shown = True
        self.append_response(CommandResponse(lines=build_boot_lines()))
        self.set_last_interaction(BOOT_STATUS)
        return True

    def ensure_registry(self) -> "asyncio.Task[RegistryStatus]":
        if self._registry_task is None:
            self._registry_task = asyncio.get_running_loop().create_task(self.load_registry())
        return self._registry_task

    async def load_registry(self) -> RegistryStatus:
        if self._registry_status is not RegistryStatus.UNINITIALIZED:
            return self._registry_status

        try:
            registry = await self._loader(self._dependencies())
        except Exception as exc:
            self._registry_status = RegistryStatus.FAILED
            self._deferred.clear()
            self._log(
                "registry.load_failed",
                "command registry failed to load",
                level="error",
                component="registry",
                data={"error": str(exc), "error_type": type(exc).__name__},
            )
            self._report_load_failure()
            return self._registry_status

        self._registry = registry
        self._registry_status = RegistryStatus.LOADED
        self._log(
            "registry.loaded",
            "command registry loaded",
            component="registry",
            data={"modules": sorted(registry)},
        )
        deferred, self._deferred = self._deferred, []
        for command_id in deferred:
            await self._run_numeric(command_id)
        return self._registry_status

    async def wait_idle(self) -> None:
        """Wait for the registry load and every in-flight command task."""

        while True:
            pending: List["asyncio.Future[object]"] = [
                task for task in self._tasks if not task.done()
            ]
            if self._registry_task is not None and not self._registry_task.done():
                pending.append(self._registry_task)
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def aclose(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        if self._registry_task is not None and not self._registry_task.done():
            self._registry_task.cancel()
        if self._owned_fetcher is not None:
            await self._owned_fetcher.aclose()
            self._owned_fetcher = None

    # -- input -------------------------------------------------------------

    def submit(self, value: Optional[str] = None) -> Optional["asyncio.Task[None]"]:
        raw = self.input if value is None else value
        if not raw.strip():
            return None

        self._history.append(raw)
        self._history_cursor = None
        self.typewriter.enqueue(
            [QueueItem(id=self._new_id(), kind="user", text="> {0}".format(raw), instant=True)]
        )
        self.input = ""
        self._log("command.submit", "command submitted", data={"raw": raw})
        return self._spawn(self.run_command(raw))

    def history_up(self) -> Optional[str]:
        if not self._history:
            return None
        cursor = self._history_cursor
        index = len(self._history) - 1 if cursor is None else max(cursor - 1, 0)
        self._history_cursor = index
        self.input = self._history[index]
        return self.input

    def history_down(self) -> str:
        cursor = self._history_cursor
        if cursor is None or cursor >= len(self._history) - 1:
            self._history_cursor = None
            self.input = ""
            return self.input
        self._history_cursor = cursor + 1
        self.input = self._history[self._history_cursor]
        return self.input

    def skip_typing(self) -> None:
        self.typewriter.skip()
        self._log("typewriter.skip", "typing skipped", component="typewriter")

    def fast_forward(self) -> bool:
        changed = self.typewriter.fast_forward()
        if changed:
            self._log("typewriter.fast_forward", "typing fast-forwarded", component="typewriter")
        return changed

    def clear_all(self) -> None:
        self.typewriter.clear()
        self._anchors.clear()

    # -- links -------------------------------------------------------------

    def register_anchor(self, anchor: str, callback: Callable[[], None]) -> None:
        self._anchors[anchor] = callback

    def consume_anchor(self, href: str) -> bool:
        """Run and forget a registered anchor handler, for hosts without clicks."""

        callback = self._anchors.pop(href, None)
        if callback is None:
            return False
        callback()
        return True

    def activate_link(self, href: str) -> bool:
        """Follow a clicked segment link. Returns False when nothing handled it."""

        callback = self._anchors.get(href)
        if callback is not None:
            callback()
            return True
        if not is_allowed_href(href):
            return False
        target = href.strip()
        if target.startswith("#"):
            return False
        if target.startswith("/") and not target.startswith("//"):
            self._host.navigate(target)
        else:
            self._host.open_url(target)
        return True

    # -- output ------------------------------------------------------------

    def set_last_interaction(self, value: str) -> None:
        self._last_interaction = value
        self._log("status", value, data={"status": value})

    def append_response(self, response: CommandResponse) -> None:
        items: List[QueueItem] = []
        dropped = 0
        for entry in response.lines:
            kind = entry.kind or "output"
            segments = sanitize_segments(entry.segments, kind)
            text = sanitize_text(entry.text)
            if text is None and segments:
                text = "".join(segment.text for segment in segments)
            if not text and not segments:
                dropped += 1
                continue
            instant = entry.instant if entry.instant is not None else not self._streaming_enabled
            items.append(
                QueueItem(
                    id=self._new_id(),
                    kind=kind,
                    text=text or "",
                    segments=segments,
                    instant=instant,
                )
            )

        if dropped:
            self._log("sanitize.dropped", "lines dropped by sanitizer", data={"count": dropped})
        if not items:
            return
        self.typewriter.enqueue(items)
        if response.side_effect is not None:
            response.side_effect()

    # -- dispatch ----------------------------------------------------------

    async def run_command(self, raw: str) -> None:
        normalized = normalize_input(raw)
        if not normalized:
            return

        token = match_control(normalized)
        if token is not None:
            self._log("command.control", "control token", data={"token": token.name})
            self._run_control(token)
            return

        command_id = parse_numeric_command(normalized)
        if command_id is not None:
            await self._run_numeric(command_id)
            return

        self.append_response(
            CommandResponse(
                lines=[
                    line("Command not recognized: {0}".format(raw), "error"),
                    line("Type /help to review available commands.", "muted"),
                ]
            )
        )
        self.set_last_interaction("Unknown command")

    def _run_control(self, token: ControlToken) -> None:
        handler = getattr(self, "_control_{0}".format(token.name))
        handler(token)

    def _control_skip(self, token: ControlToken) -> None:
        self.skip_typing()
        self.set_last_interaction("Skipped typing")

    def _control_fast_forward(self, token: ControlToken) -> None:
        self.fast_forward()
        self.set_last_interaction("Fast-forward typing")

    def _control_streaming(self, token: ControlToken) -> None:
        if not token.valid:
            self.append_response(
                CommandResponse(lines=[line("Streaming toggle expects: /streaming on|off", "error")])
            )
            self.set_last_interaction("Streaming syntax error")
            return
        if token.argument == "on":
            self._streaming_enabled = True
            self.set_last_interaction("Streaming enabled")
            return
        self._streaming_enabled = False
        self.fast_forward()
        self.set_last_interaction("Streaming disabled")

    def _control_theme(self, token: ControlToken) -> None:
        theme_id = token.argument or self._theme
        label = theme_label(theme_id)

        def apply_theme() -> None:
            self._theme = theme_id
            self._host.set_theme(theme_id)

        self.append_response(
            CommandResponse(
                lines=[line("Theme change requested → {0}".format(label), "system")],
                side_effect=apply_theme,
            )
        )
        self.set_last_interaction("Theme set to {0}".format(label))

    def _control_reduce_motion(self, token: ControlToken) -> None:
        if not token.valid:
            self.append_response(
                CommandResponse(lines=[line("Usage: /reduce-motion on|off", "error")])
            )
            self.set_last_interaction("Reduce-motion syntax error")
            return
        enabled = token.argument == "on"

        def apply_motion() -> None:
            self._reduce_motion = enabled
            self._host.set_reduce_motion(enabled)

        self.append_response(
            CommandResponse(
                lines=[
                    line("Reduced motion {0}.".format("enabled" if enabled else "disabled"), "system")
                ],
                side_effect=apply_motion,
            )
        )
        self.set_last_interaction("Reduced motion {0}".format("on" if enabled else "off"))

    def _control_menu(self, token: ControlToken) -> None:
        self.append_response(CommandResponse(lines=build_menu_lines()))
        self.set_last_interaction("Menu rendered")

    def _control_help(self, token: ControlToken) -> None:
        self.append_response(CommandResponse(lines=build_help_lines()))
        self.set_last_interaction("Help printed")

    def _control_admin_login(self, token: ControlToken) -> None:
        self.append_response(
            CommandResponse(
                lines=[
                    line("Opening admin console...", "muted"),
                    line("Redirecting to /admin for authentication.", "muted"),
                ],
                side_effect=lambda: self._host.navigate(ADMIN_LOGIN_PATH),
            )
        )
        self.set_last_interaction("Admin console redirect")

    def _control_onepager(self, token: ControlToken) -> None:
        self.append_response(
            CommandResponse(
                lines=[line("Opening one-pager view...", "system")],
                side_effect=self._host.open_onepager,
            )
        )
        self.set_last_interaction("One-pager opened")

    async def _run_numeric(self, command_id: int) -> None:
        if self._registry_status is RegistryStatus.UNINITIALIZED:
            self.append_response(
                CommandResponse(lines=[line(INITIALIZING_TEXT, "muted", instant=True)])
            )
            self.set_last_interaction("Initializing modules")
            self._deferred.append(command_id)
            self.ensure_registry()
            return

        if self._registry_status is RegistryStatus.FAILED:
            self._report_load_failure()
            return

        handler = resolve(self._registry, command_id)
        if handler is None:
            self.append_response(CommandResponse(lines=[line(PLACEHOLDER_TEXT, "muted")]))
            self.set_last_interaction("Menu option {0} requested".format(command_id))
            return

        self._log("command.module", "module handler started", data={"module": command_id})
        result = handler()
        if result is not None:
            await result

    # -- internals ---------------------------------------------------------

    def _dependencies(self) -> CommandDependencies:
        return CommandDependencies(
            append_response=self.append_response,
            set_last_interaction=self.set_last_interaction,
            reel_viewer=self._host.open_reel,
            fetch=self._fetch,
            flush_typing=self.typewriter.skip,
            host=self._host,
            register_anchor=self.register_anchor,
            site_url=self._config.api_base_url,
            debug_log=self._debug_log,
        )

    def _report_load_failure(self) -> None:
        self.append_response(
            CommandResponse(lines=[line(text, kind) for text, kind in LOAD_FAILED_LINES])
        )
        self.set_last_interaction("Command modules unavailable")

    def _spawn(self, coro: Coroutine[object, object, None]) -> "asyncio.Task[None]":
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: "asyncio.Task[None]") -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._log(
                "command.crash",
                "command task raised",
                level="error",
                data={"error": str(exc), "error_type": type(exc).__name__},
            )

    def _log(
        self,
        kind: str,
        message: str,
        *,
        level: str = "info",
        component: str = "session",
        data: Optional[Dict[str, object]] = None,
    ) -> None:
        self._debug_log.write_entry(
            level=level,
            component=component,
            kind=kind,
            message=message,
            data=data,
            session_id=self.session_id,
        )
