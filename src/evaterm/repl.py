"""Interactive entry and line-oriented stdio host for eva-terminal."""

from __future__ import annotations

import asyncio
import sys
from typing import Iterable, List, Optional, Sequence, TextIO

from evaterm.config import Settings, load_settings
from evaterm.kernel.runtime import Runtime
from evaterm.terminal.commands.reel import build_reel_lines
from evaterm.terminal.constants import REEL_ANCHOR
from evaterm.terminal.registry import Fetch
from evaterm.terminal.sanitize import sanitize_text
from evaterm.terminal.schemas import ReelItem
from evaterm.terminal.session import TerminalSession
from evaterm.terminal.types import Line
from evaterm.tui.controller import start_tui
from evaterm.ui.render import render_notice, render_transcript


class StdioHost:
    """Session host for pipes: side effects become notices after each command."""

    def __init__(self, site_url: str) -> None:
        self._site_url = site_url.rstrip("/")
        self.notices: List[str] = []

    def take_notices(self) -> List[str]:
        notices, self.notices = self.notices, []
        return notices

    def open_url(self, url: str) -> None:
        self.notices.append(render_notice("info", "Open {0}".format(url)))

    def navigate(self, path: str) -> None:
        self.open_url(self._site_url + path)

    def set_theme(self, theme_id: str) -> None:
        return None

    def set_reduce_motion(self, enabled: bool) -> None:
        return None

    def open_onepager(self) -> None:
        self.notices.append(
            render_notice("info", "One-pager view: {0}".format(self._site_url))
        )

    def copy_to_clipboard(self, text: str) -> None:
        self.notices.append(render_notice("success", "Copy: {0}".format(text)))

    def open_reel(self, items: Sequence[ReelItem]) -> None:
        for entry in build_reel_lines(items):
            text = sanitize_text(entry.text)
            if text:
                self.notices.append(text)


class TranscriptPrinter:
    """Prints completed session lines exactly once, in order."""

    def __init__(self, stream: TextIO, is_tty: Optional[bool] = None) -> None:
        self._stream = stream
        self._is_tty = is_tty
        self._printed = 0

    def print_new(self, lines: Sequence[Line]) -> None:
        if self._printed > len(lines):
            self._printed = 0
        fresh = lines[self._printed :]
        if fresh:
            render_transcript(fresh, self._stream, is_tty=self._is_tty)
        self._printed = len(lines)


async def run_commands(
    session: TerminalSession,
    commands: Iterable[str],
    host: StdioHost,
    stream: TextIO,
    *,
    boot: bool = False,
    is_tty: Optional[bool] = None,
) -> int:
    """Feed commands through ``session`` one by one and print the transcript."""

    printer = TranscriptPrinter(stream, is_tty=is_tty)
    if boot:
        await session.start()
    else:
        session.ensure_registry()

    count = 0
    for raw in commands:
        if not raw.strip():
            continue
        session.submit(raw)
        await session.wait_idle()
        session.typewriter.skip()
        printer.print_new(session.lines)
        session.consume_anchor(REEL_ANCHOR)
        for notice in host.take_notices():
            _echo(stream, notice)
        count += 1

    await session.wait_idle()
    session.typewriter.skip()
    printer.print_new(session.lines)
    return count


def run_once(
    commands: Sequence[str],
    *,
    settings: Optional[Settings] = None,
    stream: TextIO = sys.stdout,
    fetch: Optional[Fetch] = None,
    boot: bool = False,
    is_tty: Optional[bool] = None,
) -> int:
    """Run ``commands`` with streaming disabled and print every resulting line."""

    resolved = settings or load_settings()
    host = StdioHost(resolved.api_base_url)

    async def _main() -> int:
        runtime = Runtime(resolved, host=host, fetch=fetch, streaming=False)
        try:
            return await run_commands(
                runtime.session,
                commands,
                host,
                stream,
                boot=boot,
                is_tty=is_tty,
            )
        finally:
            await runtime.aclose()

    asyncio.run(_main())
    return 0


def start_repl(
    *,
    settings: Optional[Settings] = None,
    stream: TextIO = sys.stdout,
    err_stream: TextIO = sys.stderr,
) -> int:
    resolved = settings or load_settings()

    if not _stdin_is_tty():
        stdin_text = sys.stdin.read()
        commands = [entry for entry in stdin_text.splitlines() if entry.strip()]
        if not commands:
            _echo(
                err_stream,
                render_notice(
                    "error",
                    "No commands on stdin. Use `evaterm run /1` or pipe commands, one per line.",
                ),
            )
            return 2
        return run_once(commands, settings=resolved, stream=stream, boot=True)

    try:
        return start_tui(resolved)
    except RuntimeError as exc:
        _echo(err_stream, render_notice("error", str(exc)))
        return 2


def _stdin_is_tty() -> bool:
    isatty = getattr(sys.stdin, "isatty", None)
    if callable(isatty):
        try:
            return bool(isatty())
        except (OSError, ValueError):
            return False
    return False


def _echo(stream: TextIO, text: str) -> None:
    stream.write(text + "\n")
    stream.flush()
