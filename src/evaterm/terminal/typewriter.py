"""Cooperative typewriter scheduler.

The scheduler owns one pending queue and a single animating slot. Time only
moves through :meth:`Typewriter.tick`, which hosts call from their timer
(Textual ``set_interval``, an asyncio sleep loop, or synthetic deltas in
tests). Completed output always reflects submission order and each line id
is inserted at most once.
"""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Deque, Iterable, List, Optional, Set, Tuple

from evaterm.config import TypewriterConfig
from evaterm.terminal.types import Line, QueueItem, TypingState

Listener = Callable[[], None]
Sleep = Callable[[float], Awaitable[None]]

# Absorbs float drift when hosts tick with exactly ``next_delay_ms()``.
_EPSILON_MS = 1e-6


@dataclass
class SchedulerState:
    queue: Deque[QueueItem] = field(default_factory=deque)
    typing: Optional[TypingState] = None
    lines: List[Line] = field(default_factory=list)
    line_ids: Set[str] = field(default_factory=set)
    speed_multiplier: float = 1.0
    queue_version: int = 0
    processed_queue_version: int = 0
    flushed_id: Optional[str] = None
    carry_ms: float = 0.0


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


class Typewriter:
    """Reveals queued lines character by character."""

    def __init__(self, config: Optional[TypewriterConfig] = None) -> None:
        self._config = config or TypewriterConfig()
        self._state = SchedulerState()
        self._listeners: List[Listener] = []

    @property
    def config(self) -> TypewriterConfig:
        return self._config

    @property
    def lines(self) -> Tuple[Line, ...]:
        return tuple(self._state.lines)

    @property
    def typing_line(self) -> Optional[TypingState]:
        typing = self._state.typing
        return typing.copy() if typing is not None else None

    @property
    def is_typing(self) -> bool:
        return self._state.typing is not None or bool(self._state.queue)

    @property
    def speed_multiplier(self) -> float:
        return self._state.speed_multiplier

    @property
    def pending_count(self) -> int:
        return len(self._state.queue)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def enqueue(self, items: Iterable[QueueItem]) -> None:
        batch = list(items)
        if not batch:
            return
        self._state.queue.extend(batch)
        self._state.queue_version += 1
        self._process_queue()
        self._notify()

    def skip(self) -> None:
        """Complete the animating line and drain every pending item at once."""

        state = self._state
        if state.typing is not None:
            self._flush(state.typing)
        while state.queue:
            self._append_completed(state.queue.popleft().to_line())
        state.typing = None
        state.carry_ms = 0.0
        state.speed_multiplier = 1.0
        state.queue_version += 1
        state.processed_queue_version = state.queue_version
        self._notify()

    def fast_forward(self) -> bool:
        state = self._state
        if state.typing is None and not state.queue:
            return False
        state.speed_multiplier = float(self._config.fast_multiplier)
        self._notify()
        return True

    def clear(self) -> None:
        self._state = SchedulerState(queue_version=self._state.queue_version + 1)
        self._state.processed_queue_version = self._state.queue_version
        self._notify()

    def next_delay_ms(self) -> Optional[float]:
        """Milliseconds until the next reveal step, ``None`` when idle."""

        typing = self._state.typing
        if typing is None:
            return None
        if typing.complete:
            return 0.0
        return max(0.0, self._delay_ms(typing) - self._state.carry_ms)

    def tick(self, elapsed_ms: float) -> bool:
        """Spend ``elapsed_ms`` revealing characters. Returns True on change."""

        state = self._state
        if state.typing is None:
            state.carry_ms = 0.0
            return False

        state.carry_ms += max(0.0, float(elapsed_ms))
        changed = False
        while state.typing is not None:
            typing = state.typing
            if typing.complete:
                self._flush(typing)
                state.typing = self._pump()
                changed = True
                continue

            delay = self._delay_ms(typing)
            if state.carry_ms + _EPSILON_MS < delay:
                break
            state.carry_ms = max(0.0, state.carry_ms - delay)
            step = self._step(typing)
            typing.visible_text = typing.full_text[: len(typing.visible_text) + step]
            changed = True

        if state.typing is None:
            state.carry_ms = 0.0
            self._reset_multiplier_if_idle()
        if changed:
            self._notify()
        return changed

    async def drain(self, sleep: Optional[Sleep] = None) -> int:
        """Tick on real (or injected) sleeps until idle; returns tick count."""

        sleeper = sleep or asyncio.sleep
        ticks = 0
        while True:
            delay = self.next_delay_ms()
            if delay is None:
                return ticks
            await sleeper(delay / 1000.0)
            self.tick(delay)
            ticks += 1

    def _process_queue(self) -> None:
        state = self._state
        if state.queue_version == state.processed_queue_version:
            return
        state.processed_queue_version = state.queue_version

        if state.typing is None:
            state.typing = self._pump()
            state.carry_ms = 0.0
        self._reset_multiplier_if_idle()

    def _pump(self) -> Optional[TypingState]:
        queue = self._state.queue
        while queue:
            item = queue.popleft()
            if item.instant:
                self._append_completed(item.to_line())
                continue
            return TypingState(
                id=item.id,
                kind=item.kind,
                full_text=item.text,
                visible_text="",
                speed=float(item.speed or self._config.base_cps),
                segments=item.segments,
            )
        return None

    def _flush(self, typing: TypingState) -> None:
        if self._state.flushed_id == typing.id:
            return
        self._state.flushed_id = typing.id
        self._append_completed(typing.to_line())

    def _append_completed(self, line: Line) -> None:
        if line.id in self._state.line_ids:
            return
        self._state.line_ids.add(line.id)
        self._state.lines.append(line)

    def _reset_multiplier_if_idle(self) -> None:
        if self._state.typing is None and not self._state.queue:
            self._state.speed_multiplier = 1.0

    def _step(self, typing: TypingState) -> int:
        raw = _round_half_up(typing.speed * self._state.speed_multiplier / self._config.base_cps)
        return min(self._config.max_step, max(1, raw))

    def _delay_ms(self, typing: TypingState) -> float:
        ratio = typing.speed / self._config.base_cps
        if ratio <= 0:
            ratio = 1.0
        return max(
            float(self._config.min_delay_ms),
            self._config.default_delay_ms / ratio / self._state.speed_multiplier,
        )

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()
