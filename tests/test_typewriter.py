from __future__ import annotations

import asyncio

from evaterm.config import TypewriterConfig
from evaterm.terminal.types import QueueItem
from evaterm.terminal.typewriter import Typewriter


def _item(item_id: str, text: str, **extra) -> QueueItem:
    return QueueItem(id=item_id, kind=extra.pop("kind", "output"), text=text, **extra)


def _run_to_completion(writer: Typewriter, limit: int = 1000) -> int:
    ticks = 0
    while writer.typing_line is not None:
        delay = writer.next_delay_ms()
        writer.tick(delay if delay is not None else 0.0)
        ticks += 1
        assert ticks < limit
    return ticks


def test_instant_then_animated_lines_complete_in_order():
    writer = Typewriter()
    writer.enqueue(
        [
            _item("l1", "line one", instant=True),
            _item("l2", "line two", instant=True),
            _item("l3", "HELLO", speed=520),
        ]
    )

    assert [line.text for line in writer.lines] == ["line one", "line two"]
    assert writer.typing_line is not None

    sleeps = []

    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    ticks = asyncio.run(writer.drain(sleep=fake_sleep))

    assert ticks >= 1
    assert len(sleeps) == ticks
    assert [line.text for line in writer.lines] == ["line one", "line two", "HELLO"]
    assert writer.typing_line is None


def test_fast_forward_finishes_in_fewer_ticks_with_same_text():
    text = "x" * 50

    baseline = Typewriter()
    baseline.enqueue([_item("a", text)])
    baseline_ticks = _run_to_completion(baseline)

    fast = Typewriter()
    fast.enqueue([_item("a", text)])
    for _ in range(10):
        fast.tick(fast.next_delay_ms())
    assert fast.typing_line.visible_text == "x" * 10
    assert fast.fast_forward() is True
    fast_ticks = 10 + _run_to_completion(fast)

    assert baseline_ticks == 50
    assert fast_ticks == 18
    assert fast_ticks < baseline_ticks
    assert [line.text for line in fast.lines] == [text]
    assert fast.speed_multiplier == 1.0


def test_reveal_is_monotonic_prefix_of_full_text():
    writer = Typewriter(TypewriterConfig(base_cps=52, max_step=8, min_delay_ms=18))
    full = "GOD'S IN HIS HEAVEN, ALL'S RIGHT WITH THE WORLD."
    writer.enqueue([_item("boot", full, speed=150)])

    previous = 0
    while writer.typing_line is not None:
        visible = writer.typing_line.visible_text
        assert full.startswith(visible)
        assert len(visible) >= previous
        assert len(visible) <= len(full)
        previous = len(visible)
        writer.tick(writer.next_delay_ms())

    assert [line.text for line in writer.lines] == [full]


def test_step_is_capped_by_max_step():
    writer = Typewriter(TypewriterConfig(max_step=3))
    writer.enqueue([_item("a", "abcdefghij", speed=52 * 20)])

    writer.tick(writer.next_delay_ms())

    assert writer.typing_line.visible_text == "abc"


def test_enqueue_while_animating_keeps_submission_order():
    writer = Typewriter()
    writer.enqueue([_item("first", "animated first")])
    writer.tick(writer.next_delay_ms())
    writer.enqueue([_item("second", "instant second", instant=True)])

    assert [line.id for line in writer.lines] == []
    assert writer.pending_count == 1

    _run_to_completion(writer)

    assert [line.id for line in writer.lines] == ["first", "second"]


def test_skip_flushes_everything_once():
    writer = Typewriter()
    writer.enqueue([_item("a", "alpha"), _item("b", "beta"), _item("c", "gamma", instant=True)])
    writer.tick(writer.next_delay_ms())

    writer.skip()
    writer.skip()
    writer.tick(1000.0)

    assert [line.id for line in writer.lines] == ["a", "b", "c"]
    assert [line.text for line in writer.lines] == ["alpha", "beta", "gamma"]
    assert writer.typing_line is None
    assert writer.pending_count == 0


def test_duplicate_ids_are_inserted_once():
    writer = Typewriter()
    writer.enqueue([_item("dup", "once", instant=True)])
    writer.enqueue([_item("dup", "once", instant=True)])
    writer.enqueue([_item("dup", "once")])
    _run_to_completion(writer)

    assert [line.id for line in writer.lines] == ["dup"]


def test_fast_forward_when_idle_is_a_no_op():
    writer = Typewriter()
    assert writer.fast_forward() is False
    assert writer.speed_multiplier == 1.0
    assert writer.next_delay_ms() is None
    assert writer.tick(500.0) is False


def test_clear_resets_lines_and_animation():
    writer = Typewriter()
    writer.enqueue([_item("a", "alpha", instant=True), _item("b", "beta"), _item("c", "gamma")])
    writer.tick(writer.next_delay_ms())

    writer.clear()

    assert writer.lines == ()
    assert writer.typing_line is None
    assert writer.pending_count == 0

    writer.enqueue([_item("a", "alpha again", instant=True)])
    assert [line.text for line in writer.lines] == ["alpha again"]


def test_empty_animated_item_flushes_on_next_tick():
    writer = Typewriter()
    writer.enqueue([_item("empty", "")])

    assert writer.next_delay_ms() == 0.0
    writer.tick(0.0)

    assert [line.id for line in writer.lines] == ["empty"]


def test_large_elapsed_reveals_multiple_steps_in_one_tick():
    writer = Typewriter()
    writer.enqueue([_item("a", "abcdef")])

    writer.tick(10_000.0)

    assert writer.typing_line is None
    assert [line.text for line in writer.lines] == ["abcdef"]


def test_typing_line_is_a_snapshot():
    writer = Typewriter()
    writer.enqueue([_item("a", "abcdef")])
    snapshot = writer.typing_line
    writer.tick(writer.next_delay_ms())

    assert snapshot.visible_text == ""
    assert writer.typing_line.visible_text == "a"


def test_listeners_are_notified_until_unsubscribed():
    writer = Typewriter()
    calls = []
    unsubscribe = writer.subscribe(lambda: calls.append(1))

    writer.enqueue([_item("a", "x", instant=True)])
    assert calls == [1]

    unsubscribe()
    writer.enqueue([_item("b", "y", instant=True)])
    assert calls == [1]


def test_skip_after_natural_completion_does_not_duplicate():
    writer = Typewriter()
    writer.enqueue([_item("done", "finished naturally")])
    _run_to_completion(writer)
    assert [line.id for line in writer.lines] == ["done"]

    writer.skip()
    writer.tick(1000.0)

    assert [line.id for line in writer.lines] == ["done"]
    assert writer.typing_line is None
