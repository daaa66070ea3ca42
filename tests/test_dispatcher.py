from __future__ import annotations

import pytest

from evaterm.terminal.dispatcher import (
    control_specs,
    known_commands,
    match_control,
    normalize_input,
    parse_numeric_command,
    resolve,
)


def test_normalize_trims_and_lowercases():
    assert normalize_input("  /HELP  ") == "/help"
    assert normalize_input("S") == "s"


@pytest.mark.parametrize(
    "raw,name,argument",
    [
        ("s", "skip", None),
        ("f", "fast_forward", None),
        ("/start", "menu", None),
        ("/help", "help", None),
        ("/adminlogin", "admin_login", None),
        ("/onepager", "onepager", None),
        ("/eoe", "theme", "eoe"),
        ("/eva01", "theme", "eva01"),
        ("/eva02", "theme", "eva02"),
        ("/eva00", "theme", "eva00"),
    ],
)
def test_exact_control_tokens(raw, name, argument):
    token = match_control(normalize_input(raw))
    assert token is not None
    assert token.name == name
    assert token.argument == argument
    assert token.valid is True


def test_skip_and_fast_forward_are_checked_first():
    names = [spec.name for spec in control_specs()]
    assert names[:2] == ["skip", "fast_forward"]


def test_prefix_toggles_parse_their_argument():
    on = match_control("/streaming on")
    off = match_control("/reduce-motion off")
    assert (on.name, on.argument, on.valid) == ("streaming", "on", True)
    assert (off.name, off.argument, off.valid) == ("reduce_motion", "off", True)


def test_prefix_toggles_flag_bad_arguments():
    missing = match_control("/streaming")
    wrong = match_control("/reduce-motion maybe")
    assert missing.name == "streaming" and missing.valid is False
    assert wrong.name == "reduce_motion" and wrong.valid is False
    assert wrong.argument == "maybe"


def test_non_control_input_is_not_matched():
    assert match_control("") is None
    assert match_control("/1") is None
    assert match_control("start") is None
    assert match_control("skip") is None


@pytest.mark.parametrize(
    "raw,expected",
    [("/1", 1), ("/9", 9), ("/10", 10), ("/0", None), ("/11", None), ("/01", None), ("1", None)],
)
def test_numeric_command_range(raw, expected):
    assert parse_numeric_command(raw) == expected


def test_resolve_respects_registry_and_bounds():
    def handler():
        return None

    assert resolve(None, 1) is None
    assert resolve({1: handler}, 1) is handler
    assert resolve({1: handler}, 2) is None
    assert resolve({11: handler}, 11) is None


def test_known_commands_cover_menu_and_toggles():
    commands = known_commands()
    assert "/help" in commands
    assert "/streaming on" in commands
    assert "/reduce-motion off" in commands
    assert "/1" in commands and "/10" in commands
    assert "s" not in commands
