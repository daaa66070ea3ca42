"""Input routing: control tokens first, then the numbered module registry."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from evaterm.terminal.constants import MAX_COMMAND_ID, MENU_OPTIONS, MIN_COMMAND_ID, THEME_COMMANDS
from evaterm.terminal.types import CommandRegistry, Handler

_NUMERIC_RE = re.compile(r"^/(10|[1-9])$")
_TOGGLE_VALUES: Tuple[str, ...] = ("on", "off")


@dataclass(frozen=True)
class ControlSpec:
    """Grammar entry for one built-in control token."""

    name: str
    token: str
    prefix: bool = False
    values: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ControlToken:
    """A matched control token.

    ``argument`` carries the theme id for theme switches and the raw toggle
    word for prefix tokens; ``valid`` is False when a prefix token received
    an argument outside its allowed values.
    """

    name: str
    argument: Optional[str] = None
    valid: bool = True


def normalize_input(value: str) -> str:
    return value.strip().lower()


# Match order matters: "s" and "f" are checked before anything else.
_CONTROL_SPECS: Tuple[ControlSpec, ...] = (
    ControlSpec(name="skip", token="s"),
    ControlSpec(name="fast_forward", token="f"),
    ControlSpec(name="streaming", token="/streaming", prefix=True, values=_TOGGLE_VALUES),
) + tuple(
    ControlSpec(name="theme", token=token) for token in THEME_COMMANDS
) + (
    ControlSpec(name="reduce_motion", token="/reduce-motion", prefix=True, values=_TOGGLE_VALUES),
    ControlSpec(name="menu", token="/start"),
    ControlSpec(name="help", token="/help"),
    ControlSpec(name="admin_login", token="/adminlogin"),
    ControlSpec(name="onepager", token="/onepager"),
)


def control_specs() -> Tuple[ControlSpec, ...]:
    return _CONTROL_SPECS


def match_control(normalized: str) -> Optional[ControlToken]:
    """Return the control token for already-normalized input, if any."""

    if not normalized:
        return None
    for spec in _CONTROL_SPECS:
        if spec.prefix:
            if not normalized.startswith(spec.token):
                continue
            parts = normalized.split()
            argument = parts[1] if len(parts) > 1 else None
            return ControlToken(
                name=spec.name,
                argument=argument,
                valid=argument in spec.values,
            )
        if normalized == spec.token:
            argument = THEME_COMMANDS.get(spec.token) if spec.name == "theme" else None
            return ControlToken(name=spec.name, argument=argument)
    return None


def parse_numeric_command(normalized: str) -> Optional[int]:
    match = _NUMERIC_RE.match(normalized)
    if not match:
        return None
    return int(match.group(1))


def resolve(registry: Optional[CommandRegistry], command_id: int) -> Optional[Handler]:
    if registry is None:
        return None
    if command_id < MIN_COMMAND_ID or command_id > MAX_COMMAND_ID:
        return None
    return registry.get(command_id)


def known_commands() -> List[str]:
    """Every completable command string, used for input suggestions."""

    commands: List[str] = []
    for spec in _CONTROL_SPECS:
        if not spec.token.startswith("/"):
            continue
        if spec.values:
            commands.extend("{0} {1}".format(spec.token, value) for value in spec.values)
        else:
            commands.append(spec.token)
    commands.extend("/{0}".format(option.id) for option in MENU_OPTIONS)
    return commands
