"""Typewriter scheduler, command dispatch and terminal session engine."""

from evaterm.terminal.host import NullHost, SessionHost
from evaterm.terminal.registry import (
    CommandDependencies,
    HttpFetcher,
    ModuleLoadError,
    create_command_registry,
)
from evaterm.terminal.session import TerminalSession
from evaterm.terminal.types import CommandResponse, Line, RegistryStatus, ResponseLine, Segment
from evaterm.terminal.typewriter import Typewriter

__all__ = [
    "CommandDependencies",
    "CommandResponse",
    "HttpFetcher",
    "Line",
    "ModuleLoadError",
    "NullHost",
    "RegistryStatus",
    "ResponseLine",
    "Segment",
    "SessionHost",
    "TerminalSession",
    "Typewriter",
    "create_command_registry",
]
