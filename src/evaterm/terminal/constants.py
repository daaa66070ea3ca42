"""Static command tables shared by the dispatcher, session and CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from evaterm.terminal.types import ResponseLine, line


@dataclass(frozen=True)
class MenuOption:
    id: int
    label: str
    summary: str


MENU_OPTIONS: Tuple[MenuOption, ...] = (
    MenuOption(1, "Bio", "Stat sheet of who, what, where."),
    MenuOption(2, "CV", "Download the latest resume PDF."),
    MenuOption(3, "Links", "Quick jumps to social, site, and elsewhere."),
    MenuOption(4, "Projects", "Selected builds and shippable work."),
    MenuOption(5, "Writing", "Articles, essays, and long-form notes in MDX."),
    MenuOption(6, "Investments", "Tracked tickers with rolling 6M price return."),
    MenuOption(7, "Currently...", "Now Playing / Watching / Listening / Reading."),
    MenuOption(8, "Contact", "Email reveal plus copy-to-clipboard helper."),
    MenuOption(9, "Reel", "Image grid + modal viewer with keyboard nav."),
    MenuOption(10, "Repo", "Open the GitHub repository for this terminal."),
)

MIN_COMMAND_ID = 1
MAX_COMMAND_ID = len(MENU_OPTIONS)

THEME_LABELS: Dict[str, str] = {
    "eoe": "End of Evangelion",
    "eva01": "EVA-01",
    "eva02": "EVA-02",
    "eva00": "EVA-00",
}
THEME_COMMANDS: Dict[str, str] = {"/{0}".format(theme_id): theme_id for theme_id in THEME_LABELS}

REPO_URL = "https://github.com/Hxnnyy/eva-terminal"
ADMIN_LOGIN_PATH = "/admin?login=1"
REEL_ANCHOR = "#reel-open"

# Monospace layout widths for boxed and field-formatted rows.
LINE_WIDTH = 80
LABEL_WIDTH = 12
VALUE_WIDTH = 64

BOOT_LINES: Tuple[Tuple[str, str], ...] = (
    ("GOD'S IN HIS HEAVEN, ALL'S RIGHT WITH THE WORLD.", "accent"),
    (
        "Type /start to view menu, /onepager for a no-terminal experience, "
        "or /help for a list of commands.",
        "muted",
    ),
)
BOOT_STATUS = "Boot sequence"


def theme_label(theme_id: str) -> str:
    return THEME_LABELS.get(theme_id, theme_id)


def build_menu_lines() -> List[ResponseLine]:
    rows = [
        line("/{0} {1}".format(option.id, option.label.upper()), "output")
        for option in MENU_OPTIONS
    ]
    return [
        line("EVA TERMINAL :: COMMAND MATRIX", "system"),
        line("Use /1 through /{0} to execute a module.".format(MAX_COMMAND_ID), "muted"),
    ] + rows


def build_help_lines() -> List[ResponseLine]:
    return [
        line("RETRIEVING MAGI USAGE GUIDANCE...", "system"),
        line("Themes     :: /eoe, /eva01, /eva02, /eva00", "output"),
        line("Toggle     :: /reduce-motion on|off    /streaming on|off", "output"),
        line("Overlay    :: /onepager (accessible one-page summary)", "output"),
        line("Commands   :: s = skip, f = fast-forward", "output"),
        line("Menu       :: Run /start to recall options", "muted"),
    ]


def build_boot_lines() -> List[ResponseLine]:
    return [line(text, kind) for text, kind in BOOT_LINES]
