"""Centered overlay dialog: single-line input, option select, or multi-line text.

Only the fields of the active ``kind`` are meaningful. For SELECT,
``selected`` is always a valid index into ``options`` when there are any.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

INPUT_CHAR_LIMIT = 200
INPUT_WIDTH = 54

TEXTAREA_MIN_WIDTH = 30
TEXTAREA_MAX_WIDTH = 74
TEXTAREA_MIN_HEIGHT = 5
TEXTAREA_MAX_HEIGHT = 20


class ModalKind(Enum):
    INPUT = "input"
    SELECT = "select"
    TEXTAREA = "textarea"


@dataclass(frozen=True)
class ModalOption:
    label: str
    value: str
    shortcut: str = ""


STATUS_OPTIONS = (
    ModalOption("open", "open", "o"),
    ModalOption("in_progress", "in_progress", "i"),
    ModalOption("closed", "closed", "c"),
)

PRIORITY_OPTIONS = (
    ModalOption("P0 - Critical", "0", "0"),
    ModalOption("P1 - High", "1", "1"),
    ModalOption("P2 - Medium", "2", "2"),
    ModalOption("P3 - Low", "3", "3"),
    ModalOption("P4 - Backlog", "4", "4"),
)

TYPE_OPTIONS = (
    ModalOption("task", "task", "t"),
    ModalOption("bug", "bug", "b"),
    ModalOption("feature", "feature", "f"),
    ModalOption("epic", "epic", "e"),
    ModalOption("chore", "chore", "r"),
)


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


@dataclass
class Modal:
    kind: ModalKind
    title: str
    subtitle: str = ""

    # INPUT
    value: str = ""
    char_limit: int = INPUT_CHAR_LIMIT
    width: int = INPUT_WIDTH

    # TEXTAREA
    text: str = ""
    height: int = 0

    # SELECT
    options: tuple[ModalOption, ...] = field(default_factory=tuple)
    selected: int = 0

    @classmethod
    def input(cls, title: str, subtitle: str = "", value: str = "") -> Modal:
        return cls(ModalKind.INPUT, title, subtitle, value=value[:INPUT_CHAR_LIMIT])

    @classmethod
    def select(cls, title: str, subtitle: str, options, current: str = "") -> Modal:
        """Build a select dialog preselecting the option whose value is *current*."""
        options = tuple(options)
        selected = next((i for i, o in enumerate(options) if o.value == current), 0)
        return cls(ModalKind.SELECT, title, subtitle, options=options, selected=selected)

    @classmethod
    def textarea(cls, title: str, subtitle: str, value: str,
                 screen_width: int, screen_height: int) -> Modal:
        width = _clamp(screen_width * 4 // 5 - 6, TEXTAREA_MIN_WIDTH, TEXTAREA_MAX_WIDTH)
        height = _clamp(screen_height // 2 - 4, TEXTAREA_MIN_HEIGHT, TEXTAREA_MAX_HEIGHT)
        return cls(ModalKind.TEXTAREA, title, subtitle, text=value, width=width, height=height)

    # -- select --

    def move_up(self) -> None:
        if self.kind is ModalKind.SELECT and self.selected > 0:
            self.selected -= 1

    def move_down(self) -> None:
        if self.kind is ModalKind.SELECT and self.selected < len(self.options) - 1:
            self.selected += 1

    def select_by_shortcut(self, key: str) -> bool:
        """Select the option bound to *key*. Returns False and changes nothing otherwise."""
        if self.kind is not ModalKind.SELECT:
            return False
        for i, opt in enumerate(self.options):
            if opt.shortcut and opt.shortcut == key:
                self.selected = i
                return True
        return False

    def select_index(self, index: int) -> bool:
        if self.kind is ModalKind.SELECT and 0 <= index < len(self.options):
            self.selected = index
            return True
        return False

    def selected_value(self) -> str:
        if self.kind is ModalKind.SELECT and 0 <= self.selected < len(self.options):
            return self.options[self.selected].value
        return ""

    # -- text editing --

    def insert_text(self, chars: str) -> None:
        if self.kind is ModalKind.INPUT:
            room = self.char_limit - len(self.value)
            if room > 0:
                self.value += chars[:room]
        elif self.kind is ModalKind.TEXTAREA:
            self.text += chars

    def backspace(self) -> None:
        if self.kind is ModalKind.INPUT:
            self.value = self.value[:-1]
        elif self.kind is ModalKind.TEXTAREA:
            self.text = self.text[:-1]

    def newline(self) -> None:
        if self.kind is ModalKind.TEXTAREA:
            self.text += "\n"

    def input_value(self) -> str:
        return self.value if self.kind is ModalKind.INPUT else ""

    def textarea_value(self) -> str:
        return self.text if self.kind is ModalKind.TEXTAREA else ""
