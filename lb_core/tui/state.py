"""Interaction state: everything the handlers read and write.

One ``InteractionState`` exists per running UI. It is mutated in place by
the handler functions, one event at a time, on the event loop thread only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from lb_core.config import Config
from lb_core.models import Task
from lb_core.tui.commands import DeleteTask
from lb_core.tui.keys import DEFAULT_KEYMAP, KeyMap
from lb_core.tui.modal import Modal
from lb_core.tui.panels import PanelSet


class Mode(Enum):
    LIST = "list"
    DETAIL = "detail"
    FORM = "form"
    HELP = "help"
    CONFIRM = "confirm"
    FILTER = "filter"
    EDIT_TITLE = "edit_title"
    EDIT_STATUS = "edit_status"
    EDIT_PRIORITY = "edit_priority"
    EDIT_TYPE = "edit_type"


SELECT_MODES = (Mode.EDIT_STATUS, Mode.EDIT_PRIORITY, Mode.EDIT_TYPE)


class MouseAction(Enum):
    PRESS = "press"
    RELEASE = "release"


class MouseButton(Enum):
    LEFT = "left"
    MIDDLE = "middle"
    RIGHT = "right"
    WHEEL_UP = "wheel_up"
    WHEEL_DOWN = "wheel_down"


@dataclass(frozen=True)
class MouseEvent:
    x: int
    y: int
    button: MouseButton = MouseButton.LEFT
    action: MouseAction = MouseAction.PRESS

    @property
    def is_wheel(self) -> bool:
        return self.button in (MouseButton.WHEEL_UP, MouseButton.WHEEL_DOWN)

    @property
    def is_left_press(self) -> bool:
        return self.action is MouseAction.PRESS and self.button is MouseButton.LEFT


FORM_FIELDS = ("title", "description", "priority", "type")
DEFAULT_PRIORITY = 2


@dataclass
class FormState:
    """New-task form."""

    title: str = ""
    description: str = ""
    priority: str = str(DEFAULT_PRIORITY)
    type: str = "task"
    focus: int = 0

    @property
    def focused_field(self) -> str:
        return FORM_FIELDS[self.focus]

    def cycle(self, direction: int) -> None:
        self.focus = (self.focus + direction) % len(FORM_FIELDS)

    def insert_text(self, chars: str) -> None:
        name = self.focused_field
        setattr(self, name, getattr(self, name) + chars)

    def backspace(self) -> None:
        name = self.focused_field
        setattr(self, name, getattr(self, name)[:-1])

    def parsed_priority(self) -> int:
        try:
            value = int(self.priority.strip())
        except ValueError:
            return DEFAULT_PRIORITY
        return max(0, min(value, 4))


@dataclass
class Viewport:
    """Vertical scroll position over ``content_lines`` lines of text."""

    offset: int = 0
    height: int = 1
    content_lines: int = 0

    @property
    def max_offset(self) -> int:
        return max(self.content_lines - self.height, 0)

    def scroll(self, amount: int) -> None:
        self.offset = max(0, min(self.offset + amount, self.max_offset))

    def line_up(self, n: int = 1) -> None:
        self.scroll(-n)

    def line_down(self, n: int = 1) -> None:
        self.scroll(n)

    def half_view_up(self) -> None:
        self.scroll(-max(self.height // 2, 1))

    def half_view_down(self) -> None:
        self.scroll(max(self.height // 2, 1))

    def goto_top(self) -> None:
        self.offset = 0

    def goto_bottom(self) -> None:
        self.offset = self.max_offset

    def set_content(self, lines: int) -> None:
        self.content_lines = lines
        self.offset = min(self.offset, self.max_offset)


@dataclass
class InteractionState:
    config: Config = field(default_factory=Config)
    keys: KeyMap = DEFAULT_KEYMAP
    mode: Mode = Mode.LIST
    width: int = 0
    height: int = 0

    tasks: list[Task] = field(default_factory=list)
    panels: PanelSet = field(default_factory=PanelSet)

    # Task shown in Detail mode and targeted by the edit dialogs.
    selected: Task | None = None

    modal: Modal | None = None
    form: FormState = field(default_factory=FormState)
    detail: Viewport = field(default_factory=Viewport)
    help: Viewport = field(default_factory=Viewport)

    confirm_message: str = ""
    confirm_action: DeleteTask | None = None

    search_mode: bool = False
    search_input: str = ""
    filter_query: str = ""

    error: str = ""
    status_message: str = ""
    loading: bool = False

    def selected_task(self) -> Task | None:
        return self.panels.selected_task()

    def sync_selection(self) -> None:
        self.selected = self.selected_task()

    def distribute_tasks(self) -> None:
        self.panels.distribute(self.tasks, self.filter_query)
        self.sync_selection()

    def set_error(self, message: str) -> None:
        self.error = message

    def clear_error(self) -> None:
        self.error = ""
