"""Key bindings for the TUI.

Key strings are the normalized names produced by the app layer:
printable characters as themselves (``" "`` for space), and named keys
in Textual's spelling (``up``, ``pageup``, ``shift+tab``, ``ctrl+s``),
except that Escape is ``esc``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields


@dataclass(frozen=True)
class KeyBinding:
    keys: tuple[str, ...]
    help_key: str = ""
    help: str = ""

    def matches(self, key: str) -> bool:
        return key in self.keys


def _bind(*keys: str, help_key: str = "", help: str = "") -> KeyBinding:
    return field(default_factory=lambda: KeyBinding(keys, help_key or "/".join(keys), help))


@dataclass(frozen=True)
class KeyMap:
    up: KeyBinding = _bind("k", "up", help_key="↑/k", help="move up")
    down: KeyBinding = _bind("j", "down", help_key="↓/j", help="move down")
    page_up: KeyBinding = _bind("pageup", "ctrl+u", help_key="pgup/ctrl+u", help="half page up")
    page_down: KeyBinding = _bind("pagedown", "ctrl+d", help_key="pgdn/ctrl+d", help="half page down")
    top: KeyBinding = _bind("g", "home", help="go to top")
    bottom: KeyBinding = _bind("G", "end", help="go to bottom")
    select: KeyBinding = _bind("enter", help="open details")
    add: KeyBinding = _bind("a", help="new task")
    delete: KeyBinding = _bind("d", help="delete task")
    next_view: KeyBinding = _bind("tab", "l", help="next panel")
    prev_view: KeyBinding = _bind("shift+tab", "h", help="previous panel")
    refresh: KeyBinding = _bind("r", help="refresh")
    help: KeyBinding = _bind("?", help="toggle help")
    edit_title: KeyBinding = _bind("e", help="edit title")
    edit_status: KeyBinding = _bind("s", help="edit status")
    edit_priority: KeyBinding = _bind("p", help="edit priority")
    edit_type: KeyBinding = _bind("t", help="edit type")
    edit_description: KeyBinding = _bind("E", help="edit description in $EDITOR")
    search: KeyBinding = _bind("/", help="search")
    filter: KeyBinding = _bind("F", help="filter dialog")
    copy_id: KeyBinding = _bind("y", help="copy task id")
    cancel: KeyBinding = _bind("esc", help="back / cancel")
    submit: KeyBinding = _bind("ctrl+s", help="submit form")
    tab: KeyBinding = _bind("tab", help="next field")
    shift_tab: KeyBinding = _bind("shift+tab", help="previous field")

    def help_entries(self) -> list[tuple[str, str]]:
        """(key, description) pairs in declaration order, for the help view."""
        return [
            (getattr(self, f.name).help_key, getattr(self, f.name).help)
            for f in fields(self)
            if f.name not in ("tab", "shift_tab")
        ]


DEFAULT_KEYMAP = KeyMap()


def is_text_input(key: str) -> bool:
    """True for keys that insert a character into a text field."""
    return len(key) == 1 and key.isprintable()
