"""List panels: In Progress, Open and Closed, stacked in the left column.

``PanelSet`` owns the three ``TaskPanel`` instances and the focus. Only
the focused panel reacts to navigation keys and wheel scrolling. The
Closed panel is collapsed to a single row unless it has focus.
"""

from __future__ import annotations

from enum import Enum

from lb_core.models import STATUS_CLOSED, STATUS_IN_PROGRESS, Task
from lb_core.tui.geometry import (
    Bounds, calculate_panel_bounds, item_index_at, panel_at,
)
from lb_core.tui.keys import KeyMap

MIN_PANEL_HEIGHT = 3
COLLAPSED_HEIGHT = 3
STATUS_BAR_ROWS = 1


class PanelFocus(Enum):
    IN_PROGRESS = "in_progress"
    OPEN = "open"
    CLOSED = "closed"

    @property
    def title(self) -> str:
        return _TITLES[self]


_TITLES = {
    PanelFocus.IN_PROGRESS: "In Progress",
    PanelFocus.OPEN: "Open",
    PanelFocus.CLOSED: "Closed",
}

# Top-to-bottom stacking order
PANEL_ORDER = (PanelFocus.IN_PROGRESS, PanelFocus.OPEN, PanelFocus.CLOSED)


def matches_query(task: Task, query: str) -> bool:
    """Case-insensitive substring match over the task's searchable fields."""
    if not query:
        return True
    q = query.lower()
    haystack = [task.id, task.title, task.type, task.status, task.assignee, *task.labels]
    return any(q in (s or "").lower() for s in haystack)


def _closed_sort_key(task: Task) -> float:
    return task.closed_at.timestamp() if task.closed_at else float("-inf")


def partition_tasks(tasks: list[Task], query: str = "") -> dict[PanelFocus, list[Task]]:
    """Split *tasks* by status into panel lists, applying the filter *query*.

    Open and In Progress are ordered by (priority, id); Closed by close
    time, most recent first.
    """
    groups: dict[PanelFocus, list[Task]] = {p: [] for p in PANEL_ORDER}
    for task in tasks:
        if not matches_query(task, query):
            continue
        if task.status == STATUS_IN_PROGRESS:
            groups[PanelFocus.IN_PROGRESS].append(task)
        elif task.status == STATUS_CLOSED:
            groups[PanelFocus.CLOSED].append(task)
        else:
            groups[PanelFocus.OPEN].append(task)

    groups[PanelFocus.IN_PROGRESS].sort(key=lambda t: (t.priority, t.id))
    groups[PanelFocus.OPEN].sort(key=lambda t: (t.priority, t.id))
    groups[PanelFocus.CLOSED].sort(key=_closed_sort_key, reverse=True)
    return groups


class TaskPanel:
    """One bordered, scrollable task list."""

    def __init__(self, title: str) -> None:
        self.title = title
        self.tasks: list[Task] = []
        self.selected = 0
        self.offset = 0
        self.height = MIN_PANEL_HEIGHT
        self.focused = False
        self.collapsed = False

    @property
    def visible_rows(self) -> int:
        return max(self.height - 2, 1)

    def selected_task(self) -> Task | None:
        if not self.tasks:
            return None
        return self.tasks[self.selected]

    def visible_tasks(self) -> list[Task]:
        return self.tasks[self.offset:self.offset + self.visible_rows]

    def set_tasks(self, tasks: list[Task]) -> None:
        """Replace the items, keeping the selection on the same task id if present."""
        current = self.selected_task()
        self.tasks = list(tasks)
        index = None
        if current is not None:
            index = next((i for i, t in enumerate(self.tasks) if t.id == current.id), None)
        if index is None:
            index = min(self.selected, len(self.tasks) - 1)
        self.selected = max(index, 0)
        self._keep_selection_visible()

    def set_height(self, height: int) -> None:
        self.height = height
        self._keep_selection_visible()

    def select_index(self, index: int) -> bool:
        if 0 <= index < len(self.tasks):
            self.selected = index
            self._keep_selection_visible()
            return True
        return False

    def move(self, delta: int) -> None:
        if not self.tasks:
            return
        self.selected = max(0, min(self.selected + delta, len(self.tasks) - 1))
        self._keep_selection_visible()

    def scroll_by(self, amount: int) -> None:
        self.move(amount)

    def half_page(self) -> int:
        return max(self.visible_rows // 2, 1)

    def handle_key(self, key: str, keys: KeyMap) -> bool:
        """Apply a navigation key. Returns True when the key was consumed."""
        if keys.up.matches(key):
            self.move(-1)
        elif keys.down.matches(key):
            self.move(1)
        elif keys.page_up.matches(key):
            self.move(-self.half_page())
        elif keys.page_down.matches(key):
            self.move(self.half_page())
        elif keys.top.matches(key):
            self.move(-len(self.tasks))
        elif keys.bottom.matches(key):
            self.move(len(self.tasks))
        else:
            return False
        return True

    def _keep_selection_visible(self) -> None:
        rows = self.visible_rows
        if self.selected < self.offset:
            self.offset = self.selected
        elif self.selected >= self.offset + rows:
            self.offset = self.selected - rows + 1
        self.offset = max(0, min(self.offset, max(len(self.tasks) - rows, 0)))


class PanelSet:
    """The three list panels, the focus, and their layout."""

    def __init__(self) -> None:
        self.panels = {p: TaskPanel(p.title) for p in PANEL_ORDER}
        self.focused = PanelFocus.OPEN
        self.panels[PanelFocus.OPEN].focused = True
        self.panels[PanelFocus.CLOSED].collapsed = True
        self.width = 0
        self.height = 0

    def __getitem__(self, which: PanelFocus) -> TaskPanel:
        return self.panels[which]

    @property
    def current(self) -> TaskPanel:
        return self.panels[self.focused]

    def selected_task(self) -> Task | None:
        return self.current.selected_task()

    def is_visible(self, which: PanelFocus) -> bool:
        if which is PanelFocus.IN_PROGRESS:
            return bool(self.panels[which].tasks)
        return True

    def visible(self) -> list[PanelFocus]:
        return [p for p in PANEL_ORDER if self.is_visible(p)]

    def focus(self, target: PanelFocus) -> None:
        """Move focus to *target*. The Closed panel expands while focused."""
        was_closed = self.focused is PanelFocus.CLOSED
        self.panels[self.focused].focused = False
        self.focused = target
        self.panels[target].focused = True

        now_closed = target is PanelFocus.CLOSED
        if was_closed and not now_closed:
            self.panels[PanelFocus.CLOSED].collapsed = True
            self.update_sizes()
        elif now_closed and not was_closed:
            self.panels[PanelFocus.CLOSED].collapsed = False
            self.update_sizes()

    def cycle_focus(self, direction: int) -> None:
        """Advance focus by +1/-1 among the visible panels, wrapping around."""
        visible = self.visible()
        try:
            index = visible.index(self.focused)
        except ValueError:
            index = 0
        self.focus(visible[(index + direction) % len(visible)])

    def scroll(self, amount: int) -> None:
        self.current.scroll_by(amount)

    def distribute(self, tasks: list[Task], query: str = "") -> None:
        groups = partition_tasks(tasks, query)
        for which, items in groups.items():
            self.panels[which].set_tasks(items)
        if not self.is_visible(self.focused):
            self.focus(PanelFocus.OPEN)
        self.update_sizes()

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.update_sizes()

    def update_sizes(self) -> None:
        area = max(self.height - STATUS_BAR_ROWS, 0)

        in_progress = self.panels[PanelFocus.IN_PROGRESS]
        in_progress_h = 0
        if self.is_visible(PanelFocus.IN_PROGRESS):
            in_progress_h = max(min(len(in_progress.tasks) + 2, area // 3), MIN_PANEL_HEIGHT)
            in_progress.set_height(in_progress_h)

        closed = self.panels[PanelFocus.CLOSED]
        closed_h = COLLAPSED_HEIGHT if closed.collapsed else max(area // 3, MIN_PANEL_HEIGHT)
        closed.set_height(closed_h)

        open_h = max(area - in_progress_h - closed_h, MIN_PANEL_HEIGHT)
        self.panels[PanelFocus.OPEN].set_height(open_h)

    def bounds(self) -> dict[PanelFocus, Bounds]:
        stack = [(p, self.panels[p].height) for p in self.visible()]
        return calculate_panel_bounds(self.width, stack)

    def select_at(self, x: int, y: int) -> bool:
        """Focus the panel under (x, y) and select the clicked row.

        Returns True when the point hit a panel. Clicks on either border
        or below the last item only focus.
        """
        bounds = self.bounds()
        which = panel_at(bounds, x, y)
        if which is None:
            return False
        self.focus(which)
        index = item_index_at(y, bounds[which])
        panel = self.panels[which]
        if 0 <= index < panel.visible_rows:
            panel.select_index(panel.offset + index)
        return True
