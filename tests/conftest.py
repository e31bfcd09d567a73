"""Shared test helpers for lb_core tests."""

import pytest

from lb_core.config import Config
from lb_core.models import Task
from lb_core.tui.handlers import handle_resize
from lb_core.tui.state import InteractionState


def make_task(task_id: str = "bd-1", **fields) -> Task:
    """Build a Task with a default title derived from its id."""
    fields.setdefault("title", f"Task {task_id}")
    return Task(id=task_id, **fields)


def make_state(tasks=(), width: int = 120, height: int = 40,
               config: Config | None = None) -> InteractionState:
    """An InteractionState sized to a terminal and loaded with *tasks*."""
    state = InteractionState(config=config or Config())
    handle_resize(state, width, height)
    state.tasks = list(tasks)
    state.distribute_tasks()
    return state


@pytest.fixture
def state():
    """Three open tasks; bd-1 (P1) is selected in the Open panel."""
    return make_state([
        make_task("bd-1", priority=1),
        make_task("bd-2", priority=2),
        make_task("bd-42", priority=3, title="Fix the frobnicator"),
    ])
