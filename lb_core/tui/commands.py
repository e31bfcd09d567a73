"""Deferred command descriptors and the result events they produce.

Handlers never perform side effects. They return one of the command
descriptors below; the host runs it through
:class:`lb_core.tui.executor.CommandExecutor` off the event loop and feeds
the matching result back into :func:`lb_core.tui.handlers.handle_result`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Union

from lb_core.beads import CreateOptions, UpdateOptions
from lb_core.models import Task


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LoadTasks:
    kind: ClassVar[str] = "tracker-list"


@dataclass(frozen=True)
class UpdateTask:
    kind: ClassVar[str] = "tracker-update"
    task_id: str
    patch: UpdateOptions


@dataclass(frozen=True)
class DeleteTask:
    kind: ClassVar[str] = "tracker-delete"
    task_id: str


@dataclass(frozen=True)
class CreateTask:
    kind: ClassVar[str] = "tracker-create"
    options: CreateOptions


@dataclass(frozen=True)
class CopyToClipboard:
    kind: ClassVar[str] = "clipboard-write"
    text: str


@dataclass(frozen=True)
class RunShell:
    kind: ClassVar[str] = "shell-exec"
    command: str


@dataclass(frozen=True)
class EditInEditor:
    """Edit one long-form field of a task in $EDITOR.

    ``original`` is the field's value when the session was requested; the
    result is only applied when the edited text differs from it.
    """

    kind: ClassVar[str] = "editor-session"
    task_id: str
    field: str
    original: str


Command = Union[
    LoadTasks, UpdateTask, DeleteTask, CreateTask, CopyToClipboard, RunShell, EditInEditor,
]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TasksLoaded:
    tasks: list[Task] = field(default_factory=list)
    error: Exception | None = None


@dataclass(frozen=True)
class TaskUpdated:
    task_id: str
    error: Exception | None = None


@dataclass(frozen=True)
class TaskDeleted:
    task_id: str
    error: Exception | None = None


@dataclass(frozen=True)
class TaskCreated:
    task_id: str = ""
    error: Exception | None = None


@dataclass(frozen=True)
class ClipboardCopied:
    text: str
    error: Exception | None = None


@dataclass(frozen=True)
class ShellStarted:
    command: str
    error: Exception | None = None


@dataclass(frozen=True)
class EditorFinished:
    task_id: str
    field: str
    original: str
    content: str = ""
    error: Exception | None = None


Result = Union[
    TasksLoaded, TaskUpdated, TaskDeleted, TaskCreated, ClipboardCopied, ShellStarted,
    EditorFinished,
]
