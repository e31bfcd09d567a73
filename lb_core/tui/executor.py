"""Runs deferred commands against the real collaborators.

``CommandExecutor.execute`` is called off the event loop (a thread worker)
for everything except ``EditInEditor``, which the host must run with the
terminal handed over to the editor. Collaborator failures are returned in
the result's ``error`` field, never raised.
"""

from __future__ import annotations

from typing import Callable

from lb_core import editor
from lb_core.beads import BeadsClient, TrackerError
from lb_core.paths import configure_logger
from lb_core.tui import _shell
from lb_core.tui.commands import (
    ClipboardCopied, Command, CopyToClipboard, CreateTask, DeleteTask, EditInEditor,
    EditorFinished, LoadTasks, Result, RunShell, ShellStarted, TaskCreated, TaskDeleted,
    TasksLoaded, TaskUpdated, UpdateTask,
)

_log = configure_logger("lb.tui.executor")


class ClipboardError(Exception):
    pass


def copy_to_clipboard(text: str) -> None:
    try:
        import pyperclip
    except ImportError as e:
        raise ClipboardError("pyperclip not available; install it for clipboard support") from e
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        raise ClipboardError(f"{e} (install xclip or xsel)") from e


class CommandExecutor:
    """Performs the side effect a command describes and reports the outcome."""

    def __init__(
        self,
        client: BeadsClient,
        *,
        clipboard: Callable[[str], None] = copy_to_clipboard,
        edit_text: Callable[..., str] = editor.edit_text,
        start_shell: Callable[[str], object] = _shell.start_detached,
    ) -> None:
        self.client = client
        self.clipboard = clipboard
        self.edit_text = edit_text
        self.start_shell = start_shell

    def execute(self, command: Command) -> Result:
        _log.debug("execute %s %r", getattr(command, "kind", type(command).__name__), command)
        if isinstance(command, LoadTasks):
            try:
                return TasksLoaded(tasks=self.client.list_tasks())
            except TrackerError as e:
                return TasksLoaded(error=e)

        if isinstance(command, UpdateTask):
            try:
                self.client.update(command.task_id, command.patch)
            except TrackerError as e:
                return TaskUpdated(command.task_id, error=e)
            return TaskUpdated(command.task_id)

        if isinstance(command, DeleteTask):
            try:
                self.client.delete(command.task_id)
            except TrackerError as e:
                return TaskDeleted(command.task_id, error=e)
            return TaskDeleted(command.task_id)

        if isinstance(command, CreateTask):
            try:
                return TaskCreated(self.client.create(command.options))
            except TrackerError as e:
                return TaskCreated(error=e)

        if isinstance(command, CopyToClipboard):
            try:
                self.clipboard(command.text)
            except ClipboardError as e:
                return ClipboardCopied(command.text, error=e)
            return ClipboardCopied(command.text)

        if isinstance(command, RunShell):
            try:
                self.start_shell(command.command)
            except OSError as e:
                return ShellStarted(command.command, error=e)
            return ShellStarted(command.command)

        if isinstance(command, EditInEditor):
            try:
                content = self.edit_text(command.original)
            except editor.EditorError as e:
                return EditorFinished(command.task_id, command.field, command.original, error=e)
            return EditorFinished(command.task_id, command.field, command.original, content=content)

        raise TypeError(f"unknown command {command!r}")
