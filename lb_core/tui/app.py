"""Textual host for the interaction core.

The app owns the single ``InteractionState``. It turns Textual key, mouse
and resize events into core events, runs the commands the handlers return
in thread workers, and feeds their results back on the event loop.
"""

from __future__ import annotations

from textual import events
from textual.app import App, ComposeResult, SuspendNotSupported
from textual.binding import Binding
from textual.widgets import Static

from lb_core.beads import BeadsClient
from lb_core.config import Config
from lb_core.editor import EditorError
from lb_core.paths import configure_logger
from lb_core.tui.commands import Command, EditInEditor, EditorFinished, LoadTasks, Result
from lb_core.tui.executor import CommandExecutor
from lb_core.tui.handlers import handle_key, handle_resize, handle_result
from lb_core.tui.markdown import MarkdownRenderer
from lb_core.tui.mouse import handle_mouse
from lb_core.tui.state import InteractionState, Mode, MouseButton, MouseEvent
from lb_core.tui.view import render

_log = configure_logger("lb.tui")

_MOUSE_BUTTONS = {1: MouseButton.LEFT, 2: MouseButton.MIDDLE, 3: MouseButton.RIGHT}


def normalize_key(event: events.Key) -> str:
    """Map a Textual key event to the key names used by the key map."""
    if event.key == "escape":
        return "esc"
    if event.key == "space":
        return " "
    if event.character and event.is_printable:
        return event.character
    return event.key


class LazyBeadsApp(App):
    """Three-panel task browser for a beads tracker."""

    TITLE = "lazybeads"

    CSS = """
    Screen {
        layout: vertical;
        overflow: hidden;
    }
    #view {
        width: 1fr;
        height: 1fr;
    }
    """

    # Priority bindings keep Textual's focus navigation and quit handling
    # from claiming keys the core handles itself.
    BINDINGS = [
        Binding("tab", "key('tab')", show=False, priority=True),
        Binding("shift+tab", "key('shift+tab')", show=False, priority=True),
        Binding("escape", "key('esc')", show=False, priority=True),
        Binding("ctrl+s", "key('ctrl+s')", show=False, priority=True),
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        client: BeadsClient,
        config: Config | None = None,
        *,
        executor: CommandExecutor | None = None,
        markdown: MarkdownRenderer | None = None,
    ) -> None:
        super().__init__()
        self.state = InteractionState(config=config or Config())
        self.executor = executor or CommandExecutor(client)
        self.markdown = markdown or MarkdownRenderer()

    def compose(self) -> ComposeResult:
        yield Static(id="view")

    def on_mount(self) -> None:
        _log.info("TUI mounted (%dx%d)", self.size.width, self.size.height)
        handle_resize(self.state, self.size.width, self.size.height)
        self.state.loading = True
        self._refresh_view()
        self._dispatch(LoadTasks())

    # -- rendering --

    def _refresh_view(self) -> None:
        self.query_one("#view", Static).update(render(self.state, self.markdown))

    # -- input --

    def action_key(self, key: str) -> None:
        self._handle_key(key)

    def on_key(self, event: events.Key) -> None:
        event.stop()
        self._handle_key(normalize_key(event))

    def _handle_key(self, key: str) -> None:
        state = self.state
        if key == "q" and state.mode is Mode.LIST and not state.search_mode:
            self.exit()
            return
        _log.debug("key %r in %s", key, state.mode.value)
        command = handle_key(state, key)
        self._refresh_view()
        self._dispatch(command)

    def _handle_mouse(self, event: MouseEvent) -> None:
        command = handle_mouse(self.state, event)
        self._refresh_view()
        self._dispatch(command)

    def on_mouse_down(self, event: events.MouseDown) -> None:
        button = _MOUSE_BUTTONS.get(event.button)
        if button is None:
            return
        self._handle_mouse(MouseEvent(event.screen_x, event.screen_y, button))

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        self._handle_mouse(MouseEvent(event.screen_x, event.screen_y, MouseButton.WHEEL_UP))

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        self._handle_mouse(MouseEvent(event.screen_x, event.screen_y, MouseButton.WHEEL_DOWN))

    def on_resize(self, event: events.Resize) -> None:
        handle_resize(self.state, event.size.width, event.size.height)
        self._refresh_view()

    # -- deferred commands --

    def _dispatch(self, command: Command | None) -> None:
        if command is None:
            return
        if isinstance(command, EditInEditor):
            self._run_editor(command)
            return
        self.run_worker(
            lambda: self._execute_in_thread(command),
            thread=True,
            group="commands",
            description=command.kind,
        )

    def _execute_in_thread(self, command: Command) -> None:
        result = self.executor.execute(command)
        self.call_from_thread(self._on_result, result)

    def _run_editor(self, command: EditInEditor) -> None:
        """Hand the terminal to $EDITOR until it exits."""
        try:
            with self.suspend():
                result = self.executor.execute(command)
        except SuspendNotSupported:
            _log.warning("editor: terminal cannot be suspended")
            result = EditorFinished(
                command.task_id, command.field, command.original,
                error=EditorError("this terminal cannot be suspended for an editor"),
            )
        self.refresh()
        self._on_result(result)

    def _on_result(self, result: Result) -> None:
        if getattr(result, "error", None) is not None:
            _log.warning("%s failed: %s", type(result).__name__, result.error)
        command = handle_result(self.state, result)
        self._refresh_view()
        self._dispatch(command)
