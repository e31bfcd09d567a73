"""Key and result handling for the interaction core.

Every handler takes the ``InteractionState`` first, mutates it in place,
and returns at most one deferred command for the host to execute. None of
them perform I/O.
"""

from __future__ import annotations

from lb_core.beads import CreateOptions, UpdateOptions
from lb_core.config import CONTEXT_DETAIL, CONTEXT_LIST
from lb_core.paths import configure_logger
from lb_core.tui.commands import (
    ClipboardCopied, Command, CopyToClipboard, CreateTask, DeleteTask, EditInEditor,
    EditorFinished, LoadTasks, Result, ShellStarted, TaskCreated, TaskDeleted, TasksLoaded,
    TaskUpdated, UpdateTask,
)
from lb_core.tui.custom_commands import (
    TemplateError, build_custom_command, match_custom_command,
)
from lb_core.tui.keys import is_text_input
from lb_core.tui.modal import PRIORITY_OPTIONS, STATUS_OPTIONS, TYPE_OPTIONS, Modal
from lb_core.tui.state import DEFAULT_PRIORITY, FormState, InteractionState, Mode

_log = configure_logger("lb.tui.handlers")

# Border rows plus the status bar around the detail and help viewports.
VIEWPORT_CHROME_ROWS = 3

EDITABLE_TEXT_FIELDS = ("description", "notes")


def _return_to_list(state: InteractionState) -> None:
    state.mode = Mode.LIST
    state.modal = None


def _run_custom_command(state: InteractionState, key: str, context: str) -> Command | None:
    cmd = match_custom_command(state.config.custom_commands, key, context)
    if cmd is None:
        return None
    task = state.selected_task()
    if task is None:
        return None
    try:
        return build_custom_command(cmd, task)
    except TemplateError as e:
        _log.warning("custom command %r: %s", cmd.key, e)
        state.set_error(f"template error: {e}")
        return None


def _parse_priority(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return DEFAULT_PRIORITY


def apply_selection(state: InteractionState, task_id: str, value: str) -> Command | None:
    """Build the update for the value picked in the current edit dialog."""
    if state.mode is Mode.EDIT_STATUS:
        patch = UpdateOptions(status=value)
    elif state.mode is Mode.EDIT_PRIORITY:
        patch = UpdateOptions(priority=_parse_priority(value))
    elif state.mode is Mode.EDIT_TYPE:
        patch = UpdateOptions(type=value)
    else:
        return None
    return UpdateTask(task_id, patch)


def _commit_selection(state: InteractionState) -> Command | None:
    task = state.selected
    if task is None:
        _return_to_list(state)
        return None
    command = apply_selection(state, task.id, state.modal.selected_value())
    _return_to_list(state)
    return command


def _edit_text_field(task, field: str) -> EditInEditor:
    return EditInEditor(task.id, field, getattr(task, field))


# ---------------------------------------------------------------------------
# Per-mode key handlers
# ---------------------------------------------------------------------------

def handle_list_keys(state: InteractionState, key: str) -> Command | None:
    keys = state.keys
    if state.panels.current.handle_key(key, keys):
        state.sync_selection()
        return None

    task = state.selected_task()
    if keys.select.matches(key):
        if task is not None:
            state.selected = task
            state.detail.goto_top()
            state.mode = Mode.DETAIL
    elif keys.add.matches(key):
        state.form = FormState()
        state.mode = Mode.FORM
    elif keys.delete.matches(key):
        if task is not None:
            state.confirm_message = f"Delete task {task.id}?"
            state.confirm_action = DeleteTask(task.id)
            state.mode = Mode.CONFIRM
    elif keys.prev_view.matches(key):
        state.panels.cycle_focus(-1)
        state.sync_selection()
    elif keys.next_view.matches(key):
        state.panels.cycle_focus(1)
        state.sync_selection()
    elif keys.refresh.matches(key):
        state.loading = True
        return LoadTasks()
    elif keys.help.matches(key):
        state.help.goto_top()
        state.mode = Mode.HELP
    elif keys.edit_title.matches(key):
        if task is not None:
            state.selected = task
            state.modal = Modal.input("Edit Title", task.id, task.title)
            state.mode = Mode.EDIT_TITLE
    elif keys.edit_status.matches(key):
        if task is not None:
            state.selected = task
            state.modal = Modal.select("Edit Status", task.id, STATUS_OPTIONS, task.status)
            state.mode = Mode.EDIT_STATUS
    elif keys.edit_priority.matches(key):
        if task is not None:
            state.selected = task
            state.modal = Modal.select(
                "Edit Priority", task.id, PRIORITY_OPTIONS, str(task.priority),
            )
            state.mode = Mode.EDIT_PRIORITY
    elif keys.edit_type.matches(key):
        if task is not None:
            state.selected = task
            state.modal = Modal.select("Edit Type", task.id, TYPE_OPTIONS, task.type)
            state.mode = Mode.EDIT_TYPE
    elif keys.edit_description.matches(key):
        if task is not None:
            return _edit_text_field(task, "description")
    elif keys.search.matches(key):
        state.search_mode = True
        state.search_input = state.filter_query
    elif keys.filter.matches(key):
        state.modal = Modal.input("Filter", "", state.filter_query)
        state.mode = Mode.FILTER
    elif keys.copy_id.matches(key):
        if task is not None:
            return CopyToClipboard(task.id)
    else:
        return _run_custom_command(state, key, CONTEXT_LIST)
    return None


def handle_detail_keys(state: InteractionState, key: str) -> Command | None:
    keys = state.keys
    if keys.cancel.matches(key) or keys.select.matches(key):
        state.mode = Mode.LIST
    elif keys.help.matches(key):
        state.help.goto_top()
        state.mode = Mode.HELP
    elif keys.up.matches(key):
        state.detail.line_up()
    elif keys.down.matches(key):
        state.detail.line_down()
    elif keys.page_up.matches(key):
        state.detail.half_view_up()
    elif keys.page_down.matches(key):
        state.detail.half_view_down()
    elif keys.top.matches(key):
        state.detail.goto_top()
    elif keys.bottom.matches(key):
        state.detail.goto_bottom()
    elif keys.edit_description.matches(key):
        if state.selected is not None:
            return _edit_text_field(state.selected, "description")
    else:
        return _run_custom_command(state, key, CONTEXT_DETAIL)
    return None


def _submit_form(state: InteractionState) -> Command | None:
    form = state.form
    title = form.title.strip()
    if not title:
        state.set_error("title is required")
        return None
    options = CreateOptions(
        title=title,
        description=form.description.strip(),
        priority=form.parsed_priority(),
        type=form.type.strip() or "task",
    )
    state.mode = Mode.LIST
    return CreateTask(options)


def handle_form_keys(state: InteractionState, key: str) -> Command | None:
    keys = state.keys
    form = state.form
    if keys.cancel.matches(key):
        state.mode = Mode.LIST
    elif keys.submit.matches(key) or key == "enter":
        return _submit_form(state)
    elif keys.tab.matches(key):
        form.cycle(1)
    elif keys.shift_tab.matches(key):
        form.cycle(-1)
    elif key == "backspace":
        form.backspace()
    elif is_text_input(key):
        form.insert_text(key)
    return None


def handle_help_keys(state: InteractionState, key: str) -> Command | None:
    keys = state.keys
    if keys.cancel.matches(key) or keys.help.matches(key):
        state.help.goto_top()
        state.mode = Mode.LIST
    elif keys.up.matches(key):
        state.help.line_up()
    elif keys.down.matches(key):
        state.help.line_down()
    elif keys.page_up.matches(key):
        state.help.half_view_up()
    elif keys.page_down.matches(key):
        state.help.half_view_down()
    elif keys.top.matches(key):
        state.help.goto_top()
    elif keys.bottom.matches(key):
        state.help.goto_bottom()
    return None


def handle_confirm_keys(state: InteractionState, key: str) -> Command | None:
    if key in ("y", "Y"):
        action = state.confirm_action
        state.confirm_action = None
        state.mode = Mode.LIST
        return action
    if key in ("n", "N", "esc"):
        state.confirm_action = None
        state.mode = Mode.LIST
    return None


def _edit_input(state: InteractionState, key: str) -> None:
    if key == "backspace":
        state.modal.backspace()
    elif is_text_input(key):
        state.modal.insert_text(key)


def handle_edit_title_keys(state: InteractionState, key: str) -> Command | None:
    if key == "enter":
        task = state.selected
        title = state.modal.input_value().strip()
        _return_to_list(state)
        if task is not None and title:
            return UpdateTask(task.id, UpdateOptions(title=title))
    elif state.keys.cancel.matches(key):
        _return_to_list(state)
    else:
        _edit_input(state, key)
    return None


def handle_select_keys(state: InteractionState, key: str) -> Command | None:
    """Status, priority and type dialogs.

    A shortcut key selects and confirms in one step; arrow navigation
    needs an explicit enter.
    """
    modal = state.modal
    if modal.select_by_shortcut(key):
        if state.selected is not None:
            return _commit_selection(state)
        return None

    if key in ("k", "up"):
        modal.move_up()
    elif key in ("j", "down"):
        modal.move_down()
    elif key == "enter":
        return _commit_selection(state)
    elif state.keys.cancel.matches(key):
        _return_to_list(state)
    return None


def handle_filter_keys(state: InteractionState, key: str) -> Command | None:
    if key == "enter":
        state.filter_query = state.modal.input_value().strip()
        state.distribute_tasks()
        _return_to_list(state)
    elif state.keys.cancel.matches(key):
        _return_to_list(state)
    else:
        _edit_input(state, key)
    return None


def handle_search_keys(state: InteractionState, key: str) -> Command | None:
    """Inline search overlay on the list's status bar."""
    if key == "enter":
        state.search_mode = False
        state.filter_query = state.search_input.strip()
        state.distribute_tasks()
    elif key == "backspace":
        if not state.search_input:
            state.search_mode = False
        else:
            state.search_input = state.search_input[:-1]
    elif state.keys.cancel.matches(key):
        state.search_mode = False
    elif is_text_input(key):
        state.search_input += key
    return None


_KEY_HANDLERS = {
    Mode.LIST: handle_list_keys,
    Mode.DETAIL: handle_detail_keys,
    Mode.FORM: handle_form_keys,
    Mode.HELP: handle_help_keys,
    Mode.CONFIRM: handle_confirm_keys,
    Mode.FILTER: handle_filter_keys,
    Mode.EDIT_TITLE: handle_edit_title_keys,
    Mode.EDIT_STATUS: handle_select_keys,
    Mode.EDIT_PRIORITY: handle_select_keys,
    Mode.EDIT_TYPE: handle_select_keys,
}


def handle_key(state: InteractionState, key: str) -> Command | None:
    """Route one key press. The search overlay takes precedence over List mode."""
    state.clear_error()
    state.status_message = ""
    if state.search_mode and state.mode is Mode.LIST:
        return handle_search_keys(state, key)
    return _KEY_HANDLERS[state.mode](state, key)


def handle_resize(state: InteractionState, width: int, height: int) -> None:
    state.width = width
    state.height = height
    state.panels.resize(width, height)
    viewport_height = max(height - VIEWPORT_CHROME_ROWS, 1)
    state.detail.height = viewport_height
    state.help.height = viewport_height
    state.detail.scroll(0)
    state.help.scroll(0)


# ---------------------------------------------------------------------------
# Results of deferred commands
# ---------------------------------------------------------------------------

def handle_result(state: InteractionState, result: Result) -> Command | None:
    """Fold a finished command back into the state.

    Errors land in the error slot. Successful tracker mutations ask for a
    reload so the panels reflect the tracker.
    """
    if isinstance(result, TasksLoaded):
        state.loading = False
        if result.error is not None:
            state.set_error(f"failed to load tasks: {result.error}")
            return None
        state.clear_error()
        state.tasks = list(result.tasks)
        state.distribute_tasks()
        return None

    if isinstance(result, (TaskUpdated, TaskDeleted, TaskCreated)):
        if isinstance(result, TaskDeleted) or result.error is not None:
            _return_to_list(state)
        if result.error is not None:
            state.set_error(str(result.error))
            return None
        state.clear_error()
        if isinstance(result, TaskCreated) and result.task_id:
            state.status_message = f"Created {result.task_id}"
        elif isinstance(result, TaskDeleted):
            state.status_message = f"Deleted {result.task_id}"
        state.loading = True
        return LoadTasks()

    if isinstance(result, ClipboardCopied):
        if result.error is not None:
            state.set_error(f"clipboard: {result.error}")
            return None
        state.clear_error()
        state.status_message = f"Copied {result.text}"
        return None

    if isinstance(result, ShellStarted):
        if result.error is not None:
            state.set_error(f"failed to execute command: {result.error}")
            return None
        state.clear_error()
        return None

    if isinstance(result, EditorFinished):
        if result.error is not None:
            state.set_error(str(result.error))
            return None
        state.clear_error()
        if result.field not in EDITABLE_TEXT_FIELDS:
            _log.warning("editor result for unsupported field %r", result.field)
            return None
        content = result.content.rstrip("\n")
        if content == result.original.rstrip("\n"):
            _log.debug("editor: %s.%s unchanged", result.task_id, result.field)
            return None
        return UpdateTask(result.task_id, UpdateOptions(**{result.field: content}))

    _log.warning("unhandled result %r", result)
    return None
