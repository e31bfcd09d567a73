"""Tests for lb_core.tui.handlers: the key-driven mode state machine."""

from conftest import make_state, make_task

from lb_core.beads import CreateOptions, UpdateOptions
from lb_core.config import Config, CustomCommand
from lb_core.tui.commands import (
    CopyToClipboard, CreateTask, DeleteTask, EditInEditor, LoadTasks, RunShell, UpdateTask,
)
from lb_core.tui.handlers import handle_key, handle_resize
from lb_core.tui.modal import PRIORITY_OPTIONS, Modal, ModalKind
from lb_core.tui.panels import PanelFocus
from lb_core.tui.state import Mode


def press(state, *keys):
    """Feed keys in order; return the command produced by the last one."""
    command = None
    for key in keys:
        command = handle_key(state, key)
    return command


def select_task(state, task_id):
    panel = state.panels.current
    index = next(i for i, t in enumerate(panel.tasks) if t.id == task_id)
    panel.select_index(index)
    state.sync_selection()


# ---------------------------------------------------------------------------
# List mode
# ---------------------------------------------------------------------------

class TestListMode:
    def test_initial_mode(self, state):
        assert state.mode is Mode.LIST
        assert state.selected_task().id == "bd-1"

    def test_navigation_updates_selection(self, state):
        press(state, "j")
        assert state.selected.id == "bd-2"
        press(state, "down", "down")
        assert state.selected.id == "bd-42"
        press(state, "g")
        assert state.selected.id == "bd-1"

    def test_enter_opens_detail(self, state):
        press(state, "j", "enter")
        assert state.mode is Mode.DETAIL
        assert state.selected.id == "bd-2"

    def test_enter_without_task_stays_in_list(self):
        state = make_state([])
        assert press(state, "enter") is None
        assert state.mode is Mode.LIST

    def test_tab_cycles_panels(self, state):
        press(state, "tab")
        assert state.panels.focused is PanelFocus.CLOSED
        press(state, "shift+tab")
        assert state.panels.focused is PanelFocus.OPEN
        press(state, "l", "l")
        assert state.panels.focused is PanelFocus.OPEN

    def test_refresh(self, state):
        assert press(state, "r") == LoadTasks()
        assert state.loading

    def test_copy_id(self, state):
        assert press(state, "y") == CopyToClipboard("bd-1")

    def test_help(self, state):
        press(state, "?")
        assert state.mode is Mode.HELP

    def test_add_opens_empty_form(self, state):
        state.form.title = "stale"
        press(state, "a")
        assert state.mode is Mode.FORM
        assert state.form.title == ""
        assert state.form.focus == 0

    def test_edit_description_requests_editor(self, state):
        state.tasks[0].description = "old text"
        state.distribute_tasks()
        assert press(state, "E") == EditInEditor("bd-1", "description", "old text")

    def test_unmatched_key_is_silent(self, state):
        assert press(state, "Z") is None
        assert state.mode is Mode.LIST
        assert state.error == ""

    def test_error_cleared_by_next_key(self, state):
        state.set_error("boom")
        press(state, "j")
        assert state.error == ""


# ---------------------------------------------------------------------------
# Delete confirmation
# ---------------------------------------------------------------------------

class TestDeleteFlow:
    def test_delete_key_asks_for_confirmation(self, state):
        select_task(state, "bd-42")
        assert press(state, "d") is None
        assert state.mode is Mode.CONFIRM
        assert state.confirm_message == "Delete task bd-42?"
        assert state.confirm_action == DeleteTask("bd-42")

    def test_no_returns_to_list_without_deleting(self, state):
        select_task(state, "bd-42")
        press(state, "d")
        assert press(state, "n") is None
        assert state.mode is Mode.LIST
        assert state.confirm_action is None

    def test_escape_cancels(self, state):
        press(state, "d")
        assert press(state, "esc") is None
        assert state.mode is Mode.LIST

    def test_yes_deletes_exactly_once(self, state):
        select_task(state, "bd-42")
        press(state, "d")
        assert press(state, "y") == DeleteTask("bd-42")
        assert state.mode is Mode.LIST
        assert state.confirm_action is None

    def test_uppercase_yes(self, state):
        press(state, "d")
        assert press(state, "Y") == DeleteTask("bd-1")

    def test_target_captured_at_request_time(self, state):
        select_task(state, "bd-42")
        press(state, "d")
        select_task(state, "bd-2")
        assert press(state, "y") == DeleteTask("bd-42")

    def test_other_keys_ignored_in_confirm(self, state):
        press(state, "d")
        assert press(state, "x") is None
        assert state.mode is Mode.CONFIRM

    def test_delete_without_task(self):
        state = make_state([])
        press(state, "d")
        assert state.mode is Mode.LIST


# ---------------------------------------------------------------------------
# Edit dialogs
# ---------------------------------------------------------------------------

class TestEditPriority:
    def test_opens_select_with_current_value(self, state):
        press(state, "p")
        assert state.mode is Mode.EDIT_PRIORITY
        assert state.modal.kind is ModalKind.SELECT
        assert state.modal.selected == 1
        assert state.modal.subtitle == "bd-1"

    def test_shortcut_applies_immediately(self, state):
        select_task(state, "bd-42")
        press(state, "p")
        assert press(state, "1") == UpdateTask("bd-42", UpdateOptions(priority=1))
        assert state.mode is Mode.LIST
        assert state.modal is None

    def test_navigate_then_enter(self, state):
        press(state, "p", "j", "j", "j", "j")
        assert state.modal.selected == 4
        assert press(state, "enter") == UpdateTask("bd-1", UpdateOptions(priority=4))

    def test_escape_discards(self, state):
        assert press(state, "p", "j", "esc") is None
        assert state.mode is Mode.LIST
        assert state.modal is None

    def test_no_task_selected_means_no_update(self, state):
        state.selected = None
        state.modal = Modal.select("Edit Priority", "", PRIORITY_OPTIONS, "2")
        state.mode = Mode.EDIT_PRIORITY
        assert press(state, "1") is None
        assert press(state, "enter") is None
        assert state.mode is Mode.LIST

    def test_p_without_task_does_nothing(self):
        state = make_state([])
        press(state, "p")
        assert state.mode is Mode.LIST
        assert state.modal is None


class TestEditStatusAndType:
    def test_status_shortcut(self, state):
        press(state, "s")
        assert state.mode is Mode.EDIT_STATUS
        assert press(state, "c") == UpdateTask("bd-1", UpdateOptions(status="closed"))

    def test_type_shortcut(self, state):
        press(state, "t")
        assert state.mode is Mode.EDIT_TYPE
        assert press(state, "b") == UpdateTask("bd-1", UpdateOptions(type="bug"))

    def test_type_preselects_current(self, state):
        select_task(state, "bd-2")
        state.selected_task().type = "epic"
        press(state, "t")
        assert state.modal.selected_value() == "epic"

    def test_unknown_key_keeps_dialog(self, state):
        press(state, "s")
        assert press(state, "x") is None
        assert state.mode is Mode.EDIT_STATUS


class TestEditTitle:
    def test_opens_with_current_title(self, state):
        press(state, "e")
        assert state.mode is Mode.EDIT_TITLE
        assert state.modal.input_value() == "Task bd-1"

    def test_edit_and_save(self, state):
        press(state, "e")
        for _ in range(len("Task bd-1")):
            press(state, "backspace")
        press(state, "N", "e", "w", " ")
        assert press(state, "enter") == UpdateTask("bd-1", UpdateOptions(title="New"))
        assert state.mode is Mode.LIST

    def test_blank_title_not_saved(self, state):
        press(state, "e")
        state.modal.value = "   "
        assert press(state, "enter") is None
        assert state.mode is Mode.LIST

    def test_letters_are_typed_not_bindings(self, state):
        press(state, "e", "d", "q", "?")
        assert state.mode is Mode.EDIT_TITLE
        assert state.modal.input_value().endswith("dq?")

    def test_escape(self, state):
        assert press(state, "e", "x", "esc") is None
        assert state.mode is Mode.LIST


# ---------------------------------------------------------------------------
# Search overlay and filter dialog
# ---------------------------------------------------------------------------

class TestSearch:
    def test_enter_commits_filter(self, state):
        press(state, "/", "f", "r", "o", "b", " ")
        assert state.search_mode
        press(state, "enter")
        assert not state.search_mode
        assert state.filter_query == "frob"
        assert [t.id for t in state.panels[PanelFocus.OPEN].tasks] == ["bd-42"]

    def test_keys_route_to_search_first(self, state):
        press(state, "/", "d")
        assert state.mode is Mode.LIST
        assert state.search_input == "d"

    def test_backspace_on_empty_exits(self, state):
        press(state, "/", "x", "backspace")
        assert state.search_mode
        press(state, "backspace")
        assert not state.search_mode

    def test_backspace_exit_keeps_existing_filter(self, state):
        state.filter_query = "bd"
        press(state, "/")
        assert state.search_input == "bd"
        press(state, "backspace", "backspace", "backspace")
        assert not state.search_mode
        assert state.filter_query == "bd"

    def test_escape_does_not_commit(self, state):
        press(state, "/", "z", "esc")
        assert not state.search_mode
        assert state.filter_query == ""


class TestFilterDialog:
    def test_commit(self, state):
        press(state, "F")
        assert state.mode is Mode.FILTER
        for ch in " frob ":
            press(state, ch)
        press(state, "enter")
        assert state.mode is Mode.LIST
        assert state.filter_query == "frob"
        assert [t.id for t in state.panels[PanelFocus.OPEN].tasks] == ["bd-42"]

    def test_escape_discards(self, state):
        state.filter_query = "bd"
        press(state, "F", "x", "esc")
        assert state.mode is Mode.LIST
        assert state.filter_query == "bd"


# ---------------------------------------------------------------------------
# Form, help and detail
# ---------------------------------------------------------------------------

class TestForm:
    def test_submit_requires_title(self, state):
        press(state, "a")
        assert press(state, "enter") is None
        assert state.mode is Mode.FORM
        assert state.error == "title is required"

    def test_submit_creates_task(self, state):
        press(state, "a", "H", "i", "tab", "d", "o", "c", "tab", "backspace", "0", "tab")
        for _ in range(len("task")):
            press(state, "backspace")
        press(state, "b", "u", "g")
        command = press(state, "ctrl+s")
        assert command == CreateTask(CreateOptions("Hi", description="doc", priority=0, type="bug"))
        assert state.mode is Mode.LIST

    def test_tab_wraps(self, state):
        press(state, "a", "shift+tab")
        assert state.form.focused_field == "type"
        press(state, "tab")
        assert state.form.focused_field == "title"

    def test_priority_clamped(self, state):
        press(state, "a", "X", "tab", "tab", "backspace", "9")
        assert press(state, "enter").options.priority == 4

    def test_bad_priority_defaults(self, state):
        press(state, "a", "X", "tab", "tab", "backspace", "z")
        assert press(state, "enter").options.priority == 2

    def test_escape(self, state):
        press(state, "a", "esc")
        assert state.mode is Mode.LIST


class TestHelp:
    def test_scroll_and_close_resets(self, state):
        press(state, "?")
        state.help.set_content(200)
        press(state, "j", "j", "pagedown")
        assert state.help.offset > 2
        press(state, "esc")
        assert state.mode is Mode.LIST
        assert state.help.offset == 0

    def test_question_mark_closes(self, state):
        press(state, "?", "?")
        assert state.mode is Mode.LIST

    def test_bottom_and_top(self, state):
        press(state, "?")
        state.help.set_content(100)
        press(state, "G")
        assert state.help.offset == state.help.max_offset
        press(state, "g")
        assert state.help.offset == 0


class TestDetail:
    def test_escape_and_enter_return(self, state):
        press(state, "enter", "esc")
        assert state.mode is Mode.LIST
        press(state, "enter", "enter")
        assert state.mode is Mode.LIST

    def test_scroll(self, state):
        press(state, "enter")
        state.detail.set_content(100)
        press(state, "j", "j")
        assert state.detail.offset == 2
        press(state, "k")
        assert state.detail.offset == 1

    def test_edit_description(self, state):
        press(state, "enter")
        assert press(state, "E") == EditInEditor("bd-1", "description", "")

    def test_help_from_detail(self, state):
        press(state, "enter", "?")
        assert state.mode is Mode.HELP


# ---------------------------------------------------------------------------
# Custom commands
# ---------------------------------------------------------------------------

def _with_commands(*commands):
    return make_state(
        [make_task("bd-7", title="Ship it")],
        config=Config(custom_commands=tuple(commands)),
    )


class TestCustomCommands:
    def test_list_context(self):
        state = _with_commands(CustomCommand(key="T", command="tmux new-window 'bd show {{sh .ID}}'"))
        assert press(state, "T") == RunShell("tmux new-window 'bd show bd-7'")

    def test_detail_context_only_in_detail(self):
        state = _with_commands(CustomCommand(key="O", command="open {{.ID}}", context="detail"))
        assert press(state, "O") is None
        press(state, "enter")
        assert press(state, "O") == RunShell("open bd-7")

    def test_global_context_in_both(self):
        state = _with_commands(CustomCommand(key="O", command="open {{.ID}}", context="global"))
        assert press(state, "O") == RunShell("open bd-7")
        press(state, "enter")
        assert press(state, "O") == RunShell("open bd-7")

    def test_built_in_keys_take_precedence(self):
        state = _with_commands(CustomCommand(key="d", command="echo nope"))
        press(state, "d")
        assert state.mode is Mode.CONFIRM

    def test_template_error_is_recoverable(self):
        state = _with_commands(CustomCommand(key="T", command="echo {{.Bogus}}"))
        assert press(state, "T") is None
        assert state.error.startswith("template error:")
        assert state.mode is Mode.LIST

    def test_no_task_selected(self):
        state = make_state([], config=Config(custom_commands=(
            CustomCommand(key="T", command="echo {{.ID}}"),
        )))
        assert press(state, "T") is None
        assert state.error == ""


# ---------------------------------------------------------------------------
# Resize
# ---------------------------------------------------------------------------

class TestResize:
    def test_resize_updates_layout(self, state):
        handle_resize(state, 70, 20)
        assert (state.width, state.height) == (70, 20)
        assert state.panels[PanelFocus.OPEN].height == 19 - 3
        assert state.detail.height == 17
