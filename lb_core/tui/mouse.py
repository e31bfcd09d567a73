"""Mouse handling for the interaction core."""

from __future__ import annotations

from lb_core.tui.commands import Command
from lb_core.tui.geometry import WHEEL_STEP, HitKind, in_detail_pane, modal_hit
from lb_core.tui.handlers import apply_selection
from lb_core.tui.state import (
    SELECT_MODES, InteractionState, Mode, MouseAction, MouseButton, MouseEvent,
)


def _wheel_delta(event: MouseEvent) -> int:
    return -WHEEL_STEP if event.button is MouseButton.WHEEL_UP else WHEEL_STEP


def handle_list_mouse(state: InteractionState, event: MouseEvent) -> Command | None:
    if event.is_wheel:
        state.panels.scroll(_wheel_delta(event))
        state.sync_selection()
        return None

    if state.search_mode and event.action is MouseAction.PRESS:
        state.search_mode = False

    if not event.is_left_press:
        return None

    if state.panels.select_at(event.x, event.y):
        state.sync_selection()

    # Clicking the wide layout's detail pane opens the full detail view.
    if in_detail_pane(event.x, state.width) and state.selected is not None:
        state.detail.goto_top()
        state.mode = Mode.DETAIL
    return None


def handle_detail_mouse(state: InteractionState, event: MouseEvent) -> Command | None:
    if event.is_wheel:
        state.detail.scroll(_wheel_delta(event))
    elif event.is_left_press:
        state.mode = Mode.LIST
    return None


def handle_help_mouse(state: InteractionState, event: MouseEvent) -> Command | None:
    if event.is_wheel:
        state.help.scroll(_wheel_delta(event))
    elif event.is_left_press:
        state.help.goto_top()
        state.mode = Mode.LIST
    return None


def handle_modal_mouse(state: InteractionState, event: MouseEvent) -> Command | None:
    """Click outside a select dialog dismisses it; a click on an option applies it."""
    if not event.is_left_press or state.modal is None:
        return None

    modal = state.modal
    hit = modal_hit(event.x, event.y, state.width, state.height, len(modal.options))
    if hit.kind is HitKind.DISMISS:
        state.mode = Mode.LIST
        state.modal = None
        return None
    if hit.kind is HitKind.OPTION:
        modal.select_index(hit.index)
        if state.selected is not None:
            command = apply_selection(state, state.selected.id, modal.selected_value())
            state.mode = Mode.LIST
            state.modal = None
            return command
    return None


def handle_mouse(state: InteractionState, event: MouseEvent) -> Command | None:
    if not event.is_wheel:
        state.clear_error()
    if state.mode is Mode.LIST:
        return handle_list_mouse(state, event)
    if state.mode is Mode.DETAIL:
        return handle_detail_mouse(state, event)
    if state.mode is Mode.HELP:
        return handle_help_mouse(state, event)
    if state.mode in SELECT_MODES:
        return handle_modal_mouse(state, event)
    return None
