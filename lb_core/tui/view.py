"""Rich rendering of the interaction state.

``render(state, markdown)`` returns one renderable sized to the whole
terminal. The layout here must agree with :mod:`lb_core.tui.geometry`,
which the mouse handlers use for hit-testing.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from lb_core.models import STATUS_CLOSED, STATUS_IN_PROGRESS, Task
from lb_core.tui.geometry import MODAL_WIDTH, is_wide, panel_width
from lb_core.tui.markdown import MarkdownRenderer, detail_markdown
from lb_core.tui.modal import Modal, ModalKind
from lb_core.tui.panels import PANEL_ORDER, TaskPanel
from lb_core.tui.state import FORM_FIELDS, SELECT_MODES, InteractionState, Mode

PRIMARY = "magenta"
MUTED = "grey50"
ACCENT = "cyan"

PRIORITY_STYLES = {0: "bold red", 1: "red", 2: "yellow", 3: "green", 4: MUTED}
STATUS_STYLES = {STATUS_IN_PROGRESS: "yellow", STATUS_CLOSED: MUTED}


def _task_row(task: Task, width: int, selected: bool, focused: bool) -> Text:
    row = Text.assemble(
        (task.status_icon() + " ", STATUS_STYLES.get(task.status, "green")),
        (task.id, ACCENT),
        " ",
        (task.priority_string(), PRIORITY_STYLES.get(task.priority, "")),
        " ",
        task.title,
    )
    if task.is_blocked():
        row.append(" ⊘", "red")
    row.no_wrap = True
    row.overflow = "ellipsis"
    row.truncate(max(width, 1), overflow="ellipsis")
    if selected:
        row.stylize("reverse" if focused else "bold")
    return row


def render_panel(panel: TaskPanel, width: int) -> Panel:
    inner = max(width - 4, 1)
    rows = [
        _task_row(task, inner, panel.offset + i == panel.selected, panel.focused)
        for i, task in enumerate(panel.visible_tasks())
    ]
    if not rows:
        rows = [Text("no tasks", style=MUTED)]
    title = f"{panel.title} ({len(panel.tasks)})"
    return Panel(
        Group(*rows),
        title=title,
        title_align="left",
        border_style=PRIMARY if panel.focused else MUTED,
        height=panel.height,
        width=width,
    )


def render_panels(state: InteractionState) -> RenderableType:
    width = panel_width(state.width)
    return Group(*(
        render_panel(state.panels[p], width)
        for p in PANEL_ORDER
        if state.panels.is_visible(p)
    ))


def _detail_lines(state: InteractionState, markdown: MarkdownRenderer, width: int) -> list[Text]:
    task = state.selected
    if task is None:
        return [Text("No task selected", style=MUTED)]
    return markdown.render(detail_markdown(task), width)


def render_detail_preview(state: InteractionState, markdown: MarkdownRenderer) -> Panel:
    width = state.width - panel_width(state.width)
    height = max(state.height - 1, 3)
    lines = _detail_lines(state, markdown, width - 4)[:height - 2]
    return Panel(Group(*lines), border_style=MUTED, width=width, height=height)


def render_detail(state: InteractionState, markdown: MarkdownRenderer) -> Panel:
    lines = _detail_lines(state, markdown, state.width - 4)
    viewport = state.detail
    viewport.set_content(len(lines))
    visible = lines[viewport.offset:viewport.offset + viewport.height]
    title = state.selected.id if state.selected else "Detail"
    return Panel(
        Group(*visible),
        title=title,
        title_align="left",
        subtitle="esc: back  E: edit description  ?: help",
        border_style=PRIMARY,
        height=max(state.height - 1, 3),
    )


def help_lines(state: InteractionState) -> list[Text]:
    lines = [Text("Keys", style=f"bold {PRIMARY}"), Text("")]
    for key, desc in state.keys.help_entries():
        lines.append(Text.assemble((f"{key:>14}", ACCENT), "  ", desc))
    lines.append(Text.assemble((f"{'q':>14}", ACCENT), "  ", "quit"))
    if state.config.custom_commands:
        lines.extend([Text(""), Text("Custom commands", style=f"bold {PRIMARY}"), Text("")])
        for cmd in state.config.custom_commands:
            desc = cmd.description or cmd.command
            lines.append(Text.assemble(
                (f"{cmd.key:>14}", ACCENT), "  ", desc, (f"  [{cmd.context}]", MUTED),
            ))
    return lines


def render_help(state: InteractionState) -> Panel:
    lines = help_lines(state)
    viewport = state.help
    viewport.set_content(len(lines))
    visible = lines[viewport.offset:viewport.offset + viewport.height]
    return Panel(
        Group(*visible),
        title="Help",
        title_align="left",
        subtitle="esc/?: close",
        border_style=PRIMARY,
        height=max(state.height - 1, 3),
    )


def render_form(state: InteractionState) -> Panel:
    form = state.form
    rows = []
    for i, name in enumerate(FORM_FIELDS):
        focused = i == form.focus
        label = Text(f"{name.capitalize():<12}", style=f"bold {ACCENT}" if focused else MUTED)
        value = Text(getattr(form, name))
        if focused:
            value.append("▏", style=ACCENT)
        rows.append(Text.assemble(label, value))
    rows.extend([Text(""), Text("tab: next field  enter/ctrl+s: create  esc: cancel", style=MUTED)])
    if state.error:
        rows.append(Text(state.error, style="bold red"))
    return Panel(
        Group(*rows),
        title="New Task",
        title_align="left",
        border_style=PRIMARY,
        width=min(max(state.width - 4, 20), 80),
    )


def render_confirm(state: InteractionState) -> Panel:
    body = Group(
        Text(state.confirm_message, style="bold"),
        Text(""),
        Text("y: confirm  n/esc: cancel", style=MUTED),
    )
    return Panel(body, title="Confirm", border_style="red", width=MODAL_WIDTH, padding=(1, 2))


def render_modal(modal: Modal, screen_width: int) -> Panel:
    title = Text(modal.title, style=f"bold {PRIMARY}")
    if modal.subtitle:
        title.append(f" {modal.subtitle}", style=f"italic {MUTED}")

    if modal.kind is ModalKind.SELECT:
        rows = []
        for i, opt in enumerate(modal.options):
            label = f"[{opt.shortcut}] {opt.label}" if opt.shortcut else f"    {opt.label}"
            if i == modal.selected:
                rows.append(Text.assemble("> ", (label, f"bold {ACCENT}")))
            else:
                rows.append(Text("  " + label))
        # Options start two rows below the top border; see geometry.modal_hit.
        return Panel(
            Group(*rows),
            title=title,
            title_align="left",
            subtitle=Text("j/k enter esc", style=MUTED),
            border_style=PRIMARY,
            width=MODAL_WIDTH,
            padding=(1, 2),
        )

    if modal.kind is ModalKind.TEXTAREA:
        body = Text(modal.text + "▏")
        help_text = "ctrl+s: save  esc: cancel"
        width = modal.width + 6
    else:
        body = Text(modal.value + "▏", no_wrap=True, overflow="fold")
        help_text = "enter: save  esc: cancel"
        width = min(modal.width + 6, max(screen_width - 4, 20))
    return Panel(
        Group(body, Text(""), Text(help_text, style=MUTED)),
        title=title,
        title_align="left",
        border_style=PRIMARY,
        width=width,
        padding=(1, 2),
    )


def render_status_bar(state: InteractionState) -> Text:
    if state.search_mode:
        return Text.assemble(("/", ACCENT), state.search_input, ("▏", ACCENT))
    if state.error:
        return Text(f"Error: {state.error}", style="bold red", no_wrap=True, overflow="ellipsis")

    bar = Text(no_wrap=True, overflow="ellipsis")
    if state.status_message:
        bar.append(state.status_message, style="green")
        bar.append("  ")
    if state.loading:
        bar.append("loading… ", style=MUTED)
    if state.filter_query:
        bar.append(f"filter: {state.filter_query}  ", style=ACCENT)
    bar.append("?: help  a: add  e/s/p/t: edit  /: search  q: quit", style=MUTED)
    return bar


def _centered(renderable: RenderableType, state: InteractionState) -> Align:
    return Align.center(renderable, vertical="middle", height=max(state.height, 1))


def render(state: InteractionState, markdown: MarkdownRenderer) -> RenderableType:
    """Everything on screen for the current state."""
    mode = state.mode
    if mode is Mode.DETAIL:
        return Group(render_detail(state, markdown), render_status_bar(state))
    if mode is Mode.HELP:
        return Group(render_help(state), render_status_bar(state))
    if mode is Mode.FORM:
        return _centered(render_form(state), state)
    if mode is Mode.CONFIRM:
        return _centered(render_confirm(state), state)
    if mode in SELECT_MODES or mode in (Mode.EDIT_TITLE, Mode.FILTER):
        if state.modal is not None:
            return _centered(render_modal(state.modal, state.width), state)

    if is_wide(state.width):
        grid = Table.grid(expand=True)
        grid.add_column(width=panel_width(state.width))
        grid.add_column()
        grid.add_row(render_panels(state), render_detail_preview(state, markdown))
        body: RenderableType = grid
    else:
        body = render_panels(state)
    return Group(body, render_status_bar(state))
