"""Markdown rendering for the detail view."""

from __future__ import annotations

import io

from rich.console import Console
from rich.markdown import Markdown
from rich.text import Text

from lb_core.models import Task
from lb_core.paths import configure_logger

_log = configure_logger("lb.tui.markdown")

MIN_RENDER_WIDTH = 20


class MarkdownRenderer:
    """Renders markdown into Rich ``Text`` lines at a given width.

    Construct exactly once at startup and hand it to the app. The backing
    Console writes to an in-memory buffer with a fixed color system, so
    rendering never queries the terminal the UI is running in.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(
            file=io.StringIO(),
            force_terminal=True,
            color_system="truecolor",
            width=80,
        )

    def render(self, text: str, width: int) -> list[Text]:
        if not text:
            return []
        try:
            options = self.console.options.update(width=max(width, MIN_RENDER_WIDTH))
            rendered = self.console.render_lines(Markdown(text), options, pad=False)
        except Exception:
            _log.exception("markdown render failed; showing plain text")
            return [Text(line) for line in text.splitlines()]

        lines = []
        for segments in rendered:
            line = Text()
            for segment in segments:
                if not segment.control:
                    line.append(segment.text, segment.style)
            lines.append(line)
        return lines


def _fmt_time(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else ""


def detail_markdown(task: Task) -> str:
    """Markdown document describing *task* for the detail view."""
    out = [f"# {task.title or task.id}", ""]

    meta = [
        f"**ID:** `{task.id}`",
        f"**Status:** {task.status_icon()} {task.status}",
        f"**Priority:** {task.priority_string()}",
        f"**Type:** {task.type}",
    ]
    out.append(" · ".join(meta))
    out.append("")

    extra = []
    if task.assignee:
        extra.append(f"- **Assignee:** {task.assignee}")
    if task.owner:
        extra.append(f"- **Owner:** {task.owner}")
    if task.labels:
        extra.append(f"- **Labels:** {', '.join(task.labels)}")
    parent = task.parent_id()
    if parent:
        extra.append(f"- **Parent:** `{parent}`")
    if task.blocked_by:
        extra.append(f"- **Blocked by:** {', '.join(task.blocked_by)}")
    if task.blocks:
        extra.append(f"- **Blocks:** {', '.join(task.blocks)}")
    if task.due_date:
        extra.append(f"- **Due:** {_fmt_time(task.due_date)}")
    if extra:
        out.extend(extra)
        out.append("")

    for heading, body in (
        ("Description", task.description),
        ("Notes", task.notes),
        ("Design", task.design),
        ("Acceptance Criteria", task.acceptance_criteria),
    ):
        if body.strip():
            out.extend([f"## {heading}", "", body.rstrip(), ""])

    footer = []
    if task.created_at:
        created = f"Created {_fmt_time(task.created_at)}"
        if task.created_by:
            created += f" by {task.created_by}"
        footer.append(created)
    if task.updated_at:
        footer.append(f"Updated {_fmt_time(task.updated_at)}")
    if task.closed_at:
        closed = f"Closed {_fmt_time(task.closed_at)}"
        if task.close_reason:
            closed += f": {task.close_reason}"
        footer.append(closed)
    if footer:
        out.extend(["---", "", " · ".join(footer)])

    return "\n".join(out).rstrip() + "\n"
