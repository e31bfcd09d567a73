"""User-defined shell commands bound to keys.

Command strings are templates in the Go ``text/template`` syntax used by
the config file, evaluated against the selected task:

    {{.ID}}                 field value, verbatim
    {{sh .Title}}           field value, shell-escaped
    {{.Title | sh}}         same, as a pipeline
    {{sh "it's"}}           string literals are accepted as arguments

Only field access, string literals, pipelines and the ``sh`` function are
supported. Field names match case-insensitively and ignore underscores,
so ``{{.acceptance_criteria}}`` and ``{{.AcceptanceCriteria}}`` agree.
"""

from __future__ import annotations

import json
import re
from typing import Iterable

from lb_core.config import CustomCommand
from lb_core.models import Task
from lb_core.tui.commands import RunShell


class TemplateError(Exception):
    """Malformed command template, or a reference it cannot resolve."""


def shell_escape(s: str) -> str:
    """Escape *s* for interpolation into a shell command line.

    Order matters: backslashes go first so later escapes are not doubled.
    """
    s = s.replace("\\", "\\\\")
    s = s.replace('"', '\\"')
    s = s.replace("'", "'\\''")
    s = s.replace("`", "\\`")
    s = s.replace("$", "\\$")
    return s


_FUNCS = {
    "sh": shell_escape,
}

# Quoted operands are consumed whole so a "}}" inside them does not end the action.
_ACTION_RE = re.compile(
    r"""\{\{(-\s)?((?:"(?:[^"\\\n]|\\.)*"|`[^`]*`|.)*?)(\s-)?\}\}""",
    re.DOTALL,
)
_TOKEN_RE = re.compile(
    r"""\s*(?:
        (?P<field>\.[A-Za-z_][A-Za-z0-9_]*)
      | (?P<string>"(?:[^"\\\n]|\\.)*")
      | (?P<raw>`[^`]*`)
      | (?P<pipe>\|)
      | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
    )""",
    re.VERBOSE,
)


def _norm(name: str) -> str:
    return name.replace("_", "").lower()


def template_fields(task: Task) -> dict[str, str]:
    """Values a template can reference, keyed by normalized field name."""
    values = {
        "ID": task.id,
        "Title": task.title,
        "Description": task.description,
        "Notes": task.notes,
        "Design": task.design,
        "AcceptanceCriteria": task.acceptance_criteria,
        "Status": task.status,
        "Priority": str(task.priority),
        "PriorityString": task.priority_string(),
        "Type": task.type,
        "Assignee": task.assignee,
        "Owner": task.owner,
        "Labels": ",".join(task.labels),
        "ParentID": task.parent_id(),
        "StatusIcon": task.status_icon(),
        "CreatedBy": task.created_by,
        "CloseReason": task.close_reason,
    }
    return {_norm(k): v for k, v in values.items()}


def _tokenize(body: str) -> list[tuple[str, str]]:
    tokens = []
    pos = 0
    while pos < len(body):
        if not body[pos:].strip():
            break
        m = _TOKEN_RE.match(body, pos)
        if m is None:
            raise TemplateError(f"unexpected {body[pos:].strip()!r} in action")
        tokens.append((m.lastgroup, m.group(m.lastgroup)))
        pos = m.end()
    return tokens


def _operand(token: tuple[str, str], fields: dict[str, str]) -> str:
    kind, text = token
    if kind == "field":
        try:
            return fields[_norm(text[1:])]
        except KeyError:
            raise TemplateError(f"can't evaluate field {text[1:]} in type Task") from None
    if kind == "string":
        try:
            return json.loads(text)
        except ValueError:
            raise TemplateError(f"malformed string literal {text}") from None
    if kind == "raw":
        return text[1:-1]
    raise TemplateError(f"unexpected {text!r} in operand")


def _call(name: str, args: list[str]) -> str:
    fn = _FUNCS.get(name)
    if fn is None:
        raise TemplateError(f'function "{name}" not defined')
    if len(args) != 1:
        raise TemplateError(f"wrong number of args for {name}: want 1 got {len(args)}")
    return fn(*args)


def _eval_action(body: str, fields: dict[str, str]) -> str:
    tokens = _tokenize(body)
    if not tokens:
        raise TemplateError("missing value for command")

    commands: list[list[tuple[str, str]]] = [[]]
    for token in tokens:
        if token[0] == "pipe":
            commands.append([])
        else:
            commands[-1].append(token)

    value: str | None = None
    for i, command in enumerate(commands):
        if not command:
            raise TemplateError("missing command in pipeline")
        head_kind, head = command[0]
        if head_kind == "ident":
            args = [_operand(t, fields) for t in command[1:]]
            if i > 0:
                args.append(value)
            value = _call(head, args)
        else:
            if len(command) > 1 or i > 0:
                raise TemplateError(f"can't give argument to non-function {head}")
            value = _operand(command[0], fields)
    return value


def render_command_template(template: str, task: Task) -> str:
    """Render *template* against *task*.

    Raises:
        TemplateError: unclosed action, unknown field or function, or a
            malformed pipeline.
    """
    fields = template_fields(task)
    out: list[str] = []
    pos = 0
    trim_next = False
    for m in _ACTION_RE.finditer(template):
        text = template[pos:m.start()]
        if trim_next:
            text = text.lstrip()
        if m.group(1):
            text = text.rstrip()
        if "{{" in text:
            raise TemplateError("unclosed action")
        out.append(text)

        body = m.group(2)
        if not body.strip().startswith("/*"):
            out.append(_eval_action(body, fields))
        trim_next = bool(m.group(3))
        pos = m.end()

    tail = template[pos:]
    if trim_next:
        tail = tail.lstrip()
    if "{{" in tail:
        raise TemplateError("unclosed action")
    out.append(tail)
    return "".join(out)


def match_custom_command(
    commands: Iterable[CustomCommand], key: str, context: str,
) -> CustomCommand | None:
    """First command bound to *key* in *context* (or globally), in config order."""
    for cmd in commands:
        if cmd.key == key and cmd.applies_to(context):
            return cmd
    return None


def build_custom_command(cmd: CustomCommand, task: Task) -> RunShell:
    return RunShell(render_command_template(cmd.command, task))
