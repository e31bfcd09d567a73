"""Tests for lb_core.tui.custom_commands: templating, escaping and matching."""

import shutil
import subprocess

import pytest

from conftest import make_task

from lb_core.config import CustomCommand
from lb_core.tui.commands import RunShell
from lb_core.tui.custom_commands import (
    TemplateError, build_custom_command, match_custom_command, render_command_template,
    shell_escape, template_fields,
)

needs_sh = pytest.mark.skipif(shutil.which("sh") is None, reason="needs a POSIX shell")


def _sh_echo(script: str) -> str:
    result = subprocess.run(["sh", "-c", script], capture_output=True, text=True, check=True)
    return result.stdout


# ---------------------------------------------------------------------------
# Escaping
# ---------------------------------------------------------------------------

class TestShellEscape:
    def test_plain_string_unchanged(self):
        assert shell_escape("hello world") == "hello world"

    def test_each_special_character(self):
        assert shell_escape("\\") == "\\\\"
        assert shell_escape('"') == '\\"'
        assert shell_escape("'") == "'\\''"
        assert shell_escape("`") == "\\`"
        assert shell_escape("$") == "\\$"

    def test_backslashes_escaped_first(self):
        # The backslashes added for later characters are not doubled again.
        assert shell_escape("$'") == "\\$'\\''"
        assert shell_escape("\\$") == "\\\\\\$"

    def test_mixed(self):
        assert shell_escape("a\\b\"c'd`e$f") == "a\\\\b\\\"c'\\''d\\`e\\$f"

    @needs_sh
    def test_single_quote_round_trips_in_single_quotes(self):
        original = "it's a 'test'"
        assert _sh_echo(f"printf %s '{shell_escape(original)}'") == original

    @needs_sh
    def test_metacharacters_round_trip_in_double_quotes(self):
        original = 'back\\slash "quoted" $HOME `id`'
        assert _sh_echo(f'printf %s "{shell_escape(original)}"') == original


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

@pytest.fixture
def task():
    return make_task(
        "bd-42",
        title="Fix it's \"bug\"",
        priority=1,
        type="bug",
        labels=["ui", "urgent"],
        acceptance_criteria="works",
    )


class TestRender:
    def test_plain_text(self, task):
        assert render_command_template("echo hello", task) == "echo hello"

    def test_field(self, task):
        assert render_command_template("bd show {{.ID}}", task) == "bd show bd-42"

    def test_spaces_inside_action(self, task):
        assert render_command_template("{{ .ID }}", task) == "bd-42"

    def test_sh_function(self, task):
        out = render_command_template("echo '{{sh .Title}}'", task)
        assert out == "echo 'Fix it'\\''s \\\"bug\\\"'"

    def test_sh_pipeline(self, task):
        assert (render_command_template("{{.Title | sh}}", task)
                == render_command_template("{{sh .Title}}", task))

    def test_string_literal_argument(self, task):
        assert render_command_template('{{sh "a$b"}}', task) == "a\\$b"

    def test_closing_delimiter_inside_string(self, task):
        assert render_command_template('{{sh "a}}b"}} {{.ID}}', task) == "a}}b bd-42"
        assert render_command_template("{{`x}}y`}}", task) == "x}}y"

    def test_raw_string_literal(self, task):
        assert render_command_template("{{`x`}}", task) == "x"

    def test_non_string_fields(self, task):
        out = render_command_template("{{.Priority}} {{.PriorityString}} {{.Labels}}", task)
        assert out == "1 P1 ui,urgent"

    def test_field_names_case_and_underscore_insensitive(self, task):
        assert render_command_template("{{.acceptance_criteria}}", task) == "works"
        assert render_command_template("{{.id}}", task) == "bd-42"

    def test_parent_id(self):
        assert render_command_template("{{.ParentID}}", make_task("bd-1.2")) == "bd-1"

    def test_comment_renders_nothing(self, task):
        assert render_command_template("a{{/* note */}}b", task) == "ab"

    def test_trim_markers(self, task):
        assert render_command_template("x   {{- .ID -}}   y", task) == "xbd-42y"

    def test_multiple_actions(self, task):
        out = render_command_template("tmux new-window -n {{.ID}} 'bd show {{sh .ID}}'", task)
        assert out == "tmux new-window -n bd-42 'bd show bd-42'"

    def test_all_documented_fields_present(self, task):
        fields = template_fields(task)
        for name in ("id", "title", "description", "notes", "design", "acceptancecriteria",
                     "status", "priority", "type", "assignee", "owner", "labels",
                     "parentid", "prioritystring"):
            assert name in fields


class TestRenderErrors:
    def test_unknown_field(self, task):
        with pytest.raises(TemplateError, match="Nope"):
            render_command_template("{{.Nope}}", task)

    def test_unknown_function(self, task):
        with pytest.raises(TemplateError, match='function "quote" not defined'):
            render_command_template("{{quote .ID}}", task)

    def test_unclosed_action(self, task):
        with pytest.raises(TemplateError, match="unclosed action"):
            render_command_template("echo {{.ID", task)

    def test_empty_action(self, task):
        with pytest.raises(TemplateError):
            render_command_template("{{ }}", task)

    def test_wrong_arity(self, task):
        with pytest.raises(TemplateError, match="wrong number of args"):
            render_command_template("{{sh .ID .Title}}", task)

    def test_argument_to_field(self, task):
        with pytest.raises(TemplateError):
            render_command_template("{{.ID .Title}}", task)

    def test_garbage(self, task):
        with pytest.raises(TemplateError, match="unexpected"):
            render_command_template("{{ .ID + 1 }}", task)


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------

COMMANDS = (
    CustomCommand(key="T", command="echo list-T", context="list"),
    CustomCommand(key="T", command="echo global-T", context="global"),
    CustomCommand(key="D", command="echo detail-D", context="detail"),
    CustomCommand(key="G", command="echo global-G", context="global"),
)


class TestMatch:
    def test_first_match_wins(self):
        assert match_custom_command(COMMANDS, "T", "list").command == "echo list-T"

    def test_global_used_in_other_context(self):
        assert match_custom_command(COMMANDS, "T", "detail").command == "echo global-T"

    def test_context_must_match(self):
        assert match_custom_command(COMMANDS, "D", "list") is None
        assert match_custom_command(COMMANDS, "D", "detail").command == "echo detail-D"

    def test_exact_key(self):
        assert match_custom_command(COMMANDS, "t", "list") is None
        assert match_custom_command(COMMANDS, "G", "list").command == "echo global-G"

    def test_build(self, task):
        cmd = CustomCommand(key="T", command="bd show {{sh .ID}}")
        assert build_custom_command(cmd, task) == RunShell("bd show bd-42")
