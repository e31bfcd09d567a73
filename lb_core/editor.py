"""External editor bridge: edit text in ``$EDITOR`` through a temp file.

``edit_text`` writes the initial content to a uniquely named temp file,
runs the editor on it in the foreground and returns the file's contents
once the editor exits. The temp file is always removed, whatever the
outcome. Callers running a full-screen UI must hand the terminal to the
editor first (Textual: ``App.suspend()``).
"""

import os
import shlex
import subprocess
import tempfile
from pathlib import Path

from lb_core.paths import configure_logger

_log = configure_logger("lb.editor")

DEFAULT_EDITOR = "nano"


class EditorError(Exception):
    """Temp file I/O, editor launch, or read-back failure."""


def find_editor() -> str:
    """Return the user's preferred editor ($EDITOR, else nano)."""
    return os.environ.get("EDITOR") or DEFAULT_EDITOR


def edit_text(content: str, suffix: str = ".md", *, editor: str | None = None) -> str:
    """Open *content* in the editor and return the edited text.

    Args:
        content: Initial content written to the temp file.
        suffix: Temp file extension (default ``".md"`` for syntax highlighting).
        editor: Editor command line; defaults to :func:`find_editor`.
            May carry arguments (``"code --wait"``).

    Raises:
        EditorError: the temp file could not be written or read back, the
            editor could not be started, or it exited non-zero.
    """
    editor = editor or find_editor()
    tmp_path: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            prefix="lazybeads-", suffix=suffix, mode="w", delete=False,
        ) as f:
            tmp_path = f.name
            f.write(content)

        argv = shlex.split(editor) + [tmp_path]
        _log.info("editor: %s", shlex.join(argv))
        try:
            ret = subprocess.call(argv)
        except OSError as e:
            raise EditorError(f"failed to start editor {editor!r}: {e}") from e
        if ret != 0:
            raise EditorError(f"editor {editor!r} exited with status {ret}")

        return Path(tmp_path).read_text()
    except OSError as e:
        if tmp_path is None:
            raise EditorError(f"failed to create temp file: {e}") from e
        raise EditorError(f"temp file error: {e}") from e
    finally:
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                _log.warning("could not remove temp file %s", tmp_path)
