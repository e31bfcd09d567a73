"""Shared shell helpers for the TUI modules."""

import shlex
import subprocess

from lb_core.paths import configure_logger

_log = configure_logger("lb.tui.shell")


def start_detached(command: str) -> subprocess.Popen:
    """Start ``sh -c command`` in its own session and return immediately.

    Output is discarded and the exit status is never collected. Raises
    OSError when the shell cannot be started.
    """
    argv = ["sh", "-c", command]
    _log.info("shell detached: %s", shlex.join(argv))
    try:
        return subprocess.Popen(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as e:
        _log.warning("shell detached failed to start: %s", e)
        raise
