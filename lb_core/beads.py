"""beads (``bd``) CLI wrapper: list, create, update and delete issues."""

from __future__ import annotations

import json
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from lb_core.models import Task
from lb_core.paths import configure_logger

_log = configure_logger("lb.beads")

BD_TIMEOUT_SECONDS = 30


class TrackerError(Exception):
    """Raised when a bd invocation fails."""


@dataclass(frozen=True)
class UpdateOptions:
    """Sparse patch for ``bd update``. Unset fields are left unchanged."""

    title: str | None = None
    status: str | None = None
    priority: int | None = None
    type: str | None = None
    description: str | None = None
    notes: str | None = None

    def is_empty(self) -> bool:
        return all(
            v is None for v in (self.title, self.status, self.priority,
                                self.type, self.description, self.notes)
        )

    def to_args(self) -> list[str]:
        args: list[str] = []
        if self.title is not None:
            args += ["--title", self.title]
        if self.status is not None:
            args += ["--status", self.status]
        if self.priority is not None:
            args += ["--priority", str(self.priority)]
        if self.type is not None:
            args += ["--type", self.type]
        if self.description is not None:
            args += ["--description", self.description]
        if self.notes is not None:
            args += ["--notes", self.notes]
        return args


@dataclass(frozen=True)
class CreateOptions:
    title: str
    description: str = ""
    priority: int = 2
    type: str = "task"

    def to_args(self) -> list[str]:
        args = [self.title, "--priority", str(self.priority), "--type", self.type]
        if self.description:
            args += ["--description", self.description]
        return args


def find_bd() -> str | None:
    """Return the path to the bd binary, or None if not installed."""
    return shutil.which("bd")


class BeadsClient:
    """Runs bd sub-commands in the project directory."""

    def __init__(self, bd: str = "bd", cwd: Path | None = None,
                 timeout: float = BD_TIMEOUT_SECONDS) -> None:
        self.bd = bd
        self.cwd = cwd
        self.timeout = timeout

    def _run(self, *args: str) -> str:
        cmd = [self.bd, *args]
        _log.info("bd: %s", shlex.join(cmd))
        try:
            result = subprocess.run(
                cmd,
                cwd=str(self.cwd) if self.cwd else None,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise TrackerError(f"{self.bd} not found; install beads first") from e
        except subprocess.TimeoutExpired as e:
            raise TrackerError(f"bd {args[0]} timed out after {self.timeout}s") from e
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            _log.warning("bd failed (rc=%d): %s", result.returncode, stderr[:200])
            if stderr:
                raise TrackerError(stderr.splitlines()[-1])
            raise TrackerError(f"bd {args[0]} failed (rc={result.returncode})")
        return result.stdout

    def list_tasks(self) -> list[Task]:
        out = self._run("list", "--json")
        try:
            raw = json.loads(out or "[]")
        except json.JSONDecodeError as e:
            raise TrackerError(f"bd list returned invalid JSON: {e}") from e
        if not isinstance(raw, list):
            raise TrackerError("bd list returned unexpected JSON")
        try:
            return [Task.from_dict(item) for item in raw]
        except (KeyError, TypeError) as e:
            raise TrackerError(f"bd list returned a malformed issue: {e}") from e

    def update(self, task_id: str, options: UpdateOptions) -> None:
        if options.is_empty():
            _log.debug("update %s: empty patch, skipping", task_id)
            return
        self._run("update", task_id, *options.to_args())

    def delete(self, task_id: str) -> None:
        self._run("delete", task_id, "--force")

    def create(self, options: CreateOptions) -> str:
        """Create an issue and return its ID."""
        out = self._run("create", *options.to_args(), "--json")
        try:
            created = json.loads(out)
        except json.JSONDecodeError as e:
            raise TrackerError(f"bd create returned invalid JSON: {e}") from e
        if isinstance(created, dict) and created.get("id"):
            return created["id"]
        raise TrackerError("bd create did not report an issue id")
