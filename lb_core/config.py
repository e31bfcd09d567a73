"""Load ``config.yml``: user-defined custom commands bound to keys.

Example::

    customCommands:
      - key: "T"
        description: "Open task in a new tmux window"
        context: "list"
        command: "tmux new-window -n {{.ID}} 'bd show {{sh .ID}}; read'"

The configuration is loaded once at startup and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from lb_core.paths import config_file, configure_logger

_log = configure_logger("lb.config")

CONTEXT_LIST = "list"
CONTEXT_DETAIL = "detail"
CONTEXT_GLOBAL = "global"
CONTEXTS = (CONTEXT_LIST, CONTEXT_DETAIL, CONTEXT_GLOBAL)


class ConfigError(Exception):
    """Raised when config.yml exists but cannot be used."""


@dataclass(frozen=True)
class CustomCommand:
    """A shell command template bound to a key in a UI context."""

    key: str
    command: str
    description: str = ""
    context: str = CONTEXT_LIST

    def applies_to(self, context: str) -> bool:
        return self.context == context or self.context == CONTEXT_GLOBAL


@dataclass(frozen=True)
class Config:
    custom_commands: tuple[CustomCommand, ...] = field(default_factory=tuple)


def _parse_command(raw, index: int) -> CustomCommand:
    if not isinstance(raw, dict):
        raise ConfigError(f"customCommands[{index}]: expected a mapping")
    key = str(raw.get("key") or "")
    command = str(raw.get("command") or "")
    if not key:
        raise ConfigError(f"customCommands[{index}]: missing 'key'")
    if not command:
        raise ConfigError(f"customCommands[{index}]: missing 'command'")
    context = str(raw.get("context") or CONTEXT_LIST)
    if context not in CONTEXTS:
        raise ConfigError(
            f"customCommands[{index}]: invalid context {context!r} "
            f"(expected one of: {', '.join(CONTEXTS)})"
        )
    return CustomCommand(
        key=key,
        command=command,
        description=str(raw.get("description") or ""),
        context=context,
    )


def load(path: Path | None = None) -> Config:
    """Load config from *path* (default: the XDG config file).

    A missing file yields an empty Config.
    """
    if path is None:
        path = config_file()
    if not path.exists():
        _log.debug("no config at %s", path)
        return Config()

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"{path}: invalid YAML: {e}") from e
    except OSError as e:
        raise ConfigError(f"{path}: {e}") from e

    if data is None:
        return Config()
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")

    raw_commands = data.get("customCommands") or []
    if not isinstance(raw_commands, list):
        raise ConfigError(f"{path}: customCommands must be a list")

    commands = tuple(_parse_command(raw, i) for i, raw in enumerate(raw_commands))
    _log.info("loaded %d custom command(s) from %s", len(commands), path)
    return Config(custom_commands=commands)
