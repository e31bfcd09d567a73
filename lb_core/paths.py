"""Centralized path management for lazybeads.

Config lives under the XDG config dir, logs under the XDG state dir:
- $XDG_CONFIG_HOME/lazybeads/config.yml  - custom commands
- $XDG_STATE_HOME/lazybeads/debug/       - rotating log files
"""

import logging
import os
from pathlib import Path

APP_NAME = "lazybeads"
LOG_FILENAME = "lazybeads.log"
DEBUG_ENV_VAR = "LAZYBEADS_DEBUG"


def config_dir() -> Path:
    """Return the config directory ($XDG_CONFIG_HOME/lazybeads).

    Not created: a missing config directory simply means no config.
    """
    base = os.environ.get("XDG_CONFIG_HOME")
    root = Path(base) if base else Path.home() / ".config"
    return root / APP_NAME


def config_file() -> Path:
    """Return the default config file path."""
    return config_dir() / "config.yml"


def state_dir() -> Path:
    """Return the state directory ($XDG_STATE_HOME/lazybeads/)."""
    base = os.environ.get("XDG_STATE_HOME")
    root = Path(base) if base else Path.home() / ".local" / "state"
    d = root / APP_NAME
    d.mkdir(parents=True, exist_ok=True)
    return d


def debug_dir() -> Path:
    """Return the debug/logs directory.

    Contains the rotating log file for the TUI and the tracker client.
    """
    d = state_dir() / "debug"
    d.mkdir(parents=True, exist_ok=True)
    return d


def log_file() -> Path:
    return debug_dir() / LOG_FILENAME


def debug_enabled() -> bool:
    """Check if debug logging is enabled via LAZYBEADS_DEBUG."""
    return os.environ.get(DEBUG_ENV_VAR, "").strip().lower() in ("1", "true", "yes")


def set_debug(enabled: bool = True) -> None:
    """Enable or disable debug logging for this process and its loggers."""
    if enabled:
        os.environ[DEBUG_ENV_VAR] = "1"
    else:
        os.environ.pop(DEBUG_ENV_VAR, None)
    level = logging.DEBUG if enabled else logging.INFO
    for name in list(logging.root.manager.loggerDict):
        if name == "lb" or name.startswith("lb."):
            logging.getLogger(name).setLevel(level)


def configure_logger(name: str, max_bytes: int = 10_000_000) -> logging.Logger:
    """Configure a logger that always writes to file with rotation.

    Args:
        name: Logger name (e.g., "lb.tui")
        max_bytes: Maximum log file size before rotation (default 10MB)

    Returns:
        Configured logger instance
    """
    from logging.handlers import RotatingFileHandler

    logger = logging.getLogger(name)

    # Avoid adding duplicate handlers
    if logger.handlers:
        return logger

    handler = RotatingFileHandler(
        log_file(),
        maxBytes=max_bytes,
        backupCount=1,  # Keep one backup file
    )
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(handler)
    logger.propagate = False

    if debug_enabled():
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    return logger
