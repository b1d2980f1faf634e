"""Centralized path management for tmux-vim.

All tmux-vim state outside of tmux itself lives under ~/.tmux-vim/
(or $TMUX_VIM_HOME):
- ~/.tmux-vim/debug/  - Rotating command log
- ~/.tmux-vim/locks/  - Per-window advisory lock files

Lock files are keyed by a hash of the tmux server socket so windows
with the same id on different servers never share a lock.
"""

import hashlib
import logging
import os
import shlex
from pathlib import Path


def tvim_home() -> Path:
    """Return the tmux-vim home directory (~/.tmux-vim/)."""
    override = os.environ.get("TMUX_VIM_HOME")
    d = Path(override) if override else Path.home() / ".tmux-vim"
    d.mkdir(parents=True, exist_ok=True)
    return d


def debug_dir() -> Path:
    """Return the debug/logs directory (~/.tmux-vim/debug/)."""
    d = tvim_home() / "debug"
    d.mkdir(parents=True, exist_ok=True)
    return d


def locks_dir() -> Path:
    """Return the lock directory (~/.tmux-vim/locks/)."""
    d = tvim_home() / "locks"
    d.mkdir(parents=True, exist_ok=True)
    return d


def default_config_path() -> Path:
    """Return the default user config file (~/.tmux-vim.yaml)."""
    return Path.home() / ".tmux-vim.yaml"


def debug_enabled() -> bool:
    """Check if debug logging was requested via $TMUX_VIM_DEBUG."""
    return os.environ.get("TMUX_VIM_DEBUG", "") not in ("", "0", "false")


def server_tag() -> str:
    """Return a short stable tag for the tmux server we are attached to.

    $TMUX has the form ``socket_path,server_pid,session_index``; only the
    socket path identifies the server across invocations.
    """
    socket_path = os.environ.get("TMUX", "").split(",")[0]
    return hashlib.md5(socket_path.encode()).hexdigest()[:8]


def window_lock_path(window_id: str) -> Path:
    """Return the advisory lock file for a window on the current server."""
    return locks_dir() / f"{server_tag()}-{window_id.lstrip('@')}.lock"


def command_log_file() -> Path:
    """Get the path to the command log file.

    Located at ~/.tmux-vim/debug/tmux-vim.log
    """
    return debug_dir() / "tmux-vim.log"


def configure_logger(name: str, max_bytes: int = 10_000_000) -> logging.Logger:
    """Configure a logger that always writes to file with rotation.

    Args:
        name: Logger name (e.g., "tvim.lifecycle")
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
        command_log_file(),
        maxBytes=max_bytes,
        backupCount=1,
    )
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(handler)
    logger.propagate = False

    # Debug level when debug mode enabled, INFO otherwise
    set_debug(debug_enabled(), logger)
    return logger


def set_debug(enabled: bool, logger: logging.Logger | None = None) -> None:
    """Switch one logger, or every tvim logger, between DEBUG and INFO."""
    level = logging.DEBUG if enabled else logging.INFO
    if logger is not None:
        logger.setLevel(level)
        return
    for name, candidate in logging.root.manager.loggerDict.items():
        if name.startswith("tvim.") and isinstance(candidate, logging.Logger):
            candidate.setLevel(level)


def format_command(cmd: list[str] | str) -> str:
    """Render a command for the log."""
    return shlex.join(cmd) if isinstance(cmd, list) else cmd
