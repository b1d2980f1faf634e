"""Tmux control interface for tmux-vim.

Every call into tmux goes through this module, and all parsing of tmux's
text output happens here so callers only ever see structured results.
"""

import os
import re
import shutil
import subprocess
from dataclasses import dataclass

from tvim_core.paths import configure_logger, format_command

_log = configure_logger("tvim.tmux")

# split-window -c needs tmux 1.9
MIN_TMUX_VERSION = (1, 9)

_VERSION_RE = re.compile(r"(\d+)\.(\d+)")


class TmuxUnavailable(Exception):
    """Raised when tmux-vim can't run: no session, no tmux, or tmux too old."""


@dataclass(frozen=True)
class PaneInfo:
    """One line of ``list-panes -a`` output."""
    pane_id: str
    window_index: int
    window_id: str


def _tmux_cmd(*args: str) -> list[str]:
    """Build a tmux command, honouring $TMUX_VIM_SOCKET if set."""
    cmd = ["tmux"]
    sp = os.environ.get("TMUX_VIM_SOCKET")
    if sp:
        cmd.extend(["-S", sp])
    cmd.extend(args)
    return cmd


def _run(*args: str, **kwargs) -> subprocess.CompletedProcess:
    """Run a tmux command, logging it first."""
    cmd = _tmux_cmd(*args)
    _log.debug("tmux: %s", format_command(cmd))
    result = subprocess.run(cmd, **kwargs)
    if result.returncode != 0:
        _log.debug("tmux failed (rc=%s): %s", result.returncode, format_command(cmd))
    return result


def has_tmux() -> bool:
    """Check if tmux is installed."""
    return shutil.which("tmux") is not None


def in_tmux() -> bool:
    """Check if we're currently inside a tmux session."""
    return bool(os.environ.get("TMUX"))


def current_pane() -> str | None:
    """Return the pane id of the invoking shell ($TMUX_PANE), if known."""
    return os.environ.get("TMUX_PANE") or None


def parse_version(text: str) -> tuple[int, int] | None:
    """Parse ``tmux -V`` output into (major, minor).

    Development builds ("tmux master") carry no number and return None.
    """
    m = _VERSION_RE.search(text)
    if not m:
        return None
    return int(m.group(1)), int(m.group(2))


def tmux_version() -> tuple[int, int] | None:
    """Return the installed tmux version, or None if it can't be parsed."""
    result = _run("-V", capture_output=True, text=True)
    if result.returncode != 0:
        return None
    return parse_version(result.stdout)


def check_preconditions() -> None:
    """Make sure we run inside a tmux session on a supported tmux.

    Raises TmuxUnavailable with a user-facing message otherwise.
    """
    if not has_tmux():
        raise TmuxUnavailable("tmux is not installed.")
    if not in_tmux():
        raise TmuxUnavailable("not running inside a tmux session ($TMUX is unset).")
    version = tmux_version()
    if version is not None and version < MIN_TMUX_VERSION:
        want = ".".join(str(n) for n in MIN_TMUX_VERSION)
        have = ".".join(str(n) for n in version)
        raise TmuxUnavailable(f"tmux {want} or newer is required (found {have}).")


def _display(fmt: str) -> subprocess.CompletedProcess:
    """Run display-message against the invoking pane when we know it.

    Targeting $TMUX_PANE is more reliable than the "current client",
    which can be a different window when run from a background process.
    """
    pane = current_pane()
    if pane:
        return _run("display-message", "-p", "-t", pane, fmt,
                    capture_output=True, text=True)
    return _run("display-message", "-p", fmt, capture_output=True, text=True)


def current_window_id() -> str:
    """Get the id (e.g. ``@3``) of the window holding the invoking pane.

    Raises CalledProcessError if tmux can't say; per-window state must
    never fall back to a key shared by every window.
    """
    result = _display("#{window_id}")
    window_id = result.stdout.strip() if result.returncode == 0 else ""
    if not window_id:
        _log.warning("current_window_id: display-message failed: %s",
                     (result.stderr or "").strip())
        raise subprocess.CalledProcessError(
            result.returncode or 1, result.args, result.stdout, result.stderr)
    return window_id


def get_client_size() -> tuple[int, int]:
    """Get client dimensions as (width, height), (0, 0) if unknown."""
    result = _display("#{client_width} #{client_height}")
    if result.returncode != 0:
        _log.warning("get_client_size: display-message failed")
        return (0, 0)
    parts = result.stdout.strip().split()
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        return (0, 0)
    return (int(parts[0]), int(parts[1]))


def parse_pane_list(output: str) -> list[PaneInfo]:
    """Parse ``#{pane_id} #{window_index} #{window_id}`` lines."""
    panes = []
    for line in output.strip().splitlines():
        parts = line.split()
        if len(parts) != 3 or not parts[1].isdigit():
            continue
        panes.append(PaneInfo(parts[0], int(parts[1]), parts[2]))
    return panes


def list_panes() -> list[PaneInfo]:
    """List every live pane on the server."""
    result = _run("list-panes", "-a", "-F",
                  "#{pane_id} #{window_index} #{window_id}",
                  capture_output=True, text=True)
    if result.returncode != 0:
        _log.warning("list_panes failed: %s", (result.stderr or "").strip())
        return []
    return parse_pane_list(result.stdout)


def parse_environment(output: str, name: str) -> str | None:
    """Extract *name*'s value from ``show-environment`` output.

    ``NAME=value`` is set; ``-NAME`` means the variable was removed.
    """
    for line in output.splitlines():
        if line.startswith(name + "="):
            return line[len(name) + 1:]
    return None


def show_environment(name: str) -> str | None:
    """Read a variable from tmux's global environment, None if absent."""
    result = _run("show-environment", "-g", name, capture_output=True, text=True)
    if result.returncode != 0:
        # "unknown variable" is how tmux reports a missing key
        return None
    return parse_environment(result.stdout, name)


def set_environment(name: str, value: str) -> None:
    """Set a variable in tmux's global environment."""
    _run("set-environment", "-g", name, value, check=True)


def split_window(direction: str, size: int, cmd: str, cwd: str | None = None,
                 target: str | None = None) -> str:
    """Split a pane and run cmd in the new one. Returns the new pane ID.

    direction: 'h' for horizontal (left/right), 'v' for vertical (top/bottom)
    size: width (for 'h') or height (for 'v') of the new pane in cells
    """
    flag = "-h" if direction == "h" else "-v"
    args = ["split-window", flag, "-l", str(size), "-P", "-F", "#{pane_id}"]
    if target:
        args.extend(["-t", target])
    if cwd:
        args.extend(["-c", cwd])
    args.append(cmd)
    result = _run(*args, capture_output=True, text=True, check=True)
    return result.stdout.strip()


def send_keys(pane_target: str, keys: str) -> None:
    """Send keys to a tmux pane (followed by Enter)."""
    _run("send-keys", "-t", pane_target, keys, "Enter", check=True)


def send_keys_literal(pane_target: str, keys: str) -> None:
    """Send keys to a tmux pane (no Enter appended)."""
    _run("send-keys", "-t", pane_target, keys, check=True)


def select_pane(pane_id: str) -> bool:
    """Focus a specific pane. Returns True on success."""
    result = _run("select-pane", "-t", pane_id, capture_output=True, text=True)
    return result.returncode == 0


def swap_pane(src_pane: str, dst_pane: str) -> None:
    """Swap two panes, keeping the active pane where it is."""
    _run("swap-pane", "-s", src_pane, "-t", dst_pane, "-d", check=True)
