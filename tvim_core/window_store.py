"""Per-window named values kept in tmux's global environment.

tmux-vim is stateless between invocations; anything it must remember
(which pane holds the editor, where that editor was started) is stored
as a tmux environment variable whose name carries the window id.  The
values therefore live exactly as long as the tmux server does.
"""

from typing import Callable

from tvim_core import tmux as tmux_mod
from tvim_core.paths import configure_logger

_log = configure_logger("tvim.window_store")


def key_for(name: str, window: str) -> str:
    """Return the environment variable name for *name* in *window*.

    Window ids look like ``@3``; the ``@`` is dropped so the result is a
    plain shell-style identifier (``TMUX_VIM_PANE_3``).
    """
    if not window.lstrip("@"):
        raise ValueError(f"no window to scope {name} to")
    return f"{name}_{window.lstrip('@')}"


class WindowStore:
    """get/set of named values scoped to the current tmux window.

    *window_key* is called on every operation rather than once, so a
    store object never answers for a window it was created in but is no
    longer running in.
    """

    def __init__(self, window_key: Callable[[], str] | None = None):
        self._window_key = window_key or tmux_mod.current_window_id

    def window(self) -> str:
        return self._window_key()

    def get(self, name: str) -> str | None:
        """Return the stored value, or None if nothing was stored."""
        key = key_for(name, self.window())
        value = tmux_mod.show_environment(key)
        _log.debug("store get %s -> %r", key, value)
        return value or None

    def set(self, name: str, value: str) -> None:
        """Store *value*, overwriting anything stored before."""
        key = key_for(name, self.window())
        tmux_mod.set_environment(key, value)
        _log.debug("store set %s = %r", key, value)
