"""Editor pane lifecycle: reuse the window's editor pane or spawn one.

Each window has at most one editor pane, remembered in the window store.
The decision is a two-state machine:

    NO_PANE --SPAWNED--> PANE_ACTIVE
    PANE_ACTIVE --SELECT_FAILED--> NO_PANE

A stored pane id that tmux no longer lists (the user closed it) starts
in NO_PANE, as does a pane that vanishes between the liveness check and
the select.  Both are recovered by spawning; neither is reported.

The check-then-spawn sequence holds a per-window advisory lock so two
tmux-vim invocations racing in one window can't both spawn a pane.
"""

import errno
import fcntl
import os
import time
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum

from tvim_core import tmux as tmux_mod
from tvim_core.config import EditorConfig
from tvim_core.geometry import VERTICAL, SplitGeometry, compute_split
from tvim_core.paths import configure_logger, window_lock_path
from tvim_core.window_store import WindowStore

_log = configure_logger("tvim.lifecycle")

PANE_KEY = "TMUX_VIM_PANE"
DIR_KEY = "TMUX_VIM_DIR"

LOCK_TIMEOUT_SECONDS = 2.0


class PaneState(Enum):
    NO_PANE = "no-pane"
    PANE_ACTIVE = "pane-active"


class PaneEvent(Enum):
    PANE_ALIVE = "pane-alive"
    PANE_MISSING = "pane-missing"
    SELECT_FAILED = "select-failed"
    SPAWNED = "spawned"


_TRANSITIONS = {
    (PaneState.NO_PANE, PaneEvent.PANE_ALIVE): PaneState.PANE_ACTIVE,
    (PaneState.NO_PANE, PaneEvent.PANE_MISSING): PaneState.NO_PANE,
    (PaneState.NO_PANE, PaneEvent.SPAWNED): PaneState.PANE_ACTIVE,
    (PaneState.PANE_ACTIVE, PaneEvent.SELECT_FAILED): PaneState.NO_PANE,
    (PaneState.PANE_ACTIVE, PaneEvent.PANE_MISSING): PaneState.NO_PANE,
}


def next_state(state: PaneState, event: PaneEvent) -> PaneState:
    """Return the state after *event*. Undefined transitions raise ValueError."""
    try:
        return _TRANSITIONS[(state, event)]
    except KeyError:
        raise ValueError(f"invalid transition: {event.value} in {state.value}") from None


class PaneLockTimeout(Exception):
    """Raised when the window's lock cannot be acquired within the timeout."""


@dataclass(frozen=True)
class PaneResult:
    pane_id: str
    spawned: bool


def is_alive(pane_id: str | None) -> bool:
    """Check whether tmux still has a pane with exactly this id."""
    if not pane_id:
        return False
    live_ids = {p.pane_id for p in tmux_mod.list_panes()}
    return pane_id in live_ids


@contextmanager
def window_lock(window_id: str, timeout: float = LOCK_TIMEOUT_SECONDS):
    """Hold an exclusive advisory lock for *window_id* on this tmux server."""
    lock_path = window_lock_path(window_id)
    deadline = time.monotonic() + timeout
    fd = open(lock_path, "w")
    try:
        while True:
            try:
                fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except OSError as e:
                if e.errno not in (errno.EACCES, errno.EAGAIN):
                    raise
                if time.monotonic() >= deadline:
                    fd.close()
                    raise PaneLockTimeout(
                        f"Could not acquire lock on {lock_path} within "
                        f"{timeout}s: another tmux-vim is still opening a pane "
                        f"in this window."
                    ) from None
                time.sleep(0.05)
        yield fd
    finally:
        if not fd.closed:
            try:
                fcntl.flock(fd, fcntl.LOCK_UN)
            except OSError:
                pass
            fd.close()


class EditorPaneManager:
    """Finds or creates the editor pane for the current window."""

    def __init__(self, config: EditorConfig, store: WindowStore | None = None,
                 use_lock: bool = True, lock_timeout: float = LOCK_TIMEOUT_SECONDS):
        self.config = config
        self.store = store or WindowStore()
        self.use_lock = use_lock
        self.lock_timeout = lock_timeout

    def ensure_pane(self, cwd: str | None = None) -> PaneResult:
        """Return the window's editor pane, spawning it if needed."""
        cwd = cwd or os.getcwd()
        if not self.use_lock:
            return self._resolve(cwd)
        with window_lock(self.store.window(), timeout=self.lock_timeout):
            return self._resolve(cwd)

    def _resolve(self, cwd: str) -> PaneResult:
        pane_id = self.store.get(PANE_KEY)
        event = PaneEvent.PANE_ALIVE if is_alive(pane_id) else PaneEvent.PANE_MISSING
        state = next_state(PaneState.NO_PANE, event)

        if state is PaneState.PANE_ACTIVE:
            if tmux_mod.select_pane(pane_id):
                _log.info("ensure_pane: reusing %s", pane_id)
                return PaneResult(pane_id, spawned=False)
            _log.info("ensure_pane: %s vanished before select, respawning", pane_id)
            state = next_state(state, PaneEvent.SELECT_FAILED)
        elif pane_id:
            _log.info("ensure_pane: stored pane %s is gone, respawning", pane_id)

        new_id = self._spawn(cwd)
        state = next_state(state, PaneEvent.SPAWNED)
        _log.debug("ensure_pane: state=%s", state.value)
        return PaneResult(new_id, spawned=True)

    def geometry(self) -> SplitGeometry:
        width, _ = tmux_mod.get_client_size()
        return compute_split(
            width,
            pane_width=self.config.width,
            pane_count=self.config.count,
            shell_width=self.config.shell_width,
            shell_height=self.config.shell_height,
            method=self.config.split,
        )

    def _spawn(self, cwd: str) -> str:
        geom = self.geometry()
        origin = tmux_mod.current_pane()
        pane_id = tmux_mod.split_window(
            geom.flag, geom.size, self.config.editor_command,
            cwd=cwd, target=origin,
        )
        if geom.method == VERTICAL and origin:
            # Editor on top, shell keeps the short bottom pane
            tmux_mod.swap_pane(pane_id, origin)
        self.store.set(PANE_KEY, pane_id)
        self.store.set(DIR_KEY, cwd)
        _log.info("spawned %s (%s, size=%d) in %s running %r",
                  pane_id, geom.method, geom.size, cwd, self.config.editor_command)
        return pane_id
