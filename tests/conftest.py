"""Shared test helpers for tvim_core tests."""

import os
import tempfile

import pytest

# Loggers are configured at import time; keep their files out of ~
os.environ.setdefault("TMUX_VIM_HOME", tempfile.mkdtemp(prefix="tvim-test-"))

from tvim_core.tmux import PaneInfo, TmuxUnavailable  # noqa: E402
from tvim_core.window_store import WindowStore, key_for  # noqa: E402


class MemoryStore(WindowStore):
    """WindowStore backed by a dict instead of tmux's environment."""

    def __init__(self, window: str = "@1", env: dict | None = None):
        self.current = window
        self.env = {} if env is None else env
        super().__init__(window_key=lambda: self.current)

    def get(self, name):
        return self.env.get(key_for(name, self.window())) or None

    def set(self, name, value):
        self.env[key_for(name, self.window())] = value


class FakeTmux:
    """Just enough of tvim_core.tmux for lifecycle and CLI tests.

    Tracks live panes and records every spawn, swap, select and key.
    """

    TmuxUnavailable = TmuxUnavailable

    def __init__(self, live=(), client_size=(212, 50), origin="%0"):
        self.live = set(live)
        self.client_size = client_size
        self.origin = origin
        self.spawns = []
        self.swaps = []
        self.selects = []
        self.keys = []
        self.select_fails = set()
        self.on_split = None
        self._next = 100

    def list_panes(self):
        return [PaneInfo(p, 0, "@1") for p in sorted(self.live)]

    def select_pane(self, pane_id):
        self.selects.append(pane_id)
        if pane_id in self.select_fails:
            return False
        return pane_id in self.live

    def get_client_size(self):
        return self.client_size

    def current_pane(self):
        return self.origin

    def split_window(self, direction, size, cmd, cwd=None, target=None):
        if self.on_split is not None:
            hook, self.on_split = self.on_split, None
            hook()
        pane_id = f"%{self._next}"
        self._next += 1
        self.live.add(pane_id)
        self.spawns.append((direction, size, cmd, cwd, target))
        return pane_id

    def swap_pane(self, src, dst):
        self.swaps.append((src, dst))

    def send_keys(self, pane_id, keys):
        self.keys.append((pane_id, keys, "Enter"))

    def send_keys_literal(self, pane_id, keys):
        self.keys.append((pane_id, keys))

    def check_preconditions(self):
        pass


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def fake_tmux():
    return FakeTmux()


@pytest.fixture
def tvim_home(tmp_path, monkeypatch):
    """Point TMUX_VIM_HOME at a fresh directory."""
    monkeypatch.setenv("TMUX_VIM_HOME", str(tmp_path))
    monkeypatch.setenv("TMUX", "/tmp/tmux-1000/default,1234,0")
    return tmp_path
