"""Send file-open commands to the editor pane.

Files are loaded with ``:badd`` rather than ``:edit`` so an unsaved
current buffer can't raise a save prompt that would swallow the rest of
the keystrokes.  The last file is then made visible with ``:buffer``.

Keystrokes are sent one command at a time, in order; the editor's buffer
list depends on that order.
"""

import os

from tvim_core import tmux as tmux_mod
from tvim_core.paths import configure_logger

_log = configure_logger("tvim.dispatcher")

# Characters vim's fnameescape() escapes on Unix
_ESCAPE_CHARS = set(" \t\n*?[{`$\\%#'\"|!<")


def escape_path(path: str) -> str:
    """Escape *path* for use as an Ex command argument."""
    if path == "-":
        return "\\-"
    out = []
    for i, ch in enumerate(path):
        if ch in _ESCAPE_CHARS or (i == 0 and ch in "+>"):
            out.append("\\")
        out.append(ch)
    return "".join(out)


def build_commands(files: list[str], cwd: str, last_dir: str | None) -> list[str]:
    """Return the Ex commands that load *files*, in send order.

    Relative names are resolved by the editor against its own working
    directory, so when the shell has moved elsewhere the editor visits
    *cwd* for the loads and then returns with ``:cd -``.
    """
    if not files:
        return []
    commands = []
    switch_dir = cwd != last_dir
    if switch_dir:
        commands.append(f":cd {escape_path(cwd)}")
    for name in files:
        commands.append(f":badd {escape_path(name)}")
    last = files[-1]
    if switch_dir:
        commands.append(":cd -")
        # Back in the editor's own directory the short name may match
        # a different buffer
        last = os.path.join(cwd, last)
    commands.append(f":buffer {escape_path(last)}")
    return commands


def open_files(pane_id: str, files: list[str], cwd: str, last_dir: str | None) -> list[str]:
    """Load *files* into the editor in *pane_id* and focus it.

    With no files this only puts the editor in normal mode and focuses
    the pane.  Returns the commands that were sent.
    """
    tmux_mod.send_keys_literal(pane_id, "Escape")
    commands = build_commands(files, cwd, last_dir)
    for command in commands:
        tmux_mod.send_keys(pane_id, command)
    tmux_mod.select_pane(pane_id)
    _log.info("open_files: %s <- %d file(s)", pane_id, len(files))
    return commands
