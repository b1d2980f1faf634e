"""Click entry point for tmux-vim."""

import os
import subprocess
from pathlib import Path

import click

from tvim_core import tmux as tmux_mod
from tvim_core.config import SPLIT_METHODS, ConfigError, load_config
from tvim_core.dispatcher import open_files
from tvim_core.lifecycle import DIR_KEY, EditorPaneManager, PaneLockTimeout
from tvim_core.paths import configure_logger, default_config_path, format_command, set_debug
from tvim_core.window_store import WindowStore

_log = configure_logger("tvim.cli")

# Make -h and --help both work
CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


def _fail(message: str) -> None:
    click.echo(f"tmux-vim: {message}", err=True)
    raise SystemExit(1)


@click.command(context_settings=CONTEXT_SETTINGS)
@click.argument("files", nargs=-1, type=click.Path())
@click.option("--editor", envvar="TMUX_VIM_BINARY", default=None,
              help="Editor binary to run in the pane (default vim)")
@click.option("--editor-args", envvar="TMUX_VIM_ARGS", default=None,
              help="Extra arguments for the editor")
@click.option("--width", envvar="TMUX_VIM_WIDTH", type=int, default=None,
              help="Width of one editor column (default 80)")
@click.option("--count", envvar="TMUX_VIM_COUNT", type=int, default=None,
              help="Maximum number of editor columns to make room for")
@click.option("--shell-width", envvar="TMUX_VIM_SHELL_WIDTH", type=int, default=None,
              help="Columns to leave for the shell (default 132)")
@click.option("--shell-height", envvar="TMUX_VIM_SHELL_HEIGHT", type=int, default=None,
              help="Rows to leave for the shell in vertical mode (default 15)")
@click.option("--split", envvar="TMUX_VIM_SPLIT", default=None,
              type=click.Choice(SPLIT_METHODS),
              help="Put the editor beside (horizontal) or above (vertical) the shell")
@click.option("--config", "config_path", envvar="TMUX_VIM_CONFIG", default=None,
              type=click.Path(dir_okay=False, path_type=Path),
              help="YAML config file (default ~/.tmux-vim.yaml)")
@click.option("--debug", is_flag=True, envvar="TMUX_VIM_DEBUG",
              help="Log at debug level to ~/.tmux-vim/debug/tmux-vim.log")
def cli(files, editor, editor_args, width, count, shell_width, shell_height,
        split, config_path, debug):
    """Open FILES in this window's editor pane, creating the pane if needed.

    With no FILES the editor pane is just focused (or created).

    \b
    Examples:
      tmux-vim                      # focus or create the editor pane
      tmux-vim src/*.py             # load files as buffers, show the last
      tmux-vim --split vertical     # editor above the shell
    """
    if debug:
        set_debug(True)

    try:
        tmux_mod.check_preconditions()
    except tmux_mod.TmuxUnavailable as e:
        _fail(str(e))

    overrides = {
        "editor": editor,
        "editor_args": editor_args,
        "width": width,
        "count": count,
        "shell_width": shell_width,
        "shell_height": shell_height,
        "split": split,
    }
    try:
        config = load_config(config_path or default_config_path(), overrides,
                             required=config_path is not None)
    except ConfigError as e:
        _fail(str(e))

    cwd = os.getcwd()
    store = WindowStore()
    manager = EditorPaneManager(config, store)
    _log.info("tmux-vim: %d file(s) from %s", len(files), cwd)

    try:
        result = manager.ensure_pane(cwd)
        open_files(result.pane_id, list(files), cwd, store.get(DIR_KEY))
    except PaneLockTimeout as e:
        _fail(str(e))
    except subprocess.CalledProcessError as e:
        _log.warning("tmux call failed (rc=%s): %s", e.returncode, format_command(e.cmd))
        _fail(f"tmux command failed: {format_command(e.cmd)}")


def main():
    cli()
