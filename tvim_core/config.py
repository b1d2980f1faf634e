"""Configuration for tmux-vim.

Settings come from three places, highest priority first:

1. Command-line options and their TMUX_VIM_* environment variables
   (resolved by click before we get here).
2. The YAML config file, ~/.tmux-vim.yaml or $TMUX_VIM_CONFIG.
3. Built-in defaults.
"""

from dataclasses import dataclass, fields, replace
from pathlib import Path

import yaml

from tvim_core.geometry import (
    DEFAULT_SHELL_HEIGHT,
    DEFAULT_SHELL_WIDTH,
    HORIZONTAL,
    VERTICAL,
)

SPLIT_METHODS = (HORIZONTAL, VERTICAL)

# Settings that must be positive integers when given
_INT_KEYS = {"width", "count", "shell_width", "shell_height"}


class ConfigError(Exception):
    """Raised for an unreadable config file or an invalid setting."""


@dataclass(frozen=True)
class EditorConfig:
    editor: str = "vim"
    editor_args: str = ""
    width: int | None = None
    count: int | None = None
    shell_width: int = DEFAULT_SHELL_WIDTH
    shell_height: int = DEFAULT_SHELL_HEIGHT
    split: str = HORIZONTAL

    @property
    def editor_command(self) -> str:
        """Shell command run in the new pane."""
        if self.editor_args:
            return f"{self.editor} {self.editor_args}"
        return self.editor


def _known_keys() -> set[str]:
    return {f.name for f in fields(EditorConfig)}


def _validate(settings: dict, source: str) -> dict:
    """Check keys and value types, returning a cleaned copy."""
    unknown = set(settings) - _known_keys()
    if unknown:
        raise ConfigError(f"{source}: unknown setting(s): {', '.join(sorted(unknown))}")
    clean = {}
    for key, value in settings.items():
        if value is None:
            continue
        if key in _INT_KEYS:
            if isinstance(value, bool):
                raise ConfigError(f"{source}: '{key}' must be a positive integer")
            try:
                value = int(value)
            except (TypeError, ValueError):
                raise ConfigError(f"{source}: '{key}' must be a positive integer") from None
            if value < 1:
                raise ConfigError(f"{source}: '{key}' must be a positive integer")
        elif key == "split":
            if value not in SPLIT_METHODS:
                raise ConfigError(
                    f"{source}: 'split' must be one of {', '.join(SPLIT_METHODS)}")
        else:
            value = str(value)
        clean[key] = value
    return clean


def read_config_file(path: Path, required: bool = False) -> dict:
    """Read settings from a YAML file.

    A missing file yields no settings unless *required* is set, as it is
    for a file the user named explicitly.
    """
    if not path.exists():
        if required:
            raise ConfigError(f"{path}: config file not found")
        return {}
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"{path}: {e}") from None
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping of settings")
    return _validate(data, str(path))


def load_config(path: Path | None = None, overrides: dict | None = None,
                required: bool = False) -> EditorConfig:
    """Build the effective configuration.

    *overrides* holds values from the command line or environment;
    None entries mean "not given" and fall through to the file.
    """
    config = EditorConfig()
    if path is not None:
        config = replace(config, **read_config_file(path, required))
    if overrides:
        config = replace(config, **_validate(overrides, "command line"))
    return config
