"""Tests for tvim_core.config — defaults, YAML file, overrides."""

import pytest
import yaml

from tvim_core.config import ConfigError, EditorConfig, load_config, read_config_file


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "tmux-vim.yaml"

    def write(data):
        path.write_text(yaml.dump(data) if not isinstance(data, str) else data)
        return path
    return write


class TestDefaults:
    def test_defaults(self):
        config = load_config()
        assert config == EditorConfig()
        assert config.editor == "vim"
        assert config.width is None
        assert config.count is None
        assert config.shell_width == 132
        assert config.shell_height == 15
        assert config.split == "horizontal"

    def test_missing_file(self, tmp_path):
        assert load_config(tmp_path / "nope.yaml") == EditorConfig()

    def test_missing_required_file(self, tmp_path):
        with pytest.raises(ConfigError, match="config file not found"):
            load_config(tmp_path / "nope.yaml", required=True)

    def test_required_file_present(self, config_file):
        path = config_file({"width": 90})
        assert load_config(path, required=True).width == 90

    def test_editor_command(self):
        assert EditorConfig().editor_command == "vim"
        assert EditorConfig(editor="nvim", editor_args="-p").editor_command == "nvim -p"


class TestConfigFile:
    def test_reads_settings(self, config_file):
        path = config_file({"editor": "nvim", "width": 100, "split": "vertical"})
        config = load_config(path)
        assert config.editor == "nvim"
        assert config.width == 100
        assert config.split == "vertical"

    def test_empty_file(self, config_file):
        assert read_config_file(config_file("")) == {}

    def test_unknown_key(self, config_file):
        with pytest.raises(ConfigError, match="unknown setting"):
            load_config(config_file({"colour": "red"}))

    def test_not_a_mapping(self, config_file):
        with pytest.raises(ConfigError, match="mapping"):
            load_config(config_file("- a\n- b\n"))

    def test_malformed_yaml(self, config_file):
        with pytest.raises(ConfigError):
            load_config(config_file("editor: [unclosed\n"))

    def test_bad_int(self, config_file):
        with pytest.raises(ConfigError, match="'width' must be a positive integer"):
            load_config(config_file({"width": "wide"}))

    def test_zero_count(self, config_file):
        with pytest.raises(ConfigError, match="'count'"):
            load_config(config_file({"count": 0}))

    def test_bool_is_not_int(self, config_file):
        with pytest.raises(ConfigError):
            load_config(config_file({"shell_height": True}))

    def test_bad_split(self, config_file):
        with pytest.raises(ConfigError, match="'split'"):
            load_config(config_file({"split": "diagonal"}))


class TestOverrides:
    def test_override_beats_file(self, config_file):
        path = config_file({"editor": "nvim", "width": 100})
        config = load_config(path, {"width": 60, "editor": None})
        assert config.width == 60
        assert config.editor == "nvim"

    def test_override_validated(self):
        with pytest.raises(ConfigError, match="command line"):
            load_config(None, {"shell_width": -1})
