"""Tests for configuration loading and path resolution."""

from pathlib import Path

import pytest
import yaml
from todo_list.config import (
    CONFIG_TEMPLATE,
    TodoConfig,
    default_config_path,
    load_config,
    read_environment,
    resolve_export_path,
    resolve_storage_path,
)
from todo_list.exceptions import ConfigurationError


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "config" / "todo" / "config.yaml"


def write_config(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestTodoConfig:
    """Tests for TodoConfig validation."""

    def test_defaults(self):
        config = TodoConfig()

        assert config.todo_file_path is None
        assert config.todo_file_name == "TODO.json"
        assert config.is_global is True
        assert config.export_file_name == "TODO.md"
        assert config.always_export is False
        assert config.index_color is None

    def test_empty_file_name_raises(self):
        with pytest.raises(ConfigurationError, match="todo_file_name cannot be empty"):
            TodoConfig(todo_file_name=" ")

    def test_file_name_with_directory_raises(self):
        with pytest.raises(ConfigurationError, match="must be a file name"):
            TodoConfig(export_file_name="sub/TODO.md")

    def test_invalid_index_color_raises(self):
        with pytest.raises(ConfigurationError, match="Invalid index_color"):
            TodoConfig(index_color="chartreuse")

    def test_immutability(self):
        config = TodoConfig()
        with pytest.raises(AttributeError):
            config.is_global = False


class TestLoadConfig:
    """Tests for reading the YAML file and environment overrides."""

    def test_missing_file_writes_template(self, config_path):
        config = load_config(config_path)

        assert config == TodoConfig()
        assert config_path.read_text(encoding="utf-8") == CONFIG_TEMPLATE

    def test_template_loads_as_defaults(self, config_path):
        load_config(config_path)

        assert yaml.safe_load(CONFIG_TEMPLATE) is None
        assert load_config(config_path) == TodoConfig()

    def test_values_from_file(self, config_path, tmp_path):
        write_config(
            config_path,
            f"todo_file_path: {tmp_path / 'store'}\n"
            "todo_file_name: tasks.json\n"
            "global: false\n"
            "always_export: yes\n"
            "index_color: Cyan\n",
        )
        config = load_config(config_path)

        assert config.todo_file_path == tmp_path / "store"
        assert config.todo_file_name == "tasks.json"
        assert config.is_global is False
        assert config.always_export is True
        assert config.index_color == "cyan"

    def test_home_in_path_is_expanded(self, config_path, home_dir):
        write_config(config_path, "export_file_path: ~/exports\n")

        assert load_config(config_path).export_file_path == home_dir / "exports"

    def test_environment_overrides_file(self, config_path):
        write_config(config_path, "global: true\ntodo_file_name: file.json\n")
        config = load_config(
            config_path,
            {"TODO_GLOBAL": "off", "TODO_FILE_NAME": "env.json", "TODO_INDEX_COLOR": ""},
        )

        assert config.is_global is False
        assert config.todo_file_name == "env.json"
        assert config.index_color is None  # empty values are ignored

    def test_bad_boolean_raises(self, config_path):
        write_config(config_path, "")

        with pytest.raises(ConfigurationError, match="TODO_ALWAYS_EXPORT must be true or false"):
            load_config(config_path, {"TODO_ALWAYS_EXPORT": "sometimes"})

    def test_invalid_yaml_raises(self, config_path):
        write_config(config_path, "global: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(config_path)

    def test_non_mapping_raises(self, config_path):
        write_config(config_path, "- just\n- a list\n")

        with pytest.raises(ConfigurationError, match="must hold a mapping"):
            load_config(config_path)

    def test_wrong_type_raises(self, config_path):
        write_config(config_path, "todo_file_name: 42\n")

        with pytest.raises(ConfigurationError, match="must be a string"):
            load_config(config_path)

    def test_unknown_key_is_ignored(self, config_path, caplog):
        write_config(config_path, "colour: red\n")

        assert load_config(config_path) == TodoConfig()
        assert "Ignoring unknown config key 'colour'" in caplog.text


class TestConfigLocation:
    """Tests for finding the config file and the .env file."""

    def test_default_location(self, home_dir):
        assert default_config_path({}, home_dir) == home_dir / ".config" / "todo" / "config.yaml"

    def test_xdg_config_home(self, tmp_path, home_dir):
        path = default_config_path({"XDG_CONFIG_HOME": str(tmp_path / "xdg")}, home_dir)

        assert path == tmp_path / "xdg" / "todo" / "config.yaml"

    def test_explicit_config_env_var(self, tmp_path, home_dir):
        explicit = tmp_path / "elsewhere.yaml"

        assert default_config_path({"TODO_CONFIG": str(explicit)}, home_dir) == explicit

    def test_dotenv_is_merged_under_real_environment(self, work_dir):
        (work_dir / ".env").write_text("TODO_GLOBAL=false\nTODO_FILE_NAME=dot.json\n")

        merged = read_environment(work_dir, {"TODO_FILE_NAME": "real.json"})

        assert merged["TODO_GLOBAL"] == "false"
        assert merged["TODO_FILE_NAME"] == "real.json"

    def test_no_dotenv(self, work_dir):
        assert read_environment(work_dir, {"A": "1"}) == {"A": "1"}


class TestPathResolution:
    """Tests for global vs local storage paths."""

    def test_global_defaults_to_home(self, home_dir, work_dir):
        path = resolve_storage_path(TodoConfig(), cwd=work_dir, home=home_dir)

        assert path == home_dir / "TODO.json"

    def test_global_with_custom_directory(self, tmp_path, home_dir, work_dir):
        config = TodoConfig(todo_file_path=tmp_path / "store")

        assert resolve_storage_path(config, cwd=work_dir, home=home_dir) == tmp_path / "store" / "TODO.json"

    def test_local_uses_working_directory(self, tmp_path, home_dir, work_dir):
        config = TodoConfig(is_global=False, todo_file_path=tmp_path / "ignored")

        assert resolve_storage_path(config, cwd=work_dir, home=home_dir) == work_dir / "TODO.json"

    def test_export_beside_storage_by_default(self, home_dir):
        assert resolve_export_path(TodoConfig(), home_dir / "TODO.json") == home_dir / "TODO.md"

    def test_export_custom_location(self, tmp_path, home_dir):
        config = TodoConfig(export_file_path=tmp_path / "out", export_file_name="list.md")

        assert resolve_export_path(config, home_dir / "TODO.json") == tmp_path / "out" / "list.md"
