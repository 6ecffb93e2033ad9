"""Configuration management for the todo list.

Settings come from a YAML file, overridden by environment variables.
A ``.env`` file in the working directory is read as well; variables that
are really set in the environment win over it.

Configuration Precedence (highest to lowest):
    1. Environment variables (and .env)
    2. YAML config file
    3. Default values

Config file location:
    $TODO_CONFIG, else $XDG_CONFIG_HOME/todo/config.yaml,
    else ~/.config/todo/config.yaml. A commented template is written
    there on first run.

Environment Variables:
    TODO_FILE_PATH: Directory of the global task file (default: home)
    TODO_FILE_NAME: Task file name (default: TODO.json)
    TODO_GLOBAL: Use one user-wide file instead of one per directory
    TODO_EXPORT_FILE_PATH: Directory of the export (default: beside the task file)
    TODO_EXPORT_FILE_NAME: Export file name (default: TODO.md)
    TODO_ALWAYS_EXPORT: Export after every command
    TODO_INDEX_COLOR: Colour of task numbers in ``list``

Example:
    >>> config = load_config(Path("~/.config/todo/config.yaml").expanduser())
    >>> storage = resolve_storage_path(config, cwd=Path.cwd(), home=Path.home())

"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar, Optional

import yaml
from dotenv import dotenv_values

from todo_list.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TODO_CONFIG"

INDEX_COLORS = ("black", "red", "green", "yellow", "blue", "magenta", "cyan", "white")

_TRUE_WORDS = {"1", "true", "yes", "on"}
_FALSE_WORDS = {"0", "false", "no", "off"}

CONFIG_TEMPLATE = """\
# Directory where the global todo file is kept, defaults to your home directory
#todo_file_path: /path/to/dir
# Name of the todo file, defaults to TODO.json
#todo_file_name: TODO.json
# When true all todos are saved in the directory above, otherwise in the
# directory the command is run in
#global: true
# Where `todo export` writes, defaults to the directory of the todo file
#export_file_path: /path/to/dir
#export_file_name: TODO.md
# Export after every command
#always_export: false
# Colour of task numbers: black, red, green, yellow, blue, magenta, cyan, white
#index_color: cyan
"""

# YAML key -> (dataclass field, environment variable)
_KEYS: dict[str, tuple[str, str]] = {
    "todo_file_path": ("todo_file_path", "TODO_FILE_PATH"),
    "todo_file_name": ("todo_file_name", "TODO_FILE_NAME"),
    "global": ("is_global", "TODO_GLOBAL"),
    "export_file_path": ("export_file_path", "TODO_EXPORT_FILE_PATH"),
    "export_file_name": ("export_file_name", "TODO_EXPORT_FILE_NAME"),
    "always_export": ("always_export", "TODO_ALWAYS_EXPORT"),
    "index_color": ("index_color", "TODO_INDEX_COLOR"),
}


@dataclass(frozen=True)
class TodoConfig:
    """Immutable settings for one invocation.

    These settings only feed path resolution and display; the task store
    never reads them.

    Attributes:
        todo_file_path: Directory of the global task file (None = home).
        todo_file_name: File name of the task file.
        is_global: One user-wide file (True) or one per working directory.
        export_file_path: Directory of the export (None = beside the task file).
        export_file_name: File name of the export.
        always_export: Export at the end of every invocation.
        index_color: Colour name for task numbers, or None for the default.

    """

    DEFAULT_FILE_NAME: ClassVar[str] = "TODO.json"
    DEFAULT_EXPORT_NAME: ClassVar[str] = "TODO.md"

    todo_file_path: Optional[Path] = None
    todo_file_name: str = DEFAULT_FILE_NAME
    is_global: bool = True
    export_file_path: Optional[Path] = None
    export_file_name: str = DEFAULT_EXPORT_NAME
    always_export: bool = False
    index_color: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Validate all configuration values.

        Raises:
            ConfigurationError: If any configuration value is invalid.

        """
        for key, name in (
            ("todo_file_name", self.todo_file_name),
            ("export_file_name", self.export_file_name),
        ):
            if not name or not name.strip():
                raise ConfigurationError(f"{key} cannot be empty")
            if Path(name).name != name:
                raise ConfigurationError(f"{key} must be a file name, not a path: {name!r}")

        if self.index_color is not None and self.index_color not in INDEX_COLORS:
            raise ConfigurationError(
                f"Invalid index_color '{self.index_color}'. "
                f"Must be one of: {', '.join(INDEX_COLORS)}"
            )


def default_config_path(environ: Mapping[str, str], home: Path) -> Path:
    """Location of the config file for this environment."""
    explicit = environ.get(CONFIG_ENV_VAR)
    if explicit:
        return Path(explicit).expanduser()
    xdg = environ.get("XDG_CONFIG_HOME")
    base = Path(xdg).expanduser() if xdg else home / ".config"
    return base / "todo" / "config.yaml"


def read_environment(cwd: Path, environ: Mapping[str, str]) -> dict[str, str]:
    """Merge ``cwd/.env`` under the real environment."""
    merged: dict[str, str] = {}
    env_file = cwd / ".env"
    if env_file.is_file():
        merged.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
        logger.debug("Loaded %s", env_file)
    merged.update(environ)
    return merged


def load_config(config_path: Path, environ: Optional[Mapping[str, str]] = None) -> TodoConfig:
    """Build the configuration from a YAML file plus environment overrides.

    The file is created from a commented template if it does not exist.

    Raises:
        ConfigurationError: If the file cannot be read or holds bad values.

    """
    environ = environ if environ is not None else {}
    values = _read_config_file(config_path)

    fields: dict[str, Any] = {}
    for key, (field_name, env_var) in _KEYS.items():
        if key in values and values[key] is not None:
            fields[field_name] = _coerce(field_name, values[key], f"{config_path}: {key}")
        env_value = environ.get(env_var)
        if env_value is not None and env_value != "":
            fields[field_name] = _coerce(field_name, env_value, env_var)

    return TodoConfig(**fields)


def resolve_storage_path(config: TodoConfig, cwd: Path, home: Path) -> Path:
    """Location of the task file: the global directory, or the working directory."""
    if config.is_global:
        base = config.todo_file_path or home
    else:
        base = cwd
    return base / config.todo_file_name


def resolve_export_path(config: TodoConfig, storage_path: Path) -> Path:
    """Location of the markdown export."""
    base = config.export_file_path or storage_path.parent
    return base / config.export_file_name


def _read_config_file(path: Path) -> dict[str, Any]:
    """Load the YAML config, writing the template first if it is missing."""
    if not path.exists():
        _write_template(path)
        return {}

    try:
        with path.open(encoding="utf-8") as fp:
            config = yaml.safe_load(fp)
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigurationError(f"Config file {path} must hold a mapping of settings")

    for key in config:
        if key not in _KEYS:
            logger.warning("Ignoring unknown config key %r in %s", key, path)
    return dict(config)


def _write_template(path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(CONFIG_TEMPLATE, encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot create config file {path}: {e}") from e
    logger.info("Created default config at %s", path)


def _coerce(field_name: str, value: Any, source: str) -> Any:
    """Convert a raw YAML or environment value to the field's type."""
    if field_name in ("is_global", "always_export"):
        return _parse_bool(value, source)
    if field_name in ("todo_file_path", "export_file_path"):
        if not isinstance(value, str) or not value.strip():
            raise ConfigurationError(f"{source} must be a directory path")
        return Path(value).expanduser()
    if field_name == "index_color":
        if not isinstance(value, str):
            raise ConfigurationError(f"{source} must be a colour name")
        return value.strip().lower()
    if not isinstance(value, str):
        raise ConfigurationError(f"{source} must be a string")
    return value


def _parse_bool(value: Any, source: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ConfigurationError(f"{source} must be true or false, got {value!r}")
