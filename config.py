"""Settings for the cmindex command, loaded from an optional TOML file."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

try:
    import tomllib
    TOMLDecodeError = tomllib.TOMLDecodeError
except ImportError:
    import toml as tomllib  # type: ignore
    TOMLDecodeError = tomllib.TomlDecodeError  # type: ignore

from depindex.log import get_log_level
from scanner.discovery import DEFAULT_EXTENSION

DEFAULT_CONFIG_FILE = "cmindex.toml"
CONFIG_TABLE = "cmindex"
LOG_FORMATS = {"console", "json"}


class ConfigError(ValueError):
    """The configuration file is unreadable or has invalid values."""


@dataclass
class IndexSettings:
    """Effective settings for one run."""

    extension: str = DEFAULT_EXTENSION
    directories: List[str] = field(default_factory=list)
    log_level: str = field(default_factory=get_log_level)
    log_format: str = "console"


def load_settings(path: Optional[Path] = None) -> IndexSettings:
    """
    Load settings from the [cmindex] table of a TOML file.

    Args:
        path: Config file. None means cmindex.toml in the working directory,
              which may be absent.

    Returns:
        IndexSettings with file values applied over the defaults.

    Raises:
        ConfigError: If an explicitly given file is missing, the file does
                     not parse, or a value has the wrong type.
    """
    explicit = path is not None
    if path is None:
        path = Path(DEFAULT_CONFIG_FILE)

    settings = IndexSettings()
    if not path.is_file():
        if explicit:
            raise ConfigError(f"config file not found: {path}")
        return settings

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    except TOMLDecodeError as e:
        raise ConfigError(f"invalid TOML in {path}: {e}") from e

    table = data.get(CONFIG_TABLE, {})
    if not isinstance(table, dict):
        raise ConfigError(f"[{CONFIG_TABLE}] must be a table")
    return apply_settings(settings, table)


def apply_settings(settings: IndexSettings, values: Dict[str, Any]) -> IndexSettings:
    """Validate values and apply them to settings in place."""
    for key, value in values.items():
        if key == "extension":
            if not isinstance(value, str) or not value:
                raise ConfigError("extension must be a non-empty string")
            settings.extension = value if value.startswith(".") else "." + value
        elif key == "directories":
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError("directories must be a list of strings")
            settings.directories = list(value)
        elif key == "log_level":
            if not isinstance(value, str):
                raise ConfigError("log_level must be a string")
            settings.log_level = value.upper()
        elif key == "log_format":
            if value not in LOG_FORMATS:
                raise ConfigError(f"log_format must be one of {sorted(LOG_FORMATS)}")
            settings.log_format = value
        else:
            raise ConfigError(f"unknown setting: {key}")
    return settings
