"""Configuration access for url-readers.

Handles loading TOML configuration and typed lookups into it. The default
configuration file is ``config.toml`` in the per-user config directory
(``$XDG_CONFIG_HOME/url-readers`` or ``%APPDATA%\\url-readers``).
"""

import os
import sys
from pathlib import Path
from typing import Any, Optional

import tomllib

from url_readers.errors import ConfigError

APP_DIR_NAME = "url-readers"
CONFIG_FILE_NAME = "config.toml"

_MISSING = object()


class ConfigReader:
    """Read-only view over a nested configuration mapping.

    Keys use dot notation for nested values (e.g. "integrations.gcs").
    Typed getters raise ConfigError when a value has the wrong type, and
    the ``get_optional_*`` variants return None when the key is absent.

    Attributes:
        data: The underlying configuration mapping
        context: Dotted prefix of this view, used in error messages
    """

    def __init__(self, data: Optional[dict] = None, context: str = ""):
        """Initialize the reader.

        Args:
            data: Configuration mapping (defaults to empty)
            context: Dotted key this mapping was found under
        """
        self.data = data if data is not None else {}
        self.context = context

    @classmethod
    def from_file(cls, path: Optional[Path] = None) -> "ConfigReader":
        """Load configuration from a TOML file.

        Args:
            path: Path to config file (defaults to standard location)

        Returns:
            ConfigReader over the file contents

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigError: If the file is not valid TOML
        """
        if path is None:
            path = get_config_path()

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigError(f"Invalid TOML in {path}: {e}") from e

        return cls(data)

    def _full_key(self, key: str) -> str:
        return f"{self.context}.{key}" if self.context else key

    def _lookup(self, key: str) -> Any:
        value: Any = self.data
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return _MISSING
            value = value[part]
        return value

    def has(self, key: str) -> bool:
        """Return True if the key is present."""
        return self._lookup(key) is not _MISSING

    def keys(self) -> list[str]:
        """Return the top-level keys of this view."""
        return list(self.data.keys())

    def get_optional(self, key: str) -> Optional[Any]:
        """Get a raw value, or None if the key is absent."""
        value = self._lookup(key)
        return None if value is _MISSING else value

    def get_optional_string(self, key: str) -> Optional[str]:
        """Get a string value.

        Args:
            key: Configuration key

        Returns:
            The string, or None if the key is absent

        Raises:
            ConfigError: If the value is not a string
        """
        value = self._lookup(key)
        if value is _MISSING:
            return None
        if not isinstance(value, str):
            raise ConfigError(
                f"Invalid type in config for key '{self._full_key(key)}', "
                f"got {type(value).__name__}, wanted string"
            )
        return value

    def get_string(self, key: str) -> str:
        """Get a required string value.

        Raises:
            ConfigError: If the key is absent or not a string
        """
        value = self.get_optional_string(key)
        if value is None:
            raise ConfigError(f"Missing required config value at '{self._full_key(key)}'")
        return value

    def get_optional_boolean(self, key: str) -> Optional[bool]:
        """Get a boolean value, or None if the key is absent.

        Raises:
            ConfigError: If the value is not a boolean
        """
        value = self._lookup(key)
        if value is _MISSING:
            return None
        if not isinstance(value, bool):
            raise ConfigError(
                f"Invalid type in config for key '{self._full_key(key)}', "
                f"got {type(value).__name__}, wanted boolean"
            )
        return value

    def get_optional_config(self, key: str) -> Optional["ConfigReader"]:
        """Get a nested table as a ConfigReader, or None if absent.

        Raises:
            ConfigError: If the value is not a table
        """
        value = self._lookup(key)
        if value is _MISSING:
            return None
        if not isinstance(value, dict):
            raise ConfigError(
                f"Invalid type in config for key '{self._full_key(key)}', "
                f"got {type(value).__name__}, wanted object"
            )
        return ConfigReader(value, self._full_key(key))

    def get_config(self, key: str) -> "ConfigReader":
        """Get a required nested table as a ConfigReader.

        Raises:
            ConfigError: If the key is absent or not a table
        """
        config = self.get_optional_config(key)
        if config is None:
            raise ConfigError(f"Missing required config value at '{self._full_key(key)}'")
        return config

    def get_optional_config_array(self, key: str) -> Optional[list["ConfigReader"]]:
        """Get an array of tables, one ConfigReader per element.

        Elements that are not tables are returned as readers over an empty
        mapping so that per-element validation can reject them.

        Args:
            key: Configuration key

        Returns:
            List of readers, or None if the key is absent

        Raises:
            ConfigError: If the value is not an array
        """
        value = self._lookup(key)
        if value is _MISSING:
            return None
        if not isinstance(value, list):
            raise ConfigError(
                f"Invalid type in config for key '{self._full_key(key)}', "
                f"got {type(value).__name__}, wanted object-array"
            )

        full_key = self._full_key(key)
        return [
            ConfigReader(item if isinstance(item, dict) else {}, f"{full_key}[{index}]")
            for index, item in enumerate(value)
        ]


def get_config_dir() -> Path:
    """Directory holding the default config file.

    ``%APPDATA%`` on Windows, ``$XDG_CONFIG_HOME`` elsewhere, each with a
    home-directory fallback when the variable is unset or empty.
    """
    if sys.platform == "win32":
        base = os.environ.get("APPDATA") or Path.home() / "AppData" / "Roaming"
    else:
        base = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(base) / APP_DIR_NAME


def get_config_path() -> Path:
    """Default config file location, ``<config dir>/config.toml``."""
    return get_config_dir() / CONFIG_FILE_NAME
