"""TOML configuration loader with deep merge support.

Configuration files are optional for a library: when no ``default.toml``
can be found the loader yields an empty mapping and the model defaults
apply.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

from webql.exceptions import ConfigurationError

CONFIG_DIR_ENV = "WEBQL_CONFIG_DIR"
ENVIRONMENT_ENV = "WEBQL_ENV"


def get_config_dir() -> Path | None:
    """Locate the configuration directory.

    ``WEBQL_CONFIG_DIR`` wins when set and must exist. Otherwise the current
    directory and up to four parents are searched for ``config/default.toml``.
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        path = Path(override)
        if not path.is_dir():
            raise ConfigurationError(f"Config directory not found: {override}")
        return path

    current = Path.cwd()
    for _ in range(5):
        candidate = current / "config"
        if (candidate / "default.toml").exists():
            return candidate
        current = current.parent
    return None


def get_environment() -> str:
    """Current environment name from WEBQL_ENV, defaulting to 'development'."""
    return os.environ.get(ENVIRONMENT_ENV, "development")


def load_toml(file_path: Path) -> dict[str, Any]:
    """Load a TOML file into a dictionary.

    Raises:
        ConfigurationError: If the file is missing or not valid TOML
    """
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file not found: {file_path}")

    try:
        with file_path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid TOML in {file_path}: {exc}") from exc


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``, recursing into nested tables."""
    result = base.copy()

    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_config() -> dict[str, Any]:
    """Load configuration from TOML files.

    Loading order:
    1. config/default.toml
    2. config/{WEBQL_ENV}.toml (optional)
    """
    config_dir = get_config_dir()
    if config_dir is None:
        return {}

    default_path = config_dir / "default.toml"
    config = load_toml(default_path) if default_path.exists() else {}

    env_path = config_dir / f"{get_environment()}.toml"
    if env_path.exists():
        config = deep_merge(config, load_toml(env_path))

    return config
