"""Configuration loading utilities."""

from pathlib import Path

import pydantic
import yaml

from ..errors import ConfigError
from .schema import GitIdmConfig


def find_config() -> Path | None:
    """Return the first existing default config file, if any."""
    for path in (
        Path.home() / ".config" / "gitidm" / "config.yaml",
        Path.cwd() / ".gitidm" / "config.yaml",
    ):
        if path.exists():
            return path
    return None


def load_config(config_path: str | Path | None = None) -> GitIdmConfig:
    """Load gitidm configuration from a YAML file.

    Args:
        config_path: Path to config file. If None, the default locations are
            searched and built-in defaults are used when none exists.

    Returns:
        GitIdmConfig instance

    Raises:
        ConfigError: If an explicit path is missing, or the file is not valid
            YAML or does not match the schema
    """
    if config_path is None:
        config_path = find_config()
        if config_path is None:
            return GitIdmConfig()

    config_path = Path(config_path).expanduser()
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path) as f:
            config_data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

    if not isinstance(config_data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    try:
        return GitIdmConfig(**config_data)
    except pydantic.ValidationError as e:
        raise ConfigError(f"Invalid config file {config_path}: {e}") from e
