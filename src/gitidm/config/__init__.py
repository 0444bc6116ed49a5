"""Configuration loading for gitidm."""

from .loader import load_config
from .schema import GitIdmConfig

__all__ = ["GitIdmConfig", "load_config"]
