"""Connectors to the external services gitidm depends on."""

from .agent import AgentChecker
from .gitconfig import ConfigStore, GitConfigStore

__all__ = ["AgentChecker", "ConfigStore", "GitConfigStore"]
