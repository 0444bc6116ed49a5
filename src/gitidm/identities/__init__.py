"""Identity storage and activation."""

from typing import Optional

from ..config import GitIdmConfig, load_config
from ..connectors import AgentChecker, GitConfigStore
from .activation import ActivationEngine
from .repository import IdentityRepository

__all__ = [
    "ActivationEngine",
    "IdentityRepository",
    "build_engine",
    "get_activation_engine",
]


def build_engine(config: GitIdmConfig) -> ActivationEngine:
    """Wire an activation engine to the real git config and ssh-agent."""
    store = GitConfigStore(config.git)
    repository = IdentityRepository(store, config.store.namespace)
    return ActivationEngine(
        repository,
        store,
        AgentChecker(config.agent),
        active_key=config.store.active_key,
    )


# Singleton instance
_engine: Optional[ActivationEngine] = None


def get_activation_engine(config: Optional[GitIdmConfig] = None) -> ActivationEngine:
    """Get the global activation engine instance.

    Args:
        config: Settings to build the engine from on first use
            (default: load_config())

    Returns:
        ActivationEngine singleton
    """
    global _engine
    if _engine is None:
        _engine = build_engine(config or load_config())
    return _engine
