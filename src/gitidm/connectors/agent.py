"""SSH agent connector used for advisory key checks."""

import os
import subprocess
from typing import Callable, Optional

from ..config.schema import AgentConfig


class AgentChecker:
    """Checks whether a private key is loaded in the running ssh-agent."""

    def __init__(
        self,
        agent_config: AgentConfig,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        """Initialize agent checker.

        Args:
            agent_config: Which ssh-add binary to query and whether to check at all
            runner: subprocess.run compatible callable
        """
        self.agent_config = agent_config
        self.runner = runner

    def loaded_keys(self) -> Optional[str]:
        """Return the agent's key listing, or None if it cannot be queried."""
        try:
            result = self.runner(
                [self.agent_config.binary, "-l"],
                capture_output=True,
                text=True,
            )
        except OSError:
            return None
        if result.returncode != 0:
            # 1: agent has no identities, 2: no agent reachable
            return None
        return result.stdout

    def check_loaded(self, key_path: str | None) -> Optional[str]:
        """Check that key_path is loaded in the agent.

        Args:
            key_path: Private key path, or empty/None to skip the check

        Returns:
            Warning message if the key does not appear to be loaded, else None
        """
        if not key_path or not self.agent_config.enabled:
            return None

        listing = self.loaded_keys()
        if listing is not None:
            candidates = {key_path, os.path.expanduser(key_path)}
            if any(candidate in listing for candidate in candidates):
                return None

        return (
            f"SSH key {key_path} is not loaded in ssh-agent; "
            f"run 'ssh-add {key_path}' to load it"
        )
