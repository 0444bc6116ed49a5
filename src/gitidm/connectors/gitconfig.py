"""Git configuration store connector."""

import os
import re
import subprocess
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from ..config.schema import GitConfig
from ..errors import MissingEntryError, StoreError

# git exits with 5 when --unset finds nothing to remove
EXIT_KEY_MISSING = 5


class ConfigStore(ABC):
    """Key-value view over a git-style configuration scope.

    Keys are dotted (``section.subsection.variable``). ``list`` reports
    entries in the order the backing store holds them.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value for key, or None if unset."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Set key to value, replacing any previous value."""

    @abstractmethod
    def list(self, prefix: str = "") -> List[Tuple[str, str]]:
        """List (key, value) pairs whose key starts with prefix."""

    @abstractmethod
    def remove_section(self, name: str) -> None:
        """Remove a whole section.

        Raises:
            MissingEntryError: If the section does not exist
        """

    @abstractmethod
    def unset(self, key: str) -> None:
        """Remove a single key.

        Raises:
            MissingEntryError: If the key does not exist
        """

    def version(self) -> Optional[Tuple[int, ...]]:
        """Version of the backing implementation, if it has one."""
        return None


def parse_version(text: str) -> Optional[Tuple[int, ...]]:
    """Extract a (major, minor, patch) tuple from version text.

    Args:
        text: Output such as "git version 2.39.3 (Apple Git-145)" or "2.10"

    Returns:
        Version tuple, or None if no version number is present
    """
    match = re.search(r"(\d+)\.(\d+)(?:\.(\d+))?", text)
    if not match:
        return None
    return tuple(int(part or 0) for part in match.groups())


class GitConfigStore(ConfigStore):
    """ConfigStore backed by ``git config --global`` (or ``--file``)."""

    def __init__(self, git_config: GitConfig):
        """Initialize git config store.

        Args:
            git_config: Which git binary and config file to use
        """
        self.git_config = git_config
        if git_config.config_file:
            self.scope_args = ["--file", os.path.expanduser(git_config.config_file)]
        else:
            self.scope_args = ["--global"]

    def _run(self, *args: str) -> subprocess.CompletedProcess:
        """Run git and return the completed process.

        Raises:
            StoreError: If git cannot be executed
        """
        cmd = [self.git_config.binary, *args]
        env = dict(os.environ, LC_ALL="C")
        try:
            return subprocess.run(cmd, capture_output=True, text=True, env=env)
        except OSError as e:
            raise StoreError(f"Failed to run {self.git_config.binary}: {e}") from e

    def _config(self, *args: str) -> subprocess.CompletedProcess:
        return self._run("config", *self.scope_args, *args)

    @staticmethod
    def _fail(action: str, result: subprocess.CompletedProcess) -> StoreError:
        detail = result.stderr.strip() or f"exit status {result.returncode}"
        return StoreError(f"git config {action} failed: {detail}")

    def get(self, key: str) -> Optional[str]:
        result = self._config("--get", key)
        if result.returncode == 1 or "unable to read config file" in result.stderr:
            return None
        if result.returncode != 0:
            raise self._fail("--get", result)
        return result.stdout.rstrip("\n")

    def set(self, key: str, value: str) -> None:
        result = self._config("--replace-all", key, value)
        if result.returncode != 0:
            raise self._fail("set", result)

    def list(self, prefix: str = "") -> List[Tuple[str, str]]:
        result = self._config("--null", "--list")
        if result.returncode != 0:
            # A scope with no config file yet is simply empty
            if "unable to read config file" in result.stderr:
                return []
            raise self._fail("--list", result)

        entries = []
        for record in result.stdout.split("\0"):
            if not record:
                continue
            key, _, value = record.partition("\n")
            if key.startswith(prefix):
                entries.append((key, value))
        return entries

    def remove_section(self, name: str) -> None:
        result = self._config("--remove-section", name)
        if result.returncode != 0:
            if "no such section" in result.stderr:
                raise MissingEntryError(f"No such section: {name}")
            raise self._fail("--remove-section", result)

    def unset(self, key: str) -> None:
        result = self._config("--unset", key)
        if result.returncode == EXIT_KEY_MISSING:
            raise MissingEntryError(f"No such key: {key}")
        if result.returncode != 0:
            raise self._fail("--unset", result)

    def version(self) -> Optional[Tuple[int, ...]]:
        try:
            result = self._run("--version")
        except StoreError:
            return None
        if result.returncode != 0:
            return None
        return parse_version(result.stdout)
