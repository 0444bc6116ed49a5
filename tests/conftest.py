"""Shared fixtures: in-memory config store and fake ssh-add."""

import subprocess
from typing import Dict, List, Optional, Tuple

import pytest

import gitidm.identities
from gitidm.config.schema import AgentConfig
from gitidm.connectors.agent import AgentChecker
from gitidm.connectors.gitconfig import ConfigStore
from gitidm.errors import MissingEntryError, StoreError
from gitidm.identities.activation import ActivationEngine
from gitidm.identities.repository import IdentityRepository


class FakeConfigStore(ConfigStore):
    """Insertion-ordered in-memory ConfigStore."""

    def __init__(self, git_version: Optional[Tuple[int, ...]] = None):
        self.values: Dict[str, str] = {}
        self.writes: List[Tuple[str, str]] = []
        self.failing_sections: set = set()
        self.git_version = git_version

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value
        self.writes.append((key, value))

    def list(self, prefix: str = "") -> List[Tuple[str, str]]:
        return [(k, v) for k, v in self.values.items() if k.startswith(prefix)]

    def remove_section(self, name: str) -> None:
        if name in self.failing_sections:
            raise StoreError(f"could not lock config file while removing {name}")
        keys = [k for k in self.values if k.rpartition(".")[0] == name]
        if not keys:
            raise MissingEntryError(f"No such section: {name}")
        for key in keys:
            del self.values[key]

    def unset(self, key: str) -> None:
        if key not in self.values:
            raise MissingEntryError(f"No such key: {key}")
        del self.values[key]

    def version(self) -> Optional[Tuple[int, ...]]:
        return self.git_version


class FakeSshAdd:
    """Stands in for subprocess.run when querying ssh-add."""

    def __init__(self, output: str = "", returncode: int = 0, missing: bool = False):
        self.output = output
        self.returncode = returncode
        self.missing = missing
        self.calls: List[List[str]] = []

    def __call__(self, cmd, **kwargs) -> subprocess.CompletedProcess:
        self.calls.append(cmd)
        if self.missing:
            raise FileNotFoundError(cmd[0])
        return subprocess.CompletedProcess(cmd, self.returncode, stdout=self.output, stderr="")


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep config lookups and audit logs inside the test's tmp dir."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GITIDM_AUDIT__LOG_DIR", str(tmp_path / "logs"))
    return home


@pytest.fixture
def store() -> FakeConfigStore:
    return FakeConfigStore()


@pytest.fixture
def ssh_add() -> FakeSshAdd:
    return FakeSshAdd()


@pytest.fixture
def repository(store: FakeConfigStore) -> IdentityRepository:
    return IdentityRepository(store)


@pytest.fixture
def engine(
    repository: IdentityRepository, store: FakeConfigStore, ssh_add: FakeSshAdd
) -> ActivationEngine:
    return ActivationEngine(repository, store, AgentChecker(AgentConfig(), runner=ssh_add))


@pytest.fixture
def cli_engine(engine: ActivationEngine, monkeypatch) -> ActivationEngine:
    """Install the fake-backed engine as the CLI's singleton."""
    monkeypatch.setattr(gitidm.identities, "_engine", engine)
    return engine
