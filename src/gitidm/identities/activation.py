"""Activation engine: applies identities to live git config and checks drift."""

from typing import List, Optional, Tuple

from ..connectors.agent import AgentChecker
from ..connectors.gitconfig import ConfigStore
from ..errors import DriftError, MissingEntryError, NotFoundError
from .models import ActivationResult, ActiveReport, Discrepancy, Identity
from .repository import IdentityRepository

# Live git config keys an identity controls
LIVE_NAME = "user.name"
LIVE_EMAIL = "user.email"
LIVE_SSH_COMMAND = "core.sshCommand"
LIVE_KEYS = (LIVE_NAME, LIVE_EMAIL, LIVE_SSH_COMMAND)


def _stored_values(identity: Identity) -> List[Tuple[str, str]]:
    """Pair each live key with the identity's stored value ("" if unset)."""
    return [
        (LIVE_NAME, identity.name or ""),
        (LIVE_EMAIL, identity.email or ""),
        (LIVE_SSH_COMMAND, identity.ssh_command or ""),
    ]


class ActivationEngine:
    """Keeps the live git config consistent with the selected identity.

    The active pointer is read from the store on every call and never
    cached, so concurrent invocations follow last-writer-wins.
    """

    def __init__(
        self,
        repository: IdentityRepository,
        store: ConfigStore,
        agent_checker: AgentChecker,
        active_key: str = "user.activeidm",
    ):
        """Initialize activation engine.

        Args:
            repository: Identity repository
            store: Live configuration store (usually the repository's store)
            agent_checker: Advisory ssh-agent checker
            active_key: Config key holding the active identity id
        """
        self.repository = repository
        self.store = store
        self.agent_checker = agent_checker
        self.active_key = active_key

    def active_id(self) -> Optional[str]:
        """Id named by the active pointer, or None."""
        return self.store.get(self.active_key) or None

    def use(self, identity_id: str) -> ActivationResult:
        """Apply a stored identity to the live git config.

        Empty stored fields leave the corresponding live value untouched.

        Args:
            identity_id: Identity to activate

        Returns:
            ActivationResult with the values written and any agent warning

        Raises:
            NotFoundError: If the identity does not exist
        """
        if not self.repository.exists(identity_id):
            raise NotFoundError(identity_id)

        identity = self.repository.get(identity_id) or Identity(id=identity_id)

        applied = {}
        for live_key, value in _stored_values(identity):
            if value:
                self.store.set(live_key, value)
                applied[live_key] = value

        self.store.set(self.active_key, identity_id)

        return ActivationResult(
            identity=identity,
            applied=applied,
            agent_warning=self.agent_checker.check_loaded(identity.ssh_key),
        )

    def active(self) -> ActiveReport:
        """Check the live git config against the active identity.

        A pointer to a deleted identity reads back as an identity with
        every field empty.

        Returns:
            ActiveReport; ``is_active`` is False when no identity is active

        Raises:
            DriftError: If any live value differs from the stored one. The
                error carries the full report with every discrepancy.
        """
        active_id = self.active_id()
        if not active_id:
            return ActiveReport()

        identity = self.repository.get(active_id) or Identity(id=active_id)
        live = {key: self.store.get(key) or "" for key in LIVE_KEYS}

        report = ActiveReport(
            active_id=active_id,
            identity=identity,
            listing=self.repository.list_for(active_id),
            live=live,
            agent_warning=self.agent_checker.check_loaded(identity.ssh_key),
        )

        for live_key, expected in _stored_values(identity):
            if live[live_key] != expected:
                report.discrepancies.append(
                    Discrepancy(field=live_key, expected=expected, actual=live[live_key])
                )

        if report.discrepancies:
            raise DriftError(report)
        return report

    def clear_active(self) -> bool:
        """Unset the active pointer.

        Returns:
            True if a pointer was removed, False if none was set
        """
        try:
            self.store.unset(self.active_key)
        except MissingEntryError:
            return False
        return True
