"""Identity data model using Pydantic."""

from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field

from ..errors import ValidationError

# Reserved id addressing every identity at once
RESERVED_ID = "all"

# Persisted field names, in display order
NAME = "name"
EMAIL = "email"
SSH_KEY = "sshKey"
SSH_COMMAND = "sshCommand"
FIELDS = (NAME, EMAIL, SSH_KEY, SSH_COMMAND)


def key_file_command(path: str) -> str:
    """Build the ssh invocation that authenticates with exactly one key file."""
    return f"ssh -i {path} -o IdentitiesOnly=yes -F /dev/null"


class KeyFile(BaseModel):
    """Authenticate with a private key file."""

    path: str = Field(..., description="Path to the private key")

    @property
    def command(self) -> str:
        return key_file_command(self.path)


class CustomCommand(BaseModel):
    """Authenticate with an arbitrary ssh command."""

    command: str = Field(..., description="Full ssh invocation")


AuthMethod = Union[KeyFile, CustomCommand]


class IdentityFields(BaseModel):
    """Fields supplied to a single add call; None means not supplied."""

    name: Optional[str] = None
    email: Optional[str] = None
    ssh_key: Optional[str] = None
    ssh_command: Optional[str] = None

    def auth_method(self) -> Optional[AuthMethod]:
        """Resolve the auth method supplied in this call.

        Raises:
            ValidationError: If both a key file and a command were supplied
        """
        if self.ssh_key and self.ssh_command:
            raise ValidationError("conflicting auth method")
        if self.ssh_key:
            return KeyFile(path=self.ssh_key)
        if self.ssh_command:
            return CustomCommand(command=self.ssh_command)
        return None

    def is_complete(self) -> bool:
        """True if these fields are enough to create a new identity."""
        return bool(self.name and self.email and (self.ssh_key or self.ssh_command))

    def to_store(self) -> Dict[str, str]:
        """Map supplied fields to persisted field names.

        A key file also writes its derived ssh command.
        """
        values: Dict[str, str] = {}
        if self.name:
            values[NAME] = self.name
        if self.email:
            values[EMAIL] = self.email
        auth = self.auth_method()
        if isinstance(auth, KeyFile):
            values[SSH_KEY] = auth.path
            values[SSH_COMMAND] = auth.command
        elif isinstance(auth, CustomCommand):
            values[SSH_COMMAND] = auth.command
        return values


class Identity(BaseModel):
    """A stored identity as read back from the config store."""

    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    ssh_key: Optional[str] = None
    ssh_command: Optional[str] = None

    @property
    def auth_method(self) -> Optional[AuthMethod]:
        if self.ssh_key:
            return KeyFile(path=self.ssh_key)
        if self.ssh_command:
            return CustomCommand(command=self.ssh_command)
        return None

    def is_empty(self) -> bool:
        return not any((self.name, self.email, self.ssh_key, self.ssh_command))


class Discrepancy(BaseModel):
    """One field where live git config differs from the stored identity."""

    field: str = Field(..., description="Live config key, e.g. user.email")
    expected: str = Field(default="", description="Value stored on the identity")
    actual: str = Field(default="", description="Value found in live config")

    @property
    def message(self) -> str:
        actual = self.actual or "(unset)"
        return f"{self.field} is '{actual}' but the active identity expects '{self.expected}'"


class ActiveReport(BaseModel):
    """Result of checking the active identity against live git config."""

    active_id: Optional[str] = None
    identity: Optional[Identity] = None
    listing: List[Tuple[str, str, str]] = Field(default_factory=list)
    live: Dict[str, str] = Field(default_factory=dict)
    discrepancies: List[Discrepancy] = Field(default_factory=list)
    agent_warning: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return bool(self.active_id)


class ActivationResult(BaseModel):
    """Result of applying an identity to live git config."""

    identity: Identity
    applied: Dict[str, str] = Field(default_factory=dict)
    agent_warning: Optional[str] = None


class RemovalReport(BaseModel):
    """Per-identity outcome of a removal; None means removed."""

    outcomes: Dict[str, Optional[str]] = Field(default_factory=dict)

    @property
    def removed(self) -> List[str]:
        return [identity_id for identity_id, error in self.outcomes.items() if error is None]

    @property
    def failed(self) -> Dict[str, str]:
        return {
            identity_id: error
            for identity_id, error in self.outcomes.items()
            if error is not None
        }
