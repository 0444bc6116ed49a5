"""Identity repository on top of the git configuration store."""

from typing import Dict, List, Optional, Tuple

from ..connectors.gitconfig import ConfigStore
from ..errors import GitIdmError, MissingEntryError, NotFoundError, ValidationError
from .models import (
    EMAIL,
    FIELDS,
    NAME,
    RESERVED_ID,
    SSH_COMMAND,
    SSH_KEY,
    Identity,
    IdentityFields,
    RemovalReport,
)

# git reports variable names lowercased
_CANONICAL_FIELDS = {field.lower(): field for field in FIELDS}

Entry = Tuple[str, str, str]


def group_entries(entries: List[Entry]) -> Dict[str, List[Tuple[str, str]]]:
    """Group (id, field, value) entries by id, keeping first-seen order."""
    grouped: Dict[str, List[Tuple[str, str]]] = {}
    for identity_id, field, value in entries:
        grouped.setdefault(identity_id, []).append((field, value))
    return grouped


class IdentityRepository:
    """CRUD over identities stored as ``<namespace>.<id>.<field>`` keys."""

    def __init__(self, store: ConfigStore, namespace: str = "gitidm"):
        """Initialize identity repository.

        Args:
            store: Backing configuration store
            namespace: Config section holding one subsection per identity
        """
        self.store = store
        self.namespace = namespace.lower()

    def _key(self, identity_id: str, field: str) -> str:
        return f"{self.namespace}.{identity_id}.{field}"

    def _section(self, identity_id: str) -> str:
        return f"{self.namespace}.{identity_id}"

    def _parse(self, key: str) -> Optional[Tuple[str, str]]:
        """Split a stored key into (id, field), or None if it is not an identity key."""
        rest = key[len(self.namespace) + 1 :]
        identity_id, _, field = rest.rpartition(".")
        if not identity_id:
            return None
        return identity_id, _CANONICAL_FIELDS.get(field.lower(), field)

    def list(self) -> List[Entry]:
        """List every stored field as (id, field, value), in store order."""
        entries = []
        for key, value in self.store.list(f"{self.namespace}."):
            parsed = self._parse(key)
            if parsed is None:
                continue
            identity_id, field = parsed
            entries.append((identity_id, field, value))
        return entries

    def list_for(self, identity_id: str) -> List[Entry]:
        """List the stored fields of one identity."""
        return [entry for entry in self.list() if entry[0] == identity_id]

    def ids(self) -> List[str]:
        """Distinct identity ids, in store order."""
        return list(group_entries(self.list()))

    def exists(self, identity_id: str) -> bool:
        # Ids may contain dots, so "work" must not match "work.alt" keys
        return bool(self.list_for(identity_id))

    def get(self, identity_id: str) -> Optional[Identity]:
        """Load an identity.

        Args:
            identity_id: Identity id

        Returns:
            Identity, or None if no field of it is stored
        """
        values = dict(
            (field, value) for _, field, value in self.list_for(identity_id)
        )
        if not values:
            return None
        return Identity(
            id=identity_id,
            name=values.get(NAME),
            email=values.get(EMAIL),
            ssh_key=values.get(SSH_KEY),
            ssh_command=values.get(SSH_COMMAND),
        )

    def upsert(self, identity_id: str, fields: IdentityFields) -> None:
        """Create an identity or merge fields into an existing one.

        Only supplied fields are written; everything else is left as stored.

        Args:
            identity_id: Identity id
            fields: Fields supplied by the caller

        Raises:
            ValidationError: If the id is reserved or invalid, both auth
                methods were supplied, or a new identity is incomplete
        """
        if not identity_id or "\n" in identity_id:
            raise ValidationError("Identity id must be a non-empty single line")
        if identity_id == RESERVED_ID:
            raise ValidationError(
                f"'{RESERVED_ID}' is reserved and cannot be used as an identity id"
            )

        # Raises on conflicting auth methods before anything is written
        values = fields.to_store()

        if not self.exists(identity_id) and not fields.is_complete():
            raise ValidationError(
                "incomplete new identity: name, email and --key or --ssh-command are required"
            )

        for field, value in values.items():
            self.store.set(self._key(identity_id, field), value)

    def remove(self, identity_id: str) -> RemovalReport:
        """Remove one identity, or every identity when id is ``all``.

        Raises:
            NotFoundError: If a single identity does not exist
        """
        if identity_id == RESERVED_ID:
            return self.remove_all()

        self._remove_section(identity_id)
        return RemovalReport(outcomes={identity_id: None})

    def _remove_section(self, identity_id: str) -> None:
        try:
            self.store.remove_section(self._section(identity_id))
        except MissingEntryError:
            raise NotFoundError(identity_id) from None

    def remove_all(self) -> RemovalReport:
        """Remove every identity, attempting each one even if others fail."""
        report = RemovalReport()
        for identity_id in self.ids():
            try:
                self._remove_section(identity_id)
            except GitIdmError as e:
                report.outcomes[identity_id] = str(e)
            else:
                report.outcomes[identity_id] = None
        return report
