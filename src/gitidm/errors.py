"""Error types raised by gitidm."""


class GitIdmError(Exception):
    """Base class for every error gitidm reports to the user."""


class ConfigError(GitIdmError):
    """The gitidm config file is missing, unreadable, or malformed."""


class ValidationError(GitIdmError):
    """Bad or conflicting arguments, reserved id, or incomplete new identity."""


class NotFoundError(GitIdmError):
    """The requested identity does not exist."""

    def __init__(self, identity_id: str):
        super().__init__(f"Identity '{identity_id}' not found")
        self.identity_id = identity_id


class StoreError(GitIdmError):
    """A configuration store or filesystem operation failed."""


class MissingEntryError(StoreError):
    """The store reported that a key or section did not exist."""


class DriftError(GitIdmError):
    """Live git configuration disagrees with the active identity."""

    def __init__(self, report):
        self.report = report
        fields = ", ".join(d.field for d in report.discrepancies)
        super().__init__(
            f"Live git config differs from identity '{report.active_id}' ({fields}); "
            f"run 'gitidm use {report.active_id}' to fix"
        )
