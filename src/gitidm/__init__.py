"""gitidm - switch between git commit identities."""

__version__ = "0.3.0"
