"""Audit logging for gitidm."""

from .logger import AuditLogger

__all__ = ["AuditLogger"]
