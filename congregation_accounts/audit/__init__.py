"""Audit logging package."""

from congregation_accounts.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
