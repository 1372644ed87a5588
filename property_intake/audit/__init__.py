"""Audit logging package."""

from property_intake.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
