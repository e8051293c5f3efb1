"""Audit logging package."""

from expensetracker.audit.logger import (
    LOGGER_PREFIX,
    AuditLogger,
    configure_logging,
    create_correlation_id,
)

__all__ = ["LOGGER_PREFIX", "AuditLogger", "configure_logging", "create_correlation_id"]
