"""Utility modules for nanorouter."""

from nanorouter.utils.logging import AuditLogger, NullAuditLogger, configure_logging

__all__ = ["AuditLogger", "NullAuditLogger", "configure_logging"]
