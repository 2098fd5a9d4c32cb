"""Audit logging package."""

from bizbook.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
