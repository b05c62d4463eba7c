"""Audit logging package."""

from fintrack.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
