"""Audit module - immutable audit trail of security and administrative actions."""

from .service import log_audit_event, log_from_request

__all__ = ["log_audit_event", "log_from_request"]
