"""Audit logging service for security and administrative events.

This service provides a centralized interface for creating immutable audit log
entries. Entries are added to the caller's session and committed together with
the change they describe.

Audit actions are dotted lowercase names, for example:
- auth.login_success, auth.login_failed, auth.password_reset
- location.create, location.update
- organizer_application.approved, organizer_application.rejected
- event.create, event.update, event.publish, event.cancel, event.suspend, event.unsuspend
- request.approved, request.rejected
- team.upsert_member, team.update_role
- media.commit
"""

from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import Request
from sqlalchemy.orm import Session

from models.audit_log import AuditLog


def get_client_ip(request: Request) -> Optional[str]:
    """Client IP address, honouring the first X-Forwarded-For hop."""
    forwarded = request.headers.get('X-Forwarded-For')
    if forwarded:
        return forwarded.split(',')[0].strip()
    if request.client:
        return request.client.host
    return None


def get_user_agent(request: Request) -> Optional[str]:
    return request.headers.get('User-Agent')


def log_audit_event(
    db: Session,
    action: str,
    actor_id: Optional[UUID] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[Any] = None,
    tenant_id: Optional[UUID] = None,
    metadata: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> AuditLog:
    """Append an audit entry to the session and flush it.

    Nothing is committed here; the entry lands in the same transaction as the
    change it records. entity_id is stored as text so ids of any shape fit.
    """
    audit_entry = AuditLog(
        tenant_id=tenant_id,
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        metadata_json=metadata,
        ip_address=ip_address,
        user_agent=user_agent,
    )

    db.add(audit_entry)
    db.flush()

    return audit_entry


def log_from_request(
    db: Session,
    request: Request,
    action: str,
    actor_id: Optional[UUID] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[Any] = None,
    tenant_id: Optional[UUID] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """log_audit_event with client IP and User-Agent taken from the request."""
    return log_audit_event(
        db=db,
        action=action,
        actor_id=actor_id,
        entity_type=entity_type,
        entity_id=entity_id,
        tenant_id=tenant_id,
        metadata=metadata,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )
