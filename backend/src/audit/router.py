"""Audit log query endpoints (platform admin only).

All endpoints in this router are read-only. Audit logs are immutable and
cannot be created, updated, or deleted through the API.

Platform admins can query audit logs with filtering by:
- Action (auth.login_failed, event.publish, etc.)
- Entity type (user, event, tenant_membership, etc.)
- Tenant
- Pagination (page, per_page)
"""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from auth.dependencies import PlatformAdmin
from database import get_db
from models.audit_log import AuditLog
from .schemas import AuditLogListResponse, AuditLogResponse


router = APIRouter(prefix="/admin/audit-logs", tags=["Audit Logs"])


@router.get(
    "",
    response_model=AuditLogListResponse,
    summary="Query audit logs (platform admin only)",
)
def query_audit_logs(
    admin: PlatformAdmin,
    db: Annotated[Session, Depends(get_db)],
    action: Optional[str] = Query(None, description="Filter by action, e.g. event.publish"),
    entity_type: Optional[str] = Query(None, alias="entityType", description="Filter by entity type"),
    tenant_id: Optional[UUID] = Query(None, alias="tenantId", description="Filter by tenant"),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    per_page: int = Query(50, ge=1, le=100, alias="perPage", description="Entries per page (max 100)"),
) -> AuditLogListResponse:
    """Query audit logs, newest first.

    Example:
        GET /api/v1/admin/audit-logs?action=event.publish&page=1&perPage=50
    """
    query = db.query(AuditLog)

    if action:
        query = query.filter(AuditLog.action == action)
    if entity_type:
        query = query.filter(AuditLog.entity_type == entity_type)
    if tenant_id:
        query = query.filter(AuditLog.tenant_id == tenant_id)

    total = query.count()

    offset = (page - 1) * per_page
    entries = query.order_by(AuditLog.created_at.desc()).offset(offset).limit(per_page).all()

    return AuditLogListResponse(
        data=[AuditLogResponse.model_validate(entry) for entry in entries],
        total=total,
        page=page,
        per_page=per_page,
    )
