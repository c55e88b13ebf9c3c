"""Pydantic schemas for audit log endpoints.

Audit logs are read-only (no create/update/delete operations).
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from schemas.common import ApiModel


class AuditLogResponse(ApiModel):
    """Audit log entry. All fields are read-only."""
    id: UUID
    tenant_id: Optional[UUID] = Field(None, description="Tenant the entity belongs to (None for platform events)")
    actor_id: Optional[UUID] = Field(None, description="User who performed the action (None for anonymous)")
    action: str = Field(..., description="Dotted action name, e.g. event.publish")
    entity_type: Optional[str] = Field(None, description="Type of entity affected (event, location, ...)")
    entity_id: Optional[str] = None
    metadata: Optional[dict] = Field(None, validation_alias="metadata_json")
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime

    model_config = {
        "json_schema_extra": {
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "tenantId": "7c9e6679-7425-40de-944b-e07fc1f90ae7",
                "actorId": "123e4567-e89b-12d3-a456-426614174000",
                "action": "event.publish",
                "entityType": "event",
                "entityId": "abc12345-6789-0abc-def0-123456789012",
                "metadata": None,
                "ipAddress": "192.168.1.100",
                "userAgent": "Mozilla/5.0...",
                "createdAt": "2026-01-04T12:00:00Z"
            }
        }
    }


class AuditLogListResponse(ApiModel):
    """Paginated audit log query result."""
    data: List[AuditLogResponse]
    total: int = Field(..., description="Total number of entries matching filters")
    page: int
    per_page: int
