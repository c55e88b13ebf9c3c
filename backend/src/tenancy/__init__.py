"""Tenancy module - tenant context resolution for organizer endpoints.

This module provides:
- x-tenant-id header resolution with membership and tenant status checks
- Membership role enforcement inside a tenant
"""

from .dependencies import (
    TENANT_HEADER,
    TenantContext,
    TenantScope,
    TeamManagerScope,
    require_tenant_context,
    require_membership_role,
)

__all__ = [
    "TENANT_HEADER",
    "TenantContext",
    "TenantScope",
    "TeamManagerScope",
    "require_tenant_context",
    "require_membership_role",
]
