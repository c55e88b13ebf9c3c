"""FastAPI dependencies for tenant scoping of organizer endpoints.

Organizer routes act on exactly one tenant, selected by the x-tenant-id
header. The caller must hold an organizer role and a membership in that
tenant, and the tenant must be active. The membership role then decides
what the caller may do inside the tenant.

Usage:
    @router.get("/events")
    def list_events(ctx: TenantScope, db: Session = Depends(get_db)):
        return db.query(Event).filter(Event.tenant_id == ctx.tenant_id).all()

    @router.post("/team")
    def add_member(ctx: TenantContext = Depends(require_membership_role(MembershipRole.TENANT_OWNER))):
        ...
"""

from dataclasses import dataclass
from typing import Annotated, Callable, Optional
from uuid import UUID

from fastapi import Depends, Header, Request, status
from sqlalchemy.orm import Session

from auth.dependencies import VerifiedUser
from auth.roles import is_organizer_role
from database import get_db
from errors import ApiError
from models.tenant import MembershipRole, TenantMembership
from models.user import User

TENANT_HEADER = "x-tenant-id"


@dataclass(frozen=True)
class TenantContext:
    """Resolved tenant scope for the current request."""
    tenant_id: UUID
    membership_role: str
    user: User


def _no_membership() -> ApiError:
    return ApiError(status.HTTP_403_FORBIDDEN, "forbidden", "No tenant membership found.")


def require_tenant_context(
    request: Request,
    current_user: VerifiedUser,
    db: Session = Depends(get_db),
    x_tenant_id: Optional[str] = Header(None, alias=TENANT_HEADER),
) -> TenantContext:
    """Resolve and authorize the tenant named by the x-tenant-id header.

    Checks run in this order:
    1. caller holds an organizer role (403 forbidden)
    2. header present (400 tenant_header_missing)
    3. membership on (tenant_id, user_id) exists (403 forbidden)
    4. tenant is active (403 tenant_inactive)
    """
    if not is_organizer_role(current_user.role):
        raise ApiError(status.HTTP_403_FORBIDDEN, "forbidden", "Organizer access required.")

    if not x_tenant_id or not x_tenant_id.strip():
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            "tenant_header_missing",
            f"The {TENANT_HEADER} header is required.",
        )

    try:
        tenant_id = UUID(x_tenant_id.strip())
    except ValueError:
        raise _no_membership()

    membership = db.query(TenantMembership).filter(
        TenantMembership.tenant_id == tenant_id,
        TenantMembership.user_id == current_user.id,
    ).first()
    if not membership:
        raise _no_membership()

    if not membership.tenant.is_active:
        raise ApiError(status.HTTP_403_FORBIDDEN, "tenant_inactive", "Tenant is not active.")

    request.state.tenant_id = str(tenant_id)
    return TenantContext(tenant_id=tenant_id, membership_role=membership.role, user=current_user)


TenantScope = Annotated[TenantContext, Depends(require_tenant_context)]


def require_membership_role(*allowed_roles: MembershipRole) -> Callable:
    """Create a dependency that requires one of the given membership roles.

    Raises:
        ApiError 403 forbidden: If the membership role is not allowed
    """
    allowed = {role.value for role in allowed_roles}

    def membership_dependency(ctx: TenantScope) -> TenantContext:
        if ctx.membership_role not in allowed:
            raise ApiError(
                status.HTTP_403_FORBIDDEN,
                "forbidden",
                "Insufficient tenant permissions.",
            )
        return ctx

    return membership_dependency


TeamManagerScope = Annotated[
    TenantContext,
    Depends(require_membership_role(MembershipRole.TENANT_OWNER, MembershipRole.TENANT_ADMIN)),
]
