"""User roles and role groups.

Global roles (stored on user.role):
- platform_admin: curates locations, reviews organizer applications, moderates events
- tenant_owner: owns a tenant; full control of its events and team
- tenant_admin: manages a tenant's events, requests and team
- tenant_guide: runs events for a tenant
- visitor: browses events and requests to join them

Tenant scoped permission checks use the membership role (tenant_membership.role),
not the global role. A user's global role only gates which route groups
are reachable at all.

Permission Matrix (membership role):
┌──────────────────────────┬───────┬───────┬───────┐
│ Action                   │ OWNER │ ADMIN │ GUIDE │
├──────────────────────────┼───────┼───────┼───────┤
│ Manage events & requests │   ✓   │   ✓   │   ✓   │
│ Manage team              │   ✓   │   ✓   │       │
└──────────────────────────┴───────┴───────┴───────┘
"""

from typing import FrozenSet

from models.user import UserRole
from models.tenant import MembershipRole

ORGANIZER_ROLES: FrozenSet[str] = frozenset({
    UserRole.TENANT_OWNER.value,
    UserRole.TENANT_ADMIN.value,
    UserRole.TENANT_GUIDE.value,
})

TEAM_MANAGER_ROLES: FrozenSet[str] = frozenset({
    MembershipRole.TENANT_OWNER.value,
    MembershipRole.TENANT_ADMIN.value,
})

# Global roles that may be reassigned when a user joins a team. Owners and
# platform admins keep their role.
REASSIGNABLE_ROLES: FrozenSet[str] = frozenset({
    UserRole.VISITOR.value,
    UserRole.TENANT_ADMIN.value,
    UserRole.TENANT_GUIDE.value,
})


def is_organizer_role(role: str) -> bool:
    return role in ORGANIZER_ROLES


__all__ = [
    "UserRole",
    "MembershipRole",
    "ORGANIZER_ROLES",
    "TEAM_MANAGER_ROLES",
    "REASSIGNABLE_ROLES",
    "is_organizer_role",
]
