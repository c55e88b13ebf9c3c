"""SQLAlchemy Models for the UAE Trails API"""

from .base import Base, PortableJSONB
from .user import User, Profile, UserRole, UserStatus
from .tenant import (
    Tenant,
    TenantType,
    TenantStatus,
    TenantMembership,
    MembershipRole,
    OrganizerApplication,
    ApplicationStatus,
)
from .location import Location, ActivityType, Difficulty, Accessibility, LocationStatus
from .event import Event, EventStatus, EventRequest, RequestStatus, EventParticipant
from .notification import Notification, NotificationType
from .auth_token import RefreshToken, EmailVerificationToken, PasswordResetToken
from .media_asset import MediaAsset
from .audit_log import AuditLog

__all__ = [
    "Base",
    "PortableJSONB",
    "User",
    "Profile",
    "UserRole",
    "UserStatus",
    "Tenant",
    "TenantType",
    "TenantStatus",
    "TenantMembership",
    "MembershipRole",
    "OrganizerApplication",
    "ApplicationStatus",
    "Location",
    "ActivityType",
    "Difficulty",
    "Accessibility",
    "LocationStatus",
    "Event",
    "EventStatus",
    "EventRequest",
    "RequestStatus",
    "EventParticipant",
    "Notification",
    "NotificationType",
    "RefreshToken",
    "EmailVerificationToken",
    "PasswordResetToken",
    "MediaAsset",
    "AuditLog",
]
