from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    STUDENT = "student"
    MODERATOR = "moderator"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"
    CEO = "ceo"


class Permission(str, Enum):
    # CEO governance
    MANAGE_ADMINS = "manageAdmins"
    MANAGE_ROLES = "manageRoles"
    MANAGE_WALLET_SYSTEM = "manageWalletSystem"
    MANAGE_REWARDS = "manageRewards"
    VIEW_ADMIN_LOGS = "viewAdminLogs"
    VIEW_ANALYTICS = "viewAnalytics"

    # Admin operational controls
    MANAGE_USERS = "manageUsers"
    MANAGE_PROFILE_REQUESTS = "manageProfileRequests"
    APPROVE_CONTENT = "approveContent"

    # Content / community
    MANAGE_QUIZZES = "manageQuizzes"
    MANAGE_RESOURCES = "manageResources"
    MANAGE_ANNOUNCEMENTS = "manageAnnouncements"
    MANAGE_COMMUNITY = "manageCommunity"


STAFF_ROLES = (Role.CEO, Role.ADMIN)

# Upward ladder used by self-service promotion requests.
PROMOTION_LADDER: dict[Role, Role] = {
    Role.STUDENT: Role.INSTRUCTOR,
    Role.INSTRUCTOR: Role.MODERATOR,
    Role.MODERATOR: Role.ADMIN,
}

# Rank used by the CEO "manage roles" screen for one-step moves.
# Moderator and instructor sit in the opposite order to PROMOTION_LADDER.
MANAGEMENT_LADDER: dict[Role, int] = {
    Role.STUDENT: 0,
    Role.MODERATOR: 1,
    Role.INSTRUCTOR: 2,
    Role.ADMIN: 3,
}


def parse_role(value) -> Role | None:
    """Return the Role for a raw string, or None when it is not a known role."""
    if isinstance(value, Role):
        return value
    raw = (str(value) if value is not None else "").strip().lower()
    try:
        return Role(raw)
    except ValueError:
        return None


def next_role(current) -> Role | None:
    role = parse_role(current)
    if role is None:
        return None
    return PROMOTION_LADDER.get(role)


def permissions_for(role: Role) -> frozenset[Permission]:
    if role is Role.CEO:
        return frozenset({
            Permission.MANAGE_ADMINS,
            Permission.MANAGE_ROLES,
            Permission.MANAGE_WALLET_SYSTEM,
            Permission.MANAGE_REWARDS,
            Permission.VIEW_ADMIN_LOGS,
            Permission.VIEW_ANALYTICS,
        })
    if role is Role.ADMIN:
        return frozenset({
            Permission.MANAGE_USERS,
            Permission.MANAGE_PROFILE_REQUESTS,
            Permission.APPROVE_CONTENT,
            Permission.VIEW_ANALYTICS,
            Permission.VIEW_ADMIN_LOGS,
        })
    if role is Role.INSTRUCTOR:
        return frozenset({Permission.MANAGE_QUIZZES, Permission.MANAGE_RESOURCES})
    if role is Role.MODERATOR:
        return frozenset({Permission.MANAGE_COMMUNITY})
    if role is Role.STUDENT:
        return frozenset()
    raise ValueError(f"unknown role: {role!r}")
