"""CEO "manage roles" screen: move a user exactly one rung along MANAGEMENT_LADDER."""

from __future__ import annotations

from flask import current_app

from learnhub.extensions import db
from learnhub.models import User
from learnhub.roles import MANAGEMENT_LADDER, Role, parse_role
from learnhub.utils import audit
from learnhub.utils.user_directory import get_user, require_actor, set_role
from learnhub.workflows.errors import InvalidRole, InvalidStateTransition, ProtectedRole


def change_role_directly(ceo_id: int, user_id: int, new_role) -> User:
    ceo = require_actor(ceo_id, Role.CEO, message="CEO access only")

    role = parse_role(new_role)
    if role is None:
        raise InvalidRole("Invalid role")
    if role is Role.CEO:
        raise InvalidRole("Cannot assign CEO role via system")

    user = get_user(user_id, for_update=True)
    if user.has_role(Role.CEO):
        raise ProtectedRole("Cannot modify CEO role")

    old_role = user.role_enum
    step = MANAGEMENT_LADDER[role] - MANAGEMENT_LADDER[old_role]
    if abs(step) != 1:
        raise InvalidStateTransition(
            "Invalid transition. Use step-by-step promotions/demotions "
            "(e.g., student -> moderator -> instructor -> admin)."
        )

    try:
        set_role(user, role)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    current_app.logger.info("direct role change by=%s user=%s %s->%s", ceo.id, user.id, old_role.value, role.value)

    audit.record(
        audit.ROLE_UPDATE,
        ceo.id,
        target_id=user.id,
        details={
            "kind": "DIRECT_ROLE_CHANGE",
            "oldRole": old_role.value,
            "newRole": role.value,
            "via": "CEO_MANAGE_ROLES",
        },
        category="ROLE",
    )
    return user
