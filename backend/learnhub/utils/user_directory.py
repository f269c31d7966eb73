"""Read and write access to users for the workflow engines.

Engines never touch ``User`` rows directly; role writes happen only through
:func:`set_role`, inside the caller's transaction.
"""

from __future__ import annotations

from learnhub.extensions import db
from learnhub.models import User
from learnhub.roles import Role
from learnhub.workflows.errors import Forbidden, NotFound


def _coerce_id(user_id) -> int:
    try:
        return int(user_id)
    except (TypeError, ValueError):
        raise NotFound("User not found")


def get_user(user_id, for_update: bool = False) -> User:
    uid = _coerce_id(user_id)
    if for_update:
        user = User.query.filter_by(id=uid).with_for_update().first()
    else:
        user = db.session.get(User, uid)
    if user is None:
        raise NotFound("User not found")
    return user


def require_actor(actor_id, *roles: Role, message: str = "Forbidden: insufficient role") -> User:
    actor = get_user(actor_id)
    if roles and not actor.has_role(*roles):
        raise Forbidden(message)
    return actor


def set_role(user: User, role: Role) -> None:
    user.role = Role(role).value
    db.session.add(user)
