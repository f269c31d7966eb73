from __future__ import annotations

from functools import wraps

from flask import jsonify, request
from flask_login import current_user

from learnhub.extensions import db, login_manager
from learnhub.models import User
from learnhub.roles import Role, STAFF_ROLES
from learnhub.utils.jwt_utils import decode_token, get_bearer_token
from learnhub.utils.system_settings import get_settings


@login_manager.user_loader
def load_user(user_id):
    try:
        return db.session.get(User, int(user_id))
    except (TypeError, ValueError):
        return None


@login_manager.request_loader
def load_user_from_request(req):
    """Resolve ``Authorization: Bearer <jwt>`` to a user for every API call."""
    token = get_bearer_token(req.headers.get("Authorization", ""))
    if not token:
        return None
    payload = decode_token(token)
    if not payload or payload.get("type") != "access":
        return None
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return None
    return db.session.get(User, user_id)


def require_roles(*roles: Role):
    """Reject anonymous, blocked and (during maintenance) non-staff callers, then check roles.

    With no roles given any authenticated user passes.
    """

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not current_user or not current_user.is_authenticated:
                return jsonify({"message": "No token provided" if not request.headers.get("Authorization") else "Invalid or expired token"}), 401

            user = current_user._get_current_object()
            if user.is_blocked:
                return jsonify({"message": "Your account has been blocked by admin."}), 403

            settings = get_settings()
            if settings.maintenance_mode and not user.has_role(*STAFF_ROLES):
                return jsonify({"message": settings.maintenance_message}), 503

            if roles and not user.has_role(*roles):
                return jsonify({"message": "Forbidden: insufficient role"}), 403
            return fn(*args, **kwargs)

        return wrapper

    return decorator


require_auth = require_roles()


def caller() -> User:
    return current_user._get_current_object()
