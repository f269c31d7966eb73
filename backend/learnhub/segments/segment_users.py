from __future__ import annotations

from flask import Blueprint, jsonify, request

from learnhub.auth import caller, require_auth, require_roles
from learnhub.roles import Role
from learnhub.workflows.roles_admin import change_role_directly

users_bp = Blueprint("users_bp", __name__, url_prefix="/api/users")


@users_bp.get("/me")
@require_auth
def me():
    return jsonify({"ok": True, "user": caller().to_dict()}), 200


@users_bp.patch("/<int:user_id>/role")
@require_roles(Role.CEO)
def update_role(user_id: int):
    payload = request.get_json(silent=True) or {}
    new_role = payload.get("newRole") if isinstance(payload, dict) else None
    if not new_role:
        return jsonify({"message": "New role is required"}), 400

    user = change_role_directly(caller().id, user_id, new_role)
    return jsonify({"ok": True, "message": "Role updated successfully", "user": user.to_dict()}), 200
