from __future__ import annotations

from flask import Blueprint, jsonify, request

from learnhub.auth import caller, require_auth, require_roles
from learnhub.roles import Role
from learnhub.utils.system_settings import get_settings, update_availability

system_settings_bp = Blueprint("system_settings_bp", __name__, url_prefix="/api/system/settings")


@system_settings_bp.get("")
@require_auth
def read_settings():
    return jsonify({"ok": True, "settings": get_settings().to_dict()}), 200


@system_settings_bp.patch("/availability")
@require_roles(Role.CEO)
def update_availability_settings():
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        payload = {}
    s = update_availability(
        caller().id,
        maintenance_mode=payload.get("maintenanceMode"),
        maintenance_message=payload.get("maintenanceMessage"),
        allow_registrations=payload.get("allowRegistrations"),
    )
    return jsonify({"ok": True, "message": "Availability settings updated", "settings": s.to_dict()}), 200
