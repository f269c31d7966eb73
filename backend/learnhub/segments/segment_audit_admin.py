from __future__ import annotations

from flask import Blueprint, jsonify, request

from learnhub.auth import require_roles
from learnhub.roles import STAFF_ROLES
from learnhub.utils import audit

audit_bp = Blueprint("audit_bp", __name__, url_prefix="/api/admin/audit")


@audit_bp.get("")
@require_roles(*STAFF_ROLES)
def list_logs():
    target = (request.args.get("targetId") or "").strip()
    if target and not target.isdigit():
        return jsonify({"message": "targetId must be numeric"}), 400
    rows = audit.list_entries(
        action=(request.args.get("action") or "").strip(),
        category=(request.args.get("category") or "").strip(),
        target_id=int(target) if target else None,
    )
    return jsonify({"ok": True, "items": [r.to_dict() for r in rows]}), 200
