from __future__ import annotations

from flask import Blueprint, jsonify, request

from learnhub.auth import caller, require_auth, require_roles
from learnhub.roles import STAFF_ROLES
from learnhub.workflows import demotion

role_change_bp = Blueprint("role_change_bp", __name__, url_prefix="/api/role-change")


def _payload() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@role_change_bp.post("")
@require_roles(*STAFF_ROLES)
def initiate():
    payload = _payload()
    user_id = payload.get("userId")
    new_role = payload.get("newRole")
    if not user_id or not new_role:
        return jsonify({"message": "userId and newRole are required"}), 400

    req = demotion.initiate_demotion(caller().id, user_id, new_role, payload.get("reason"))
    return jsonify({
        "ok": True,
        "message": "Demotion request initiated and pending user review",
        "request": req.to_dict(),
    }), 201


@role_change_bp.get("")
@require_roles(*STAFF_ROLES)
def list_requests():
    user_id = (request.args.get("userId") or "").strip()
    if user_id and not user_id.isdigit():
        return jsonify({"message": "userId must be numeric"}), 400
    rows = demotion.list_all(
        status=(request.args.get("status") or "").strip() or None,
        user_id=int(user_id) if user_id else None,
    )
    return jsonify({"ok": True, "items": [r.to_dict() for r in rows]}), 200


@role_change_bp.get("/mine")
@require_auth
def my_request():
    row = demotion.latest_for_user(caller().id)
    return jsonify({"ok": True, "request": row.to_dict() if row else None}), 200


@role_change_bp.get("/active")
@require_auth
def my_active_requests():
    rows = demotion.list_active(caller().id)
    return jsonify({"ok": True, "items": [r.to_dict() for r in rows]}), 200


@role_change_bp.patch("/<int:req_id>/respond")
@require_auth
def respond(req_id: int):
    payload = _payload()
    req = demotion.user_respond(req_id, caller().id, payload.get("confirm"), payload.get("disputeNote"))
    return jsonify({"ok": True, "message": "Response recorded", "request": req.to_dict()}), 200


@role_change_bp.patch("/<int:req_id>/finalize")
@require_roles(*STAFF_ROLES)
def finalize(req_id: int):
    req = demotion.finalize_demotion(req_id, caller().id)
    return jsonify({"ok": True, "message": "Role demotion finalized", "request": req.to_dict()}), 200


@role_change_bp.patch("/<int:req_id>/cancel")
@require_roles(*STAFF_ROLES)
def cancel(req_id: int):
    req = demotion.cancel_demotion(req_id, caller().id)
    return jsonify({"ok": True, "message": "Demotion cancelled", "request": req.to_dict()}), 200
