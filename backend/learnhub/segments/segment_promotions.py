from __future__ import annotations

from flask import Blueprint, jsonify, request

from learnhub.auth import caller, require_auth, require_roles
from learnhub.roles import Role, STAFF_ROLES
from learnhub.workflows import promotion

promotions_bp = Blueprint("promotions_bp", __name__, url_prefix="/api/promotions")


def _payload() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@promotions_bp.post("")
@require_auth
def request_promotion():
    req = promotion.request_promotion(caller().id)
    return jsonify({"ok": True, "message": "Promotion request submitted successfully", "request": req.to_dict()}), 201


@promotions_bp.post("/ceo-initiate")
@require_roles(Role.CEO)
def ceo_initiate():
    payload = _payload()
    user_id = payload.get("userId")
    requested_role = payload.get("requestedRole")
    if not user_id or not requested_role:
        return jsonify({"message": "userId and requestedRole are required"}), 400

    req = promotion.ceo_initiate_promotion(caller().id, user_id, requested_role)
    return jsonify({"ok": True, "message": "Promotion flow initiated for user", "request": req.to_dict()}), 201


@promotions_bp.get("")
@require_roles(*STAFF_ROLES)
def list_promotions():
    rows = promotion.list_promotions(
        status=(request.args.get("status") or "").strip() or None,
        role=(request.args.get("role") or "").strip() or None,
    )
    return jsonify({"ok": True, "items": [r.to_dict() for r in rows]}), 200


@promotions_bp.get("/mine")
@require_auth
def my_promotion():
    row = promotion.latest_request_for(caller().id)
    return jsonify({"ok": True, "request": row.to_dict() if row else None}), 200


@promotions_bp.patch("/<int:req_id>/interview")
@require_roles(*STAFF_ROLES)
def schedule_interview(req_id: int):
    payload = _payload()
    req = promotion.schedule_interview(
        req_id,
        caller().id,
        scheduled_at=payload.get("scheduledAt"),
        mode=payload.get("mode"),
        meeting_link=payload.get("meetingLink"),
        location=payload.get("location"),
        notes=payload.get("notes"),
    )
    return jsonify({"ok": True, "message": "Interview scheduled successfully", "request": req.to_dict()}), 200


@promotions_bp.patch("/<int:req_id>/interview-complete")
@require_roles(*STAFF_ROLES)
def complete_interview(req_id: int):
    payload = _payload()
    req = promotion.complete_interview(req_id, caller().id, proof_url=payload.get("proofUrl"))
    return jsonify({"ok": True, "message": "Interview marked as completed", "request": req.to_dict()}), 200


@promotions_bp.patch("/<int:req_id>/confirm")
@require_auth
def confirm_interview(req_id: int):
    payload = _payload()
    req = promotion.confirm_interview_status(req_id, caller().id, payload.get("confirm"))
    return jsonify({"ok": True, "message": "Interview confirmation updated", "request": req.to_dict()}), 200


@promotions_bp.patch("/<int:req_id>/approve")
@require_roles(Role.CEO)
def approve(req_id: int):
    payload = _payload()
    req = promotion.approve_promotion(req_id, caller().id, reason=payload.get("reason"))
    return jsonify({"ok": True, "message": "Promotion approved", "request": req.to_dict()}), 200


@promotions_bp.patch("/<int:req_id>/reject")
@require_roles(Role.CEO)
def reject(req_id: int):
    payload = _payload()
    req = promotion.reject_promotion(req_id, caller().id, reason=payload.get("reason"))
    return jsonify({
        "ok": True,
        "message": f"Promotion rejected. Next request allowed on {req.cooldown_ends_at.isoformat()}",
        "request": req.to_dict(),
    }), 200
