"""Promotion workflow: a user's move one step up the role ladder.

A request starts either as ``pending_review`` (the user asked) or as
``awaiting_user_confirmation`` (the CEO started it). Staff may gate it with an
interview that the user confirms, and the CEO closes it with an approval, the
only place a promotion changes ``User.role``, or a rejection, which starts a
cooldown before the user may ask again.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from flask import current_app

from learnhub.extensions import db
from learnhub.models import PromotionRequest, PromotionStatus, User
from learnhub.models.promotion_request import INTERVIEW_MODES, PROMOTION_ACTIVE_STATUSES
from learnhub.roles import Role, STAFF_ROLES, next_role, parse_role
from learnhub.utils import audit
from learnhub.utils.clock import utcnow
from learnhub.utils.notify import notify_user
from learnhub.utils.user_directory import get_user, require_actor, set_role
from learnhub.workflows.common import (
    clean_text,
    commit_transition,
    insert_active,
    load_request,
    parse_datetime,
)
from learnhub.workflows.errors import (
    ActiveRequestExists,
    CooldownActive,
    Forbidden,
    IneligibleRole,
    InvalidInput,
    InvalidRole,
    ProtectedRole,
)
from learnhub.workflows.transitions import PROMOTION_TRANSITIONS, PromotionEvent, advance

COOLDOWN_DAYS = 30
CEO_INITIATED_REASON = "CEO initiated promotion flow"


def _cooldown_days() -> int:
    return int(current_app.config.get("PROMOTION_COOLDOWN_DAYS") or COOLDOWN_DAYS)


def _audit(kind: str, actor_id: int, target_id: int, **details) -> None:
    audit.record(
        audit.ROLE_UPDATE,
        actor_id,
        target_id=target_id,
        details={"kind": kind, **details},
        category="PROMOTION",
    )


def _guard(req: PromotionRequest, event: PromotionEvent, message: str | None = None) -> PromotionStatus:
    if req.is_terminal and event in (PromotionEvent.APPROVE, PromotionEvent.REJECT):
        message = f"Request already {req.status}"
    return advance(PROMOTION_TRANSITIONS, req.status_enum, event, message)


def active_request_for(user_id: int) -> PromotionRequest | None:
    return (
        PromotionRequest.query
        .filter(PromotionRequest.user_id == int(user_id))
        .filter(PromotionRequest.status.in_([s.value for s in PROMOTION_ACTIVE_STATUSES]))
        .first()
    )


def latest_request_for(user_id: int) -> PromotionRequest | None:
    return (
        PromotionRequest.query
        .filter_by(user_id=int(user_id))
        .order_by(PromotionRequest.created_at.desc(), PromotionRequest.id.desc())
        .first()
    )


def request_promotion(user_id: int, now: datetime | None = None) -> PromotionRequest:
    now = now or utcnow()
    user = get_user(user_id)

    if user.has_role(Role.CEO):
        raise IneligibleRole("CEO cannot request promotion", status_code=403)

    requested = next_role(user.role)
    if requested is None:
        raise IneligibleRole("Your current role is not eligible for promotion via this flow")

    latest = latest_request_for(user.id)
    if latest is not None and latest.cooldown_ends_at and latest.cooldown_ends_at > now:
        raise CooldownActive(
            "You must wait before requesting again",
            nextAllowedDate=latest.cooldown_ends_at.isoformat(),
        )

    message = "You already have an active promotion request"
    if active_request_for(user.id) is not None:
        raise ActiveRequestExists(message)

    req = PromotionRequest(
        user_id=int(user.id),
        initiated_by="user",
        current_role_at_request=user.role_enum.value,
        requested_role=requested.value,
        status=PromotionStatus.PENDING_REVIEW.value,
        interview_required=requested is Role.ADMIN,
        interview_confirmed_by_user="pending",
        last_updated_by=int(user.id),
        created_at=now,
    )
    insert_active(req, message)
    current_app.logger.info("promotion %s requested user=%s %s->%s", req.id, user.id, req.current_role_at_request, req.requested_role)

    _audit(
        "PROMOTION_REQUEST",
        user.id,
        user.id,
        requestId=req.id,
        **{"from": req.current_role_at_request, "to": req.requested_role, "initiatedBy": "user"},
    )
    return req


def ceo_initiate_promotion(ceo_id: int, user_id: int, requested_role) -> PromotionRequest:
    ceo = require_actor(ceo_id, Role.CEO, message="CEO access only")
    target = get_user(user_id)

    if target.has_role(Role.CEO):
        raise ProtectedRole("Cannot run promotion flow on CEO account")

    role = parse_role(requested_role)
    if role is None:
        raise InvalidRole("Invalid requested role")
    if role is Role.CEO:
        raise InvalidRole("CEO role cannot be assigned via promotion flow")

    message = "User already has an active promotion request"
    if active_request_for(target.id) is not None:
        raise ActiveRequestExists(message)

    req = PromotionRequest(
        user_id=int(target.id),
        initiated_by="ceo",
        current_role_at_request=target.role_enum.value,
        requested_role=role.value,
        status=PromotionStatus.AWAITING_USER_CONFIRMATION.value,
        interview_required=role is Role.ADMIN,
        interview_confirmed_by_user="pending",
        decision_reason=CEO_INITIATED_REASON,
        last_updated_by=int(ceo.id),
    )
    insert_active(req, message)
    current_app.logger.info("promotion %s initiated by ceo=%s user=%s ->%s", req.id, ceo.id, target.id, role.value)

    _audit(
        "CEO_INITIATED_PROMOTION",
        ceo.id,
        target.id,
        requestId=req.id,
        **{"from": req.current_role_at_request, "to": req.requested_role},
    )
    return req


def get_promotion(request_id) -> PromotionRequest:
    return load_request(PromotionRequest, request_id)


def list_promotions(status: str | None = None, role: str | None = None) -> list[PromotionRequest]:
    q = PromotionRequest.query
    if status:
        q = q.filter(PromotionRequest.status == status.strip().lower())
    if role:
        q = q.filter(PromotionRequest.requested_role == role.strip().lower())
    return q.order_by(PromotionRequest.created_at.desc(), PromotionRequest.id.desc()).all()


def schedule_interview(
    request_id,
    actor_id: int,
    scheduled_at=None,
    mode: str | None = None,
    meeting_link: str | None = None,
    location: str | None = None,
    notes: str | None = None,
) -> PromotionRequest:
    actor = require_actor(actor_id, *STAFF_ROLES)
    req = get_promotion(request_id)
    current = req.status_enum
    nxt = _guard(req, PromotionEvent.SCHEDULE_INTERVIEW, "Interview cannot be scheduled in current state")

    when = parse_datetime(scheduled_at, "scheduledAt")
    if mode is not None and mode != "":
        mode = str(mode).strip().lower()
        if mode not in INTERVIEW_MODES:
            raise InvalidInput("mode must be 'online' or 'offline'")
    else:
        mode = None

    values = {
        "status": nxt,
        "interview_required": True,
        "interview_scheduled_at": when,
        "interview_mode": mode or req.interview_mode,
        "interview_meeting_link": clean_text(meeting_link, 400) or req.interview_meeting_link,
        "interview_location": clean_text(location, 240) or req.interview_location,
        "interview_notes": clean_text(notes, 4000) or req.interview_notes,
        # A new interview replaces any earlier outcome.
        "interview_completed_at": None,
        "interview_completed_by": None,
        "interview_confirmed_by_user": "pending",
        "interview_proof_url": None,
        "last_updated_by": int(actor.id),
    }
    commit_transition(PromotionRequest, req, current, values)
    current_app.logger.info("promotion %s interview scheduled by=%s at=%s", req.id, actor.id, when)

    _audit(
        "INTERVIEW_SCHEDULED",
        actor.id,
        req.user_id,
        requestId=req.id,
        scheduledAt=req.interview_scheduled_at,
        mode=req.interview_mode,
    )
    return req


def complete_interview(request_id, actor_id: int, proof_url: str | None = None) -> PromotionRequest:
    actor = require_actor(actor_id, *STAFF_ROLES)
    req = get_promotion(request_id)
    current = req.status_enum
    nxt = _guard(req, PromotionEvent.COMPLETE_INTERVIEW, "Interview is not in a schedulable state to be completed")

    values = {
        "status": nxt,
        "interview_completed_at": utcnow(),
        "interview_completed_by": int(actor.id),
        "last_updated_by": int(actor.id),
    }
    proof = clean_text(proof_url, 600)
    if proof:
        values["interview_proof_url"] = proof
    commit_transition(PromotionRequest, req, current, values)
    current_app.logger.info("promotion %s interview completed by=%s", req.id, actor.id)

    _audit("INTERVIEW_COMPLETED", actor.id, req.user_id, requestId=req.id, proofUrl=proof)
    return req


def confirm_interview_status(request_id, user_id: int, confirm) -> PromotionRequest:
    req = get_promotion(request_id)
    user = get_user(user_id)
    if int(req.user_id) != int(user.id):
        raise Forbidden("Not your request")

    current = req.status_enum
    answer = (str(confirm).strip().lower() if confirm is not None else "")
    event = PromotionEvent.CONFIRM_YES if answer == "yes" else PromotionEvent.CONFIRM_NO
    nxt = _guard(req, event, "Interview is not in a state that can be confirmed")
    if answer not in ("yes", "no"):
        raise InvalidInput("Confirm must be 'yes' or 'no'")

    values = {
        "status": nxt,
        "interview_confirmed_by_user": answer,
        "last_updated_by": int(user.id),
    }
    commit_transition(PromotionRequest, req, current, values)
    current_app.logger.info("promotion %s interview confirmation=%s status=%s", req.id, answer, req.status)

    _audit("INTERVIEW_CONFIRMATION", user.id, user.id, requestId=req.id, confirm=answer)
    return req


def approve_promotion(request_id, ceo_id: int, reason: str | None = None) -> PromotionRequest:
    ceo = require_actor(ceo_id, Role.CEO, message="CEO access only")
    req = get_promotion(request_id)
    current = req.status_enum
    nxt = _guard(req, PromotionEvent.APPROVE)

    role = parse_role(req.requested_role)
    if role is None or role is Role.CEO:
        raise InvalidRole("CEO promotion must be handled manually")

    user = get_user(req.user_id, for_update=True)
    values = {
        "status": nxt,
        "decided_by": int(ceo.id),
        "decided_at": utcnow(),
        "decision_reason": clean_text(reason, 400) or "Promotion approved",
        "last_updated_by": int(ceo.id),
    }
    commit_transition(PromotionRequest, req, current, values, extra_writes=lambda: set_role(user, role))
    current_app.logger.info("promotion %s approved by=%s user=%s role=%s", req.id, ceo.id, user.id, role.value)

    _audit(
        "PROMOTION_APPROVED",
        ceo.id,
        user.id,
        requestId=req.id,
        **{"from": req.current_role_at_request, "to": req.requested_role},
    )
    notify_user(
        user,
        "Promotion approved",
        f"Your promotion to {role.value} has been approved.",
        meta={"promotion_request_id": req.id},
    )
    return req


def reject_promotion(request_id, ceo_id: int, reason: str | None = None, now: datetime | None = None) -> PromotionRequest:
    ceo = require_actor(ceo_id, Role.CEO, message="CEO access only")
    req = get_promotion(request_id)
    current = req.status_enum
    nxt = _guard(req, PromotionEvent.REJECT)

    now = now or utcnow()
    cooldown_ends_at = now + timedelta(days=_cooldown_days())
    values = {
        "status": nxt,
        "cooldown_ends_at": cooldown_ends_at,
        "decided_by": int(ceo.id),
        "decided_at": now,
        "decision_reason": clean_text(reason, 400) or "Promotion not approved",
        "last_updated_by": int(ceo.id),
    }
    commit_transition(PromotionRequest, req, current, values)
    current_app.logger.info("promotion %s rejected by=%s cooldown_until=%s", req.id, ceo.id, cooldown_ends_at.isoformat())

    _audit(
        "PROMOTION_REJECTED",
        ceo.id,
        req.user_id,
        requestId=req.id,
        cooldownEndsAt=cooldown_ends_at,
    )
    user = db.session.get(User, int(req.user_id))
    if user is not None:
        notify_user(
            user,
            "Promotion not approved",
            f"Your promotion request was not approved. You may request again after {cooldown_ends_at.date().isoformat()}.",
            meta={"promotion_request_id": req.id},
        )
    return req
