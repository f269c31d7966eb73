"""Demotion workflow.

CEO/Admin open a request with a reason, the affected user accepts or disputes
it once, and CEO/Admin either finalize it, which applies ``new_role`` even if
the user disputed, or cancel it.
"""

from __future__ import annotations

from flask import current_app

from learnhub.extensions import db
from learnhub.models import DemotionStatus, RoleChangeRequest, User
from learnhub.models.role_change_request import DEMOTION_ACTIVE_STATUSES, MIN_REASON_LENGTH
from learnhub.roles import Role, STAFF_ROLES, parse_role
from learnhub.utils import audit
from learnhub.utils.clock import utcnow
from learnhub.utils.notify import notify_user
from learnhub.utils.user_directory import get_user, require_actor, set_role
from learnhub.workflows.common import clean_text, commit_transition, insert_active, load_request
from learnhub.workflows.errors import (
    ActiveRequestExists,
    Forbidden,
    InvalidInput,
    InvalidReason,
    InvalidRole,
    NotReady,
    ProtectedRole,
)
from learnhub.workflows.transitions import DEMOTION_TRANSITIONS, DemotionEvent, advance


def _audit(kind: str, actor_id: int, target_id: int, **details) -> None:
    audit.record(
        audit.ROLE_UPDATE,
        actor_id,
        target_id=target_id,
        details={"kind": kind, **details},
        category="ROLE",
    )


def list_active(user_id: int) -> list[RoleChangeRequest]:
    return (
        RoleChangeRequest.query
        .filter(RoleChangeRequest.user_id == int(user_id))
        .filter(RoleChangeRequest.status.in_([s.value for s in DEMOTION_ACTIVE_STATUSES]))
        .order_by(RoleChangeRequest.created_at.desc())
        .all()
    )


def list_all(status: str | None = None, user_id: int | None = None) -> list[RoleChangeRequest]:
    q = RoleChangeRequest.query
    if status:
        q = q.filter(RoleChangeRequest.status == status.strip().lower())
    if user_id is not None:
        q = q.filter(RoleChangeRequest.user_id == int(user_id))
    return q.order_by(RoleChangeRequest.created_at.desc(), RoleChangeRequest.id.desc()).all()


def latest_for_user(user_id: int) -> RoleChangeRequest | None:
    return (
        RoleChangeRequest.query
        .filter_by(user_id=int(user_id))
        .order_by(RoleChangeRequest.created_at.desc(), RoleChangeRequest.id.desc())
        .first()
    )


def get_demotion(request_id) -> RoleChangeRequest:
    return load_request(RoleChangeRequest, request_id)


def initiate_demotion(actor_id: int, user_id: int, new_role, reason: str | None) -> RoleChangeRequest:
    actor = require_actor(actor_id, *STAFF_ROLES)
    target = get_user(user_id)

    reason = str(reason or "").strip()
    if len(reason) < MIN_REASON_LENGTH:
        raise InvalidReason(f"Reason must be at least {MIN_REASON_LENGTH} characters")

    if target.has_role(Role.CEO):
        raise ProtectedRole("CEO cannot be demoted")

    # Any non-CEO role is accepted; the direction relative to the current role is not checked.
    role = parse_role(new_role)
    if role is None:
        raise InvalidRole("Invalid new role")
    if role is Role.CEO:
        raise InvalidRole("CEO role cannot be assigned via demotion flow")

    message = "User already has an active demotion request"
    if list_active(target.id):
        raise ActiveRequestExists(message)

    req = RoleChangeRequest(
        user_id=int(target.id),
        current_role=target.role_enum.value,
        new_role=role.value,
        reason=reason[:400],
        status=DemotionStatus.PENDING_USER_REVIEW.value,
        initiated_by=int(actor.id),
        last_updated_by=int(actor.id),
    )
    insert_active(req, message)
    current_app.logger.info("demotion %s initiated by=%s user=%s %s->%s", req.id, actor.id, target.id, req.current_role, req.new_role)

    _audit("INITIATE_DEMOTION", actor.id, target.id, requestId=req.id, newRole=req.new_role, reason=req.reason)
    notify_user(
        target,
        "Role change pending your review",
        f"A change of your role from {req.current_role} to {req.new_role} was requested. "
        f"Reason: {req.reason}. Please accept or dispute it.",
        meta={"role_change_request_id": req.id},
    )
    return req


def user_respond(request_id, user_id: int, confirm, dispute_note: str | None = None) -> RoleChangeRequest:
    req = get_demotion(request_id)
    user = get_user(user_id)
    if int(req.user_id) != int(user.id):
        raise Forbidden("This is not your request")

    current = req.status_enum
    accepted = confirm is True
    event = DemotionEvent.ACCEPT if accepted else DemotionEvent.DISPUTE
    nxt = advance(DEMOTION_TRANSITIONS, current, event, "Cannot update this request now")
    if not isinstance(confirm, bool):
        raise InvalidInput("confirm must be true or false")

    values = {
        "status": nxt,
        "user_response": "accepted" if accepted else "disputed",
        "last_updated_by": int(user.id),
    }
    note = None if accepted else clean_text(dispute_note, 1000)
    if note:
        values["dispute_note"] = note
    commit_transition(RoleChangeRequest, req, current, values)
    current_app.logger.info("demotion %s user response=%s", req.id, req.user_response)

    _audit(
        "ACCEPT_DEMOTION" if accepted else "DISPUTE_DEMOTION",
        user.id,
        user.id,
        requestId=req.id,
        disputeNote=note,
    )
    return req


def finalize_demotion(request_id, actor_id: int) -> RoleChangeRequest:
    actor = require_actor(actor_id, *STAFF_ROLES)
    req = get_demotion(request_id)
    current = req.status_enum
    nxt = advance(
        DEMOTION_TRANSITIONS,
        current,
        DemotionEvent.FINALIZE,
        "Request is not ready for final action",
        error=NotReady,
    )

    role = Role(req.new_role)
    user = get_user(req.user_id, for_update=True)
    if user.has_role(Role.CEO):
        raise ProtectedRole("CEO cannot be demoted")

    values = {
        "status": nxt,
        "finalized_by": int(actor.id),
        "finalized_at": utcnow(),
        "last_updated_by": int(actor.id),
    }
    # A dispute is recorded but does not block the final decision.
    commit_transition(RoleChangeRequest, req, current, values, extra_writes=lambda: set_role(user, role))
    current_app.logger.info("demotion %s finalized by=%s user=%s role=%s response=%s", req.id, actor.id, user.id, role.value, req.user_response)

    _audit(
        "FINALIZE_DEMOTION",
        actor.id,
        user.id,
        requestId=req.id,
        newRole=req.new_role,
        userResponse=req.user_response,
    )
    notify_user(
        user,
        "Role updated",
        f"Your role has been changed from {req.current_role} to {req.new_role}.",
        meta={"role_change_request_id": req.id},
    )
    return req


def cancel_demotion(request_id, actor_id: int) -> RoleChangeRequest:
    actor = require_actor(actor_id, *STAFF_ROLES)
    req = get_demotion(request_id)
    current = req.status_enum
    nxt = advance(DEMOTION_TRANSITIONS, current, DemotionEvent.CANCEL, f"Request is already {req.status}")

    values = {
        "status": nxt,
        "cancelled_by": int(actor.id),
        "last_updated_by": int(actor.id),
    }
    commit_transition(RoleChangeRequest, req, current, values)
    current_app.logger.info("demotion %s cancelled by=%s", req.id, actor.id)

    _audit("CANCEL_DEMOTION", actor.id, req.user_id, requestId=req.id)
    user = db.session.get(User, int(req.user_id))
    if user is not None:
        notify_user(
            user,
            "Role change withdrawn",
            "The pending change of your role has been withdrawn. No change was made.",
            meta={"role_change_request_id": req.id},
        )
    return req
