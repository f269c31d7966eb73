"""Transition tables for the promotion and demotion workflows.

Each table maps ``(current_status, event)`` to the next status. Anything not
listed is an illegal move and is rejected by :func:`advance` before the engine
touches the database.
"""

from __future__ import annotations

from enum import Enum

from learnhub.models.promotion_request import PromotionStatus as P
from learnhub.models.role_change_request import DemotionStatus as D
from learnhub.workflows.errors import InvalidStateTransition


class PromotionEvent(str, Enum):
    SCHEDULE_INTERVIEW = "schedule_interview"
    COMPLETE_INTERVIEW = "complete_interview"
    CONFIRM_YES = "confirm_yes"
    CONFIRM_NO = "confirm_no"
    APPROVE = "approve"
    REJECT = "reject"


class DemotionEvent(str, Enum):
    ACCEPT = "accept"
    DISPUTE = "dispute"
    FINALIZE = "finalize"
    CANCEL = "cancel"


def _decisions(*states: P) -> dict:
    table = {}
    for s in states:
        table[(s, PromotionEvent.APPROVE)] = P.APPROVED
        table[(s, PromotionEvent.REJECT)] = P.REJECTED
    return table


PROMOTION_TRANSITIONS: dict[tuple[P, PromotionEvent], P] = {
    (P.PENDING_REVIEW, PromotionEvent.SCHEDULE_INTERVIEW): P.INTERVIEW_SCHEDULED,
    (P.AWAITING_USER_CONFIRMATION, PromotionEvent.SCHEDULE_INTERVIEW): P.INTERVIEW_SCHEDULED,
    (P.UNDER_REVIEW, PromotionEvent.SCHEDULE_INTERVIEW): P.INTERVIEW_SCHEDULED,
    (P.INTERVIEW_SCHEDULED, PromotionEvent.COMPLETE_INTERVIEW): P.INTERVIEW_COMPLETED,
    (P.INTERVIEW_COMPLETED, PromotionEvent.CONFIRM_YES): P.UNDER_REVIEW,
    (P.INTERVIEW_COMPLETED, PromotionEvent.CONFIRM_NO): P.DISPUTED,
    # The CEO may decide from any non-terminal status, disputed included.
    **_decisions(
        P.PENDING_REVIEW,
        P.AWAITING_USER_CONFIRMATION,
        P.UNDER_REVIEW,
        P.INTERVIEW_SCHEDULED,
        P.INTERVIEW_COMPLETED,
        P.DISPUTED,
    ),
}

DEMOTION_TRANSITIONS: dict[tuple[D, DemotionEvent], D] = {
    (D.PENDING_USER_REVIEW, DemotionEvent.ACCEPT): D.USER_ACCEPTED,
    (D.PENDING_USER_REVIEW, DemotionEvent.DISPUTE): D.USER_DISPUTED,
    (D.PENDING_USER_REVIEW, DemotionEvent.CANCEL): D.CANCELLED,
    (D.USER_ACCEPTED, DemotionEvent.FINALIZE): D.FINALIZED,
    (D.USER_ACCEPTED, DemotionEvent.CANCEL): D.CANCELLED,
    (D.USER_DISPUTED, DemotionEvent.FINALIZE): D.FINALIZED,
    (D.USER_DISPUTED, DemotionEvent.CANCEL): D.CANCELLED,
}


def can_advance(table: dict, current, event) -> bool:
    return (current, event) in table


def advance(table: dict, current, event, message: str | None = None, error=InvalidStateTransition):
    """Return the status ``event`` leads to from ``current``, or raise ``error``."""
    nxt = table.get((current, event))
    if nxt is None:
        cur = getattr(current, "value", current)
        ev = getattr(event, "value", event)
        raise error(message or f"Cannot {ev.replace('_', ' ')} a request that is {cur}")
    return nxt


def allowed_events(table: dict, current) -> list:
    return [ev for (st, ev) in table if st == current]
