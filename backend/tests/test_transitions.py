import pytest

from learnhub.models import DemotionStatus as D, PromotionStatus as P
from learnhub.models.promotion_request import PROMOTION_TERMINAL_STATUSES
from learnhub.workflows.errors import InvalidStateTransition, NotReady
from learnhub.workflows.transitions import (
    DEMOTION_TRANSITIONS,
    PROMOTION_TRANSITIONS,
    DemotionEvent,
    PromotionEvent,
    advance,
    allowed_events,
    can_advance,
)


class TestPromotionTable:
    def test_interview_path(self):
        s = advance(PROMOTION_TRANSITIONS, P.PENDING_REVIEW, PromotionEvent.SCHEDULE_INTERVIEW)
        assert s is P.INTERVIEW_SCHEDULED
        s = advance(PROMOTION_TRANSITIONS, s, PromotionEvent.COMPLETE_INTERVIEW)
        assert s is P.INTERVIEW_COMPLETED
        assert advance(PROMOTION_TRANSITIONS, s, PromotionEvent.CONFIRM_YES) is P.UNDER_REVIEW
        assert advance(PROMOTION_TRANSITIONS, s, PromotionEvent.CONFIRM_NO) is P.DISPUTED

    def test_terminal_states_accept_nothing(self):
        for status in PROMOTION_TERMINAL_STATUSES:
            assert allowed_events(PROMOTION_TRANSITIONS, status) == []

    def test_decisions_allowed_from_disputed(self):
        assert can_advance(PROMOTION_TRANSITIONS, P.DISPUTED, PromotionEvent.APPROVE)
        assert can_advance(PROMOTION_TRANSITIONS, P.DISPUTED, PromotionEvent.REJECT)
        assert not can_advance(PROMOTION_TRANSITIONS, P.DISPUTED, PromotionEvent.SCHEDULE_INTERVIEW)

    def test_complete_requires_scheduled(self):
        with pytest.raises(InvalidStateTransition) as exc:
            advance(PROMOTION_TRANSITIONS, P.PENDING_REVIEW, PromotionEvent.COMPLETE_INTERVIEW)
        assert "pending_review" in exc.value.message

    def test_confirm_only_after_completion(self):
        for status in (P.PENDING_REVIEW, P.AWAITING_USER_CONFIRMATION, P.INTERVIEW_SCHEDULED, P.UNDER_REVIEW):
            assert not can_advance(PROMOTION_TRANSITIONS, status, PromotionEvent.CONFIRM_YES)


class TestDemotionTable:
    def test_respond_only_once(self):
        assert advance(DEMOTION_TRANSITIONS, D.PENDING_USER_REVIEW, DemotionEvent.ACCEPT) is D.USER_ACCEPTED
        assert advance(DEMOTION_TRANSITIONS, D.PENDING_USER_REVIEW, DemotionEvent.DISPUTE) is D.USER_DISPUTED
        assert not can_advance(DEMOTION_TRANSITIONS, D.USER_ACCEPTED, DemotionEvent.DISPUTE)
        assert not can_advance(DEMOTION_TRANSITIONS, D.USER_DISPUTED, DemotionEvent.ACCEPT)

    def test_finalize_needs_a_response(self):
        with pytest.raises(NotReady):
            advance(DEMOTION_TRANSITIONS, D.PENDING_USER_REVIEW, DemotionEvent.FINALIZE, error=NotReady)
        assert advance(DEMOTION_TRANSITIONS, D.USER_DISPUTED, DemotionEvent.FINALIZE) is D.FINALIZED

    def test_cancel_from_every_active_state(self):
        for status in (D.PENDING_USER_REVIEW, D.USER_ACCEPTED, D.USER_DISPUTED):
            assert advance(DEMOTION_TRANSITIONS, status, DemotionEvent.CANCEL) is D.CANCELLED

    def test_terminal_states_accept_nothing(self):
        assert allowed_events(DEMOTION_TRANSITIONS, D.FINALIZED) == []
        assert allowed_events(DEMOTION_TRANSITIONS, D.CANCELLED) == []

    def test_custom_message(self):
        with pytest.raises(InvalidStateTransition, match="already cancelled"):
            advance(DEMOTION_TRANSITIONS, D.CANCELLED, DemotionEvent.CANCEL, "Request is already cancelled")
