"""The database itself refuses a second live request for the same user."""

import pytest
from sqlalchemy.exc import IntegrityError

from learnhub.extensions import db
from learnhub.models import DemotionStatus, PromotionRequest, PromotionStatus, RoleChangeRequest
from learnhub.roles import Role
from learnhub.workflows.common import insert_active
from learnhub.workflows.errors import ActiveRequestExists


def _promotion(user_id, status=PromotionStatus.PENDING_REVIEW):
    return PromotionRequest(
        user_id=user_id,
        current_role_at_request="student",
        requested_role="instructor",
        status=status.value,
    )


def _demotion(user_id, actor_id, status=DemotionStatus.PENDING_USER_REVIEW):
    return RoleChangeRequest(
        user_id=user_id,
        current_role="admin",
        new_role="student",
        reason="Repeated policy violations",
        status=status.value,
        initiated_by=actor_id,
    )


def test_second_active_promotion_row_violates_index(ctx, make_user):
    uid = make_user()
    db.session.add(_promotion(uid))
    db.session.commit()

    db.session.add(_promotion(uid, PromotionStatus.UNDER_REVIEW))
    with pytest.raises(IntegrityError):
        db.session.commit()
    db.session.rollback()


def test_terminal_rows_do_not_count(ctx, make_user):
    uid = make_user()
    for status in (PromotionStatus.REJECTED, PromotionStatus.APPROVED, PromotionStatus.DISPUTED):
        db.session.add(_promotion(uid, status))
    db.session.add(_promotion(uid))
    db.session.commit()
    assert PromotionRequest.query.filter_by(user_id=uid).count() == 4


def test_insert_active_maps_race_to_domain_error(ctx, make_user):
    uid = make_user()
    ceo = make_user(Role.CEO)
    insert_active(_demotion(uid, ceo), "busy")

    with pytest.raises(ActiveRequestExists, match="busy"):
        insert_active(_demotion(uid, ceo, DemotionStatus.USER_DISPUTED), "busy")
    assert RoleChangeRequest.query.filter_by(user_id=uid).count() == 1


def test_finished_demotions_do_not_count(ctx, make_user):
    uid = make_user()
    ceo = make_user(Role.CEO)
    insert_active(_demotion(uid, ceo, DemotionStatus.FINALIZED), "busy")
    insert_active(_demotion(uid, ceo, DemotionStatus.CANCELLED), "busy")
    insert_active(_demotion(uid, ceo), "busy")
    assert RoleChangeRequest.query.filter_by(user_id=uid).count() == 3
