from __future__ import annotations

from enum import Enum

from learnhub.extensions import db
from learnhub.utils.clock import utcnow


class PromotionStatus(str, Enum):
    PENDING_REVIEW = "pending_review"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    INTERVIEW_COMPLETED = "interview_completed"
    AWAITING_USER_CONFIRMATION = "awaiting_user_confirmation"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    DISPUTED = "disputed"


PROMOTION_ACTIVE_STATUSES = (
    PromotionStatus.PENDING_REVIEW,
    PromotionStatus.INTERVIEW_SCHEDULED,
    PromotionStatus.INTERVIEW_COMPLETED,
    PromotionStatus.AWAITING_USER_CONFIRMATION,
    PromotionStatus.UNDER_REVIEW,
)
PROMOTION_TERMINAL_STATUSES = (PromotionStatus.APPROVED, PromotionStatus.REJECTED)

INTERVIEW_MODES = ("online", "offline")

_ACTIVE_SQL = "status IN ({})".format(", ".join(f"'{s.value}'" for s in PROMOTION_ACTIVE_STATUSES))


class PromotionRequest(db.Model):
    __tablename__ = "promotion_requests"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    initiated_by = db.Column(db.String(8), nullable=False, default="user")  # user | ceo
    current_role_at_request = db.Column(db.String(32), nullable=False)
    requested_role = db.Column(db.String(32), nullable=False)

    status = db.Column(db.String(32), nullable=False, default=PromotionStatus.PENDING_REVIEW.value, index=True)

    interview_required = db.Column(db.Boolean, nullable=False, default=False)
    interview_scheduled_at = db.Column(db.DateTime, nullable=True)
    interview_mode = db.Column(db.String(16), nullable=True)  # online | offline
    interview_meeting_link = db.Column(db.String(400), nullable=True)
    interview_location = db.Column(db.String(240), nullable=True)
    interview_notes = db.Column(db.Text, nullable=True)
    interview_completed_at = db.Column(db.DateTime, nullable=True)
    interview_completed_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    interview_confirmed_by_user = db.Column(db.String(8), nullable=False, default="pending")  # pending | yes | no
    interview_proof_url = db.Column(db.String(600), nullable=True)

    decided_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    decided_at = db.Column(db.DateTime, nullable=True)
    decision_reason = db.Column(db.String(400), nullable=True)

    cooldown_ends_at = db.Column(db.DateTime, nullable=True)

    last_updated_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        # One live workflow per user; the database rejects a racing second insert.
        db.Index(
            "uq_promotion_requests_active_user",
            "user_id",
            unique=True,
            sqlite_where=db.text(_ACTIVE_SQL),
            postgresql_where=db.text(_ACTIVE_SQL),
        ),
    )

    @property
    def status_enum(self) -> PromotionStatus:
        return PromotionStatus(self.status)

    @property
    def is_terminal(self) -> bool:
        return self.status_enum in PROMOTION_TERMINAL_STATUSES

    def to_dict(self):
        from learnhub.workflows.interview import interview_of

        return {
            "id": int(self.id),
            "user_id": int(self.user_id),
            "initiated_by": self.initiated_by or "user",
            "current_role_at_request": self.current_role_at_request or "",
            "requested_role": self.requested_role or "",
            "status": self.status,
            "interview": interview_of(self).to_dict(),
            "decision": {
                "decided_by": int(self.decided_by) if self.decided_by is not None else None,
                "decided_at": self.decided_at.isoformat() if self.decided_at else None,
                "reason": self.decision_reason or "",
            },
            "cooldown_ends_at": self.cooldown_ends_at.isoformat() if self.cooldown_ends_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
