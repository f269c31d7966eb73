from __future__ import annotations

from enum import Enum

from learnhub.extensions import db
from learnhub.utils.clock import utcnow


class DemotionStatus(str, Enum):
    PENDING_USER_REVIEW = "pending_user_review"
    USER_ACCEPTED = "user_accepted"
    USER_DISPUTED = "user_disputed"
    FINALIZED = "finalized"
    CANCELLED = "cancelled"


DEMOTION_ACTIVE_STATUSES = (
    DemotionStatus.PENDING_USER_REVIEW,
    DemotionStatus.USER_ACCEPTED,
    DemotionStatus.USER_DISPUTED,
)

MIN_REASON_LENGTH = 10

_ACTIVE_SQL = "status IN ({})".format(", ".join(f"'{s.value}'" for s in DEMOTION_ACTIVE_STATUSES))


class RoleChangeRequest(db.Model):
    """A CEO/Admin initiated demotion awaiting the user's response and a final decision."""

    __tablename__ = "role_change_requests"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    current_role = db.Column(db.String(32), nullable=False)
    new_role = db.Column(db.String(32), nullable=False)
    reason = db.Column(db.String(400), nullable=False)

    status = db.Column(db.String(32), nullable=False, default=DemotionStatus.PENDING_USER_REVIEW.value, index=True)
    user_response = db.Column(db.String(16), nullable=True)  # accepted | disputed
    dispute_note = db.Column(db.String(1000), nullable=True)

    initiated_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    finalized_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    finalized_at = db.Column(db.DateTime, nullable=True)
    cancelled_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    last_updated_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        db.Index(
            "uq_role_change_requests_active_user",
            "user_id",
            unique=True,
            sqlite_where=db.text(_ACTIVE_SQL),
            postgresql_where=db.text(_ACTIVE_SQL),
        ),
    )

    @property
    def status_enum(self) -> DemotionStatus:
        return DemotionStatus(self.status)

    def to_dict(self):
        return {
            "id": int(self.id),
            "user_id": int(self.user_id),
            "current_role": self.current_role or "",
            "new_role": self.new_role or "",
            "reason": self.reason or "",
            "status": self.status,
            "user_response": self.user_response,
            "dispute_note": self.dispute_note or "",
            "initiated_by": int(self.initiated_by),
            "finalized_by": int(self.finalized_by) if self.finalized_by is not None else None,
            "finalized_at": self.finalized_at.isoformat() if self.finalized_at else None,
            "cancelled_by": int(self.cancelled_by) if self.cancelled_by is not None else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
