import json

from learnhub.extensions import db
from learnhub.utils.clock import utcnow


class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)

    actor_user_id = db.Column(db.Integer, nullable=True, index=True)
    action = db.Column(db.String(64), nullable=False)
    category = db.Column(db.String(32), nullable=False, default="SYSTEM")
    target_type = db.Column(db.String(64), nullable=True)
    target_id = db.Column(db.Integer, nullable=True, index=True)
    meta = db.Column(db.Text, nullable=True)  # JSON string
    ip = db.Column(db.String(64), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    __table_args__ = (
        db.Index("ix_audit_logs_action_category", "action", "category"),
    )

    def meta_dict(self) -> dict:
        raw = (self.meta or "").strip()
        if not raw:
            return {}
        try:
            d = json.loads(raw)
        except ValueError:
            return {}
        return d if isinstance(d, dict) else {}

    def to_dict(self):
        return {
            "id": int(self.id),
            "actor_user_id": int(self.actor_user_id) if self.actor_user_id else None,
            "action": self.action,
            "category": self.category or "SYSTEM",
            "target_type": self.target_type or "",
            "target_id": int(self.target_id) if self.target_id else None,
            "details": self.meta_dict(),
            "ip": self.ip or "",
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
