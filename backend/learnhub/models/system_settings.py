from learnhub.extensions import db
from learnhub.utils.clock import utcnow

DEFAULT_MAINTENANCE_MESSAGE = "We are under scheduled maintenance. Please try again later."


class SystemSettings(db.Model):
    """Platform-wide switches. A single row, shared by every server instance."""

    __tablename__ = "system_settings"

    id = db.Column(db.Integer, primary_key=True)

    platform_name = db.Column(db.String(120), nullable=False, default="LearnHub")
    maintenance_mode = db.Column(db.Boolean, nullable=False, default=False)
    maintenance_message = db.Column(db.String(400), nullable=False, default=DEFAULT_MAINTENANCE_MESSAGE)
    allow_registrations = db.Column(db.Boolean, nullable=False, default=True)

    updated_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        return {
            "platform_name": self.platform_name or "",
            "maintenance_mode": bool(self.maintenance_mode),
            "maintenance_message": self.maintenance_message or DEFAULT_MAINTENANCE_MESSAGE,
            "allow_registrations": bool(self.allow_registrations),
            "updated_by": int(self.updated_by) if self.updated_by is not None else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
