from flask_login import UserMixin

from learnhub.extensions import db
from learnhub.roles import Role, parse_role, permissions_for
from learnhub.utils.clock import utcnow


class User(db.Model, UserMixin):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(120), nullable=False, default="")
    email = db.Column(db.String(255), unique=True, index=True, nullable=False)

    role = db.Column(db.String(32), nullable=False, default=Role.STUDENT.value, index=True)

    is_blocked = db.Column(db.Boolean, nullable=False, default=False)
    block_reason = db.Column(db.String(240), nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    @property
    def role_enum(self) -> Role:
        return parse_role(self.role) or Role.STUDENT

    def has_role(self, *roles: Role) -> bool:
        return self.role_enum in roles

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role_enum.value,
            "permissions": sorted(p.value for p in permissions_for(self.role_enum)),
            "is_blocked": bool(self.is_blocked),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
