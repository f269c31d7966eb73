from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from learnhub.extensions import db
from learnhub.models import SystemSettings
from learnhub.models.system_settings import DEFAULT_MAINTENANCE_MESSAGE
from learnhub.roles import Role
from learnhub.utils import audit
from learnhub.utils.clock import utcnow
from learnhub.utils.user_directory import require_actor
from learnhub.workflows.errors import InvalidInput


def get_settings() -> SystemSettings:
    row = SystemSettings.query.order_by(SystemSettings.id.asc()).first()
    if row:
        return row
    row = SystemSettings()
    try:
        db.session.add(row)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        row = SystemSettings.query.order_by(SystemSettings.id.asc()).first()
        if row is None:
            raise
    return row


def is_maintenance() -> bool:
    return bool(get_settings().maintenance_mode)


def update_availability(
    actor_id: int,
    maintenance_mode: bool | None = None,
    maintenance_message: str | None = None,
    allow_registrations: bool | None = None,
) -> SystemSettings:
    require_actor(actor_id, Role.CEO, message="Only CEO can modify system settings")

    for name, value in (("maintenanceMode", maintenance_mode), ("allowRegistrations", allow_registrations)):
        if value is not None and not isinstance(value, bool):
            raise InvalidInput(f"{name} must be a boolean")
    if maintenance_message is not None and not isinstance(maintenance_message, str):
        raise InvalidInput("maintenanceMessage must be a string")

    s = get_settings()
    if maintenance_mode is not None:
        s.maintenance_mode = maintenance_mode
    if maintenance_message is not None:
        s.maintenance_message = maintenance_message.strip() or DEFAULT_MAINTENANCE_MESSAGE
    if allow_registrations is not None:
        s.allow_registrations = allow_registrations
    s.updated_by = int(actor_id)
    s.updated_at = utcnow()

    db.session.add(s)
    db.session.commit()

    audit.record(
        "SYSTEM_SETTINGS_AVAILABILITY_UPDATE",
        actor_id,
        details={
            "maintenanceMode": bool(s.maintenance_mode),
            "allowRegistrations": bool(s.allow_registrations),
        },
        category="SYSTEM",
        target_type="system_settings",
        target_id=int(s.id),
    )
    return s
