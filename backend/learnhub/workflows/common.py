"""Persistence helpers shared by the promotion and demotion engines."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError

from learnhub.extensions import db
from learnhub.workflows.errors import ActiveRequestExists, InvalidInput, InvalidStateTransition, NotFound


def load_request(model, request_id, label: str = "Request"):
    try:
        rid = int(request_id)
    except (TypeError, ValueError):
        raise NotFound(f"{label} not found")
    row = db.session.get(model, rid)
    if row is None:
        raise NotFound(f"{label} not found")
    return row


def insert_active(row, message: str):
    """Insert a new active request; a concurrent active one surfaces as ActiveRequestExists."""
    try:
        db.session.add(row)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ActiveRequestExists(message)
    return row


def compare_and_set(model, row, expected_status, values: dict) -> None:
    """UPDATE the row only while it still has ``expected_status``.

    Runs inside the caller's transaction; the caller commits or rolls back.
    """
    expected = getattr(expected_status, "value", expected_status)
    values = {k: getattr(v, "value", v) for k, v in values.items()}
    changed = (
        model.query
        .filter(model.id == row.id, model.status == expected)
        .update(values, synchronize_session=False)
    )
    if changed != 1:
        raise InvalidStateTransition("Request was changed by someone else, reload and try again")


def commit_transition(model, row, expected_status, values: dict, extra_writes=None):
    """Compare-and-set the request plus any extra writes, all in one commit."""
    try:
        compare_and_set(model, row, expected_status, values)
        if extra_writes is not None:
            extra_writes()
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    db.session.refresh(row)
    return row


def parse_datetime(value, field: str) -> datetime | None:
    """ISO-8601 string (``Z`` allowed) or datetime to naive UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        raw = str(value).strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError:
            raise InvalidInput(f"{field} must be an ISO-8601 datetime")
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def clean_text(value, limit: int) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text[:limit] if text else None
