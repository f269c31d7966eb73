from __future__ import annotations

import json

from flask import current_app, has_request_context, request

from learnhub.extensions import db
from learnhub.models import AuditLog

ROLE_UPDATE = "ROLE_UPDATE"


def _safe_json(details: dict | None) -> str | None:
    if details is None:
        return None
    try:
        return json.dumps(details, default=str)
    except (TypeError, ValueError):
        return json.dumps({"raw": str(details)})


def _client_ip() -> str | None:
    if not has_request_context():
        return None
    return (request.headers.get("X-Forwarded-For") or request.remote_addr or "").split(",")[0].strip() or None


def record(
    action: str,
    actor_id: int | None,
    target_id: int | None = None,
    details: dict | None = None,
    category: str = "SYSTEM",
    target_type: str = "user",
) -> AuditLog | None:
    """Append an audit entry. Never raises: a failed write is logged and dropped."""
    if not action or actor_id is None:
        return None
    try:
        row = AuditLog(
            actor_user_id=int(actor_id),
            action=action,
            category=category,
            target_type=target_type,
            target_id=int(target_id) if target_id is not None else None,
            meta=_safe_json(details),
            ip=_client_ip(),
        )
        db.session.add(row)
        db.session.commit()
        return row
    except Exception:
        db.session.rollback()
        current_app.logger.exception("audit write failed action=%s actor=%s target=%s", action, actor_id, target_id)
        return None


def list_entries(action: str = "", category: str = "", target_id: int | None = None, limit: int = 250) -> list[AuditLog]:
    q = AuditLog.query
    if action:
        q = q.filter(AuditLog.action.ilike(action))
    if category:
        q = q.filter(AuditLog.category.ilike(category))
    if target_id is not None:
        q = q.filter(AuditLog.target_id == int(target_id))
    return q.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit).all()
