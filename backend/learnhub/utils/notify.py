from __future__ import annotations

import json
from typing import Any, Dict, Optional

import requests
from flask import current_app

from learnhub.extensions import db
from learnhub.models import Notification, User
from learnhub.utils.clock import utcnow


def queue_in_app(user_id: int, title: str, message: str, meta: Optional[Dict[str, Any]] = None) -> Notification:
    n = Notification(
        user_id=user_id,
        channel="in_app",
        title=title[:160] if title else "",
        message=message or "",
        status="queued",
        provider="local",
        meta=json.dumps(meta or {}, default=str),
    )
    db.session.add(n)
    return n


def send_email(to: str, subject: str, text: str) -> tuple[bool, str]:
    """POST a plain-text email to the configured mail API."""
    url = (current_app.config.get("MAIL_API_URL") or "").strip()
    if not url:
        return False, "MAIL_API_URL not set"
    if not (to or "").strip():
        return False, "no recipient"

    payload = {
        "from": current_app.config.get("MAIL_FROM") or "",
        "to": to.strip(),
        "subject": subject,
        "text": text,
    }
    headers = {"Content-Type": "application/json"}
    key = (current_app.config.get("MAIL_API_KEY") or "").strip()
    if key:
        headers["Authorization"] = f"Bearer {key}"

    try:
        r = requests.post(url, json=payload, headers=headers, timeout=10)
    except requests.RequestException as e:
        return False, f"mail_exception:{e}"
    if 200 <= r.status_code < 300:
        return True, "sent"
    return False, f"mail_http_{r.status_code}"


def notify_user(user: User, title: str, message: str, meta: Optional[Dict[str, Any]] = None) -> None:
    """In-app notification plus email. Failures are logged, never raised."""
    try:
        queue_in_app(int(user.id), title, message, meta)
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("in-app notification failed user=%s", user.id)

    try:
        sent, detail = send_email(user.email, title, message)
    except Exception as e:
        sent, detail = False, f"mail_exception:{e}"
    if not sent:
        current_app.logger.warning("email not sent user=%s detail=%s", user.id, detail)

    try:
        n = Notification(
            user_id=int(user.id),
            channel="email",
            title=title[:160] if title else "",
            message=message or "",
            status="sent" if sent else "failed",
            provider="mail_api",
            provider_ref=detail[:120],
            sent_at=utcnow() if sent else None,
            meta=json.dumps(meta or {}, default=str),
        )
        db.session.add(n)
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("email notification record failed user=%s", user.id)
