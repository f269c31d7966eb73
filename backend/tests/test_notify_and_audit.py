import requests

from learnhub.extensions import db
from learnhub.models import AuditLog, Notification, User
from learnhub.roles import Role
from learnhub.utils import audit
from learnhub.utils.notify import notify_user, send_email
from learnhub.workflows import promotion


class _Resp:
    def __init__(self, status_code):
        self.status_code = status_code


def test_send_email_without_url(ctx):
    assert send_email("a@b.test", "Hi", "body") == (False, "MAIL_API_URL not set")


def test_send_email_posts_to_mail_api(ctx, monkeypatch):
    ctx.config.update(MAIL_API_URL="https://mail.example.com/send", MAIL_API_KEY="k-123", MAIL_FROM="hub@learnhub.test")
    seen = {}

    def fake_post(url, json=None, headers=None, timeout=None):
        seen.update(url=url, json=json, headers=headers, timeout=timeout)
        return _Resp(202)

    monkeypatch.setattr(requests, "post", fake_post)
    assert send_email(" a@b.test ", "Subject", "Text") == (True, "sent")
    assert seen["url"] == "https://mail.example.com/send"
    assert seen["json"] == {"from": "hub@learnhub.test", "to": "a@b.test", "subject": "Subject", "text": "Text"}
    assert seen["headers"]["Authorization"] == "Bearer k-123"


def test_send_email_http_error(ctx, monkeypatch):
    ctx.config["MAIL_API_URL"] = "https://mail.example.com/send"
    monkeypatch.setattr(requests, "post", lambda *a, **kw: _Resp(500))
    assert send_email("a@b.test", "s", "t") == (False, "mail_http_500")


def test_send_email_network_error(ctx, monkeypatch):
    ctx.config["MAIL_API_URL"] = "https://mail.example.com/send"

    def boom(*a, **kw):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(requests, "post", boom)
    sent, detail = send_email("a@b.test", "s", "t")
    assert sent is False
    assert detail.startswith("mail_exception:")


def test_notify_user_records_both_channels(ctx, make_user, monkeypatch):
    ctx.config["MAIL_API_URL"] = "https://mail.example.com/send"
    monkeypatch.setattr(requests, "post", lambda *a, **kw: _Resp(200))
    uid = make_user()
    notify_user(db.session.get(User, uid), "Hello", "World", meta={"x": 1})

    rows = Notification.query.filter_by(user_id=uid).order_by(Notification.id).all()
    assert [(n.channel, n.status) for n in rows] == [("in_app", "queued"), ("email", "sent")]
    assert rows[1].sent_at is not None
    assert rows[0].meta_dict() == {"x": 1}


def test_audit_record_and_filters(ctx, make_user):
    actor = make_user(Role.CEO)
    audit.record(audit.ROLE_UPDATE, actor, target_id=5, details={"kind": "X"}, category="ROLE")
    audit.record("SOMETHING_ELSE", actor, target_id=6)

    assert [e.target_id for e in audit.list_entries(action="role_update")] == [5]
    assert [e.target_id for e in audit.list_entries(category="system")] == [6]
    assert [e.target_id for e in audit.list_entries(target_id=6)] == [6]
    assert len(audit.list_entries()) == 2


def test_audit_without_actor_is_skipped(ctx):
    assert audit.record(audit.ROLE_UPDATE, None) is None
    assert AuditLog.query.count() == 0


def test_failed_audit_write_does_not_break_workflow(ctx, make_user, monkeypatch):
    def broken(**kw):
        raise RuntimeError("audit store down")

    monkeypatch.setattr(audit, "AuditLog", broken)
    uid = make_user()
    req = promotion.request_promotion(uid)

    assert req.status == "pending_review"
    assert AuditLog.query.count() == 0
