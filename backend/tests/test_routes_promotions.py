from datetime import timedelta

from conftest import role_of
from learnhub.extensions import db
from learnhub.models import PromotionRequest
from learnhub.roles import Role
from learnhub.utils.clock import utcnow


def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.get_json()["db"] == "ok"


def test_requires_token(client):
    r = client.post("/api/promotions")
    assert r.status_code == 401
    assert r.get_json()["message"] == "No token provided"


def test_bad_token(client):
    r = client.post("/api/promotions", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.get_json()["message"] == "Invalid or expired token"


def test_student_to_instructor_over_http(app, client, make_user, auth_headers):
    student = make_user(Role.STUDENT)
    ceo = make_user(Role.CEO)

    r = client.post("/api/promotions", headers=auth_headers(student))
    assert r.status_code == 201
    body = r.get_json()
    assert body["ok"] is True
    req = body["request"]
    assert req["status"] == "pending_review"
    assert req["requested_role"] == "instructor"
    assert req["interview"] == {"stage": "none", "required": False}

    r = client.post("/api/promotions", headers=auth_headers(student))
    assert r.status_code == 400
    assert r.get_json()["message"] == "You already have an active promotion request"

    r = client.get("/api/promotions/mine", headers=auth_headers(student))
    assert r.get_json()["request"]["id"] == req["id"]

    r = client.patch(f"/api/promotions/{req['id']}/approve", headers=auth_headers(student))
    assert r.status_code == 403

    r = client.patch(f"/api/promotions/{req['id']}/approve", json={"reason": "ok"}, headers=auth_headers(ceo))
    assert r.status_code == 200
    assert r.get_json()["request"]["status"] == "approved"
    assert r.get_json()["request"]["decision"]["reason"] == "ok"
    assert role_of(app, student) == "instructor"

    r = client.patch(f"/api/promotions/{req['id']}/approve", headers=auth_headers(ceo))
    assert r.status_code == 400
    assert r.get_json()["message"] == "Request already approved"


def test_ceo_request_is_forbidden(client, make_user, auth_headers):
    ceo = make_user(Role.CEO)
    r = client.post("/api/promotions", headers=auth_headers(ceo))
    assert r.status_code == 403


def test_cooldown_reports_next_allowed_date(app, client, make_user, auth_headers):
    student = make_user()
    ceo = make_user(Role.CEO)
    rid = client.post("/api/promotions", headers=auth_headers(student)).get_json()["request"]["id"]

    r = client.patch(f"/api/promotions/{rid}/reject", json={"reason": "not yet"}, headers=auth_headers(ceo))
    assert r.status_code == 200
    cooldown = r.get_json()["request"]["cooldown_ends_at"]
    assert cooldown is not None

    r = client.post("/api/promotions", headers=auth_headers(student))
    assert r.status_code == 400
    assert r.get_json()["nextAllowedDate"] == cooldown

    with app.app_context():
        row = db.session.get(PromotionRequest, rid)
        row.cooldown_ends_at = utcnow() - timedelta(days=1)
        db.session.commit()

    r = client.post("/api/promotions", headers=auth_headers(student))
    assert r.status_code == 201


def test_ceo_initiate_and_interview_over_http(app, client, make_user, auth_headers):
    moderator = make_user(Role.MODERATOR)
    admin = make_user(Role.ADMIN)
    ceo = make_user(Role.CEO)

    r = client.post("/api/promotions/ceo-initiate", json={"userId": moderator}, headers=auth_headers(ceo))
    assert r.status_code == 400

    r = client.post(
        "/api/promotions/ceo-initiate",
        json={"userId": moderator, "requestedRole": "admin"},
        headers=auth_headers(ceo),
    )
    assert r.status_code == 201
    req = r.get_json()["request"]
    assert req["status"] == "awaiting_user_confirmation"
    assert req["interview"]["required"] is True

    rid = req["id"]
    r = client.patch(
        f"/api/promotions/{rid}/interview",
        json={"scheduledAt": "2026-11-02T10:00:00Z", "mode": "online", "meetingLink": "https://meet.example.com/x"},
        headers=auth_headers(admin),
    )
    assert r.status_code == 200
    interview = r.get_json()["request"]["interview"]
    assert interview["stage"] == "scheduled"
    assert interview["scheduled_at"] == "2026-11-02T10:00:00"

    r = client.patch(f"/api/promotions/{rid}/interview-complete", json={}, headers=auth_headers(admin))
    assert r.get_json()["request"]["interview"]["stage"] == "completed"

    r = client.patch(f"/api/promotions/{rid}/confirm", json={"confirm": "yes"}, headers=auth_headers(admin))
    assert r.status_code == 403

    r = client.patch(f"/api/promotions/{rid}/confirm", json={"confirm": "yes"}, headers=auth_headers(moderator))
    assert r.status_code == 200
    assert r.get_json()["request"]["status"] == "under_review"

    r = client.get("/api/promotions?status=under_review", headers=auth_headers(admin))
    assert [i["id"] for i in r.get_json()["items"]] == [rid]

    r = client.get("/api/promotions", headers=auth_headers(moderator))
    assert r.status_code == 403

    r = client.patch(f"/api/promotions/{rid}/approve", headers=auth_headers(ceo))
    assert r.status_code == 200
    assert role_of(app, moderator) == "admin"


def test_unknown_request_is_404(client, make_user, auth_headers):
    ceo = make_user(Role.CEO)
    r = client.patch("/api/promotions/999/approve", headers=auth_headers(ceo))
    assert r.status_code == 404
    assert r.get_json()["message"] == "Request not found"
