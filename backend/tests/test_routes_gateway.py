"""Users, audit and system settings endpoints plus the shared access checks."""

from conftest import role_of
from learnhub.extensions import db
from learnhub.models import User
from learnhub.roles import Role


def test_me_includes_permissions(client, make_user, auth_headers):
    uid = make_user(Role.INSTRUCTOR)
    r = client.get("/api/users/me", headers=auth_headers(uid))
    assert r.status_code == 200
    user = r.get_json()["user"]
    assert user["role"] == "instructor"
    assert user["permissions"] == ["manageQuizzes", "manageResources"]


def test_blocked_user_is_refused(client, make_user, auth_headers):
    uid = make_user(is_blocked=True)
    r = client.get("/api/users/me", headers=auth_headers(uid))
    assert r.status_code == 403


def test_token_for_deleted_user(app, client, make_user, auth_headers):
    uid = make_user()
    headers = auth_headers(uid)
    with app.app_context():
        db.session.delete(db.session.get(User, uid))
        db.session.commit()
    assert client.get("/api/users/me", headers=headers).status_code == 401


def test_direct_role_change(app, client, make_user, auth_headers):
    ceo = make_user(Role.CEO)
    admin = make_user(Role.ADMIN)
    uid = make_user(Role.STUDENT)

    r = client.patch(f"/api/users/{uid}/role", json={"newRole": "moderator"}, headers=auth_headers(admin))
    assert r.status_code == 403

    r = client.patch(f"/api/users/{uid}/role", json={}, headers=auth_headers(ceo))
    assert r.status_code == 400

    r = client.patch(f"/api/users/{uid}/role", json={"newRole": "admin"}, headers=auth_headers(ceo))
    assert r.status_code == 400

    r = client.patch(f"/api/users/{uid}/role", json={"newRole": "moderator"}, headers=auth_headers(ceo))
    assert r.status_code == 200
    assert r.get_json()["user"]["role"] == "moderator"
    assert role_of(app, uid) == "moderator"

    r = client.get(f"/api/admin/audit?category=ROLE&targetId={uid}", headers=auth_headers(admin))
    assert r.status_code == 200
    items = r.get_json()["items"]
    assert len(items) == 1
    assert items[0]["details"]["kind"] == "DIRECT_ROLE_CHANGE"


def test_audit_is_staff_only(client, make_user, auth_headers):
    r = client.get("/api/admin/audit", headers=auth_headers(make_user(Role.MODERATOR)))
    assert r.status_code == 403


def test_maintenance_mode_blocks_non_staff(client, make_user, auth_headers):
    ceo = make_user(Role.CEO)
    admin = make_user(Role.ADMIN)
    student = make_user()

    r = client.patch(
        "/api/system/settings/availability",
        json={"maintenanceMode": True, "maintenanceMessage": "Upgrading, back soon"},
        headers=auth_headers(admin),
    )
    assert r.status_code == 403

    r = client.patch(
        "/api/system/settings/availability",
        json={"maintenanceMode": True, "maintenanceMessage": "Upgrading, back soon"},
        headers=auth_headers(ceo),
    )
    assert r.status_code == 200
    assert r.get_json()["settings"]["maintenance_mode"] is True

    r = client.post("/api/promotions", headers=auth_headers(student))
    assert r.status_code == 503
    assert r.get_json()["message"] == "Upgrading, back soon"

    assert client.get("/api/users/me", headers=auth_headers(admin)).status_code == 200

    r = client.patch("/api/system/settings/availability", json={"maintenanceMode": False}, headers=auth_headers(ceo))
    assert r.status_code == 200
    assert client.get("/api/users/me", headers=auth_headers(student)).status_code == 200


def test_settings_type_errors(client, make_user, auth_headers):
    ceo = make_user(Role.CEO)
    r = client.patch("/api/system/settings/availability", json={"maintenanceMode": "on"}, headers=auth_headers(ceo))
    assert r.status_code == 400
    assert r.get_json()["message"] == "maintenanceMode must be a boolean"


def test_unknown_route_is_json(client):
    r = client.get("/api/nope")
    assert r.status_code == 404
    assert "message" in r.get_json()
