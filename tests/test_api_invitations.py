from datetime import datetime, timedelta

import pytz

from models.audit_log import AuditLogModel
from models.invitation import TeacherInvitationModel
from utils.user_manager import UserManager


def _token_for(db, email):
    db.expire_all()
    return (
        db.query(TeacherInvitationModel)
        .filter(TeacherInvitationModel.email == email)
        .one()
        .token
    )


def test_invite_validate_accept_end_to_end(client, db, admin, email_sender):
    _, admin_headers = admin

    resp = client.post(
        "/api/invitations",
        json={"email": "teacher@example.com"},
        headers={**admin_headers, "Origin": "https://portal.test"},
    )
    assert resp.status_code == 200
    assert resp.json()["invitation"]["status"] == "pending"
    token = _token_for(db, "teacher@example.com")
    assert f"https://portal.test/teacher-signup?token={token}" in email_sender.sent[0]["html"]

    resp = client.get("/api/invitations/validate", params={"token": token})
    assert resp.status_code == 200
    assert resp.json() == {"email": "teacher@example.com", "status": "pending"}

    resp = client.post(
        "/api/invitations/accept",
        json={
            "token": token,
            "full_name": "Thandi Mokoena",
            "password": "s3cret-pass",
            "confirm_password": "s3cret-pass",
        },
    )
    assert resp.status_code == 200
    assert resp.json()["email"] == "teacher@example.com"

    user_manager = UserManager(db)
    user = user_manager.get_user_by_email("teacher@example.com")
    assert user_manager.get_role(user.user_id) == ("teacher", True)

    resp = client.post(
        "/api/auth/login",
        json={"email": "teacher@example.com", "password": "s3cret-pass"},
    )
    assert resp.status_code == 200
    assert resp.json()["role"] == "teacher"
    assert resp.json()["is_verified"] is True

    actions = {row.action for row in db.query(AuditLogModel).all()}
    assert {"invitation_sent", "teacher_registered"} <= actions


def test_second_accept_is_gone(client, db, admin):
    _, admin_headers = admin
    client.post("/api/invitations", json={"email": "teacher@example.com"}, headers=admin_headers)
    token = _token_for(db, "teacher@example.com")
    body = {
        "token": token,
        "full_name": "Thandi Mokoena",
        "password": "s3cret-pass",
        "confirm_password": "s3cret-pass",
    }

    assert client.post("/api/invitations/accept", json=body).status_code == 200
    resp = client.post("/api/invitations/accept", json=body)

    assert resp.status_code == 410
    assert "already been used" in resp.json()["detail"]


def test_validate_expired_and_unknown_tokens(client, db, admin):
    _, admin_headers = admin
    client.post("/api/invitations", json={"email": "teacher@example.com"}, headers=admin_headers)
    token = _token_for(db, "teacher@example.com")
    model = db.query(TeacherInvitationModel).filter(TeacherInvitationModel.token == token).one()
    model.expires_at = (datetime.now(pytz.utc) - timedelta(minutes=1)).isoformat()
    db.commit()

    resp = client.get("/api/invitations/validate", params={"token": token})
    assert resp.status_code == 410
    assert "expired" in resp.json()["detail"]

    resp = client.get("/api/invitations/validate", params={"token": "bogus"})
    assert resp.status_code == 404

    listed = client.get("/api/invitations", headers=admin_headers).json()["invitations"]
    assert listed[0]["status"] == "expired"


def test_accept_rejects_mismatched_and_short_passwords(client, db, admin):
    _, admin_headers = admin
    client.post("/api/invitations", json={"email": "teacher@example.com"}, headers=admin_headers)
    token = _token_for(db, "teacher@example.com")

    resp = client.post(
        "/api/invitations/accept",
        json={"token": token, "full_name": "T", "password": "abcdefgh", "confirm_password": "abcdefgx"},
    )
    assert resp.status_code == 400

    resp = client.post(
        "/api/invitations/accept",
        json={"token": token, "full_name": "T", "password": "short", "confirm_password": "short"},
    )
    assert resp.status_code == 400
    assert "at least 8 characters" in resp.json()["detail"]


def test_resend_rotates_token(client, db, admin, email_sender):
    _, admin_headers = admin
    client.post("/api/invitations", json={"email": "teacher@example.com"}, headers=admin_headers)
    first = _token_for(db, "teacher@example.com")

    resp = client.post(
        "/api/invitations/resend", json={"email": "teacher@example.com"}, headers=admin_headers
    )

    assert resp.status_code == 200
    assert _token_for(db, "teacher@example.com") != first
    assert len(email_sender.sent) == 2
    assert client.get("/api/invitations/validate", params={"token": first}).status_code == 404


def test_delivery_failure_is_a_bad_gateway(client, db, admin, email_sender):
    _, admin_headers = admin
    email_sender.fail = True

    resp = client.post("/api/invitations", json={"email": "teacher@example.com"}, headers=admin_headers)

    assert resp.status_code == 502
    assert "could not be sent" in resp.json()["detail"]
    token = _token_for(db, "teacher@example.com")
    assert client.get("/api/invitations/validate", params={"token": token}).status_code == 200


def test_only_admins_can_invite(client, teacher, parent):
    for _, headers in (teacher, parent):
        resp = client.post("/api/invitations", json={"email": "x@example.com"}, headers=headers)
        assert resp.status_code == 403


def test_reinviting_registered_teacher_conflicts(client, db, admin):
    _, admin_headers = admin
    client.post("/api/invitations", json={"email": "teacher@example.com"}, headers=admin_headers)
    token = _token_for(db, "teacher@example.com")
    client.post(
        "/api/invitations/accept",
        json={"token": token, "full_name": "T M", "password": "s3cret-pass", "confirm_password": "s3cret-pass"},
    )

    resp = client.post("/api/invitations", json={"email": "teacher@example.com"}, headers=admin_headers)

    assert resp.status_code == 409
