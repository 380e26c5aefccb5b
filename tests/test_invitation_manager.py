from datetime import datetime, timedelta

import pytest
import pytz

from core.exceptions import (
    InvitationAlreadyAcceptedError,
    InvitationAlreadyUsedError,
    InvitationDeliveryError,
    InvitationExpiredError,
    InvitationNotFoundError,
    ValidationError,
)
from models.invitation import TeacherInvitationModel
from utils.invitation_manager import (
    InvitationManager,
    build_invite_link,
    display_status,
    is_active,
)
from utils.user_manager import UserAlreadyExistsError

from conftest import RecordingEmailSender


class Clock:
    def __init__(self):
        self.now = datetime(2025, 3, 1, 8, 0, tzinfo=pytz.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def manager(db, user_manager, email_sender, clock):
    return InvitationManager(db, user_manager=user_manager, email_sender=email_sender, clock=clock)


def _rows(db, email):
    db.expire_all()
    return db.query(TeacherInvitationModel).filter(TeacherInvitationModel.email == email).all()


def test_issue_creates_pending_invitation_and_sends_link(manager, email_sender, clock):
    model = manager.issue("  Teacher@Example.com ", "admin-1", origin="https://portal.test")

    assert model.email == "teacher@example.com"
    assert model.status == "pending"
    assert model.invited_by == "admin-1"
    assert model.expires_at == (clock.now + timedelta(days=7)).isoformat()
    assert len(email_sender.sent) == 1
    sent = email_sender.sent[0]
    assert sent["to"] == "teacher@example.com"
    assert f"https://portal.test/teacher-signup?token={model.token}" in sent["html"]


def test_issue_rejects_empty_email(manager, email_sender):
    with pytest.raises(ValidationError):
        manager.issue("   ", "admin-1")
    assert email_sender.sent == []


def test_validate_pending_invitation(manager):
    model = manager.issue("teacher@example.com", "admin-1")

    result = manager.validate(model.token)

    assert result.email == "teacher@example.com"
    assert result.status == "pending"


def test_validate_fails_once_expiry_passes_while_status_is_pending(manager, db, clock):
    model = manager.issue("teacher@example.com", "admin-1")
    model.expires_at = (clock.now - timedelta(seconds=1)).isoformat()
    db.commit()

    with pytest.raises(InvitationExpiredError):
        manager.validate(model.token)
    assert _rows(db, "teacher@example.com")[0].status == "pending"


def test_validate_follows_the_clock(manager, clock):
    model = manager.issue("teacher@example.com", "admin-1")

    clock.advance(days=7)
    assert manager.validate(model.token).status == "pending"

    clock.advance(seconds=1)
    with pytest.raises(InvitationExpiredError):
        manager.validate(model.token)


def test_validate_unknown_token(manager):
    with pytest.raises(InvitationNotFoundError):
        manager.validate("no-such-token")
    with pytest.raises(InvitationNotFoundError):
        manager.validate("")


def test_reissue_rotates_token_and_expiry_in_place(manager, db, clock):
    first = manager.issue("teacher@example.com", "admin-1")
    first_token = first.token

    clock.advance(days=3)
    second = manager.resend("teacher@example.com", "admin-2")

    rows = _rows(db, "teacher@example.com")
    assert len(rows) == 1
    assert rows[0].token == second.token != first_token
    assert rows[0].expires_at == (clock.now + timedelta(days=7)).isoformat()
    assert rows[0].invited_by == "admin-2"
    with pytest.raises(InvitationNotFoundError):
        manager.validate(first_token)


def test_reissue_revives_an_expired_invitation(manager, clock):
    manager.issue("teacher@example.com", "admin-1")
    clock.advance(days=10)

    model = manager.issue("teacher@example.com", "admin-1")

    assert manager.validate(model.token).status == "pending"


def test_consume_creates_verified_teacher(manager, user_manager, db):
    model = manager.issue("teacher@example.com", "admin-1")

    user = manager.consume(model.token, "s3cret-pass", "Thandi Mokoena")

    assert user.email == "teacher@example.com"
    assert user_manager.get_role(user.user_id) == ("teacher", True)
    assert _rows(db, "teacher@example.com")[0].status == "accepted"


def test_second_consume_fails_with_already_used(manager):
    model = manager.issue("teacher@example.com", "admin-1")
    manager.consume(model.token, "s3cret-pass", "Thandi Mokoena")

    with pytest.raises(InvitationAlreadyUsedError):
        manager.consume(model.token, "another-pass", "Someone Else")


def test_consume_rejects_short_password_and_keeps_invitation(manager, db):
    model = manager.issue("teacher@example.com", "admin-1")

    with pytest.raises(ValidationError):
        manager.consume(model.token, "short", "Thandi Mokoena")

    assert _rows(db, "teacher@example.com")[0].status == "pending"


def test_failed_account_creation_leaves_invitation_pending(manager, user_manager, db):
    user_manager.sign_up("teacher@example.com", "password123", "Existing", "parent")
    model = manager.issue("teacher@example.com", "admin-1")

    with pytest.raises(UserAlreadyExistsError):
        manager.consume(model.token, "s3cret-pass", "Thandi Mokoena")

    assert _rows(db, "teacher@example.com")[0].status == "pending"


def test_accepted_email_cannot_be_reinvited(manager):
    model = manager.issue("teacher@example.com", "admin-1")
    manager.consume(model.token, "s3cret-pass", "Thandi Mokoena")

    with pytest.raises(InvitationAlreadyAcceptedError):
        manager.issue("teacher@example.com", "admin-1")


def test_delivery_failure_keeps_the_new_token(db, user_manager, clock):
    manager = InvitationManager(
        db,
        user_manager=user_manager,
        email_sender=RecordingEmailSender(fail=True),
        clock=clock,
    )

    with pytest.raises(InvitationDeliveryError):
        manager.issue("teacher@example.com", "admin-1")

    rows = _rows(db, "teacher@example.com")
    assert len(rows) == 1
    assert manager.validate(rows[0].token).email == "teacher@example.com"


def test_display_status_and_is_active(manager, clock):
    model = manager.issue("teacher@example.com", "admin-1")
    assert is_active(model, clock.now)
    assert display_status(model, clock.now) == "pending"

    later = clock.now + timedelta(days=8)
    assert not is_active(model, later)
    assert display_status(model, later) == "expired"

    model.status = "accepted"
    assert display_status(model, later) == "accepted"


def test_list_invitations_newest_first(manager, clock):
    manager.issue("first@example.com", "admin-1")
    clock.advance(minutes=5)
    manager.issue("second@example.com", "admin-1")

    emails = [m.email for m in manager.list_invitations()]

    assert emails == ["second@example.com", "first@example.com"]


def test_build_invite_link_strips_trailing_slash():
    assert build_invite_link("abc", "https://portal.test/") == "https://portal.test/teacher-signup?token=abc"
