import uuid
from datetime import datetime, timedelta

import pytest

from orderexpress.app import db
from orderexpress.app.errors import (
    EmailDeliveryError,
    InvalidInvitationToken,
    InvitationDeliveryError,
    InvitationEmailMismatch,
    InvitationError,
    InvitationExpired,
    InvitationNotFound,
    InvitationNotPending,
    UserExists,
)
from orderexpress.app.invitations import service
from orderexpress.app.models import Invitation, User, UserBusinessRole


def accept_url(token):
    return f"http://localhost/accept-invite?token={token}"


@pytest.fixture
def invitation(app, owner, business):
    return service.invite_user(business, owner, 'new.hire@example.com', 'inventory_manager', accept_url)


def test_invite_stores_pending_row_and_emails_link(app, business, invitation, outbox):
    assert invitation.status == 'pending'
    assert service.is_uuid_token(invitation.token)
    assert invitation.expires_at is None
    assert len(outbox) == 1
    mail = outbox[0]
    assert mail["to"] == 'new.hire@example.com'
    assert mail["subject"] == "You're invited to OrderExpress"
    assert f"/accept-invite?token={invitation.token}" in mail["html"]
    assert 'Corner Bar' in mail["html"]
    assert 'Inventory manager' in mail["body"]
    assert service.list_pending_invitations(business) == [invitation]


def test_invite_rejects_unknown_role(app, owner, business):
    with pytest.raises(ValueError):
        service.invite_user(business, owner, 'a@example.com', 'bartender', accept_url)
    assert Invitation.query.count() == 0


def test_invite_expiry_from_config(app, owner, business):
    app.config['INVITE_EXPIRATION_HOURS'] = 48
    inv = service.invite_user(business, owner, 'later@example.com', 'sales_manager', accept_url)
    assert inv.expires_at is not None
    assert timedelta(hours=47) < inv.expires_at - datetime.utcnow() <= timedelta(hours=48)


def test_failed_email_keeps_pending_invitation(app, owner, business, monkeypatch):
    def broken(*args, **kwargs):
        raise EmailDeliveryError('{"message":"invalid api key"}')

    monkeypatch.setattr('orderexpress.app.invitations.service.send_email', broken)
    with pytest.raises(InvitationDeliveryError) as exc:
        service.invite_user(business, owner, 'orphan@example.com', 'ordering_manager', accept_url)
    assert exc.value.message == '{"message":"invalid api key"}'

    row = Invitation.query.filter_by(email='orphan@example.com').one()
    assert row.status == 'pending'
    # an undelivered invitation can still be resent or cancelled
    monkeypatch.setattr('orderexpress.app.invitations.service.send_email', lambda *a, **k: None)
    assert service.resend_invitation(business, row.id, accept_url).id == row.id
    service.cancel_invitation(business, row.id)
    assert Invitation.query.filter_by(email='orphan@example.com').first() is None


@pytest.mark.parametrize('token', [None, '', 'abc', '123', 'not-a-uuid-at-all', str(uuid.uuid4()).upper()[:-1]])
def test_preview_rejects_malformed_tokens(app, token):
    with pytest.raises(InvalidInvitationToken) as exc:
        service.preview_invitation(token)
    assert exc.value.to_dict() == {"error": "Invalid token format (expected UUID)", "code": "invalid_token"}


def test_preview_unknown_token(app):
    with pytest.raises(InvitationNotFound) as exc:
        service.preview_invitation(str(uuid.uuid4()))
    assert exc.value.status == 404
    assert exc.value.message == "Invitation not found"


def test_expired_invitation_cannot_be_accepted(app, invitation):
    invitation.expires_at = datetime.utcnow() - timedelta(minutes=1)
    db.session.commit()
    with pytest.raises(InvitationExpired):
        service.accept_invitation(invitation.token, invitation.email, password='longenough')
    assert invitation.status == 'pending'
    assert User.query.filter_by(email=invitation.email).first() is None


def test_accept_creates_account_and_role(app, business, invitation):
    user, accepted = service.accept_invitation(
        invitation.token, 'New.Hire@Example.com', password='longenough', first_name='Nia', last_name='Hire'
    )
    assert accepted.status == 'accepted'
    assert accepted.accepted_at is not None
    assert user.email == 'new.hire@example.com'
    assert user.confirmed is True
    assert user.check_password('longenough')
    assert user.display_name == 'Nia Hire'
    assignment = db.session.get(UserBusinessRole, (user.id, business.id))
    assert assignment.role == 'inventory_manager'
    assert service.list_pending_invitations(business) == []


def test_accepted_token_is_single_use(app, invitation):
    service.accept_invitation(invitation.token, invitation.email, password='longenough')
    with pytest.raises(InvitationNotPending):
        service.accept_invitation(invitation.token, invitation.email, password='longenough')
    assert User.query.filter_by(email=invitation.email).count() == 1


def test_accept_with_wrong_email_changes_nothing(app, invitation):
    with pytest.raises(InvitationEmailMismatch) as exc:
        service.accept_invitation(invitation.token, 'someone.else@example.com', password='longenough')
    assert exc.value.message == "Email does not match invitation"
    assert invitation.status == 'pending'
    assert User.query.count() == 1


def test_accept_with_short_password(app, invitation):
    with pytest.raises(InvitationError):
        service.accept_invitation(invitation.token, invitation.email, password='short')
    assert invitation.status == 'pending'
    assert User.query.filter_by(email=invitation.email).first() is None


def test_existing_account_must_log_in_first(app, invitation, factories):
    existing = factories.user('new.hire@example.com')
    with pytest.raises(UserExists) as exc:
        service.accept_invitation(invitation.token, invitation.email, password='whatever1')
    assert exc.value.to_dict() == {"code": "USER_EXISTS"}
    assert invitation.status == 'pending'

    user, _ = service.accept_invitation(invitation.token, invitation.email, acting_user=existing)
    assert user.id == existing.id
    assert invitation.status == 'accepted'


def test_accept_upserts_existing_role(app, business, invitation, factories):
    existing = factories.user('new.hire@example.com')
    factories.assign(existing, business, 'sales_manager')
    service.accept_invitation(invitation.token, invitation.email, acting_user=existing)
    assignment = db.session.get(UserBusinessRole, (existing.id, business.id))
    assert assignment.role == 'inventory_manager'
    assert UserBusinessRole.query.filter_by(user_id=existing.id).count() == 1


def test_signed_in_as_someone_else(app, invitation, factories):
    other = factories.user('other@example.com')
    with pytest.raises(InvitationEmailMismatch):
        service.accept_invitation(invitation.token, invitation.email, password='longenough', acting_user=other)
    assert invitation.status == 'pending'


def test_cancelled_invitation_is_gone(app, business, invitation):
    token = invitation.token
    service.cancel_invitation(business, invitation.id)
    with pytest.raises(InvitationNotFound):
        service.accept_invitation(token, 'new.hire@example.com', password='longenough')
    with pytest.raises(InvitationNotFound):
        service.cancel_invitation(business, 12345)


def test_cancel_only_pending(app, business, invitation):
    service.accept_invitation(invitation.token, invitation.email, password='longenough')
    with pytest.raises(InvitationNotPending):
        service.cancel_invitation(business, invitation.id)


def test_cancel_is_scoped_to_business(app, invitation, factories):
    stranger = factories.user('stranger@example.com')
    theirs = factories.business(stranger.id, 'Elsewhere')
    with pytest.raises(InvitationNotFound):
        service.cancel_invitation(theirs, invitation.id)
    assert invitation.status == 'pending'


def test_members_change_role_and_remove(app, owner, business, factories):
    bob = factories.user('bob@example.com')
    amy = factories.user('amy@example.com')
    factories.assign(bob, business, 'sales_manager')
    factories.assign(amy, business, 'ordering_manager')

    members = service.list_members(business)
    assert [(u.email, r) for u, r in members] == [
        ('owner@example.com', 'admin'),
        ('amy@example.com', 'ordering_manager'),
        ('bob@example.com', 'sales_manager'),
    ]

    service.change_role(business, bob.id, 'inventory_manager')
    assert db.session.get(UserBusinessRole, (bob.id, business.id)).role == 'inventory_manager'

    with pytest.raises(ValueError):
        service.change_role(business, owner.id, 'sales_manager')
    with pytest.raises(ValueError):
        service.change_role(business, bob.id, 'bartender')
    with pytest.raises(ValueError):
        service.remove_member(business, owner.id)

    service.remove_member(business, amy.id)
    assert db.session.get(UserBusinessRole, (amy.id, business.id)) is None
    with pytest.raises(LookupError):
        service.remove_member(business, amy.id)
    with pytest.raises(LookupError):
        service.change_role(business, amy.id, 'admin')


def test_purge_expired_invitations(app, owner, business):
    past = datetime.utcnow() - timedelta(days=1)
    stale = service.invite_user(business, owner, 'stale@example.com', 'sales_manager', accept_url, expires_at=past)
    fresh = service.invite_user(business, owner, 'fresh@example.com', 'sales_manager', accept_url)
    stale_id = stale.id
    assert service.purge_expired_invitations() == 1
    db.session.expire_all()
    assert db.session.get(Invitation, stale_id) is None
    assert db.session.get(Invitation, fresh.id) is not None
    assert service.purge_expired_invitations() == 0


def test_invite_email_escapes_business_name(app, owner, factories, outbox):
    shady = factories.business(owner.id, '<img src=x onerror=alert(1)>')
    service.invite_user(shady, owner, 'guest@example.com', 'sales_manager', accept_url)
    html = outbox[-1]["html"]
    assert '<img' not in html
    assert '&lt;img src=x onerror=alert(1)&gt;' in html
    # the plain text part carries the name as typed
    assert '<img src=x onerror=alert(1)>' in outbox[-1]["body"]
