"""Staff invitations and business membership.

An invitation is created as ``pending`` with a random UUID token and emailed
as an accept link. Accepting it provisions (or reuses) the account, upserts the
role assignment and marks the invitation ``accepted`` in a single commit.
Cancelling deletes it. A token that was accepted, deleted or has expired never
grants access again.
"""
from __future__ import annotations

import re
import uuid
from datetime import datetime, timedelta
from typing import Callable

from flask import current_app, render_template
from sqlalchemy.exc import SQLAlchemyError

from .. import db
from ..errors import (
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
from ..mail import send_email
from ..models import (
    INVITATION_ACCEPTED,
    INVITATION_PENDING,
    ROLES,
    Business,
    Invitation,
    User,
    UserBusinessRole,
    format_role_label,
)

UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$", re.IGNORECASE)


def _token_preview(token: "str | None") -> str:
    return f"{token[:8]}…" if isinstance(token, str) else repr(token)


def is_uuid_token(value: "str | None") -> bool:
    return isinstance(value, str) and UUID_RE.match(value) is not None


def default_expiry(now: "datetime | None" = None) -> "datetime | None":
    hours = int(current_app.config.get("INVITE_EXPIRATION_HOURS") or 0)
    if hours <= 0:
        return None
    return (now or datetime.utcnow()) + timedelta(hours=hours)


def build_invitation_email(invitation: Invitation, accept_url: str) -> tuple[str, str, str]:
    app_name = current_app.config.get("APP_NAME", "OrderExpress")
    context = {
        "app_name": app_name,
        "business_name": invitation.business.business_name if invitation.business else app_name,
        "role_label": format_role_label(invitation.role),
        "accept_url": accept_url,
    }
    subject = f"You're invited to {app_name}"
    text = render_template("emails/invite.txt", **context)
    html = render_template("emails/invite.html", **context)
    return subject, text, html


def invite_user(
    business: Business,
    inviter: User,
    email: str,
    role: str,
    accept_url_for: Callable[[str], str],
    expires_at: "datetime | None" = None,
) -> Invitation:
    """Store a pending invitation and email its accept link.

    The row is committed before the email goes out. If delivery fails the
    invitation stays pending and InvitationDeliveryError is raised.
    """
    if role not in ROLES:
        raise ValueError(f"unknown role: {role!r}")
    email = email.strip()
    invitation = Invitation(
        business_id=business.id,
        email=email,
        role=role,
        token=str(uuid.uuid4()),
        status=INVITATION_PENDING,
        invited_by=inviter.id,
        expires_at=expires_at if expires_at is not None else default_expiry(),
    )
    try:
        db.session.add(invitation)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to store invitation for %s", email)
        raise
    current_app.logger.info(
        "Invitation %s created for %s (business %s, role %s)", invitation.id, email, business.id, role
    )
    send_invitation_email(invitation, accept_url_for(invitation.token))
    return invitation


def send_invitation_email(invitation: Invitation, accept_url: str) -> None:
    subject, text, html = build_invitation_email(invitation, accept_url)
    try:
        send_email(subject, invitation.email, text, html)
    except EmailDeliveryError as exc:
        current_app.logger.error("Invitation %s stored but email failed: %s", invitation.id, exc)
        raise InvitationDeliveryError(invitation, str(exc)) from exc


def resend_invitation(business: Business, invitation_id: int, accept_url_for: Callable[[str], str]) -> Invitation:
    invitation = Invitation.query.filter_by(id=invitation_id, business_id=business.id).first()
    if invitation is None:
        raise InvitationNotFound()
    if invitation.status != INVITATION_PENDING:
        raise InvitationNotPending()
    send_invitation_email(invitation, accept_url_for(invitation.token))
    return invitation


def preview_invitation(token: "str | None") -> Invitation:
    """Checks made before asking for account details: shape, existence, status, expiry."""
    if not is_uuid_token(token):
        raise InvalidInvitationToken()
    invitation = Invitation.query.filter_by(token=token).first()
    if invitation is None:
        raise InvitationNotFound()
    if invitation.status != INVITATION_PENDING:
        raise InvitationNotPending()
    if invitation.is_expired():
        raise InvitationExpired()
    return invitation


def accept_invitation(
    token: "str | None",
    email: "str | None",
    password: "str | None" = None,
    first_name: "str | None" = None,
    last_name: "str | None" = None,
    acting_user: "User | None" = None,
) -> tuple[User, Invitation]:
    """Redeem an invitation token.

    Validation failures raise a specific InvitationError subclass and leave
    the invitation untouched. An existing account is reused only when it is
    the signed-in ``acting_user``; otherwise UserExists is raised so the
    caller can ask the person to log in first.
    """
    current_app.logger.info("Accepting invitation %s for %s", _token_preview(token), email)
    invitation = preview_invitation(token)
    if (invitation.email or "").strip().lower() != (email or "").strip().lower():
        current_app.logger.warning("Invitation %s email mismatch: %s", invitation.id, email)
        raise InvitationEmailMismatch()

    user = User.query.filter(db.func.lower(User.email) == invitation.email.strip().lower()).first()
    if user is not None:
        if acting_user is None or acting_user.id != user.id:
            raise UserExists()
    else:
        if acting_user is not None:
            # signed in as someone else than the invitee
            raise InvitationEmailMismatch()
        if not password or len(password) < 8:
            raise InvitationError("Password must be at least 8 characters.")
        user = User(
            email=invitation.email.strip(),
            first_name=first_name or None,
            last_name=last_name or None,
            confirmed=True,
            confirmed_at=datetime.utcnow(),
        )
        user.set_password(password)
        db.session.add(user)

    try:
        db.session.flush()
        assignment = db.session.get(UserBusinessRole, (user.id, invitation.business_id))
        if assignment is None:
            assignment = UserBusinessRole(user_id=user.id, business_id=invitation.business_id, role=invitation.role)
            db.session.add(assignment)
        else:
            assignment.role = invitation.role
        invitation.status = INVITATION_ACCEPTED
        invitation.accepted_at = datetime.utcnow()
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to accept invitation %s", invitation.id)
        raise
    current_app.logger.info("Invitation %s accepted by user %s", invitation.id, user.id)
    return user, invitation


def cancel_invitation(business: Business, invitation_id: int) -> None:
    invitation = Invitation.query.filter_by(id=invitation_id, business_id=business.id).first()
    if invitation is None:
        raise InvitationNotFound()
    if invitation.status != INVITATION_PENDING:
        raise InvitationNotPending()
    try:
        db.session.delete(invitation)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to cancel invitation %s", invitation_id)
        raise
    current_app.logger.info("Invitation %s cancelled", invitation_id)


def list_pending_invitations(business: Business) -> list[Invitation]:
    return (
        Invitation.query.filter_by(business_id=business.id, status=INVITATION_PENDING)
        .order_by(Invitation.invited_at.asc(), Invitation.id.asc())
        .all()
    )


def list_members(business: Business) -> list[tuple[User, str]]:
    """Users of the business with their effective role, owner first."""
    rows = (
        db.session.query(User, UserBusinessRole.role)
        .join(UserBusinessRole, UserBusinessRole.user_id == User.id)
        .filter(UserBusinessRole.business_id == business.id)
        .order_by(User.email.asc())
        .all()
    )
    members = [(user, "admin" if user.id == business.created_by_user else role) for user, role in rows]
    if business.owner is not None and all(user.id != business.created_by_user for user, _ in members):
        members.append((business.owner, "admin"))
    members.sort(key=lambda m: (m[0].id != business.created_by_user, (m[0].email or "").lower()))
    return members


def change_role(business: Business, user_id: int, role: str) -> UserBusinessRole:
    if role not in ROLES:
        raise ValueError(f"unknown role: {role!r}")
    if user_id == business.created_by_user:
        raise ValueError("The owner's role cannot be changed.")
    assignment = db.session.get(UserBusinessRole, (user_id, business.id))
    if assignment is None:
        raise LookupError("User is not a member of this business.")
    try:
        assignment.role = role
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to change role of user %s", user_id)
        raise
    current_app.logger.info("User %s is now %s in business %s", user_id, role, business.id)
    return assignment


def remove_member(business: Business, user_id: int) -> None:
    if user_id == business.created_by_user:
        raise ValueError("The owner cannot be removed.")
    assignment = db.session.get(UserBusinessRole, (user_id, business.id))
    if assignment is None:
        raise LookupError("User is not a member of this business.")
    try:
        db.session.delete(assignment)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to remove user %s from business %s", user_id, business.id)
        raise
    current_app.logger.info("User %s removed from business %s", user_id, business.id)


def purge_expired_invitations(now: "datetime | None" = None) -> int:
    now = now or datetime.utcnow()
    q = Invitation.query.filter(
        Invitation.status == INVITATION_PENDING,
        Invitation.expires_at.isnot(None),
        Invitation.expires_at < now,
    )
    count = q.count()
    if count:
        q.delete(synchronize_session=False)
        db.session.commit()
    return count
