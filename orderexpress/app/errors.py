"""Domain exceptions shared by the services, views and JSON endpoints."""
from __future__ import annotations


class NoBusinessAccess(Exception):
    """The user neither owns the business nor holds a role in it."""

    def __init__(self, user_id: int, business_id: int):
        super().__init__(f"user {user_id} has no access to business {business_id}")
        self.user_id = user_id
        self.business_id = business_id


class EmailDeliveryError(Exception):
    """Raised when the mail provider rejects a message. The message is the provider's text."""


class InvitationError(Exception):
    code = "invalid"
    status = 400
    message = "Invitation is not valid"

    def __init__(self, message: "str | None" = None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class InvalidInvitationToken(InvitationError):
    code = "invalid_token"
    message = "Invalid token format (expected UUID)"


class InvitationNotFound(InvitationError):
    code = "not_found"
    status = 404
    message = "Invitation not found"


class InvitationNotPending(InvitationError):
    code = "not_pending"
    message = "Invitation is not pending"


class InvitationExpired(InvitationError):
    code = "expired"
    message = "Invitation expired"


class InvitationEmailMismatch(InvitationError):
    code = "email_mismatch"
    message = "Email does not match invitation"


class UserExists(InvitationError):
    # the client should log in with the existing account and re-open the link
    code = "USER_EXISTS"
    status = 200
    message = "This email already has an account. Log in, then re-open the invite link."

    def to_dict(self) -> dict:
        return {"code": self.code}


class InvitationDeliveryError(InvitationError):
    """The invitation row was stored but the email could not be sent."""

    code = "email_failed"
    status = 502

    def __init__(self, invitation, message: str):
        super().__init__(message)
        self.invitation = invitation
