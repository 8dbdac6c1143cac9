from __future__ import annotations
from flask import Blueprint, render_template, redirect, url_for, flash, request, session
from flask_login import current_user, login_user
from sqlalchemy.exc import SQLAlchemyError

from .. import db
from ..errors import InvitationEmailMismatch, InvitationError, UserExists
from ..forms import AcceptInviteForm, ConfirmAcceptForm
from ..models import User, format_role_label
from ..preferences import CURRENT_BUSINESS_KEY, SessionPreferenceStore
from ..utils.display import password_strength
from . import service

invitations_bp = Blueprint("invitations", __name__, template_folder="../templates")


def _render_error(exc: InvitationError):
    messages = {
        "not_pending": "This invitation is not valid anymore.",
        "expired": "This invitation has expired.",
        "email_mismatch": "Logged in user does not match the invite email.",
    }
    message = messages.get(exc.code, exc.message)
    status = exc.status if exc.status >= 400 else 400
    return render_template("invitations/error.html", message=message, code=exc.code), status


@invitations_bp.route("/accept-invite", methods=["GET"])
def accept_invite():
    token = request.args.get("token", "")
    try:
        invitation = service.preview_invitation(token)
    except InvitationError as exc:
        return _render_error(exc)

    context = {
        "invitation": invitation,
        "business": invitation.business,
        "role_label": format_role_label(invitation.role),
    }
    if current_user.is_authenticated:
        if (current_user.email or "").lower() != invitation.email.lower():
            return _render_error(InvitationEmailMismatch())
        return render_template("invitations/confirm.html", form=ConfirmAcceptForm(token=token), **context)

    existing = User.query.filter(db.func.lower(User.email) == invitation.email.lower()).first()
    if existing is not None:
        # login() sends the user back here once signed in
        session["pending_invite"] = token
        return render_template("invitations/login_required.html", **context)
    return render_template(
        "invitations/accept.html", form=AcceptInviteForm(token=token), password_strength=0, **context
    )


@invitations_bp.route("/accept-invite", methods=["POST"])
def accept_invite_submit():
    token = request.form.get("token", "")
    try:
        invitation = service.preview_invitation(token)
    except InvitationError as exc:
        return _render_error(exc)

    if current_user.is_authenticated:
        form = ConfirmAcceptForm()
        if not form.validate_on_submit():
            return redirect(url_for("invitations.accept_invite", token=token))
        acting = current_user._get_current_object()
        kwargs = {"email": acting.email, "acting_user": acting}
    else:
        form = AcceptInviteForm()
        if not form.validate_on_submit():
            for errors in form.errors.values():
                for message in errors:
                    flash(message, "error")
            return render_template(
                "invitations/accept.html",
                form=form,
                invitation=invitation,
                business=invitation.business,
                role_label=format_role_label(invitation.role),
                password_strength=password_strength(form.password.data),
            ), 400
        kwargs = {
            "email": invitation.email,
            "password": form.password.data,
            "first_name": form.first_name.data,
            "last_name": form.last_name.data,
        }

    try:
        user, accepted = service.accept_invitation(token, **kwargs)
    except UserExists as exc:
        session["pending_invite"] = token
        flash(exc.message, "warning")
        return redirect(url_for("auth.login"))
    except InvitationError as exc:
        return _render_error(exc)
    except SQLAlchemyError:
        flash("Could not accept invitation.", "error")
        return redirect(url_for("invitations.accept_invite", token=token))

    if not current_user.is_authenticated:
        login_user(user)
    if (current_user.email or "").lower() != accepted.email.lower():
        return _render_error(InvitationEmailMismatch())
    SessionPreferenceStore().set(CURRENT_BUSINESS_KEY, accepted.business_id)
    flash(f"You joined {accepted.business.business_name}.", "success")
    return redirect(url_for("dashboard.index"))
