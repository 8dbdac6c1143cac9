from __future__ import annotations
from flask import Blueprint, render_template, redirect, url_for, flash, g
from flask_login import login_required, current_user
from sqlalchemy.exc import SQLAlchemyError

from ..auth.permissions import business_admin_required, business_required
from ..errors import InvitationDeliveryError, InvitationError
from ..forms import ChangeRoleForm, InviteUserForm
from ..invitations import service
from ..models import format_role_label

settings_bp = Blueprint("settings", __name__, template_folder="../templates")


def accept_url_for(token: str) -> str:
    return url_for("invitations.accept_invite", token=token, _external=True)


@settings_bp.route("/settings")
@login_required
@business_required
def index():
    return render_template("settings/index.html", section="settings", title="Settings")


@settings_bp.route("/settings/users")
@login_required
@business_required
def users():
    members = service.list_members(g.business)
    pending = service.list_pending_invitations(g.business)
    return render_template(
        "settings/users.html",
        section="settings",
        title="Users",
        members=members,
        pending=pending,
        invite_form=InviteUserForm(),
        role_form=ChangeRoleForm(),
        is_admin=g.role == "admin",
        format_role_label=format_role_label,
    )


@settings_bp.route("/settings/users/invite", methods=["POST"])
@login_required
@business_admin_required
def invite():
    form = InviteUserForm()
    if not form.validate_on_submit():
        for errors in form.errors.values():
            for message in errors:
                flash(message, "error")
        return redirect(url_for("settings.users"))
    try:
        service.invite_user(g.business, current_user, str(form.email.data), str(form.role.data), accept_url_for)
        flash("Invitation sent.", "success")
    except InvitationDeliveryError as exc:
        flash(f"The invitation was saved but the email could not be sent: {exc.message}", "error")
    except SQLAlchemyError:
        flash("Could not create the invitation.", "error")
    return redirect(url_for("settings.users"))


@settings_bp.route("/settings/invitations/<int:invitation_id>/resend", methods=["POST"])
@login_required
@business_admin_required
def resend(invitation_id: int):
    try:
        service.resend_invitation(g.business, invitation_id, accept_url_for)
        flash("Invitation sent again.", "success")
    except InvitationError as exc:
        flash(exc.message, "error")
    return redirect(url_for("settings.users"))


@settings_bp.route("/settings/invitations/<int:invitation_id>/cancel", methods=["POST"])
@login_required
@business_admin_required
def cancel(invitation_id: int):
    try:
        service.cancel_invitation(g.business, invitation_id)
        flash("Invitation cancelled.", "success")
    except InvitationError as exc:
        flash(exc.message, "error")
    except SQLAlchemyError:
        flash("Could not cancel the invitation.", "error")
    return redirect(url_for("settings.users"))


@settings_bp.route("/settings/users/<int:user_id>/role", methods=["POST"])
@login_required
@business_admin_required
def change_role(user_id: int):
    form = ChangeRoleForm()
    if not form.validate_on_submit():
        flash("Choose a valid role.", "error")
        return redirect(url_for("settings.users"))
    try:
        service.change_role(g.business, user_id, str(form.role.data))
        flash("Role updated.", "success")
    except (ValueError, LookupError) as exc:
        flash(str(exc), "error")
    except SQLAlchemyError:
        flash("Could not change role.", "error")
    return redirect(url_for("settings.users"))


@settings_bp.route("/settings/users/<int:user_id>/remove", methods=["POST"])
@login_required
@business_admin_required
def remove(user_id: int):
    try:
        service.remove_member(g.business, user_id)
        flash("User removed from this business.", "success")
    except (ValueError, LookupError) as exc:
        flash(str(exc), "error")
    except SQLAlchemyError:
        flash("Could not remove user.", "error")
    return redirect(url_for("settings.users"))
