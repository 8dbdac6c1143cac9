from __future__ import annotations
from flask import Blueprint, render_template, redirect, url_for, flash, request, current_app
from flask_login import login_user, logout_user, login_required
from .. import db
from ..errors import EmailDeliveryError
from ..mail import send_email
from ..models import User
from ..forms import RegisterForm, LoginForm
from typing import cast
from sqlalchemy.exc import IntegrityError
from datetime import datetime
from ..forms import ResendConfirmationForm
from flask import session

auth_bp = Blueprint("auth", __name__, template_folder="../templates")


@auth_bp.route('/set-language', methods=['POST'])
def set_language():
    lang = request.form.get('lang')
    if lang in current_app.config.get("LANGUAGES", ("en",)):
        session['lang'] = lang
    return redirect(request.referrer or url_for('dashboard.index'))


def _find_user_by_email(email: "str | None") -> "User | None":
    if not email:
        return None
    return User.query.filter(db.func.lower(User.email) == email.strip().lower()).first()


def _send_confirmation(user: User, resend: bool = False) -> None:
    token = user.generate_confirmation_token()
    confirm_url = url_for("auth.confirm_email", token=token, _external=True)
    app_name = current_app.config.get("APP_NAME", "OrderExpress")
    subject = f"[{app_name}] Confirm your email" + (" (resent)" if resend else "")
    body = f"Click the link below to finish creating your account:\n\n{confirm_url}\n\nThis link expires in one hour."
    send_email(subject, str(user.email), body)


@auth_bp.route("/register", methods=["GET", "POST"])
def register():
    form = RegisterForm()
    if form.validate_on_submit():
        existing = _find_user_by_email(form.email.data)
        if existing:
            # unconfirmed accounts get a fresh confirmation email instead of a silent block
            if not existing.confirmed:
                try:
                    _send_confirmation(existing, resend=True)
                    flash("We sent the confirmation email again. Check your inbox.", "success")
                except EmailDeliveryError:
                    flash("Could not send the confirmation email. Please contact support.", "error")
                return render_template("auth/register.html", form=form)
            flash("That email address is already registered.", "warning")
            return render_template("auth/register.html", form=form)
        user = User()
        user.email = str(form.email.data).strip()
        user.first_name = form.first_name.data or None
        user.last_name = form.last_name.data or None
        user.set_password(cast(str, form.password.data))
        user.confirmed = False

        # the account is only stored once the confirmation email went out
        try:
            _send_confirmation(user)
        except EmailDeliveryError:
            flash("Could not send the confirmation email. Please contact support.", "error")
            return render_template("auth/register.html", form=form)

        try:
            db.session.add(user)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            current_app.logger.exception("User commit failed after email sent, possible race on unique email")
            flash("That email address is already registered. Please try again.", "warning")
            return render_template("auth/register.html", form=form)

        flash("Confirmation email sent. Check your inbox.", "success")
        return redirect(url_for("auth.login"))
    return render_template("auth/register.html", form=form)


@auth_bp.route("/confirm/<token>")
def confirm_email(token: str):
    email = User.confirm_token(token)
    if not email:
        flash("The confirmation link is invalid or has expired.", "error")
        return redirect(url_for("auth.login"))
    user = _find_user_by_email(email)
    if not user:
        flash("Account not found.", "error")
        return redirect(url_for("auth.register"))
    if user.confirmed:
        flash("Your email is already confirmed.", "warning")
        return redirect(url_for("auth.login"))
    user.confirmed = True
    user.confirmed_at = datetime.utcnow()
    db.session.add(user)
    db.session.commit()
    flash("Email confirmed. Please log in.", "success")
    return redirect(url_for("auth.login"))


@auth_bp.route("/resend-confirmation", methods=["GET", "POST"])
def resend_confirmation():
    form = ResendConfirmationForm()
    if form.validate_on_submit():
        user = _find_user_by_email(form.email.data)
        if not user:
            flash("No account found for that email address.", "warning")
            return render_template("auth/resend_confirmation.html", form=form)
        if user.confirmed:
            flash("Your email is already confirmed. Please log in.", "warning")
            return redirect(url_for("auth.login"))
        try:
            _send_confirmation(user, resend=True)
        except EmailDeliveryError:
            flash("Could not send the confirmation email. Please contact support.", "error")
            return render_template("auth/resend_confirmation.html", form=form)
        flash("We sent the confirmation email again. Check your inbox.", "success")
        return redirect(url_for("auth.login"))
    return render_template("auth/resend_confirmation.html", form=form)


@auth_bp.route("/login", methods=["GET", "POST"])
def login():
    form = LoginForm()
    if form.validate_on_submit():
        user = _find_user_by_email(form.email.data)
        if user and user.check_password(cast(str, form.password.data)):
            if not user.confirmed:
                flash("Your email is not confirmed yet. Click the link in the confirmation email.", "warning")
                return redirect(url_for("auth.login"))
            login_user(user)
            current_app.logger.info("User %s logged in", user.id)
            # an invite link opened before logging in is picked up here
            pending = session.pop("pending_invite", None)
            if pending:
                return redirect(url_for("invitations.accept_invite", token=pending))
            return redirect(url_for("dashboard.index"))
        flash("Invalid email or password.", "error")
    return render_template("auth/login.html", form=form)


@auth_bp.route("/logout")
@login_required
def logout():
    logout_user()
    return redirect(url_for("auth.login"))
