from __future__ import annotations
from flask import Blueprint, render_template, redirect, url_for, flash, current_app
from flask_login import login_required, current_user
from sqlalchemy.exc import SQLAlchemyError

from .. import db
from ..forms import BusinessForm
from ..models import Business, UserBusinessRole
from ..preferences import CURRENT_BUSINESS_KEY, SessionPreferenceStore

businesses_bp = Blueprint("businesses", __name__, template_folder="../templates")


def create_business(owner_id: int, name: str, address: "str | None" = None) -> Business:
    """Insert a business and the owner's admin assignment in one transaction."""
    business = Business(business_name=name.strip(), business_address=address, created_by_user=owner_id)
    try:
        db.session.add(business)
        db.session.flush()
        db.session.add(UserBusinessRole(user_id=owner_id, business_id=business.id, role="admin"))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to create business for user %s", owner_id)
        raise
    current_app.logger.info("Business %s created by user %s", business.id, owner_id)
    return business


@businesses_bp.route("/businesses/create", methods=["GET", "POST"])
@login_required
def create():
    form = BusinessForm()
    if form.validate_on_submit():
        try:
            business = create_business(current_user.id, str(form.business_name.data), form.full_address())
        except SQLAlchemyError:
            flash("Could not create business.", "error")
            return render_template("businesses/create.html", form=form)
        SessionPreferenceStore().set(CURRENT_BUSINESS_KEY, business.id)
        flash("Business created.", "success")
        return redirect(url_for("dashboard.index"))
    return render_template("businesses/create.html", form=form)
