from __future__ import annotations
from flask import Blueprint, render_template, redirect, url_for, flash, request, g, abort
from flask_login import login_required, current_user

from ..auth.permissions import business_required
from ..errors import NoBusinessAccess
from ..preferences import sidebar_collapsed, toggle_sidebar
from .context import accessible_businesses, select_business
from .navigation import SECTIONS, SECTION_TITLES, gate_section, menu_for

dashboard_bp = Blueprint("dashboard", __name__, template_folder="../templates")


@dashboard_bp.app_context_processor
def inject_navigation():
    role = g.get("role")
    if not role:
        return {}
    return {
        "menu": menu_for(role),
        "current_business": g.get("business"),
        "current_role": role,
        "sidebar_collapsed": sidebar_collapsed(g.preferences),
    }


@dashboard_bp.route("/")
def home():
    if current_user.is_authenticated:
        return redirect(url_for("dashboard.index"))
    return redirect(url_for("auth.login"))


@dashboard_bp.route("/dashboard")
@login_required
@business_required
def index():
    return redirect(url_for("dashboard.section", name=gate_section(g.role, None)))


@dashboard_bp.route("/dashboard/<name>")
@login_required
@business_required
def section(name: str):
    if name not in SECTIONS:
        abort(404)
    allowed = gate_section(g.role, name)
    if allowed != name:
        return redirect(url_for("dashboard.section", name=allowed))
    return render_template(
        f"dashboard/{name}.html",
        section=name,
        title=SECTION_TITLES[name],
        businesses=accessible_businesses(current_user.id),
    )


@dashboard_bp.route("/dashboard/businesses/<int:business_id>/select", methods=["POST"])
@login_required
@business_required
def switch_business(business_id: int):
    try:
        business = select_business(current_user.id, business_id, g.preferences)
    except NoBusinessAccess:
        flash("You do not have access to that business.", "error")
        return redirect(url_for("dashboard.index"))
    flash(f"Switched to {business.business_name}.", "success")
    return redirect(url_for("dashboard.index"))


@dashboard_bp.route("/dashboard/sidebar", methods=["POST"])
@login_required
@business_required
def sidebar():
    toggle_sidebar(g.preferences)
    return redirect(request.referrer or url_for("dashboard.index"))
