from functools import wraps
from flask import abort, flash, g, redirect, request, url_for
from flask_login import current_user

from ..dashboard.context import resolve_current_business, resolve_role
from ..dashboard.navigation import is_section_allowed
from ..errors import NoBusinessAccess
from ..preferences import SessionPreferenceStore


def _wants_json() -> bool:
    return request.blueprint == "api_v1" or request.path.startswith("/api/")


def load_business_context() -> bool:
    """Resolve g.business and g.role for this request. Returns False when the user has no business."""
    store = SessionPreferenceStore()
    g.preferences = store
    business = resolve_current_business(current_user.id, store)
    g.business = business
    g.role = resolve_role(current_user.id, business.id) if business is not None else None
    return business is not None


def business_required(f):
    @wraps(f)
    def wrapped(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)
        try:
            has_business = load_business_context()
        except NoBusinessAccess:
            if _wants_json():
                abort(403)
            flash("You do not have access to this business.", "error")
            return redirect(url_for("businesses.create"))
        if not has_business:
            if _wants_json():
                abort(409, "Create or select a business first")
            flash("Create your business to get started.", "info")
            return redirect(url_for("businesses.create"))
        return f(*args, **kwargs)
    return wrapped


def section_required(section: str):
    def decorator(f):
        @business_required
        @wraps(f)
        def wrapped(*args, **kwargs):
            if not is_section_allowed(g.role, section):
                if _wants_json():
                    abort(403)
                flash("Your role does not have access to that section.", "warning")
                return redirect(url_for("dashboard.index"))
            return f(*args, **kwargs)
        return wrapped
    return decorator


def business_admin_required(f):
    @business_required
    @wraps(f)
    def wrapped(*args, **kwargs):
        if g.role != "admin":
            if _wants_json():
                abort(403)
            flash("Only business admins can manage users.", "error")
            return redirect(url_for("settings.index"))
        return f(*args, **kwargs)
    return wrapped
