"""Resolve the business a signed-in user is working in and the role they hold there."""
from __future__ import annotations

from flask import current_app
from sqlalchemy import or_

from .. import db
from ..errors import NoBusinessAccess
from ..models import Business, UserBusinessRole
from ..preferences import CURRENT_BUSINESS_KEY, PreferenceStore, cached_business_id


def can_access(user_id: int, business: Business) -> bool:
    if business.created_by_user == user_id:
        return True
    return db.session.get(UserBusinessRole, (user_id, business.id)) is not None


def resolve_current_business(user_id: int, store: PreferenceStore) -> "Business | None":
    """Pick the current business: cached choice, else oldest owned, else any assigned one.

    Resolutions that did not come from the cache are written back to the store.
    Returns None when the user has no business at all.
    """
    cached_id = cached_business_id(store)
    if cached_id is not None:
        business = db.session.get(Business, cached_id)
        if business is not None and can_access(user_id, business):
            return business
        current_app.logger.info("Cached business %s no longer resolves for user %s", cached_id, user_id)
        store.clear(CURRENT_BUSINESS_KEY)

    business = (
        Business.query.filter_by(created_by_user=user_id)
        .order_by(Business.created_at.asc(), Business.id.asc())
        .first()
    )
    if business is None:
        assignment = UserBusinessRole.query.filter_by(user_id=user_id).first()
        if assignment is not None:
            business = db.session.get(Business, assignment.business_id)
    if business is None:
        return None
    store.set(CURRENT_BUSINESS_KEY, business.id)
    return business


def resolve_role(user_id: int, business_id: int) -> str:
    """Effective role: admin for the owner, otherwise the stored assignment.

    Raises NoBusinessAccess when neither applies.
    """
    business = db.session.get(Business, business_id)
    if business is None:
        raise NoBusinessAccess(user_id, business_id)
    if business.created_by_user == user_id:
        return "admin"
    assignment = db.session.get(UserBusinessRole, (user_id, business_id))
    if assignment is None:
        raise NoBusinessAccess(user_id, business_id)
    return assignment.role


def accessible_businesses(user_id: int) -> list[Business]:
    assigned = db.session.query(UserBusinessRole.business_id).filter(UserBusinessRole.user_id == user_id)
    return (
        Business.query.filter(or_(Business.created_by_user == user_id, Business.id.in_(assigned)))
        .order_by(Business.business_name.asc(), Business.id.asc())
        .all()
    )


def select_business(user_id: int, business_id: int, store: PreferenceStore) -> Business:
    business = db.session.get(Business, business_id)
    if business is None or not can_access(user_id, business):
        raise NoBusinessAccess(user_id, business_id)
    store.set(CURRENT_BUSINESS_KEY, business.id)
    return business
