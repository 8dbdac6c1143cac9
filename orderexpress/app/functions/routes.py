"""JSON endpoints called by the browser for privileged invitation steps.

Both take a JSON body and answer ``{"success": true}`` or ``{"error": ...}``.
"""
from __future__ import annotations
from flask import Blueprint, jsonify, request, current_app
from flask_login import current_user, login_required
from sqlalchemy.exc import SQLAlchemyError

from ..errors import EmailDeliveryError, InvitationError
from ..invitations import service
from ..mail import send_email

functions_bp = Blueprint("functions", __name__)


def _json_body():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return None
    return payload


def _non_string(payload: dict, *keys: str):
    for key in keys:
        value = payload.get(key)
        if value is not None and not isinstance(value, str):
            return key
    return None


@functions_bp.route("/accept-invite", methods=["POST"])
def accept_invite():
    payload = _json_body()
    if payload is None:
        return jsonify({"error": "Empty or invalid JSON body"}), 400
    token = payload.get("token")
    email = payload.get("email")
    password = payload.get("password")
    if not token or not email or not password:
        return jsonify({"error": "Missing token, email, or password"}), 400
    bad = _non_string(payload, "token", "email", "password", "first_name", "last_name")
    if bad:
        return jsonify({"error": f"'{bad}' must be a string"}), 400
    acting = current_user._get_current_object() if current_user.is_authenticated else None
    try:
        service.accept_invitation(
            token,
            email,
            password=password,
            first_name=payload.get("first_name"),
            last_name=payload.get("last_name"),
            acting_user=acting,
        )
    except InvitationError as exc:
        return jsonify(exc.to_dict()), exc.status
    except SQLAlchemyError as exc:
        return jsonify({"error": str(exc.orig) if getattr(exc, "orig", None) else str(exc)}), 400
    return jsonify({"success": True})


@functions_bp.route("/send-invite-email", methods=["POST"])
@login_required
def send_invite_email():
    payload = _json_body() or {}
    to = payload.get("to")
    subject = payload.get("subject")
    html = payload.get("html")
    if not to or not subject or not html:
        return jsonify({"error": "Missing 'to', 'subject', or 'html'."}), 400
    bad = _non_string(payload, "to", "subject", "html", "text")
    if bad:
        return jsonify({"error": f"'{bad}' must be a string"}), 400
    try:
        send_email(subject, to, payload.get("text") or "", html)
    except EmailDeliveryError as exc:
        current_app.logger.error("send-invite-email failed for %s: %s", to, exc)
        return jsonify({"error": str(exc)}), 500
    return jsonify({"success": True})
