from __future__ import annotations
import smtplib
from email.message import EmailMessage

import requests
from flask import current_app

from .errors import EmailDeliveryError

RESEND_URL = "https://api.resend.com/emails"
BREVO_URL = "https://api.brevo.com/v3/smtp/email"


def send_email(subject: str, recipient: str, body: str, html: str | None = None) -> None:
    """Send a transactional email through the configured provider.

    Raises EmailDeliveryError carrying the provider's error text verbatim.
    """
    provider = current_app.config.get("EMAIL_PROVIDER", "smtp")
    if provider == "brevo":
        _send_brevo(subject, recipient, body, html)
    elif provider == "resend":
        _send_resend(subject, recipient, body, html)
    else:
        _send_smtp(subject, recipient, body, html)
    current_app.logger.info("Email '%s' sent to %s via %s", subject, recipient, provider)


def _post(url: str, headers: dict, payload: dict) -> None:
    try:
        resp = requests.post(url, headers=headers, json=payload, timeout=10)
    except requests.RequestException as exc:
        current_app.logger.exception("Email provider request failed")
        raise EmailDeliveryError(str(exc)) from exc
    if resp.status_code not in (200, 201, 202):
        current_app.logger.error("Email provider returned non-success: %s %s", resp.status_code, resp.text)
        raise EmailDeliveryError(resp.text or f"HTTP {resp.status_code}")


def _send_resend(subject: str, recipient: str, body: str, html: str | None) -> None:
    api_key = current_app.config.get("RESEND_API_KEY")
    if not api_key:
        raise EmailDeliveryError("RESEND_API_KEY not configured")
    payload = {
        "from": current_app.config.get("MAIL_DEFAULT_SENDER"),
        "to": [recipient],
        "subject": subject,
        "text": body,
    }
    if html:
        payload["html"] = html
    _post(RESEND_URL, {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}, payload)


def _send_brevo(subject: str, recipient: str, body: str, html: str | None) -> None:
    api_key = current_app.config.get("BREVO_API_KEY")
    if not api_key:
        raise EmailDeliveryError("BREVO_API_KEY not configured")
    payload = {
        "sender": {"email": current_app.config.get("MAIL_DEFAULT_SENDER")},
        "to": [{"email": recipient}],
        "subject": subject,
        "textContent": body,
    }
    if html:
        payload["htmlContent"] = html
    _post(BREVO_URL, {"api-key": api_key, "Content-Type": "application/json"}, payload)


def _send_smtp(subject: str, recipient: str, body: str, html: str | None) -> None:
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = current_app.config.get("MAIL_DEFAULT_SENDER")
    msg["To"] = recipient
    msg.set_content(body)
    if html:
        msg.add_alternative(html, subtype="html")
    try:
        mail_server: str = str(current_app.config.get("MAIL_SERVER"))
        mail_port: int = int(current_app.config.get("MAIL_PORT") or 0)
        with smtplib.SMTP(mail_server, mail_port, timeout=10) as server:
            if bool(current_app.config.get("MAIL_USE_TLS")):
                server.starttls()
            username = str(current_app.config.get("MAIL_USERNAME") or "")
            password = str(current_app.config.get("MAIL_PASSWORD") or "")
            if username and password:
                server.login(username, password)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as exc:
        current_app.logger.exception("Failed to send email via SMTP")
        raise EmailDeliveryError(str(exc)) from exc
