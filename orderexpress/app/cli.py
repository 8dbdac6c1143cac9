from __future__ import annotations

import click
from flask import current_app

from .models import INVITATION_PENDING, Invitation


@click.group("invites")
def invites_cli():
    """Staff invitation maintenance."""
    pass


@invites_cli.command("list-pending")
def list_pending():
    """Print pending invitations, oldest first."""
    rows = (
        Invitation.query.filter_by(status=INVITATION_PENDING)
        .order_by(Invitation.invited_at.asc(), Invitation.id.asc())
        .all()
    )
    for inv in rows:
        expires = inv.expires_at.isoformat() if inv.expires_at else "never"
        state = "expired" if inv.is_expired() else "open"
        click.echo(f"{inv.id}\t{inv.business_id}\t{inv.email}\t{inv.role}\t{state}\texpires={expires}")
    if not rows:
        click.echo("No pending invitations.")


@invites_cli.command("purge-expired")
def purge_expired():
    """Delete pending invitations whose expiry has passed."""
    from .invitations.service import purge_expired_invitations

    count = purge_expired_invitations()
    current_app.logger.info("purge-expired: removed %s invitations", count)
    click.echo(f"Removed {count} expired invitations.")
