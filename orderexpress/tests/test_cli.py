from datetime import datetime, timedelta

from orderexpress.app.invitations import service
from orderexpress.app.models import Invitation


def test_list_pending_and_purge(app, owner, business):
    runner = app.test_cli_runner()
    result = runner.invoke(args=['invites', 'list-pending'])
    assert result.exit_code == 0
    assert 'No pending invitations.' in result.output

    past = datetime.utcnow() - timedelta(hours=1)
    service.invite_user(business, owner, 'late@example.com', 'sales_manager', lambda t: t, expires_at=past)
    service.invite_user(business, owner, 'ok@example.com', 'inventory_manager', lambda t: t)

    result = runner.invoke(args=['invites', 'list-pending'])
    lines = result.output.strip().splitlines()
    assert len(lines) == 2
    assert 'late@example.com\tsales_manager\texpired' in lines[0]
    assert 'ok@example.com\tinventory_manager\topen\texpires=never' in lines[1]

    result = runner.invoke(args=['invites', 'purge-expired'])
    assert result.exit_code == 0
    assert 'Removed 1 expired invitations.' in result.output
    assert [i.email for i in Invitation.query.all()] == ['ok@example.com']
