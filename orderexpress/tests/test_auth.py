import re

from orderexpress.app import db
from orderexpress.app.errors import EmailDeliveryError
from orderexpress.app.models import User


def _confirm_path(outbox):
    match = re.search(r"http://localhost(/confirm/\S+)", outbox[-1]["body"])
    assert match, outbox[-1]["body"]
    return match.group(1)


def test_register_confirm_and_login(client, app, outbox):
    rv = client.post('/register', data={
        'first_name': 'Tess', 'last_name': 'Ter', 'email': 't@example.com', 'password': 'secret123'
    }, follow_redirects=True)
    assert rv.status_code == 200
    assert len(outbox) == 1
    assert outbox[0]["to"] == 't@example.com'
    assert outbox[0]["subject"] == "[OrderExpress] Confirm your email"

    # unconfirmed accounts cannot log in yet
    client.post('/login', data={'email': 't@example.com', 'password': 'secret123'}, follow_redirects=True)
    with client.session_transaction() as sess:
        assert '_user_id' not in sess

    rv = client.get(_confirm_path(outbox), follow_redirects=True)
    assert rv.status_code == 200
    user = User.query.filter_by(email='t@example.com').first()
    assert user.confirmed is True
    assert user.display_name == 'Tess Ter'

    rv = client.post('/login', data={'email': 't@example.com', 'password': 'secret123'})
    assert rv.status_code == 302
    with client.session_transaction() as sess:
        assert sess.get('_user_id') == str(user.id)


def test_register_is_not_stored_when_email_fails(client, app, monkeypatch):
    def broken(*args, **kwargs):
        raise EmailDeliveryError("provider down")

    monkeypatch.setattr('orderexpress.app.auth.routes.send_email', broken)
    rv = client.post('/register', data={'email': 'x@example.com', 'password': 'secret123'}, follow_redirects=True)
    assert rv.status_code == 200
    assert b'Could not send the confirmation email' in rv.data
    assert User.query.filter_by(email='x@example.com').first() is None


def test_register_duplicate_email_is_case_insensitive(client, app, factories):
    factories.user('dup@example.com')
    rv = client.post('/register', data={'email': 'DUP@example.com', 'password': 'secret123'}, follow_redirects=True)
    assert b'already registered' in rv.data
    assert User.query.count() == 1


def test_login_resists_sql_injection(client, app, factories):
    factories.user('sql@example.com', password='safePass123')
    payload = "' OR '1'='1"
    client.post('/login', data={'email': payload, 'password': 'doesnotmatter'}, follow_redirects=True)
    with client.session_transaction() as sess:
        assert '_user_id' not in sess

    rv = factories.login(client, 'sql@example.com', 'safePass123')
    assert rv.status_code == 200
    with client.session_transaction() as sess:
        assert '_user_id' in sess


def test_login_without_business_goes_to_create_business(client, app, factories):
    factories.user('new@example.com')
    rv = client.post('/login', data={'email': 'new@example.com', 'password': 'pw123456'}, follow_redirects=True)
    assert rv.status_code == 200
    assert rv.request.path == '/businesses/create'


def test_create_business_makes_owner_admin(client, app, factories):
    user = factories.user('founder@example.com')
    factories.login(client, 'founder@example.com')
    rv = client.post('/businesses/create', data={
        'business_name': 'Harbor Tavern',
        'address1': '12 Dock Rd',
        'city': 'Portsmouth',
        'zip': '03801',
    }, follow_redirects=True)
    assert rv.status_code == 200
    assert rv.request.path == '/dashboard/overview'
    assert b'Harbor Tavern' in rv.data

    from orderexpress.app.models import Business, UserBusinessRole
    biz = Business.query.filter_by(business_name='Harbor Tavern').first()
    assert biz.created_by_user == user.id
    assert biz.business_address == '12 Dock Rd, Portsmouth, 03801'
    role = db.session.get(UserBusinessRole, (user.id, biz.id))
    assert role.role == 'admin'
    with client.session_transaction() as sess:
        assert sess.get('oe_current_business_id') == biz.id
