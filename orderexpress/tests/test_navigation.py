import pytest

from orderexpress.app.dashboard.navigation import (
    ROLE_SECTIONS,
    allowed_sections,
    gate_section,
    is_section_allowed,
    menu_for,
)


def test_role_section_table():
    assert allowed_sections('admin') == ('overview', 'products', 'inventory', 'ordering', 'analytics')
    assert allowed_sections('inventory_manager') == ('products', 'inventory')
    assert allowed_sections('ordering_manager') == ('products', 'ordering')
    assert allowed_sections('sales_manager') == ('analytics',)


def test_unknown_role_is_rejected():
    with pytest.raises(ValueError):
        allowed_sections('bartender')


@pytest.mark.parametrize('role', sorted(ROLE_SECTIONS))
def test_gate_always_lands_on_an_allowed_section(role):
    for requested in (None, '', 'overview', 'products', 'inventory', 'ordering', 'analytics', 'bogus'):
        section = gate_section(role, requested)
        assert is_section_allowed(role, section)
        if requested in allowed_sections(role):
            assert section == requested
        else:
            assert section == allowed_sections(role)[0]


def test_settings_is_open_to_every_role():
    for role in ROLE_SECTIONS:
        assert is_section_allowed(role, 'settings')
        assert gate_section(role, 'settings') == 'settings'
        assert menu_for(role)[-1] == ('settings', 'Settings')


def test_sales_manager_is_sent_to_analytics():
    assert gate_section('sales_manager', 'products') == 'analytics'
    assert menu_for('sales_manager') == [('analytics', 'Analytics'), ('settings', 'Settings')]


def test_dashboard_redirects_to_allowed_section(client, app, business, factories):
    staff = factories.user('sales@example.com')
    factories.assign(staff, business, 'sales_manager')
    factories.login(client, 'sales@example.com')

    rv = client.get('/dashboard/overview')
    assert rv.status_code == 302
    assert rv.headers['Location'].endswith('/dashboard/analytics')

    rv = client.get('/dashboard/analytics')
    assert rv.status_code == 200
    assert b'Analytics' in rv.data
    assert b'/dashboard/products' not in rv.data

    assert client.get('/dashboard/nowhere').status_code == 404


def test_sidebar_toggle_is_remembered(client, app, owner, business, factories):
    factories.login(client, owner.email)
    client.post('/dashboard/sidebar')
    with client.session_transaction() as sess:
        assert sess.get('oe_sidebar_collapsed') is True
    rv = client.get('/dashboard/overview')
    assert b'sidebar-collapsed' in rv.data


def test_switch_business_from_dashboard(client, app, owner, business, factories):
    second = factories.business(owner.id, 'Second Spot')
    factories.login(client, owner.email)
    rv = client.post(f'/dashboard/businesses/{second.id}/select', follow_redirects=True)
    assert rv.status_code == 200
    assert b'Switched to Second Spot' in rv.data
    with client.session_transaction() as sess:
        assert sess.get('oe_current_business_id') == second.id

    stranger = factories.user('stranger@example.com')
    theirs = factories.business(stranger.id, 'Elsewhere')
    rv = client.post(f'/dashboard/businesses/{theirs.id}/select', follow_redirects=True)
    assert b'You do not have access to that business.' in rv.data
    with client.session_transaction() as sess:
        assert sess.get('oe_current_business_id') == second.id
