import pytest

from orderexpress.app.models import format_role_label
from orderexpress.app.utils.display import (
    packaging_label,
    parse_delivery_days,
    password_strength,
    serialize_delivery_days,
    unit_price_label,
)


@pytest.mark.parametrize('raw,expected', [
    (None, []),
    ('', []),
    ('["Monday", "Wednesday"]', ['Monday', 'Wednesday']),
    ('fri, mon', ['Monday', 'Friday']),
    ('Tues. Thurs. Sat', ['Tuesday', 'Thursday', 'Saturday']),
    (['SUNDAY', 'monday', 'someday'], ['Monday', 'Sunday']),
    ('["mon", "mon"]', ['Monday']),
])
def test_parse_delivery_days(raw, expected):
    assert parse_delivery_days(raw) == expected


def test_serialize_delivery_days():
    assert serialize_delivery_days('wed,mon') == '["Monday", "Wednesday"]'
    assert serialize_delivery_days([]) is None
    assert serialize_delivery_days('nope') is None


@pytest.mark.parametrize('price,units,unit,expected', [
    ('24.00', 6, 'bottle', '$4.00 per bottle'),
    ('$30', '12', 'can', '$2.50 per can'),
    (10, 3, 'can(food)', '$3.33 per can'),
    ('99', 4, None, '$24.75 per unit'),
    ('24.00', 1, 'bottle', None),
    ('24.00', None, 'bottle', None),
    (None, 6, 'bottle', None),
    ('free', 6, 'bottle', None),
])
def test_unit_price_label(price, units, unit, expected):
    assert unit_price_label(price, units, unit) == expected


def test_packaging_label_variants():
    assert packaging_label('Acme', 6, '750', 'ml', 'bottle') == 'Acme / 6 x 750ml (bottles)'
    assert packaging_label('Acme', 24, '12', 'oz', 'box') == 'Acme / 24 x 12oz (boxes)'
    assert packaging_label('Acme', None, '750', 'ml', 'bottle') == 'Acme / 750ml(bottle)'
    assert packaging_label(None, None, None, 'L', None) == 'No vendor / L'
    assert packaging_label('Acme', 6, None, None, 'bottle') == 'Acme'


@pytest.mark.parametrize('password,expected', [
    (None, 0),
    ('', 0),
    ('abc', 20),
    ('abcdefgh', 40),
    ('Abcdefgh', 60),
    ('Abcdefg1', 80),
    ('Abcdef1!', 100),
])
def test_password_strength(password, expected):
    assert password_strength(password) == expected


def test_format_role_label():
    assert format_role_label('inventory_manager') == 'Inventory manager'
    assert format_role_label('admin') == 'Admin'
