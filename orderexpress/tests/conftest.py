import sys
import os
import pytest

# ensure repository root is on sys.path so `orderexpress` package can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# Ensure tests have a DATABASE_URL so importing app.config doesn't raise
os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')
from orderexpress.app import create_app, db
from orderexpress.app.config import Config
from orderexpress.app.businesses.routes import create_business
from orderexpress.app.models import User, UserBusinessRole


# Config declares its attributes Final, so the test config is a standalone class
# instead of a subclass that redeclares them.
class TestConfig:
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    WTF_CSRF_ENABLED = False
    SECRET_KEY = getattr(Config, "SECRET_KEY", "test-secret")
    SECURITY_PASSWORD_SALT = "test-salt"
    APP_NAME = "OrderExpress"
    LANGUAGES = ("en", "es")
    MAIL_DEFAULT_SENDER = "no-reply@example.com"
    EMAIL_PROVIDER = "smtp"
    INVITE_EXPIRATION_HOURS = 0
    SERVER_NAME = "localhost"


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    """Capture outgoing email instead of talking to a provider."""
    sent = []

    def fake_send(subject, recipient, body, html=None):
        sent.append({"subject": subject, "to": recipient, "body": body, "html": html})

    monkeypatch.setattr('orderexpress.app.auth.routes.send_email', fake_send)
    monkeypatch.setattr('orderexpress.app.invitations.service.send_email', fake_send)
    monkeypatch.setattr('orderexpress.app.functions.routes.send_email', fake_send)
    return sent


def create_user(email, password='pw123456', confirmed=True, first_name=None, last_name=None):
    u = User(email=email, first_name=first_name, last_name=last_name, confirmed=confirmed)
    u.set_password(password)
    db.session.add(u)
    db.session.commit()
    return u


def assign_role(user, business, role):
    db.session.add(UserBusinessRole(user_id=user.id, business_id=business.id, role=role))
    db.session.commit()


def login(client, email, password='pw123456'):
    return client.post('/login', data={'email': email, 'password': password}, follow_redirects=True)


@pytest.fixture
def owner(app):
    return create_user('owner@example.com', first_name='Olivia', last_name='Owner')


@pytest.fixture
def business(owner):
    return create_business(owner.id, 'Corner Bar', '1 Main St, Springfield')


@pytest.fixture
def factories():
    """Helpers for building users, businesses and sessions inside a test."""

    class Factories:
        user = staticmethod(create_user)
        business = staticmethod(create_business)
        assign = staticmethod(assign_role)
        login = staticmethod(login)

    return Factories
