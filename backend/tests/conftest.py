"""
Pytest fixtures for Storefront backend tests.

Provides test database setup, role-specific users with tokens, products,
a captured mail outbox, and the Flask test client.
"""

from decimal import Decimal

import pytest

from storefront import create_app
from storefront.extensions import db
from storefront.models import Product, User
from storefront.roles import Role
from storefront.services import mail_service
from storefront.services.auth_service import hash_password
from storefront.services.token_service import issue_token

TEST_PASSWORD = "Password123!"

TEST_CONFIG = {
    'TESTING': True,
    'APP_ENV': 'test',
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    'JWT_SECRET_KEY': 'test-jwt-secret-key-that-is-long-enough-for-hs256',
    'BCRYPT_ROUNDS': 4,
    'RESEND_API_KEY': '',
    'FRONTEND_URL': 'http://shop.test',
    'CORS_ALLOWED_ORIGINS': ['http://shop.test'],
}


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TEST_CONFIG)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def cli_runner(app):
    return app.test_cli_runner()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def outbox(monkeypatch):
    """Capture outbound email instead of calling the provider."""
    sent = []

    def fake_send_email(to, subject, body):
        sent.append({'to': to, 'subject': subject, 'body': body})
        return True

    monkeypatch.setattr(mail_service, 'send_email', fake_send_email)
    return sent


def make_user(db_session, username: str, role: Role = Role.USER, password: str = TEST_PASSWORD) -> User:
    user = User(
        username=username,
        email=f"{username}@storefront.test",
        password_hash=hash_password(password),
        role=role,
    )
    db_session.add(user)
    db_session.commit()
    return user


def make_product(db_session, name: str = "Widget", price: str = "10.00", stock: int = 10, **kwargs) -> Product:
    product = Product(name=name, price=Decimal(price), stock=stock, **kwargs)
    db_session.add(product)
    db_session.commit()
    return product


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def superuser(db_session):
    return make_user(db_session, "root", Role.SUPERUSER)


@pytest.fixture(scope='function')
def admin(db_session):
    return make_user(db_session, "manager", Role.ADMIN)


@pytest.fixture(scope='function')
def user(db_session):
    return make_user(db_session, "alice")


@pytest.fixture(scope='function')
def other_user(db_session):
    return make_user(db_session, "bob")


@pytest.fixture(scope='function')
def superuser_headers(superuser):
    return auth_headers(issue_token(superuser.id))


@pytest.fixture(scope='function')
def admin_headers(admin):
    return auth_headers(issue_token(admin.id))


@pytest.fixture(scope='function')
def user_headers(user):
    return auth_headers(issue_token(user.id))


@pytest.fixture(scope='function')
def other_user_headers(other_user):
    return auth_headers(issue_token(other_user.id))


@pytest.fixture(scope='function')
def product(db_session):
    return make_product(db_session, name="Coffee Beans", price="12.50", stock=5, category="pantry")
