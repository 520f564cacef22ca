"""
Pytest fixtures for PuantajPro backend tests.

Provides test database setup, users with live session tokens, a customer
fixture, and the test client.
"""

import pytest
from puantaj import create_app
from puantaj.extensions import db
from puantaj.models import Customer
from puantaj.services import auth_service, session_service
from puantaj.services.login_throttle_service import LoginThrottle


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'SESSION_SWEEP_INTERVAL_SECONDS': 0,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        # Throttle counters are process state; start every test clean
        app.extensions["login_throttle"] = LoginThrottle(
            max_failed_attempts=app.config["LOGIN_MAX_FAILED_ATTEMPTS"],
        )

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def user(db_session):
    """Regular user."""
    return auth_service.create_user("owner@puantaj.test", "Password123", first_name="Ayşe", last_name="Yılmaz")


@pytest.fixture(scope='function')
def other_user(db_session):
    """Second regular user, for ownership checks."""
    return auth_service.create_user("other@puantaj.test", "Password123")


@pytest.fixture(scope='function')
def admin_user(db_session):
    return auth_service.create_user("admin@puantaj.test", "Password123", role="ADMIN")


@pytest.fixture(scope='function')
def token(user):
    _, plaintext = session_service.create_session(user.id)
    return plaintext


@pytest.fixture(scope='function')
def headers(token):
    return auth_headers(token)


@pytest.fixture(scope='function')
def admin_headers(admin_user):
    _, plaintext = session_service.create_session(admin_user.id)
    return auth_headers(plaintext)


@pytest.fixture(scope='function')
def other_headers(other_user):
    _, plaintext = session_service.create_session(other_user.id)
    return auth_headers(plaintext)


@pytest.fixture(scope='function')
def customer(db_session, user):
    """Customer owned by `user`."""
    customer = Customer(user_id=user.id, name="Demir İnşaat", company="Demir Ltd.")
    db_session.add(customer)
    db_session.commit()
    return customer


def get_auth_token(client, email: str, password: str) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
