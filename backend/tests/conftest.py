"""
Pytest fixtures for ShopDesk backend tests.

Provides test database setup, accounts with tokens, inventory factories
and the test client.
"""

from decimal import Decimal

import pytest

from shopdesk import create_app
from shopdesk.config import TestConfig
from shopdesk.extensions import db
from shopdesk.models import ActiveItem, OnHoldItem
from shopdesk.models.auth import ROLE_ADMIN, ROLE_EMPLOYEE
from shopdesk.models.inventory import STATUS_PENDING
from shopdesk.services import get_services

ADMIN_USERNAME = "admin@shop.local"
ADMIN_PASSWORD = "Admin123!"
EMPLOYEE_USERNAME = "employee@shop.local"
EMPLOYEE_PASSWORD = "Employee123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

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

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def services(db_session):
    return get_services()


@pytest.fixture(scope='function')
def admin_user(services):
    user = services.access.create_user(ADMIN_USERNAME, ADMIN_PASSWORD, ROLE_ADMIN, is_approved=True)
    db.session.commit()
    return user


@pytest.fixture(scope='function')
def employee_user(services):
    user = services.access.create_user(EMPLOYEE_USERNAME, EMPLOYEE_PASSWORD, ROLE_EMPLOYEE, is_approved=True)
    db.session.commit()
    return user


@pytest.fixture(scope='function')
def admin_headers(client, admin_user):
    return auth_headers(get_auth_token(client, ADMIN_USERNAME, ADMIN_PASSWORD))


@pytest.fixture(scope='function')
def employee_headers(client, employee_user):
    return auth_headers(get_auth_token(client, EMPLOYEE_USERNAME, EMPLOYEE_PASSWORD))


@pytest.fixture(scope='function')
def make_active_item(db_session, admin_user):
    """Factory for sellable items, bypassing the approval queue."""
    counter = {"n": 0}

    def _make(unique_code=None, *, name="Item", price="100.00", quantity=1,
              is_taxable=False, tags=None, brand=None):
        counter["n"] += 1
        item = ActiveItem(
            unique_code=unique_code or f"TEST_{counter['n']:04d}",
            name=name,
            price=Decimal(price),
            tags=tags or [],
            brand=brand,
            quantity=quantity,
            is_taxable=is_taxable,
            added_by_user_id=admin_user.id,
            approved_by_user_id=admin_user.id,
        )
        db_session.add(item)
        db_session.commit()
        return item

    return _make


@pytest.fixture(scope='function')
def make_on_hold_item(db_session, employee_user):
    """Factory for staged items with an explicit unique code."""

    def _make(unique_code, *, name="Staged", price="25.00", quantity=1, status=STATUS_PENDING):
        item = OnHoldItem(
            unique_code=unique_code,
            name=name,
            price=Decimal(price),
            tags=[],
            quantity=quantity,
            is_taxable=False,
            added_by_user_id=employee_user.id,
            status=status,
        )
        db_session.add(item)
        db_session.commit()
        return item

    return _make


def get_auth_token(client, username: str, password: str) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
