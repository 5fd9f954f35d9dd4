"""
Pytest fixtures for StockPOS backend tests.

Provides test database setup, a store handle, item factories and a logged-in
test client.
"""

import pytest

from stockpos import create_app
from stockpos.extensions import db
from stockpos.services.auth_service import AuthGateway
from stockpos.services.inventory_service import InventoryLedger
from stockpos.services.order_service import OrderNumberGenerator, OrderProcessor
from stockpos.store import PersistentStore


ADMIN_EMAIL = "admin@test.local"
ADMIN_PASSWORD = "Password123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'LOW_STOCK_THRESHOLD': 10,
        'DEFAULT_ADMIN_USERNAME': 'admin',
        'DEFAULT_ADMIN_EMAIL': ADMIN_EMAIL,
        'DEFAULT_ADMIN_PASSWORD': ADMIN_PASSWORD,
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

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def store(db_session):
    return PersistentStore(db_session)


@pytest.fixture(scope='function')
def ledger(store):
    return InventoryLedger(store)


@pytest.fixture(scope='function')
def processor(store):
    return OrderProcessor(store, OrderNumberGenerator("TEST-"))


@pytest.fixture(scope='function')
def make_item(ledger):
    """Factory: add an item with sensible defaults, overridable per test."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        payload = {
            "name": f"Item {counter['n']}",
            "price": 2.5,
            "cost": 1.0,
            "quantity": 10,
            "min_stock": 0,
        }
        payload.update(overrides)
        return ledger.add_item(payload)

    return _make


@pytest.fixture(scope='function')
def admin_user(store):
    return AuthGateway(store).create_user("admin", ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture(scope='function')
def auth_client(client, admin_user):
    """Test client carrying a logged-in session cookie."""
    resp = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200, resp.get_json()
    return client
