"""
Pytest fixtures for Distrack backend tests.

Provides test database setup, per-role users in two companies, product
factories and auth helpers.
"""

import pytest
from distrack import create_app
from distrack.extensions import db
from distrack.models import Distribution, Product
from distrack.services import auth_service
from distrack.time_utils import utcnow


PASSWORD = "secret1"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'STRICT_STOCK_LOCKING': False,
    })

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.drop_all()


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """Cheap hashes keep the suite fast; the algorithm is unchanged."""
    monkeypatch.setattr(auth_service, "BCRYPT_ROUNDS", 4)


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """
    Create fresh database for each test.

    The app context lives for the whole test, so flask.g is per test.
    """
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def make_user(company_name: str, user_id: str, role: str, name: str | None = None):
    return auth_service.register_user(
        company_name=company_name,
        user_id=user_id,
        password=PASSWORD,
        name=name or user_id.title(),
        role=role,
    )


@pytest.fixture(scope='function')
def manager_a(db_session):
    """Manager in company Acme (creates the company)."""
    return make_user("Acme", "mgr1", "manager", name="Maria Manager")


@pytest.fixture(scope='function')
def admin_a(db_session, manager_a):
    return make_user("Acme", "admin1", "admin", name="Ada Admin")


@pytest.fixture(scope='function')
def worker_a(db_session, manager_a):
    return make_user("Acme", "wrk1", "worker", name="Walt Worker")


@pytest.fixture(scope='function')
def manager_a2(db_session, manager_a):
    """Second manager in Acme, for distributed_by scoping."""
    return make_user("Acme", "mgr2", "manager", name="Mo Manager")


@pytest.fixture(scope='function')
def manager_b(db_session):
    """Manager in company Beta (second tenant)."""
    return make_user("Beta", "mgr1", "manager", name="Bea Manager")


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory: make_product(company_id, name, initial_quantity, category=None)."""
    def _make(company_id: int, name: str, initial_quantity: int, category: str | None = None) -> Product:
        product = Product(
            company_id=company_id,
            name=name,
            category=category,
            initial_quantity=initial_quantity,
        )
        db_session.add(product)
        db_session.commit()
        return product
    return _make


@pytest.fixture(scope='function')
def make_distribution(db_session):
    """
    Factory writing a Distribution row directly (bypasses the stock validator).

    Used to lay down history with explicit timestamps.
    """
    def _make(product: Product, user, worker_name: str, quantity: int, distributed_at=None,
              worker_gender: str | None = "male", worker_mobile: str | None = None) -> Distribution:
        row = Distribution(
            company_id=product.company_id,
            product_id=product.id,
            worker_name=worker_name,
            worker_gender=worker_gender,
            worker_mobile=worker_mobile,
            quantity=quantity,
            distributed_by_user_id=user.id,
            distributed_at=distributed_at or utcnow(),
        )
        db_session.add(row)
        db_session.commit()
        return row
    return _make


def get_auth_token(client, company_name: str, user_id: str, password: str = PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'company_name': company_name,
        'user_id': user_id,
        'password': password,
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def manager_headers(client, manager_a):
    return auth_headers(get_auth_token(client, "Acme", "mgr1"))


@pytest.fixture(scope='function')
def admin_headers(client, admin_a):
    return auth_headers(get_auth_token(client, "Acme", "admin1"))


@pytest.fixture(scope='function')
def worker_headers(client, worker_a):
    return auth_headers(get_auth_token(client, "Acme", "wrk1"))


@pytest.fixture(scope='function')
def manager_b_headers(client, manager_b):
    return auth_headers(get_auth_token(client, "Beta", "mgr1"))
