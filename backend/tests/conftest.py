"""
Pytest fixtures for MyHouz backend tests.

Provides test database setup, seller/customer accounts, bearer tokens, and
the test client.
"""

import pytest
from myhouz import create_app
from myhouz.extensions import db
from myhouz.models import User
from myhouz.services.auth_service import hash_password
from myhouz.services.session_service import create_session


PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
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


@pytest.fixture(scope='session')
def password_hash():
    """bcrypt is deliberately slow: hash the shared test password once."""
    return hash_password(PASSWORD)


def _make_user(db_session, password_hash, email, first_name, last_name, user_type):
    user = User(
        email=email,
        password_hash=password_hash,
        first_name=first_name,
        last_name=last_name,
        user_type=user_type,
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def seller(db_session, password_hash):
    """Professional account that owns registers, loyalty programs and suppliers."""
    return _make_user(db_session, password_hash, "seller@myhouz.test", "Sam", "Seller", "professional")


@pytest.fixture(scope='function')
def other_seller(db_session, password_hash):
    """Second professional, used to prove per-seller isolation."""
    return _make_user(db_session, password_hash, "other@myhouz.test", "Olga", "Other", "professional")


@pytest.fixture(scope='function')
def customer(db_session, password_hash):
    """Individual account: writes reviews, curates ideabooks."""
    return _make_user(db_session, password_hash, "customer@myhouz.test", "Cleo", "Customer", "individual")


@pytest.fixture(scope='function')
def friend(db_session, password_hash):
    """Second individual, invited as an ideabook collaborator."""
    return _make_user(db_session, password_hash, "friend@myhouz.test", "Fred", "Friend", "individual")


def auth_headers(user) -> dict:
    """Open a session for the user and return the Authorization header."""
    _, token = create_session(user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope='function')
def seller_headers(seller):
    return auth_headers(seller)


@pytest.fixture(scope='function')
def customer_headers(customer):
    return auth_headers(customer)
