"""
Pytest fixtures for homestock backend tests.

Provides an in-memory database, per-test table wipe, households seeded from
presets, and a small location builder.
"""

import pytest
from homestock import create_app
from homestock.extensions import db
from homestock.models import Household
from homestock.services import household_service, location_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'AUTO_NUMBER_RETRY_ATTEMPTS': 3,
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
def household(db_session):
    """Household on a copy of the standard preset."""
    return household_service.create_household("Hjemme", preset="standard")


@pytest.fixture(scope='function')
def other_household(db_session):
    """Second household, used to prove scope isolation."""
    return household_service.create_household("Hytta", preset="standard")


@pytest.fixture(scope='function')
def kitchen(household):
    return location_service.create_location(household.id, "ROOM", name="Kjøkken")


@pytest.fixture(scope='function')
def cabinet(household, kitchen):
    return location_service.create_location(household.id, "CABINET", parent_id=kitchen.id)


@pytest.fixture(scope='function')
def make_location(household):
    """Create a location in the default household: make_location("SHELF", parent)."""
    def _make(location_type, parent=None, name=None):
        return location_service.create_location(
            household.id,
            location_type,
            parent_id=parent.id if parent is not None else None,
            name=name,
        )
    return _make
