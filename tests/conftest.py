from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from dashquery.database import Base, SQLStore, enable_sqlite_savepoints
from dashquery.models.dashboard import Dashboard
from dashquery.services.auth import SignedInUser
import dashquery.models  # noqa: F401


@pytest.fixture(scope="function")
def sync_engine() -> Generator[Engine, None, None]:
    """Create sync test database engine."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def store(sync_engine) -> SQLStore:
    return SQLStore(sync_engine)


@pytest.fixture
def signed_in_user() -> SignedInUser:
    return SignedInUser(user_id=1, org_id=1, login="viewer")


@pytest.fixture
def other_user() -> SignedInUser:
    return SignedInUser(user_id=2, org_id=1, login="editor")


@pytest.fixture
def dashboard_document():
    """Dashboard document with a single timeseries panel (id 2)."""
    return {
        "editable": True,
        "panels": [
            {
                "gridPos": {"h": 9, "w": 12, "x": 0, "y": 0},
                "id": 2,
                "title": "Panel Title",
                "type": "timeseries",
            }
        ],
        "schemaVersion": 35,
        "title": "New dashboard",
        "version": 0,
    }


def create_dashboard(store: SQLStore, **overrides) -> Dashboard:
    """Insert a dashboard row with default values."""
    defaults = {
        "org_id": 1,
        "uid": "1",
        "title": "New dashboard",
        "data": {"panels": [{"id": 2}]},
    }
    defaults.update(overrides)
    dashboard = Dashboard(**defaults)
    with store.with_transaction() as session:
        session.add(dashboard)
    return dashboard


@pytest.fixture
def make_dashboard(store):
    def _make(**overrides) -> Dashboard:
        return create_dashboard(store, **overrides)
    return _make
