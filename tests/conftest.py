"""
Fixtures comunes: base SQLite en memoria, reloj fijo y cliente HTTP.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.config.database import create_db_engine, create_session_factory, init_db
from app.config.settings import Settings
from app.core.auth.security import create_access_token
from app.main import create_app
from app.modules.pvz.repository import PVZRepository
from app.modules.pvz.service import PVZService
from app.shared.clock import FixedClock

T0 = datetime(2025, 4, 20, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = create_session_factory(engine)()
    yield session
    session.close()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(T0, step=timedelta(seconds=1))


@pytest.fixture
def repository(db, clock) -> PVZRepository:
    return PVZRepository(db, clock)


@pytest.fixture
def service(db, clock) -> PVZService:
    return PVZService(db, clock)


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url="sqlite://", secret_key="test-secret", _env_file=None)


@pytest.fixture
def client(settings, clock):
    app = create_app(settings, clock)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(settings):
    def _headers(role: str) -> dict:
        token = create_access_token(role, None, settings)
        return {"Authorization": f"Bearer {token}"}

    return _headers
