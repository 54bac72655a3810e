"""
Shared fixtures: an in-memory SQLite database built from the ORM models,
a token service with a test secret, and a TestClient wired to both.
"""
import itertools
import os
import tempfile
from datetime import datetime, timedelta

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')
os.environ.setdefault('PASSWORD_HASH_ROUNDS', '1000')
os.environ.setdefault('UPLOAD_DIR', tempfile.mkdtemp(prefix='assignment-uploads-'))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from backend.auth.jwt_handler import TokenService, get_token_service  # noqa: E402
from backend.database import Base, enable_sqlite_foreign_keys, get_db  # noqa: E402
from backend.main import app  # noqa: E402
from backend.models.assignment import Assignment  # noqa: E402
from backend.models.submission import Submission  # noqa: E402
from backend.models.user import User  # noqa: E402

TEST_TABLES = [User.__table__, Assignment.__table__, Submission.__table__]


@pytest.fixture
def engine():
    test_engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(test_engine)
    Base.metadata.create_all(bind=test_engine, tables=TEST_TABLES)
    try:
        yield test_engine
    finally:
        Base.metadata.drop_all(bind=test_engine, tables=list(reversed(TEST_TABLES)))
        test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def token_service():
    return TokenService(secret_key='test-secret', algorithm='HS256', expires_minutes=60)


@pytest.fixture
def client(session_factory, token_service):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_service] = lambda: token_service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def ticking_clock(monkeypatch):
    """Make submission timestamps strictly increasing, one second apart."""
    start = datetime(2026, 1, 5, 9, 0)
    ticks = itertools.count()
    monkeypatch.setattr(
        'backend.repositories.assignments.utc_now',
        lambda: start + timedelta(seconds=next(ticks)),
    )


@pytest.fixture
def signup(client):
    def _signup(email: str, role: str, name: str = 'Test User', password: str = 'secret-password') -> dict:
        response = client.post(
            '/api/signup',
            json={'email': email, 'password': password, 'role': role, 'name': name},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _signup