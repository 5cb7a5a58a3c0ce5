"""
Shared fixtures: an in-memory SQLite database per test, an authenticated
operator and a TestClient whose get_db dependency uses the same session.
"""

import os

os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["REDIS_URL"] = ""
os.environ["GEMINI_API_KEY"] = ""
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import bookkeeper.models  # noqa: F401
from bookkeeper.core.database import Base
from bookkeeper.core.dependencies import get_db
from bookkeeper.core.security import create_access_token
from bookkeeper.main import app
from bookkeeper.services import user_service

OPERATOR_MOBILE = "9000000001"
OPERATOR_PASSWORD = "secret123"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user(db):
    return user_service.create_user(db, mobile=OPERATOR_MOBILE, password=OPERATOR_PASSWORD, name="Owner")


@pytest.fixture
def auth_headers(user):
    token = create_access_token({"sub": user.user_id, "mobile": user.mobile})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def reauth():
    return {"mobile": OPERATOR_MOBILE, "password": OPERATOR_PASSWORD}


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
