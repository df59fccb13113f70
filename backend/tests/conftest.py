from __future__ import annotations

import os
import sys
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

# Settings and the default engine are built at import time.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"
os.environ["JWT_SECRET"] = "test-secret-key-for-watched"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["GEMINI_API_KEY"] = "test-gemini-key"
os.environ["OMDB_API_KEY"] = "test-omdb-key"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import watched.models  # noqa: E402,F401
from watched.core.security import create_access_token, hash_password  # noqa: E402
from watched.db.base import Base  # noqa: E402
from watched.db.session import enable_sqlite_foreign_keys, get_db  # noqa: E402
from watched.main import app as fastapi_app  # noqa: E402
from watched.models.movie import Movie  # noqa: E402
from watched.models.user import User  # noqa: E402

engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client():
    fastapi_app.dependency_overrides[get_db] = override_get_db
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()


def bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.username)}"}


@pytest.fixture()
def auth_header():
    return bearer


@pytest.fixture()
def make_user(db_session):
    def _make(username: str, *, password: str = "password123", is_admin: bool = False) -> User:
        user = User(
            username=username,
            password_hash=hash_password(password),
            is_admin=is_admin,
            email=f"{username.lower()}@example.com",
            full_name=username.title(),
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def make_movie(db_session):
    def _make(title: str = "Inception", **fields) -> Movie:
        movie = Movie(title=title, year=fields.pop("year", "2010"), genre=fields.pop("genre", "Sci-Fi"), **fields)
        db_session.add(movie)
        db_session.commit()
        db_session.refresh(movie)
        return movie

    return _make
