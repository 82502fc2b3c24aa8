"""Pytest configuration and fixtures."""

import os
from datetime import UTC, datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from reading_api.database import Base, get_db
from reading_api.main import app
from reading_api.models import Category, Story, User
from reading_api.services.auth import create_access_token


class AuthHeaders(dict):
    """Dict subclass that also stores user_id."""

    def __init__(self, *args, user_id: int | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace(
        "/story_reading", "/story_reading_test"
    )
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_user(db, email: str, username: str, role: str = "USER") -> User:
    user = User(email=email, username=username, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def headers_for(user: User) -> AuthHeaders:
    token = create_access_token(user.id, user.email)
    return AuthHeaders({"Authorization": f"Bearer {token}"}, user_id=user.id)


@pytest.fixture
def reader(db):
    return create_user(db, "reader@example.com", "reader")


@pytest.fixture
def auth_headers(reader):
    """Auth headers for the default reader."""
    return headers_for(reader)


@pytest.fixture
def other_headers(db):
    """Auth headers for a second reader."""
    return headers_for(create_user(db, "other@example.com", "other"))


@pytest.fixture
def admin_headers(db):
    return headers_for(create_user(db, "admin@example.com", "admin", role="ADMIN"))


@pytest.fixture
def category(db):
    category = Category(slug="folk-tales", name={"en": "Folk Tales", "tr": "Halk Masalları"})
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@pytest.fixture
def make_story(db):
    """Factory for stories; published unless told otherwise."""
    counter = {"n": 0}

    def _make(status: str = "PUBLISHED", categories=None, deleted: bool = False) -> Story:
        counter["n"] += 1
        story = Story(
            slug=f"story-{counter['n']}",
            title={"en": f"Story {counter['n']}", "tr": f"Hikaye {counter['n']}"},
            status=status,
            published_at=datetime.now(UTC) if status == "PUBLISHED" else None,
            rating_count=0,
            deleted_at=datetime.now(UTC) if deleted else None,
        )
        story.categories = list(categories or [])
        db.add(story)
        db.commit()
        db.refresh(story)
        return story

    return _make


@pytest.fixture
def story(make_story, category):
    return make_story(categories=[category])


@pytest.fixture
def draft_story(make_story):
    return make_story(status="DRAFT")


@pytest.fixture
def make_user(db):
    """Factory for extra readers."""

    def _make(email: str, username: str, role: str = "USER") -> User:
        return create_user(db, email, username, role)

    return _make
