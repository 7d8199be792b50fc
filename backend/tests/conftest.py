"""
Pytest configuration and fixtures for backend tests.
"""

import os
import sys
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Scratch space for the database file and uploads used at import time
TEST_DATA_DIR = Path(tempfile.mkdtemp(prefix="civiclens-tests-"))

# Set test environment variables before importing config
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["REFRESH_TOKEN_SECRET"] = "test-refresh-secret-for-testing-only"
os.environ["CORS_ORIGINS"] = '["http://localhost:3000"]'
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DATA_DIR / 'startup.db'}"
os.environ["UPLOAD_DIR"] = str(TEST_DATA_DIR / "uploads")
os.environ["DB_CONNECT_RETRIES"] = "1"

from authentication.auth import create_access_token, get_password_hash  # noqa: E402
from models.config import settings  # noqa: E402
from repositories.database import (  # noqa: E402
    DatabaseHandle,
    create_db_engine,
    get_db,
    get_session_factory,
    get_store,
)
import repositories.db_models as db_models  # noqa: E402


@pytest.fixture(scope="function")
def store(tmp_path):
    """A fresh SQLite database file per test.

    File-backed (not in-memory) so the search fan-out threads, which open
    their own connections, see the same data as the test session.
    """
    handle = DatabaseHandle(create_db_engine(f"sqlite:///{tmp_path / 'test.db'}"))
    handle.create_schema()
    try:
        yield handle
    finally:
        handle.drop_schema()
        handle.dispose()


@pytest.fixture(scope="function")
def db_session(store):
    """Create a database session for each test."""
    session = store.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def db(db_session):
    """Alias for db_session."""
    return db_session


@pytest.fixture(scope="function")
def upload_dir(tmp_path, monkeypatch) -> Path:
    """Point uploads at a per-test directory."""
    directory = tmp_path / "uploads"
    directory.mkdir()
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(directory))
    return directory


@pytest.fixture(scope="function")
def client(store, db_session, upload_dir):
    """Create a test client wired to the per-test database."""
    from main import app
    from helpers.rate_limiter import limiter

    # Reset rate limiter storage before each test to prevent rate limit errors
    limiter.reset()

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: store.session_factory
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_user(
    db_session,
    name: str,
    username: str,
    email: str,
    password: str = "password123",
    is_admin: bool = False,
) -> db_models.User:
    user = db_models.User(
        name=name,
        username=username,
        email=email,
        hashed_password=get_password_hash(password),
        is_admin=is_admin,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def test_user(db_session) -> db_models.User:
    """Create a test user."""
    return make_user(
        db_session, "Test User", "testuser", "test@example.com", "testpassword123"
    )


@pytest.fixture
def other_user(db_session) -> db_models.User:
    """Create another test user (for interaction tests)."""
    return make_user(
        db_session, "Other User", "otheruser", "other@example.com", "otherpassword123"
    )


@pytest.fixture
def admin_user(db_session) -> db_models.User:
    """Create an admin user."""
    return make_user(
        db_session,
        "Admin User",
        "adminuser",
        "admin@example.com",
        "adminpassword123",
        is_admin=True,
    )


@pytest.fixture
def user_factory(db_session):
    """Factory fixture to create extra users."""

    def _create_user(name: str, username: str, email: str, **kwargs) -> db_models.User:
        return make_user(db_session, name, username, email, **kwargs)

    return _create_user


@pytest.fixture
def test_post(db_session, test_user) -> db_models.Post:
    """Create a post authored by test_user."""
    post = db_models.Post(
        title="Pothole on Elm Street",
        description="A deep pothole near the school crossing is damaging cars.",
        category=db_models.PostCategory.TRAFFIC,
        author_id=test_user.id,
    )
    db_session.add(post)
    db_session.commit()
    db_session.refresh(post)
    return post


@pytest.fixture
def test_comment(db_session, test_post, other_user) -> db_models.Comment:
    """Create a comment by other_user on test_post (counter kept in step)."""
    comment = db_models.Comment(
        post_id=test_post.id,
        author_id=other_user.id,
        content="I drove past it this morning.",
    )
    db_session.add(comment)
    test_post.comment_count = 1
    db_session.commit()
    db_session.refresh(comment)
    return comment


@pytest.fixture
def test_topic(db_session) -> db_models.Topic:
    topic = db_models.Topic(
        name="Road Maintenance",
        description="Issues related to road repairs and potholes.",
        post_count=3,
    )
    db_session.add(topic)
    db_session.commit()
    db_session.refresh(topic)
    return topic


@pytest.fixture
def test_location(db_session) -> db_models.Location:
    location = db_models.Location(
        name="Central Park",
        description="The main park in the downtown area.",
        type=db_models.LocationType.PARK,
        post_count=2,
    )
    db_session.add(location)
    db_session.commit()
    db_session.refresh(location)
    return location


@pytest.fixture
def auth_headers(test_user) -> dict:
    """Get authentication headers for test user."""
    token = create_access_token(test_user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers(other_user) -> dict:
    """Get authentication headers for other user."""
    token = create_access_token(other_user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_auth_headers(admin_user) -> dict:
    token = create_access_token(admin_user.id)
    return {"Authorization": f"Bearer {token}"}
