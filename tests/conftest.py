"""
Pytest configuration and fixtures for the Bookstore API tests.

The application runs against an in-memory SQLite database shared through a
StaticPool, with test settings and a fake image uploader swapped in through
FastAPI's dependency overrides.
"""
from dataclasses import replace
from datetime import timedelta
from decimal import Decimal
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from app.database import Base, get_db
from app.security import Claim, create_access_token, get_password_hash
from app.uploader import get_uploader
from config import Settings, get_settings
from models.models import Book, User, ROLE_ADMIN, ROLE_USER

# -----------------------------------
# Database Setup for Testing
# -----------------------------------
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)

TEST_SETTINGS = Settings(jwt_secret="test-secret-key-for-the-bookstore-api-suite", cloudinary_cloud_name="demo")


class FakeUploader:
    """Stands in for the image host; remembers what it was given."""

    def __init__(self):
        self.uploads = []

    def upload(self, data: bytes, mime_type: str) -> str:
        self.uploads.append((data, mime_type))
        return f"https://res.cloudinary.com/demo/image/upload/v1/profile_{len(self.uploads)}.png"


def _get_test_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def reset_db():
    """Every test starts from empty tables."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture(autouse=True)
def override_dependencies(uploader):
    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_settings] = lambda: TEST_SETTINGS
    app.dependency_overrides[get_uploader] = lambda: uploader
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db_session():
    """Provide a database session for direct setup and assertions."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a user, optionally with another secret or a lifetime."""
    def _headers(user: User, secret: Optional[str] = None, expires_delta: Optional[timedelta] = None):
        settings = replace(TEST_SETTINGS, jwt_secret=secret) if secret else TEST_SETTINGS
        token = create_access_token(Claim(id=user.id, role=user.role), settings, expires_delta)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def setup_test_data(db_session):
    """
    Pre-populates the test database with sample users and books.

    Returns:
        dict: A dictionary containing test users and books.
    """
    alice = User(username="alice", email="alice@example.com", password_hash=get_password_hash("password123"), role=ROLE_USER)
    bob = User(username="bob", email="bob@example.com", password_hash=get_password_hash("securepass"), role=ROLE_USER)
    admin = User(username="Admin1", email="admin1@example.com", password_hash=get_password_hash("adminpass"), role=ROLE_ADMIN)
    db_session.add_all([alice, bob, admin])

    hobbit = Book(isbn="9780261102217", title="The Hobbit", author=["J. R. R. Tolkien"],
                  genre=["Fantasy", "Adventure"], price=Decimal("12.99"), username="Admin")
    dune = Book(isbn="9780441172719", title="Dune", author=["Frank Herbert"],
                genre=["Science Fiction"], price=Decimal("9.99"), username="Admin")
    omens = Book(isbn="9780060853983", title="Good Omens", author=["Terry Pratchett", "Neil Gaiman"],
                 genre=["Fantasy", "Comedy"], price=Decimal("15.50"), username="alice")
    clean = Book(isbn="9780132350884", title="Clean Code", author=["Robert C. Martin"],
                 genre=["Software"], price=Decimal("39.00"), username="Admin")
    db_session.add_all([hobbit, dune, omens, clean])
    db_session.commit()

    return {
        "users": {"alice": alice, "bob": bob, "admin": admin},
        "books": [hobbit, dune, omens, clean],
    }
