import os

# Settings are read at import time; point the app at SQLite before importing it
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")

import uuid
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from app.main import app
from app.db.session import get_db
from app.models import Base, Book, Genre, User


@pytest.fixture
def test_engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return sessionmaker(bind=test_engine, autocommit=False, autoflush=False, future=True)


@pytest.fixture
def db_session(session_factory):
    """Create a fresh database session for each test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def test_client(session_factory):
    """Test client whose requests use the test database."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def registered_user(test_client):
    """Register a user through the API and return its summary plus password."""
    suffix = uuid.uuid4().hex[:8]
    payload = {
        "username": f"reader_{suffix}",
        "email": f"reader-{suffix}@example.com",
        "password": "secret-pass",
    }
    response = test_client.post("/auth/register", json=payload)
    assert response.status_code == 201, f"Failed to register user: {response.text}"
    return {**response.json()["data"], "password": payload["password"]}


@pytest.fixture
def auth_headers(test_client, registered_user):
    """Bearer header for the registered user."""
    response = test_client.post(
        "/auth/login",
        json={"email": registered_user["email"], "password": registered_user["password"]},
    )
    assert response.status_code == 200, f"Failed to log in: {response.text}"
    return {"Authorization": f"Bearer {response.json()['data']['access_token']}"}


@pytest.fixture
def sample_genre(test_client):
    """Create a genre using the API."""
    response = test_client.post("/genre", json={"name": "Sci-Fi"})
    assert response.status_code == 201, f"Failed to create sample genre: {response.text}"
    return response.json()["data"]


@pytest.fixture
def sample_book(test_client, sample_genre):
    """Create the 'Dune' book (price 100, stock 5) using the API."""
    book_data = {
        "title": "Dune",
        "writer": "Frank Herbert",
        "publisher": "Chilton Books",
        "publication_year": 1965,
        "description": "Desert planet",
        "price": 100,
        "stock_quantity": 5,
        "genre_id": sample_genre["id"],
    }
    response = test_client.post("/books", json=book_data)
    assert response.status_code == 201, f"Failed to create sample book: {response.text}"
    return response.json()["data"]


# Fixtures for service and repository tests that need model objects
@pytest.fixture
def user_model(db_session):
    user = User(username="model_user", email="model@example.com", password_hash="not-a-hash")
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def genre_model(db_session):
    genre = Genre(name="Fantasy")
    db_session.add(genre)
    db_session.commit()
    return genre


@pytest.fixture
def make_book(db_session, genre_model):
    """Factory creating committed books in the fixture genre unless told otherwise."""

    def _make(title: str, price: str = "10.00", stock: int = 5, genre: Genre | None = None) -> Book:
        book = Book(
            title=title,
            writer="Some Writer",
            publisher="Some Publisher",
            price=Decimal(price),
            stock_quantity=stock,
            genre_id=(genre or genre_model).id,
        )
        db_session.add(book)
        db_session.commit()
        return book

    return _make
