"""
Pytest configuration and fixtures for the family library tests.
"""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from family_library.api.deps import get_storage
from family_library.core.database import build_engine, build_session_factory, create_tables
from family_library.core.security import create_access_token, get_password_hash
from family_library.main import app
from family_library.schemas import (
    Book,
    BookCreate,
    Bookshelf,
    BookshelfCreate,
    Family,
    FamilyCreate,
    User,
    UserCreate,
    UserFamilyCreate,
)
from family_library.storage import MemStorage, SqlStorage, Storage

# Hashing is deliberately slow, so fixtures share one hash
TEST_PASSWORD = "testpassword123"
TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


def make_sql_storage() -> SqlStorage:
    """A SqlStorage on a private in-memory SQLite database."""
    engine = build_engine("sqlite://")
    create_tables(engine)
    return SqlStorage(build_session_factory(engine))


@pytest.fixture(params=["memory", "sql"])
def storage(request) -> Storage:
    """Every storage backend, one test run each."""
    if request.param == "memory":
        return MemStorage()
    return make_sql_storage()


@pytest.fixture
def mem_storage() -> MemStorage:
    return MemStorage()


@pytest.fixture(scope="function")
def client(mem_storage: MemStorage) -> Generator[TestClient, None, None]:
    """Create a test client backed by a fresh in-memory store."""
    app.dependency_overrides[get_storage] = lambda: mem_storage

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def add_user(storage: Storage, username: str, display_name: str | None = None) -> User:
    return storage.create_user(
        UserCreate(
            username=username,
            password=TEST_PASSWORD_HASH,
            display_name=display_name or username.title(),
        )
    )


@pytest.fixture
def make_user(storage: Storage):
    """Create users on the current backend."""

    def _make_user(username: str, display_name: str | None = None) -> User:
        return add_user(storage, username, display_name)

    return _make_user


@pytest.fixture
def household(storage: Storage) -> dict:
    """
    A small family on the given backend.

    Two members (alice, bob) share one bookshelf with two rows and one book.
    """
    return build_household(storage)


@pytest.fixture
def mem_household(mem_storage: MemStorage) -> dict:
    """The same household on the in-memory store used by ``client``."""
    return build_household(mem_storage)


def build_household(storage: Storage) -> dict:
    family: Family = storage.create_family(FamilyCreate(name="Test Family"))
    alice = add_user(storage, "alice")
    bob = add_user(storage, "bob")
    for user in (alice, bob):
        storage.add_user_to_family(UserFamilyCreate(user_id=user.id, family_id=family.id))

    bookshelf: Bookshelf = storage.create_bookshelf(
        BookshelfCreate(name="Living Room", family_id=family.id, user_id=alice.id, num_shelves=2)
    )
    book: Book = storage.create_book(
        BookCreate(
            title="The Three-Body Problem",
            author="Liu Cixin",
            isbn="9780765382030",
            category="Science Fiction",
            added_by_id=alice.id,
            bookshelf_id=bookshelf.id,
            shelf_position={"shelf": 0, "position": 0},
        )
    )
    return {
        "storage": storage,
        "family": family,
        "alice": alice,
        "bob": bob,
        "bookshelf": bookshelf,
        "book": book,
    }


@pytest.fixture
def auth_headers(mem_household: dict) -> dict:
    """Authorization headers for alice."""
    token = create_access_token(data={"sub": str(mem_household["alice"].id)})
    return {"Authorization": f"Bearer {token}"}
