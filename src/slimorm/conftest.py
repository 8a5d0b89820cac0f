# src/slimorm/conftest.py
"""
Pytest configuration and shared fixtures.

Tests are co-located with implementation files using the *_test.py suffix.
Unit tests run repositories against a MagicMock executor. Integration tests
request the db_connection fixture and are skipped when the database in
DATABASE_URL cannot be reached.

Run with SLIMORM_ENV=test so that .env.test is loaded.
"""

from dataclasses import dataclass
from pathlib import Path
from unittest.mock import MagicMock

import psycopg
import pytest

from slimorm import db
from slimorm.config import config
from slimorm.entity import Entity, column
from slimorm.hydrator import Hydrator
from slimorm.repository import AbstractRepository, RepositoryManager

# =============================================================================
# Entities
# =============================================================================


@dataclass
class User(Entity):
    name: str = column(default="")
    email: str = column(default="", name="email_address", setter="set_email")
    role: str = column(default="")
    flag_with_no_relation_to_database: bool = False

    def set_email(self, email: str) -> None:
        self.email = (email or "").strip().lower()


class UserRepository(AbstractRepository):
    def get_searchable_fields(self) -> list[str]:
        return ["name", "email_address"]


# =============================================================================
# Wiring Fixtures
# =============================================================================


@pytest.fixture
def user_type():
    """The User entity class."""
    return User


@pytest.fixture
def manager():
    """Provide an empty RepositoryManager."""
    return RepositoryManager()


@pytest.fixture
def hydrator(manager):
    """Provide a Hydrator bound to the manager fixture."""
    return Hydrator(manager)


@pytest.fixture
def fake_db():
    """
    Executor double standing in for slimorm.db.

    Defaults to "no rows": fetch_one returns None, fetch_all returns [] and
    execute reports 0 affected rows.
    """
    executor = MagicMock()
    executor.fetch_one.return_value = None
    executor.fetch_all.return_value = []
    executor.execute.return_value = 0
    return executor


@pytest.fixture
def user_repo(manager, hydrator, fake_db):
    """Provide a UserRepository backed by the fake executor."""
    repo = UserRepository(User, hydrator, executor=fake_db)
    manager.add_repository(repo)
    return repo


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def test_db():
    """
    Apply the schema once per test session.

    Skips every test that depends on it when the database is unreachable.
    """
    schema_file = Path(__file__).parent.parent.parent / "migrations" / "001_initial_schema.sql"
    if not schema_file.exists():
        raise FileNotFoundError(f"Migration file not found: {schema_file}")

    try:
        conn = psycopg.connect(config.database_url, connect_timeout=3)
    except psycopg.OperationalError as exc:
        pytest.skip(f"Database not available: {exc}")

    with conn:
        with conn.cursor() as cur:
            cur.execute(schema_file.read_text())

    yield config.database_url


@pytest.fixture
def db_connection(test_db):
    """
    Provide a database connection with transaction rollback.

    Each test runs in a transaction that is rolled back at the end,
    ensuring tests don't affect each other.
    """
    conn = psycopg.connect(test_db)

    # Clean slate: truncate all tables before each test
    with conn.cursor() as cur:
        cur.execute('TRUNCATE "user" RESTART IDENTITY CASCADE')
    conn.commit()

    # Route every slimorm statement through this connection
    db.set_connection_override(conn)

    yield conn

    # Rollback any changes made during the test
    conn.rollback()
    db.clear_connection_override()
    conn.close()


@pytest.fixture
def live_user_repo(db_connection, manager, hydrator):
    """Provide a UserRepository running against the test database."""
    repo = UserRepository(User, hydrator)
    manager.add_repository(repo)
    return repo


@pytest.fixture
def sample_users(live_user_repo) -> list:
    """Store five users; two admins and three members."""
    users = [
        User(name="Alice", email="alice@example.com", role="admin"),
        User(name="Bob", email="bob@example.com", role="member"),
        User(name="Carol", email="carol@example.com", role="member"),
        User(name="Dave", email="dave@example.org", role="admin"),
        User(name="Eve", email="eve@example.org", role="member"),
    ]
    for user in users:
        live_user_repo.upsert(user)
    return users
