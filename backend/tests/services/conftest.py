"""Service test fixtures — migrated SQLite database + FastAPI test client.

Invariants:
    - Every test gets a fresh SQLite file under tmp_path
    - test_engine is built by SchemaMigrator (the real revisions), not create_all
    - get_db dependency overridden to use the test session factory
    - db_manager patched so readiness probes see the test engine

Design Decisions:
    - File-backed SQLite instead of :memory:, since the migrator and sessions open
      separate connections and must see the same database
"""

import pytest
from httpx import ASGITransport, AsyncClient

from usermanagement.db.session import create_engine, create_session_factory
from usermanagement.infrastructure.database import get_db, DatabaseSessionManager
from usermanagement.infrastructure.schema_migrator import SchemaMigrator
from usermanagement.infrastructure.user_repository import SqlUserRepository
import usermanagement.infrastructure.database as db_module
from usermanagement.main import app


def make_user_fields(
    first_name: str, last_name: str, email: str, phone: str = "5551234567", **extra,
) -> dict:
    return {
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "phone": phone,
        "dob": extra.get("dob", ""),
        "address": extra.get("address", ""),
    }


@pytest.fixture
async def empty_engine(tmp_path):
    """SQLite engine over an empty database (no revisions applied)."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'users.db'}")
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_engine(empty_engine):
    await SchemaMigrator(empty_engine).run()
    return empty_engine


@pytest.fixture
async def test_session_factory(test_engine):
    return create_session_factory(test_engine)


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def sql_repo(test_db):
    return SqlUserRepository(test_db)


@pytest.fixture
async def seeded_users(test_session_factory):
    """John Doe, Jane Smith, Jonathan Davis, Alice Wonder (ids 1..4).

    Seeded through its own session, closed afterwards: an open SQLite read
    transaction would block writes made by the client's sessions.
    """
    async with test_session_factory() as session:
        repo = SqlUserRepository(session)
        return [
            await repo.insert(make_user_fields("John", "Doe", "john.doe@example.com", "5551234567")),
            await repo.insert(make_user_fields("Jane", "Smith", "jane.smith@example.com", "5559876543")),
            await repo.insert(make_user_fields("Jonathan", "Davis", "jon.davis@mail.org", "4441234567")),
            await repo.insert(make_user_fields("Alice", "Wonder", "alice@wonder.land", "+15551112222")),
        ]


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.database_url = str(test_engine.url)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
