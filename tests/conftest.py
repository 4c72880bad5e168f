"""Shared pytest fixtures for all tests."""

from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from zylorb.auth import AuthGateway, TokenCodec
from zylorb.common.config import Config, DatabaseConfig, LoggingConfig
from zylorb.core.db import InMemoryAccountStore, SQLiteAccountStore

TEST_JWT_SECRET = "test-secret-key-for-testing-only-do-not-use-in-production"

# Lowest bcrypt work factor keeps hashing fast in tests
TEST_HASH_ROUNDS = 4


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Provide a controllable clock."""
    return FakeClock()


@pytest.fixture
def sample_config(tmp_path: Path) -> Config:
    """Provide a sample configuration for tests."""
    return Config(
        logging=LoggingConfig(level="WARNING", format="text"),
        database=DatabaseConfig(
            backend="sqlite",
            database_path=str(tmp_path / "test_zylorb.db"),
        ),
    )


@pytest.fixture
def jwt_secret() -> str:
    """Provide the test signing secret."""
    return TEST_JWT_SECRET


@pytest.fixture
def hash_rounds() -> int:
    """Provide the bcrypt work factor used in tests."""
    return TEST_HASH_ROUNDS


@pytest.fixture
def memory_store() -> InMemoryAccountStore:
    """Provide an empty in-memory account store."""
    return InMemoryAccountStore()


@pytest_asyncio.fixture
async def sqlite_store(tmp_path: Path) -> AsyncGenerator[SQLiteAccountStore, None]:
    """Provide a connected SQLite account store in a temp directory."""
    store = SQLiteAccountStore(db_path=tmp_path / "accounts.db")
    await store.connect()
    yield store
    await store.close()


@pytest.fixture
def codec() -> TokenCodec:
    """Provide a token codec using the test secret."""
    return TokenCodec(secret_key=TEST_JWT_SECRET)


@pytest.fixture
def gateway(memory_store: InMemoryAccountStore, codec: TokenCodec) -> AuthGateway:
    """Provide a gateway over an empty in-memory store."""
    return AuthGateway(store=memory_store, codec=codec, hash_rounds=TEST_HASH_ROUNDS)


@pytest.fixture
def sample_registration() -> dict:
    """Provide valid registration data."""
    return {
        "username": "night_owl",
        "email": "owl@example.com",
        "password": "hunter22",
    }
