"""Account store interface and backend selection."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import structlog

from zylorb.common.config import DatabaseConfig
from zylorb.core.models import Account

logger = structlog.get_logger(__name__)

# Fields that update_fields() may write; id, username, email and created_at are fixed
UPDATABLE_FIELDS = frozenset(
    {"avatar", "zone", "followers", "following", "posts_count", "is_verified", "last_login_at"}
)


def check_updatable(changes: Dict[str, Any]) -> None:
    """Reject field names update_fields() does not accept."""
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")


class AccountStore(ABC):
    """
    Persistence interface for accounts.

    A single store is constructed at startup and shared by reference with
    the gateway. Implementations enforce username and email uniqueness on
    :meth:`insert` by raising ``DuplicateRecordError``.
    """

    #: Short backend name reported by the health endpoint
    backend_name: str = "unknown"

    async def connect(self) -> None:
        """Open any underlying resources."""

    async def close(self) -> None:
        """Release any underlying resources."""

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[Account]:
        """Return the account registered with ``email``, if any."""

    @abstractmethod
    async def find_by_username(self, username: str) -> Optional[Account]:
        """Return the account registered with ``username``, if any."""

    @abstractmethod
    async def find_by_id(self, account_id: int) -> Optional[Account]:
        """Return the account with ``account_id``, if any."""

    @abstractmethod
    async def insert(self, account: Account) -> Account:
        """Persist a new account and return it with its assigned id."""

    @abstractmethod
    async def update(self, account: Account) -> Account:
        """Persist changes to an existing account."""

    @abstractmethod
    async def update_fields(self, account_id: int, **changes: Any) -> Account:
        """
        Write only the given fields of an existing account.

        Columns not named in ``changes`` keep whatever value the store holds,
        so concurrent writers touching different fields do not overwrite
        each other.

        Args:
            account_id: Account to change
            **changes: Field names from ``UPDATABLE_FIELDS`` and new values

        Returns:
            The account as stored after the write

        Raises:
            AccountNotFoundError: If no account has ``account_id``
            ValueError: If a field is not updatable
        """

    async def __aenter__(self) -> "AccountStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def create_account_store(config: DatabaseConfig) -> AccountStore:
    """
    Build the account store selected by configuration.

    The backend is chosen once, here. A store that later fails to connect
    raises instead of falling back to another backend.

    Args:
        config: Database configuration

    Returns:
        Unconnected AccountStore instance

    Example:
        >>> store = create_account_store(DatabaseConfig(backend="memory"))
        >>> await store.connect()
    """
    if config.backend == "sqlite":
        from .sqlite_store import SQLiteAccountStore

        store: AccountStore = SQLiteAccountStore(
            db_path=config.get_database_path(),
            timeout=config.connection_timeout,
        )
    else:
        from .memory_store import InMemoryAccountStore

        store = InMemoryAccountStore()

    logger.info("account_store_selected", backend=store.backend_name)
    return store
