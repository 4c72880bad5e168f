"""Account persistence: store interface, backends, and exceptions."""

from .exceptions import (
    AccountNotFoundError,
    DatabaseConnectionError,
    DatabaseError,
    DuplicateRecordError,
    QueryError,
)
from .memory_store import InMemoryAccountStore
from .sqlite_store import SQLiteAccountStore
from .store import AccountStore, create_account_store

__all__ = [
    "AccountStore",
    "create_account_store",
    "InMemoryAccountStore",
    "SQLiteAccountStore",
    "DatabaseError",
    "DatabaseConnectionError",
    "AccountNotFoundError",
    "DuplicateRecordError",
    "QueryError",
]
