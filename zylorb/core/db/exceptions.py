"""Exceptions for account store operations."""

from pathlib import Path
from typing import Optional


class DatabaseError(Exception):
    """Base exception for account store errors."""

    pass


class DatabaseConnectionError(DatabaseError):
    """Raised when the store cannot be opened or is used before connect()."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class AccountNotFoundError(DatabaseError):
    """Raised when updating an account that does not exist."""

    def __init__(self, message: str, account_id: Optional[int] = None):
        super().__init__(message)
        self.account_id = account_id


class DuplicateRecordError(DatabaseError):
    """Raised when attempting to create a duplicate record."""

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        key: Optional[str] = None,
        value: Optional[str] = None,
    ):
        super().__init__(message)
        self.table = table
        self.key = key
        self.value = value


class QueryError(DatabaseError):
    """Raised when a store query fails."""

    def __init__(
        self,
        message: str,
        query: Optional[str] = None,
        params: Optional[tuple] = None,
    ):
        super().__init__(message)
        self.query = query
        self.params = params
