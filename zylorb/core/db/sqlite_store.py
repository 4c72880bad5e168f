"""SQLite-backed account store using aiosqlite."""

import json
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import aiosqlite
import structlog

from zylorb.core.models import Account

from .exceptions import (
    AccountNotFoundError,
    DatabaseConnectionError,
    DuplicateRecordError,
    QueryError,
)
from .store import AccountStore, check_updatable

logger = structlog.get_logger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS accounts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT NOT NULL UNIQUE,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    avatar TEXT NOT NULL,
    zone TEXT NOT NULL,
    followers TEXT NOT NULL DEFAULT '[]',
    following TEXT NOT NULL DEFAULT '[]',
    posts_count INTEGER NOT NULL DEFAULT 0,
    is_verified INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    last_login_at TEXT
)
"""

_COLUMNS = (
    "id, username, email, password_hash, avatar, zone, followers, following, "
    "posts_count, is_verified, created_at, last_login_at"
)


class SQLiteAccountStore(AccountStore):
    """
    Account store persisted to a single SQLite file.

    Uniqueness of username and email is enforced by the schema, so two
    concurrent inserts cannot both succeed.

    Example:
        >>> store = SQLiteAccountStore(Path("zylorb.db"))
        >>> async with store:
        ...     account = await store.find_by_email("someone@example.com")
    """

    backend_name = "sqlite"

    def __init__(self, db_path: Path, timeout: int = 30):
        """
        Initialize the store.

        Args:
            db_path: Path to SQLite database file
            timeout: Connection timeout in seconds
        """
        self.db_path = db_path
        self.timeout = timeout
        self._connection: Optional[aiosqlite.Connection] = None

    async def connect(self) -> None:
        """
        Open the database and create the accounts table if needed.

        Raises:
            DatabaseConnectionError: If the database cannot be opened
        """
        if self._connection is not None:
            return

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._connection = await aiosqlite.connect(str(self.db_path), timeout=self.timeout)
            self._connection.row_factory = aiosqlite.Row
            await self._connection.execute(SCHEMA)
            await self._connection.commit()
        except (OSError, sqlite3.Error) as e:
            logger.error("database_connection_failed", db_path=str(self.db_path), error=str(e))
            self._connection = None
            raise DatabaseConnectionError(
                f"Failed to connect to database: {e}",
                path=self.db_path,
            ) from e

        logger.info("database_connected", db_path=str(self.db_path))

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
            logger.info("database_closed", db_path=str(self.db_path))

    @property
    def connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise DatabaseConnectionError("Database connection not initialized", path=self.db_path)
        return self._connection

    async def find_by_email(self, email: str) -> Optional[Account]:
        return await self._fetch_one("email = ?", (email,))

    async def find_by_username(self, username: str) -> Optional[Account]:
        return await self._fetch_one("username = ?", (username,))

    async def find_by_id(self, account_id: int) -> Optional[Account]:
        return await self._fetch_one("id = ?", (account_id,))

    async def insert(self, account: Account) -> Account:
        query = (
            "INSERT INTO accounts (username, email, password_hash, avatar, zone, followers, "
            "following, posts_count, is_verified, created_at, last_login_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)"
        )
        params = (
            account.username,
            account.email,
            account.password_hash,
            account.avatar,
            account.zone,
            json.dumps(account.followers),
            json.dumps(account.following),
            account.posts_count,
            int(account.is_verified),
            account.created_at.isoformat(),
            account.last_login_at.isoformat() if account.last_login_at else None,
        )
        cursor = await self._write(query, params)
        return account.model_copy(update={"id": cursor.lastrowid})

    async def update(self, account: Account) -> Account:
        query = (
            "UPDATE accounts SET username = ?, email = ?, password_hash = ?, avatar = ?, "
            "zone = ?, followers = ?, following = ?, posts_count = ?, is_verified = ?, "
            "last_login_at = ? WHERE id = ?"
        )
        params = (
            account.username,
            account.email,
            account.password_hash,
            account.avatar,
            account.zone,
            json.dumps(account.followers),
            json.dumps(account.following),
            account.posts_count,
            int(account.is_verified),
            account.last_login_at.isoformat() if account.last_login_at else None,
            account.id,
        )
        cursor = await self._write(query, params)
        if cursor.rowcount == 0:
            raise AccountNotFoundError(f"Account not found: {account.id}", account_id=account.id)
        return account

    async def update_fields(self, account_id: int, **changes: Any) -> Account:
        check_updatable(changes)
        if changes:
            # Column names come from UPDATABLE_FIELDS, never from the caller's values
            assignments = ", ".join(f"{column} = ?" for column in changes)
            query = f"UPDATE accounts SET {assignments} WHERE id = ?"
            params = tuple(_to_column(column, value) for column, value in changes.items())
            await self._write(query, params + (account_id,))

        account = await self.find_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(f"Account not found: {account_id}", account_id=account_id)
        return account

    async def _fetch_one(self, where: str, params: tuple) -> Optional[Account]:
        query = f"SELECT {_COLUMNS} FROM accounts WHERE {where}"
        try:
            cursor = await self.connection.execute(query, params)
            row = await cursor.fetchone()
        except sqlite3.Error as e:
            logger.error("query_failed", error=str(e))
            raise QueryError(f"Query failed: {e}", query=query, params=params) from e

        return _row_to_account(row) if row else None

    async def _write(self, query: str, params: tuple) -> aiosqlite.Cursor:
        connection = self.connection
        try:
            cursor = await connection.execute(query, params)
            await connection.commit()
        except sqlite3.IntegrityError as e:
            await connection.rollback()
            key = "email" if "email" in str(e) else "username"
            raise DuplicateRecordError(
                f"{key.capitalize()} already registered",
                table="accounts",
                key=key,
            ) from e
        except sqlite3.Error as e:
            await connection.rollback()
            logger.error("query_failed", error=str(e))
            raise QueryError(f"Query failed: {e}", query=query) from e
        return cursor


def _to_column(column: str, value: Any) -> Any:
    if column in ("followers", "following"):
        return json.dumps(list(value))
    if column == "is_verified":
        return int(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _row_to_account(row: Any) -> Account:
    return Account(
        id=row["id"],
        username=row["username"],
        email=row["email"],
        password_hash=row["password_hash"],
        avatar=row["avatar"],
        zone=row["zone"],
        followers=json.loads(row["followers"]),
        following=json.loads(row["following"]),
        posts_count=row["posts_count"],
        is_verified=bool(row["is_verified"]),
        created_at=datetime.fromisoformat(row["created_at"]),
        last_login_at=(
            datetime.fromisoformat(row["last_login_at"]) if row["last_login_at"] else None
        ),
    )
