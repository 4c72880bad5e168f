"""In-process account store."""

from typing import Any, Dict, Optional

import structlog

from zylorb.core.models import Account

from .exceptions import AccountNotFoundError, DuplicateRecordError
from .store import AccountStore, check_updatable

logger = structlog.get_logger(__name__)


class InMemoryAccountStore(AccountStore):
    """
    Dict-backed account store for development and tests.

    Contents live for the lifetime of the instance. Accounts are copied on
    the way in and out so callers cannot mutate stored state without
    calling :meth:`update`.
    """

    backend_name = "memory"

    def __init__(self) -> None:
        self._accounts: Dict[int, Account] = {}
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._accounts)

    async def find_by_email(self, email: str) -> Optional[Account]:
        for account in self._accounts.values():
            if account.email == email:
                return account.model_copy(deep=True)
        return None

    async def find_by_username(self, username: str) -> Optional[Account]:
        for account in self._accounts.values():
            if account.username == username:
                return account.model_copy(deep=True)
        return None

    async def find_by_id(self, account_id: int) -> Optional[Account]:
        account = self._accounts.get(account_id)
        return account.model_copy(deep=True) if account else None

    async def insert(self, account: Account) -> Account:
        # No await between the uniqueness check and the write, so this is
        # atomic with respect to other coroutines.
        self._check_unique(account)

        stored = account.model_copy(deep=True, update={"id": self._next_id})
        self._accounts[stored.id] = stored
        self._next_id += 1

        logger.debug("account_inserted", account_id=stored.id, backend=self.backend_name)
        return stored.model_copy(deep=True)

    async def update(self, account: Account) -> Account:
        if account.id is None or account.id not in self._accounts:
            raise AccountNotFoundError(
                f"Account not found: {account.id}",
                account_id=account.id,
            )
        self._check_unique(account)

        self._accounts[account.id] = account.model_copy(deep=True)
        return account.model_copy(deep=True)

    async def update_fields(self, account_id: int, **changes: Any) -> Account:
        check_updatable(changes)
        stored = self._accounts.get(account_id)
        if stored is None:
            raise AccountNotFoundError(f"Account not found: {account_id}", account_id=account_id)

        updated = Account.model_validate({**stored.model_dump(), **changes})
        self._accounts[account_id] = updated
        return updated.model_copy(deep=True)

    def _check_unique(self, account: Account) -> None:
        for existing in self._accounts.values():
            if existing.id == account.id:
                continue
            if existing.username == account.username:
                raise DuplicateRecordError(
                    "Username already registered",
                    table="accounts",
                    key="username",
                    value=account.username,
                )
            if existing.email == account.email:
                raise DuplicateRecordError(
                    "Email already registered",
                    table="accounts",
                    key="email",
                    value=account.email,
                )
