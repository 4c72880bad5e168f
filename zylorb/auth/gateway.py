"""Registration, login and bearer-token authentication over an account store."""

import asyncio
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import structlog

from zylorb.core.db import (
    AccountNotFoundError,
    AccountStore,
    DatabaseError,
    DuplicateRecordError,
)
from zylorb.core.exceptions import (
    AccountValidationError,
    DuplicateAccountError,
    InvalidCredentialsError,
    StoreUnavailableError,
    UnauthorizedError,
)
from zylorb.core.models import VALID_ZONES, Account, PublicAccount

from .security import DEFAULT_HASH_ROUNDS, TokenCodec, hash_password, verify_password

logger = structlog.get_logger(__name__)

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]{3,30}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6
# bcrypt only considers the first 72 bytes of input
MAX_PASSWORD_BYTES = 72
MAX_AVATAR_LENGTH = 16


@dataclass
class AuthResult:
    """Token and public account view returned by register and login."""

    token: str
    account: PublicAccount


class AuthGateway:
    """
    Request-handling contract for registration, login and authentication.

    The gateway owns no global state: the store and token codec are passed
    in once at startup. Registration is serialized with a lock so two
    concurrent requests cannot both pass the uniqueness check.

    Example:
        >>> gateway = AuthGateway(store=InMemoryAccountStore(), codec=TokenCodec("s3cret"))
        >>> result = await gateway.register("night_owl", "owl@example.com", "hunter22")
        >>> account = await gateway.authenticate(result.token)
    """

    def __init__(
        self,
        store: AccountStore,
        codec: TokenCodec,
        hash_rounds: int = DEFAULT_HASH_ROUNDS,
    ):
        self.store = store
        self.codec = codec
        self.hash_rounds = hash_rounds
        self._register_lock = asyncio.Lock()

    async def register(self, username: str, email: str, password: str) -> AuthResult:
        """
        Create an account and issue a token for it.

        Raises:
            AccountValidationError: If any input is missing or malformed
            DuplicateAccountError: If the username or email is taken
            StoreUnavailableError: If the account store fails
        """
        username = (username or "").strip()
        email = (email or "").strip()
        _validate_registration(username, email, password)

        async with self._register_lock:
            if await self._call_store(self.store.find_by_email(email)):
                logger.info("registration_rejected_duplicate", field="email")
                raise DuplicateAccountError(field="email")
            if await self._call_store(self.store.find_by_username(username)):
                logger.info("registration_rejected_duplicate", field="username")
                raise DuplicateAccountError(field="username")

            account = Account(
                username=username,
                email=email,
                password_hash=hash_password(password, rounds=self.hash_rounds),
            )
            account = await self._call_store(self.store.insert(account))

        logger.info("account_registered", account_id=account.id, username=account.username)
        return AuthResult(token=self.codec.mint(account), account=account.public_view())

    async def login(self, email: str, password: str) -> AuthResult:
        """
        Check credentials and issue a token.

        Unknown email and wrong password raise the same error.

        Raises:
            AccountValidationError: If email or password is missing
            InvalidCredentialsError: If the credentials do not match
            StoreUnavailableError: If the account store fails
        """
        email = (email or "").strip()
        if not email or not password:
            raise AccountValidationError("Email and password are required")

        account = await self._call_store(self.store.find_by_email(email))
        if account is None:
            logger.warning("login_failed_user_not_found")
            raise InvalidCredentialsError()

        if not verify_password(password, account.password_hash):
            logger.warning("login_failed_invalid_password", account_id=account.id)
            raise InvalidCredentialsError()

        account = await self._call_store(
            self.store.update_fields(account.id, last_login_at=datetime.now(timezone.utc))
        )

        logger.info("login_successful", account_id=account.id, username=account.username)
        return AuthResult(token=self.codec.mint(account), account=account.public_view())

    async def authenticate(self, token: Optional[str]) -> Account:
        """
        Resolve a bearer token to a live account.

        Raises:
            UnauthorizedError: If no token was sent or its account is gone
            TokenError: If the token is malformed, forged or expired
            StoreUnavailableError: If the account store fails
        """
        if not token:
            raise UnauthorizedError("Access token required")

        claims = self.codec.validate(token)

        account = await self._call_store(self.store.find_by_id(claims.subject_id))
        if account is None:
            logger.warning("token_subject_not_found", account_id=claims.subject_id)
            raise UnauthorizedError("User not found")

        logger.debug("request_authenticated", account_id=account.id)
        return account

    async def update_profile(
        self,
        account: Account,
        avatar: Optional[str] = None,
        zone: Optional[str] = None,
    ) -> Account:
        """
        Change the avatar and/or zone of an authenticated account.

        Only the changed fields are written; ``account`` itself is left
        untouched and the stored result is returned.

        Raises:
            AccountValidationError: If a value is invalid
            UnauthorizedError: If the account no longer exists
            StoreUnavailableError: If the account store fails
        """
        changes = {}
        if avatar is not None:
            avatar = avatar.strip()
            if not avatar or len(avatar) > MAX_AVATAR_LENGTH:
                raise AccountValidationError(
                    f"Avatar must be 1-{MAX_AVATAR_LENGTH} characters", field="avatar"
                )
            changes["avatar"] = avatar

        if zone is not None:
            if zone not in VALID_ZONES:
                raise AccountValidationError(
                    f"Zone must be one of: {', '.join(VALID_ZONES)}", field="zone"
                )
            changes["zone"] = zone

        account = await self._call_store(self.store.update_fields(account.id, **changes))
        logger.info("profile_updated", account_id=account.id)
        return account

    async def _call_store(self, operation):
        """Await a store call, translating store failures into API errors."""
        try:
            return await operation
        except DuplicateRecordError as e:
            raise DuplicateAccountError(field=e.key) from e
        except AccountNotFoundError as e:
            logger.warning("account_vanished", account_id=e.account_id)
            raise UnauthorizedError("User not found") from e
        except DatabaseError as e:
            logger.error("account_store_error", error=str(e), error_type=type(e).__name__)
            raise StoreUnavailableError() from e


def _validate_registration(username: str, email: str, password: Optional[str]) -> None:
    if not username or not email or not password:
        raise AccountValidationError("All fields are required")

    if not USERNAME_PATTERN.match(username):
        raise AccountValidationError(
            "Username must be 3-30 characters of letters, numbers and underscores",
            field="username",
        )

    if not EMAIL_PATTERN.match(email):
        raise AccountValidationError("Please enter a valid email address", field="email")

    if len(password) < MIN_PASSWORD_LENGTH:
        raise AccountValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters", field="password"
        )

    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise AccountValidationError(
            f"Password must be at most {MAX_PASSWORD_BYTES} bytes", field="password"
        )
