"""Unit tests for the auth gateway."""

import asyncio
from typing import Optional

import pytest

from zylorb.auth import AuthGateway, TokenCodec
from zylorb.core.db import InMemoryAccountStore, QueryError
from zylorb.core.exceptions import (
    AccountValidationError,
    DuplicateAccountError,
    InvalidCredentialsError,
    MalformedTokenError,
    StoreUnavailableError,
    UnauthorizedError,
)
from zylorb.core.models import DEFAULT_AVATAR, DEFAULT_ZONE, Account


class BrokenStore(InMemoryAccountStore):
    """Store whose lookups always fail."""

    async def find_by_email(self, email: str) -> Optional[Account]:
        raise QueryError("disk I/O error", query="SELECT ...")


@pytest.mark.asyncio
class TestRegister:
    """Tests for AuthGateway.register."""

    async def test_register_returns_token_and_public_view(
        self, gateway: AuthGateway, sample_registration: dict
    ):
        """Test that registration issues a token for the new account."""
        result = await gateway.register(**sample_registration)

        assert result.token
        assert result.account.id == 1
        assert result.account.username == "night_owl"
        assert result.account.avatar == DEFAULT_AVATAR
        assert result.account.zone == DEFAULT_ZONE
        assert result.account.followers == 0
        assert result.account.is_verified is False
        assert "password_hash" not in result.account.model_dump()

    async def test_registered_token_authenticates(
        self, gateway: AuthGateway, sample_registration: dict
    ):
        """Test that the issued token resolves to the same account."""
        result = await gateway.register(**sample_registration)

        account = await gateway.authenticate(result.token)
        assert account.id == result.account.id

    async def test_password_is_hashed(
        self,
        gateway: AuthGateway,
        memory_store: InMemoryAccountStore,
        sample_registration: dict,
    ):
        """Test that the plaintext password is never stored."""
        await gateway.register(**sample_registration)

        stored = await memory_store.find_by_email("owl@example.com")
        assert stored.password_hash != "hunter22"
        assert stored.password_hash.startswith("$2b$")

    async def test_surrounding_whitespace_is_trimmed(self, gateway: AuthGateway):
        """Test that username and email are stored trimmed."""
        result = await gateway.register("  night_owl ", " owl@example.com ", "hunter22")

        assert result.account.username == "night_owl"
        assert result.account.email == "owl@example.com"

    async def test_duplicate_email(
        self,
        gateway: AuthGateway,
        memory_store: InMemoryAccountStore,
        sample_registration: dict,
    ):
        """Test that a taken email is rejected and nothing is stored."""
        await gateway.register(**sample_registration)

        with pytest.raises(DuplicateAccountError) as exc_info:
            await gateway.register("someone_else", "owl@example.com", "hunter22")

        assert exc_info.value.field == "email"
        assert str(exc_info.value) == "User already exists with this email or username"
        assert len(memory_store) == 1

    async def test_duplicate_username(
        self,
        gateway: AuthGateway,
        memory_store: InMemoryAccountStore,
        sample_registration: dict,
    ):
        """Test that a taken username is rejected and nothing is stored."""
        await gateway.register(**sample_registration)

        with pytest.raises(DuplicateAccountError) as exc_info:
            await gateway.register("night_owl", "other@example.com", "hunter22")

        assert exc_info.value.field == "username"
        assert len(memory_store) == 1

    async def test_concurrent_registrations_single_winner(
        self, gateway: AuthGateway, memory_store: InMemoryAccountStore
    ):
        """Test that racing registrations for one email create one account."""
        results = await asyncio.gather(
            *(gateway.register(f"racer_{i}", "race@example.com", "hunter22") for i in range(5)),
            return_exceptions=True,
        )

        successes = [r for r in results if not isinstance(r, Exception)]
        failures = [r for r in results if isinstance(r, DuplicateAccountError)]
        assert len(successes) == 1
        assert len(failures) == 4
        assert len(memory_store) == 1

    @pytest.mark.parametrize(
        "username,email,password",
        [
            ("", "owl@example.com", "hunter22"),
            ("night_owl", "", "hunter22"),
            ("night_owl", "owl@example.com", ""),
            ("   ", "owl@example.com", "hunter22"),
        ],
    )
    async def test_missing_fields(
        self, gateway: AuthGateway, username: str, email: str, password: str
    ):
        """Test that every field is required."""
        with pytest.raises(AccountValidationError, match="All fields are required"):
            await gateway.register(username, email, password)

    @pytest.mark.parametrize(
        "username,email,password,field",
        [
            ("ab", "owl@example.com", "hunter22", "username"),
            ("night owl", "owl@example.com", "hunter22", "username"),
            ("x" * 31, "owl@example.com", "hunter22", "username"),
            ("night_owl", "not-an-email", "hunter22", "email"),
            ("night_owl", "owl@example.com", "short", "password"),
            ("night_owl", "owl@example.com", "p" * 73, "password"),
        ],
    )
    async def test_invalid_fields(
        self,
        gateway: AuthGateway,
        memory_store: InMemoryAccountStore,
        username: str,
        email: str,
        password: str,
        field: str,
    ):
        """Test that malformed input is rejected before touching the store."""
        with pytest.raises(AccountValidationError) as exc_info:
            await gateway.register(username, email, password)

        assert exc_info.value.field == field
        assert len(memory_store) == 0

    async def test_store_failure(self, codec: TokenCodec, hash_rounds: int):
        """Test that store failures surface as StoreUnavailableError."""
        gateway = AuthGateway(store=BrokenStore(), codec=codec, hash_rounds=hash_rounds)

        with pytest.raises(StoreUnavailableError):
            await gateway.register("night_owl", "owl@example.com", "hunter22")


@pytest.mark.asyncio
class TestLogin:
    """Tests for AuthGateway.login."""

    async def test_login_success(self, gateway: AuthGateway, sample_registration: dict):
        """Test that correct credentials return a working token."""
        registered = await gateway.register(**sample_registration)

        result = await gateway.login("owl@example.com", "hunter22")

        assert result.account.id == registered.account.id
        account = await gateway.authenticate(result.token)
        assert account.username == "night_owl"

    async def test_login_records_last_login(
        self,
        gateway: AuthGateway,
        memory_store: InMemoryAccountStore,
        sample_registration: dict,
    ):
        """Test that a successful login stamps last_login_at."""
        await gateway.register(**sample_registration)
        assert (await memory_store.find_by_id(1)).last_login_at is None

        await gateway.login("owl@example.com", "hunter22")

        assert (await memory_store.find_by_id(1)).last_login_at is not None

    async def test_wrong_password_and_unknown_email_match(
        self, gateway: AuthGateway, sample_registration: dict
    ):
        """Test that the two failure causes are indistinguishable."""
        await gateway.register(**sample_registration)

        with pytest.raises(InvalidCredentialsError) as wrong_password:
            await gateway.login("owl@example.com", "wrong-password")
        with pytest.raises(InvalidCredentialsError) as unknown_email:
            await gateway.login("nobody@example.com", "hunter22")

        assert str(wrong_password.value) == str(unknown_email.value) == "Invalid email or password"
        assert wrong_password.value.status_code == unknown_email.value.status_code == 400

    @pytest.mark.parametrize("email,password", [("", "hunter22"), ("owl@example.com", "")])
    async def test_missing_credentials(self, gateway: AuthGateway, email: str, password: str):
        """Test that both login fields are required."""
        with pytest.raises(AccountValidationError, match="Email and password are required"):
            await gateway.login(email, password)

    async def test_store_failure(self, codec: TokenCodec, hash_rounds: int):
        """Test that a failing store is not reported as bad credentials."""
        gateway = AuthGateway(store=BrokenStore(), codec=codec, hash_rounds=hash_rounds)

        with pytest.raises(StoreUnavailableError):
            await gateway.login("owl@example.com", "hunter22")


@pytest.mark.asyncio
class TestAuthenticate:
    """Tests for AuthGateway.authenticate."""

    @pytest.mark.parametrize("token", [None, ""])
    async def test_missing_token(self, gateway: AuthGateway, token):
        """Test that a request without a token is unauthorized."""
        with pytest.raises(UnauthorizedError, match="Access token required"):
            await gateway.authenticate(token)

    async def test_garbage_token(self, gateway: AuthGateway):
        """Test that an undecodable token is a token error, not unauthorized."""
        with pytest.raises(MalformedTokenError):
            await gateway.authenticate("garbage")

    async def test_account_no_longer_exists(
        self, gateway: AuthGateway, codec: TokenCodec, hash_rounds: int, sample_registration: dict
    ):
        """Test that a valid token for a vanished account is unauthorized."""
        result = await gateway.register(**sample_registration)
        emptied = AuthGateway(store=InMemoryAccountStore(), codec=codec, hash_rounds=hash_rounds)

        with pytest.raises(UnauthorizedError, match="User not found"):
            await emptied.authenticate(result.token)


@pytest.mark.asyncio
class TestUpdateProfile:
    """Tests for AuthGateway.update_profile."""

    async def test_update_avatar_and_zone(
        self,
        gateway: AuthGateway,
        memory_store: InMemoryAccountStore,
        sample_registration: dict,
    ):
        """Test that profile changes are persisted."""
        result = await gateway.register(**sample_registration)
        account = await gateway.authenticate(result.token)

        updated = await gateway.update_profile(account, avatar="🦉", zone="gaming")

        assert updated.avatar == "🦉"
        assert updated.zone == "gaming"
        stored = await memory_store.find_by_id(account.id)
        assert stored.zone == "gaming"

    async def test_partial_update_keeps_other_fields(
        self, gateway: AuthGateway, sample_registration: dict
    ):
        """Test that omitted fields are left unchanged."""
        result = await gateway.register(**sample_registration)
        account = await gateway.authenticate(result.token)

        updated = await gateway.update_profile(account, zone="culture")

        assert updated.avatar == DEFAULT_AVATAR
        assert updated.zone == "culture"

    async def test_invalid_zone(self, gateway: AuthGateway, sample_registration: dict):
        """Test that unknown zones are rejected."""
        result = await gateway.register(**sample_registration)
        account = await gateway.authenticate(result.token)

        with pytest.raises(AccountValidationError) as exc_info:
            await gateway.update_profile(account, zone="underground")

        assert exc_info.value.field == "zone"

    @pytest.mark.parametrize("avatar", ["", "   ", "x" * 17])
    async def test_invalid_avatar(
        self, gateway: AuthGateway, sample_registration: dict, avatar: str
    ):
        """Test that empty or oversized avatars are rejected."""
        result = await gateway.register(**sample_registration)
        account = await gateway.authenticate(result.token)

        with pytest.raises(AccountValidationError) as exc_info:
            await gateway.update_profile(account, avatar=avatar)

        assert exc_info.value.field == "avatar"

    async def test_rejected_update_leaves_account_unchanged(
        self,
        gateway: AuthGateway,
        memory_store: InMemoryAccountStore,
        sample_registration: dict,
    ):
        """Test that a valid avatar is not applied when the zone is rejected."""
        result = await gateway.register(**sample_registration)
        account = await gateway.authenticate(result.token)

        with pytest.raises(AccountValidationError):
            await gateway.update_profile(account, avatar="🦉", zone="underground")

        assert account.avatar == DEFAULT_AVATAR
        assert (await memory_store.find_by_id(account.id)).avatar == DEFAULT_AVATAR

    async def test_update_keeps_login_made_after_authentication(
        self,
        gateway: AuthGateway,
        memory_store: InMemoryAccountStore,
        sample_registration: dict,
    ):
        """Test that a profile update does not roll back a later login stamp."""
        result = await gateway.register(**sample_registration)
        account = await gateway.authenticate(result.token)
        await gateway.login("owl@example.com", "hunter22")

        updated = await gateway.update_profile(account, zone="gaming")

        stored = await memory_store.find_by_id(account.id)
        assert stored.last_login_at is not None
        assert stored.zone == "gaming"
        assert updated.last_login_at == stored.last_login_at

    async def test_login_keeps_profile_update(
        self,
        gateway: AuthGateway,
        memory_store: InMemoryAccountStore,
        sample_registration: dict,
    ):
        """Test that stamping a login does not overwrite profile fields."""
        result = await gateway.register(**sample_registration)
        account = await gateway.authenticate(result.token)
        await gateway.update_profile(account, avatar="🦉", zone="life")

        login = await gateway.login("owl@example.com", "hunter22")

        assert login.account.zone == "life"
        stored = await memory_store.find_by_id(account.id)
        assert stored.avatar == "🦉"
        assert stored.last_login_at is not None

    async def test_account_removed_before_update(
        self, gateway: AuthGateway, codec: TokenCodec, hash_rounds: int, sample_registration: dict
    ):
        """Test that updating a vanished account is unauthorized, not a store failure."""
        result = await gateway.register(**sample_registration)
        account = await gateway.authenticate(result.token)
        emptied = AuthGateway(store=InMemoryAccountStore(), codec=codec, hash_rounds=hash_rounds)

        with pytest.raises(UnauthorizedError, match="User not found"):
            await emptied.update_profile(account, zone="gaming")
