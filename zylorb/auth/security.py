"""Security utilities for password hashing and bearer token management."""

import time
from datetime import timedelta
from typing import Callable

import bcrypt
from jose import JWTError, jwt
from pydantic import ValidationError
import structlog

from zylorb.core.exceptions import BadSignatureError, ExpiredTokenError, MalformedTokenError
from zylorb.core.models import Account

from .schemas import TokenClaims

logger = structlog.get_logger(__name__)

# Fixed session lifetime; tokens cannot be revoked before this elapses.
TOKEN_TTL = timedelta(hours=24)

DEFAULT_HASH_ROUNDS = 12


# ============================================================================
# Password Hashing
# ============================================================================


def hash_password(password: str, rounds: int = DEFAULT_HASH_ROUNDS) -> str:
    """
    Hash a password using bcrypt.

    A fresh salt is generated per call, so hashing the same password twice
    gives different digests. Compare with :func:`verify_password`.

    Args:
        password: Plain text password to hash (at most 72 bytes UTF-8)
        rounds: bcrypt work factor (log2 of iterations)

    Returns:
        Bcrypt hashed password string

    Example:
        >>> hashed = hash_password("mysecretpassword")
        >>> hashed.startswith("$2b$")
        True
    """
    password_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against a bcrypt hash.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Bcrypt hashed password to check against

    Returns:
        True if password matches, False otherwise

    Example:
        >>> hashed = hash_password("test")
        >>> verify_password("test", hashed)
        True
        >>> verify_password("wrong", hashed)
        False
    """
    try:
        password_bytes = plain_password.encode("utf-8")
        hashed_bytes = hashed_password.encode("utf-8")
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except (ValueError, TypeError) as e:
        logger.warning("password_verification_error", error=str(e))
        return False


# ============================================================================
# Bearer Tokens
# ============================================================================


class TokenCodec:
    """
    Mints and validates self-contained signed bearer tokens.

    Tokens are JWTs carrying the account id, email, username and issue
    time. Nothing is stored server-side: validity depends only on the
    signature and the token's age. The secret must stay fixed for the life
    of the process; replacing it invalidates every token issued under the
    old one.

    Example:
        >>> codec = TokenCodec(secret_key="s3cret")
        >>> token = codec.mint(account)
        >>> codec.validate(token).subject_id == account.id
        True
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        ttl: timedelta = TOKEN_TTL,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the codec.

        Args:
            secret_key: Secret key for signing tokens
            algorithm: JWT signing algorithm (default: HS256)
            ttl: Token lifetime measured from the issue time
            clock: Returns the current time in seconds since the epoch
        """
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.ttl = ttl
        self._clock = clock

    def mint(self, account: Account) -> str:
        """
        Create a signed token for an account.

        Args:
            account: Persisted account (must have an id)

        Returns:
            Compact JWT string, safe for URLs and headers
        """
        if account.id is None:
            raise ValueError("Cannot mint a token for an unsaved account")

        issued_at = round(self._clock(), 3)
        claims = {
            "sub": str(account.id),
            "email": account.email,
            "username": account.username,
            "iat": issued_at,
            "exp": issued_at + self.ttl.total_seconds(),
        }
        return jwt.encode(claims, self._secret_key, algorithm=self.algorithm)

    def validate(self, token: str) -> TokenClaims:
        """
        Decode and validate a token.

        Args:
            token: Token string from the Authorization header

        Returns:
            Validated token claims

        Raises:
            MalformedTokenError: If the token cannot be decoded or lacks claims
            BadSignatureError: If the signature does not match the payload
            ExpiredTokenError: If the token is older than the TTL
        """
        try:
            unverified = jwt.get_unverified_claims(token)
            claims = TokenClaims.model_validate(unverified)
        except (JWTError, ValidationError) as e:
            logger.debug("token_malformed", error=str(e))
            raise MalformedTokenError() from e

        try:
            # Expiry is checked below against the codec clock.
            jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": False, "verify_iat": False, "verify_nbf": False},
            )
        except JWTError as e:
            logger.debug("token_bad_signature", error=str(e))
            raise BadSignatureError() from e

        age = self._clock() - claims.iat
        if age > self.ttl.total_seconds():
            logger.debug("token_expired", subject=claims.sub, age_seconds=round(age, 3))
            raise ExpiredTokenError()

        return claims
