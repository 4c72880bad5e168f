"""
Example usage of the ZYLORB auth core without the HTTP layer.

This example demonstrates:
1. Loading configuration from YAML
2. Setting up structured logging
3. Registering, logging in and authenticating through the gateway
4. Handling the errors the gateway raises
"""

import asyncio
import secrets

from zylorb.auth import AuthGateway, RequestThrottle, TokenCodec
from zylorb.common.config import Config
from zylorb.common.logging_config import bind_context, get_logger, setup_logging
from zylorb.core.db import create_account_store
from zylorb.core.exceptions import InvalidCredentialsError, TokenError

logger = get_logger(__name__)

CONFIG_YAML = """
logging:
  level: INFO
  format: text
database:
  backend: memory
"""


async def example_register_and_login(gateway: AuthGateway) -> str:
    """Example: Register an account, then log in with the same credentials."""
    logger.info("example_started", example="register_and_login")

    registered = await gateway.register("night_owl", "owl@example.com", "hunter22")
    print(f"Registered {registered.account.username} (id {registered.account.id})")

    result = await gateway.login("owl@example.com", "hunter22")
    print(f"Login token: {result.token[:24]}...")

    try:
        await gateway.login("owl@example.com", "wrong-password")
    except InvalidCredentialsError as e:
        print(f"Wrong password rejected: {e.message}")

    return result.token


async def example_authenticate(gateway: AuthGateway, token: str) -> None:
    """Example: Resolve a bearer token to its account."""
    logger.info("example_started", example="authenticate")

    account = await gateway.authenticate(token)
    print(f"Token belongs to {account.username}")

    try:
        await gateway.authenticate(token[:-4] + "AAAA")
    except TokenError:
        print(f"Tampered token rejected: {TokenError.public_message}")


def example_throttle() -> None:
    """Example: Per-address request ceiling."""
    throttle = RequestThrottle(max_requests=3, window_seconds=60)

    for attempt in range(1, 5):
        allowed = throttle.allow("203.0.113.9")
        print(f"Request {attempt}: {'allowed' if allowed else 'denied'}")

    print(f"Retry after {throttle.retry_after('203.0.113.9')}s")


async def main():
    """Run all examples."""
    config = Config.from_yaml_string(CONFIG_YAML)
    setup_logging(config.logging)
    bind_context(example_run=secrets.token_hex(4))

    codec = TokenCodec(secret_key=secrets.token_urlsafe(32))
    async with create_account_store(config.database) as store:
        gateway = AuthGateway(store=store, codec=codec, hash_rounds=10)
        token = await example_register_and_login(gateway)
        await example_authenticate(gateway, token)

    example_throttle()


if __name__ == "__main__":
    asyncio.run(main())
