"""CLI commands for account management."""

import argparse
import asyncio
import getpass
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import structlog

from zylorb.auth import AuthGateway, TokenCodec
from zylorb.common.config import Config
from zylorb.common.logging_config import setup_logging
from zylorb.core.db import create_account_store
from zylorb.core.exceptions import TokenError, ZylorbError

logger = structlog.get_logger(__name__)


def _load_config(config_path: Optional[str]) -> Config:
    if config_path:
        return Config.from_yaml(Path(config_path))
    return Config()


async def create_account(
    username: str,
    email: str,
    password: Optional[str] = None,
    config_path: Optional[str] = None,
) -> bool:
    """
    Register an account through the same gateway the API uses.

    Args:
        username: New username
        email: New email address
        password: Password (if None, prompts interactively)
        config_path: Optional YAML configuration file

    Returns:
        True if successful, False otherwise
    """
    from zylorb.web.settings import get_settings

    settings = get_settings()
    config = _load_config(config_path or settings.config_path)
    setup_logging(config.logging)

    if password is None:
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Error: Passwords do not match", file=sys.stderr)
            return False

    codec = TokenCodec(secret_key=settings.jwt_secret, algorithm=settings.jwt_algorithm)
    async with create_account_store(config.database) as store:
        gateway = AuthGateway(store=store, codec=codec, hash_rounds=settings.password_hash_rounds)
        try:
            result = await gateway.register(username, email, password)
        except ZylorbError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return False

    print(f"Account '{result.account.username}' created with id {result.account.id}")
    print(f"Token: {result.token}")
    logger.info("account_created_via_cli", account_id=result.account.id)
    return True


def inspect_token(token: str) -> bool:
    """
    Validate a token with the configured secret and print its claims.

    Returns:
        True if the token is valid, False otherwise
    """
    from zylorb.web.settings import get_settings

    settings = get_settings()
    codec = TokenCodec(secret_key=settings.jwt_secret, algorithm=settings.jwt_algorithm)

    try:
        claims = codec.validate(token)
    except TokenError as e:
        print(f"Invalid token ({type(e).__name__})", file=sys.stderr)
        return False

    issued = datetime.fromtimestamp(claims.iat, tz=timezone.utc)
    expires = issued + codec.ttl
    print(f"{'Account ID':<12} {claims.sub}")
    print(f"{'Username':<12} {claims.username}")
    print(f"{'Email':<12} {claims.email}")
    print(f"{'Issued':<12} {issued.isoformat()[:19]}")
    print(f"{'Expires':<12} {expires.isoformat()[:19]}")
    return True


def main() -> None:
    """Main entry point for account CLI commands."""
    parser = argparse.ArgumentParser(
        prog="zylorb-accounts",
        description="ZYLORB account management commands",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    create_parser = subparsers.add_parser(
        "create",
        help="Create an account",
        description="Register a new account and print its first token",
    )
    create_parser.add_argument("--username", "-u", required=True, help="Username")
    create_parser.add_argument("--email", "-e", required=True, help="Email address")
    create_parser.add_argument(
        "--password",
        "-p",
        help="Password (if not provided, will prompt interactively)",
    )
    create_parser.add_argument("--config", "-c", help="Path to YAML configuration file")

    token_parser = subparsers.add_parser(
        "inspect-token",
        help="Validate a token",
        description="Check a bearer token against the configured secret and show its claims",
    )
    token_parser.add_argument("token", help="Bearer token")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "create":
        success = asyncio.run(
            create_account(args.username, args.email, args.password, args.config)
        )
        sys.exit(0 if success else 1)
    elif args.command == "inspect-token":
        sys.exit(0 if inspect_token(args.token) else 1)


if __name__ == "__main__":
    main()
