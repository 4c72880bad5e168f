"""ZYLORB package initialization."""

from .auth import AuthGateway, RequestThrottle, TokenCodec, hash_password, verify_password
from .common.config import Config, DatabaseConfig, LoggingConfig
from .common.logging_config import setup_logging
from .core.db import AccountStore, InMemoryAccountStore, SQLiteAccountStore, create_account_store
from .core.exceptions import ZylorbError
from .core.models import Account, PublicAccount

__version__ = "2.1.0"
__all__ = [
    "Account",
    "PublicAccount",
    "AccountStore",
    "InMemoryAccountStore",
    "SQLiteAccountStore",
    "create_account_store",
    "AuthGateway",
    "TokenCodec",
    "RequestThrottle",
    "hash_password",
    "verify_password",
    "Config",
    "DatabaseConfig",
    "LoggingConfig",
    "setup_logging",
    "ZylorbError",
]
