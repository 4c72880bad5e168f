"""Shared pytest fixtures for API tests."""

from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient

from zylorb.common.config import Config, DatabaseConfig, LoggingConfig
from zylorb.web.main import create_app
from zylorb.web.settings import APISettings


@pytest.fixture
def api_settings(jwt_secret: str, hash_rounds: int) -> APISettings:
    """Provide test API settings."""
    return APISettings(
        jwt_secret=jwt_secret,
        password_hash_rounds=hash_rounds,
        allowed_origins=["*"],
        log_requests=False,  # Reduce noise in tests
    )


@pytest.fixture
def test_config() -> Config:
    """Provide a test configuration with an in-memory account store."""
    return Config(
        database=DatabaseConfig(backend="memory"),
        logging=LoggingConfig(
            level="WARNING",  # Reduce noise in tests
            format="text",
        ),
    )


@pytest.fixture
def test_app(api_settings: APISettings, test_config: Config) -> Generator[TestClient, None, None]:
    """Provide a FastAPI TestClient backed by a fresh in-memory store."""
    app = create_app(settings=api_settings, config=test_config)
    with TestClient(app, raise_server_exceptions=True) as client:
        yield client


@pytest.fixture
def register_account(test_app: TestClient, sample_registration: dict) -> Callable[..., dict]:
    """
    Provide a helper that registers an account and returns the response body.

    Keyword arguments override fields of the sample registration.
    """

    def _register(**overrides) -> dict:
        response = test_app.post("/api/register", json={**sample_registration, **overrides})
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture
def auth_headers(register_account: Callable[..., dict]) -> dict:
    """Provide Authorization headers for a freshly registered account."""
    token = register_account()["token"]
    return {"Authorization": f"Bearer {token}"}
