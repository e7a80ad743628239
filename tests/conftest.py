from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.api import deps
from app.core.config import Settings
from app.core.security import get_password_hash
from app.factory import create_app
from tests.fakes import FakeDatabase


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        env="test",
        debug=False,
        docs_enabled=False,
        log_level="WARNING",
        secret_key="test_secret_key_must_be_32_chars_minimum",
        admin_username="admin",
        admin_password_hash=get_password_hash("password"),
        cors_origins=["http://localhost"],
        trusted_hosts=["testserver", "localhost"],
        tomorrow_api_key=None,
        use_mock_weather=True,
        weather_timeout_seconds=1.0,
        mongodb_uri="mongodb://localhost:27017/weather_test",
        mongodb_server_selection_timeout_ms=100,
        mongodb_ping_on_startup=False,
    )


@pytest.fixture()
def database() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture()
def client(settings: Settings, database: FakeDatabase) -> TestClient:
    app = create_app(settings)
    app.dependency_overrides[deps.get_database] = lambda: database
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def token_pair(client: TestClient) -> dict:
    resp = client.post(
        "/api/v1/auth/token",
        data={"username": "admin", "password": "password"},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


@pytest.fixture()
def token(token_pair: dict) -> str:
    return token_pair["access_token"]
