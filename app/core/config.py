from __future__ import annotations

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_ADMIN_PASSWORD_HASH = (
    "$2b$12$sdOU8uwfeIt/6CaZUIM6ke71zg30wHn0r3QC4TDA3xHYwQxTVEEXi"
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="APP_",
        case_sensitive=False,
    )

    env: str = Field(default="development")
    debug: bool = Field(default=False)
    docs_enabled: bool = Field(default=True)
    log_level: str = Field(default="INFO")

    secret_key: str = Field(min_length=32)
    algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60 * 24, ge=1, le=60 * 24 * 30)
    refresh_token_expire_days: int = Field(default=7, ge=1, le=90)
    token_expiry_warning_minutes: int = Field(default=15, ge=0, le=60 * 24)

    admin_username: str = Field(default="admin", min_length=3, max_length=64)
    admin_password_hash: str = Field(default=DEFAULT_ADMIN_PASSWORD_HASH, min_length=10)

    cors_origins: list[str] = Field(default_factory=list)
    trusted_hosts: list[str] = Field(default_factory=lambda: ["localhost", "127.0.0.1"])

    tomorrow_api_key: str | None = Field(default=None)
    tomorrow_api_base_url: AnyHttpUrl = Field(default="https://api.tomorrow.io/v4")
    use_mock_weather: bool = Field(default=False)
    weather_timeout_seconds: float = Field(default=10.0, ge=1.0, le=30.0)

    mongodb_uri: str = Field(default="mongodb://localhost:27017/weather", min_length=10)
    mongodb_server_selection_timeout_ms: int = Field(default=5_000, ge=100, le=60_000)
    mongodb_ping_on_startup: bool = Field(default=True)

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"

    @property
    def mock_weather_enabled(self) -> bool:
        return self.use_mock_weather or self.env.lower() == "test"


def load_settings() -> Settings:
    settings = Settings()
    if not settings.cors_origins:
        settings.cors_origins = ["http://localhost:3000", "http://localhost:8000"]
    return settings
