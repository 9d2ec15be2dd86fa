"""
Environment-backed settings, built once by ``create_app`` and passed down.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    app_name: str = "Leadboard API"
    app_version: str = "1.0.0"
    environment: str = "dev"  # dev | test | prod

    # Database
    database_url: str = Field(default="sqlite:///./leadboard.db")
    db_timeout_seconds: int = 20

    # Bearer tokens
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_ttl_seconds: int = 60 * 60 * 24 * 30

    # AES key for API keys at rest, 16/24/32 bytes
    enc_secret: str = "0123456789abcdef0123456789abcdef"

    # Google OAuth
    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_url: str = "http://localhost:8000/oauth/google/callback"

    cors_origins: str = "http://localhost:3000"
    log_level: str = "INFO"

    def origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
