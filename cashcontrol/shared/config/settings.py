# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import sys
from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_INSECURE_SECRETS = ("dev", "development", "test", "")

_SECTION_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    validate_by_name=True,
)


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///cashcontrol.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")

    model_config = _SECTION_CONFIG


class TelegramConfig(BaseSettings):
    bot_token: str = Field("", alias="TELEGRAM_BOT_TOKEN")
    # Replay window for mini-app init data, in seconds.
    auth_max_age: int = Field(86_400, ge=1, alias="TELEGRAM_AUTH_MAX_AGE")

    model_config = _SECTION_CONFIG


class SessionConfig(BaseSettings):
    jwt_secret: str = Field("dev", alias="JWT_SECRET")
    ttl_seconds: int = Field(86_400, ge=1, alias="SESSION_TTL")

    model_config = _SECTION_CONFIG


class SecurityConfig(BaseSettings):
    allowed_origins: Annotated[list[str], NoDecode] = Field(["*"], alias="ALLOWED_ORIGINS")

    # Rate limiting
    enable_rate_limit: bool = Field(True, alias="ENABLE_RATE_LIMIT")
    rate_limit_requests: int = Field(10, alias="RL_LIMIT")
    rate_limit_window: float = Field(60.0, alias="RL_WINDOW")
    trust_proxy_headers: bool = Field(False, alias="TRUST_PROXY_HEADERS")

    model_config = _SECTION_CONFIG

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _parse_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("enable_rate_limit", "trust_proxy_headers", mode="before")
    @classmethod
    def _parse_bool(cls, value: str | bool) -> bool:
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes")
        return bool(value)


def _database_config_factory() -> DatabaseConfig:
    return DatabaseConfig()  # type: ignore[call-arg]


def _telegram_config_factory() -> TelegramConfig:
    return TelegramConfig()  # type: ignore[call-arg]


def _session_config_factory() -> SessionConfig:
    return SessionConfig()  # type: ignore[call-arg]


def _security_config_factory() -> SecurityConfig:
    return SecurityConfig()  # type: ignore[call-arg]


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    database: DatabaseConfig = Field(default_factory=_database_config_factory)
    telegram: TelegramConfig = Field(default_factory=_telegram_config_factory)
    session: SessionConfig = Field(default_factory=_session_config_factory)
    security: SecurityConfig = Field(default_factory=_security_config_factory)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        extra="ignore",
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes")
        return bool(value)

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "AppConfig":
        if not self.is_production():
            return self

        if self.session.jwt_secret in _INSECURE_SECRETS:
            print(
                "\n❌ CRITICAL SECURITY ERROR: Insecure JWT_SECRET detected in production!\n"
                "   JWT_SECRET must be a strong random value in production.\n"
                "   Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\"\n",
                file=sys.stderr,
            )
            sys.exit(1)

        if not self.telegram.bot_token:
            print(
                "\n❌ CRITICAL CONFIG ERROR: TELEGRAM_BOT_TOKEN is not set in production!\n"
                "   Mini-app logins cannot be verified without it.\n",
                file=sys.stderr,
            )
            sys.exit(1)

        if "*" in self.security.allowed_origins:
            print("\n⚠️  PRODUCTION SECURITY WARNINGS:", file=sys.stderr)
            print("   ⚠️  CORS allows wildcard (*) origins\n", file=sys.stderr)

        return self

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "SecurityConfig",
    "SessionConfig",
    "TelegramConfig",
    "load_config",
]
