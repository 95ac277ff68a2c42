# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import sys
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_INSECURE_SECRETS = ("dev", "development", "test", "change-me", "")

_SECTION_CONFIG = SettingsConfigDict(
    validate_by_name=True,
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
)


def _parse_bool_value(value: str | bool) -> bool:
    if isinstance(value, str):
        return value.lower() in ("1", "true", "yes")
    return bool(value)


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///vidshare.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")

    model_config = _SECTION_CONFIG


class TokenSettings(BaseSettings):
    access_secret: str = Field("dev", alias="ACCESS_TOKEN_SECRET")
    refresh_secret: str = Field("dev-refresh", alias="REFRESH_TOKEN_SECRET")
    access_ttl_minutes: int = Field(15, ge=1, alias="ACCESS_TOKEN_TTL_MINUTES")
    refresh_ttl_days: int = Field(15, ge=1, alias="REFRESH_TOKEN_TTL_DAYS")
    algorithm: str = Field("HS256", alias="JWT_ALGORITHM")

    model_config = _SECTION_CONFIG

    @property
    def access_ttl_seconds(self) -> int:
        return self.access_ttl_minutes * 60

    @property
    def refresh_ttl_seconds(self) -> int:
        return self.refresh_ttl_days * 24 * 60 * 60


class AuthPolicyConfig(BaseSettings):
    # Login is refused until the email address is verified
    require_verified_email: bool = Field(True, alias="AUTH_REQUIRE_VERIFIED_EMAIL")
    # Every refresh call also replaces the stored refresh token
    rotate_refresh_tokens: bool = Field(True, alias="AUTH_ROTATE_REFRESH_TOKENS")

    verification_code_ttl_minutes: int = Field(
        10, ge=1, alias="VERIFICATION_CODE_TTL_MINUTES"
    )
    verification_code_rounds: int = Field(
        10, ge=4, le=31, alias="VERIFICATION_CODE_BCRYPT_ROUNDS"
    )

    model_config = _SECTION_CONFIG

    @field_validator("require_verified_email", "rotate_refresh_tokens", mode="before")
    @classmethod
    def _parse_bool(cls, value: str | bool) -> bool:
        return _parse_bool_value(value)


class MailConfig(BaseSettings):
    backend: Literal["smtp", "console"] = Field("console", alias="MAIL_BACKEND")
    smtp_host: str | None = Field(None, alias="SMTP_HOST")
    smtp_port: int = Field(587, alias="SMTP_PORT")
    smtp_user: str | None = Field(None, alias="SMTP_USER")
    smtp_password: str | None = Field(None, alias="SMTP_PASSWORD")
    smtp_use_tls: bool = Field(True, alias="SMTP_USE_TLS")
    from_address: str = Field("no-reply@vidshare.local", alias="MAIL_FROM")
    timeout: float = Field(30.0, ge=0.1, alias="SMTP_TIMEOUT")

    model_config = _SECTION_CONFIG

    @field_validator("smtp_use_tls", mode="before")
    @classmethod
    def _parse_bool(cls, value: str | bool) -> bool:
        return _parse_bool_value(value)


class MediaConfig(BaseSettings):
    imagekit_public_key: str | None = Field(None, alias="IMAGEKIT_PUBLIC_KEY")
    imagekit_private_key: str | None = Field(None, alias="IMAGEKIT_PRIVATE_KEY")
    imagekit_url_endpoint: str | None = Field(None, alias="IMAGEKIT_URL_ENDPOINT")
    upload_url: str = Field(
        "https://upload.imagekit.io/api/v1/files/upload", alias="IMAGEKIT_UPLOAD_URL"
    )
    api_url: str = Field("https://api.imagekit.io/v1", alias="IMAGEKIT_API_URL")
    folder: str = Field("vidshare", alias="MEDIA_FOLDER")
    temp_dir: Path = Field(Path("instance/uploads"), alias="UPLOAD_TEMP_DIR")
    timeout: float = Field(60.0, ge=0.1, alias="MEDIA_TIMEOUT")

    model_config = _SECTION_CONFIG


class ObservabilityConfig(BaseSettings):
    metrics_enabled: bool = Field(True, alias="METRICS_ENABLED")
    service_name: str = Field("vidshare-backend", alias="SERVICE_NAME")

    model_config = _SECTION_CONFIG


class SecurityConfig(BaseSettings):
    # Cookie security
    cookie_secure: bool = Field(True, alias="COOKIE_SECURE")
    cookie_samesite: str = Field("None", alias="COOKIE_SAMESITE")

    # CORS
    allowed_origins_raw: str = Field("*", alias="ALLOWED_ORIGINS")

    # Rate limiting
    enable_rate_limit: bool = Field(True, alias="ENABLE_RATE_LIMIT")
    rate_limit_requests: int = Field(10, alias="RL_LIMIT")
    rate_limit_window: float = Field(60.0, alias="RL_WINDOW")

    # Reverse proxies in front of the app whose X-Forwarded-For is trusted
    trusted_proxy_count: int = Field(0, ge=0, alias="TRUSTED_PROXY_COUNT")

    # HSTS
    enable_hsts: bool = Field(False, alias="ENABLE_HSTS")

    model_config = _SECTION_CONFIG

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins_raw.split(",") if o.strip()]

    @field_validator("cookie_secure", "enable_rate_limit", "enable_hsts", mode="before")
    @classmethod
    def _parse_bool(cls, value: str | bool) -> bool:
        return _parse_bool_value(value)


def _database_config_factory() -> DatabaseConfig:
    return DatabaseConfig()  # type: ignore[call-arg]


def _token_settings_factory() -> TokenSettings:
    return TokenSettings()  # type: ignore[call-arg]


def _auth_policy_config_factory() -> AuthPolicyConfig:
    return AuthPolicyConfig()  # type: ignore[call-arg]


def _mail_config_factory() -> MailConfig:
    return MailConfig()  # type: ignore[call-arg]


def _media_config_factory() -> MediaConfig:
    return MediaConfig()  # type: ignore[call-arg]


def _observability_config_factory() -> ObservabilityConfig:
    return ObservabilityConfig()  # type: ignore[call-arg]


def _security_config_factory() -> SecurityConfig:
    return SecurityConfig()  # type: ignore[call-arg]


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")

    database: DatabaseConfig = Field(default_factory=_database_config_factory)
    tokens: TokenSettings = Field(default_factory=_token_settings_factory)
    auth: AuthPolicyConfig = Field(default_factory=_auth_policy_config_factory)
    mail: MailConfig = Field(default_factory=_mail_config_factory)
    media: MediaConfig = Field(default_factory=_media_config_factory)
    observability: ObservabilityConfig = Field(default_factory=_observability_config_factory)
    security: SecurityConfig = Field(default_factory=_security_config_factory)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        arbitrary_types_allowed=True,
        extra="ignore",
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        return _parse_bool_value(value)

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "AppConfig":
        if not self.is_production():
            return self

        insecure = [
            name
            for name, value in (
                ("ACCESS_TOKEN_SECRET", self.tokens.access_secret),
                ("REFRESH_TOKEN_SECRET", self.tokens.refresh_secret),
            )
            if value in _INSECURE_SECRETS or value.startswith("dev")
        ]
        if insecure or self.tokens.access_secret == self.tokens.refresh_secret:
            print(
                "\n❌ CRITICAL SECURITY ERROR: Insecure token secrets detected in production!\n"
                f"   Offending settings: {', '.join(insecure) or 'secrets are identical'}\n"
                "   Access and refresh secrets must be distinct strong random values.\n"
                "   Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(48))\"\n",
                file=sys.stderr,
            )
            sys.exit(1)

        warnings = []
        if not self.security.cookie_secure:
            warnings.append("⚠️  Cookie Secure flag is DISABLED (use HTTPS!)")
        if "*" in self.security.allowed_origins:
            warnings.append("⚠️  CORS allows wildcard (*) origins")
        if not self.security.enable_hsts:
            warnings.append("⚠️  HSTS is DISABLED (recommended for HTTPS)")
        if self.mail.backend == "console":
            warnings.append("⚠️  MAIL_BACKEND=console, verification codes are only logged")

        if warnings:
            print("\n⚠️  PRODUCTION SECURITY WARNINGS:", file=sys.stderr)
            for warning in warnings:
                print(f"   {warning}", file=sys.stderr)
            print(
                "   Consider enabling these security features in production.\n",
                file=sys.stderr,
            )

        return self

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()  # type: ignore[call-arg]


__all__ = [
    "AppConfig",
    "AuthPolicyConfig",
    "DatabaseConfig",
    "MailConfig",
    "MediaConfig",
    "ObservabilityConfig",
    "SecurityConfig",
    "TokenSettings",
    "load_config",
]
