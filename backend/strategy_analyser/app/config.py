"""Centralized application configuration for the strategy analyser service."""
from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_ROOT_DIR = Path(__file__).resolve().parents[3]
_SERVICE_DIR = _ROOT_DIR / "backend" / "strategy_analyser"
_DEFAULT_ENV_FILES: tuple[Path, ...] = (
    _ROOT_DIR / ".env",
    _SERVICE_DIR / ".env",
)


class StorageSettings(BaseSettings):
    """Relational storage configuration.

    A settings class of its own so that the flat aliases such as
    ``DATABASE_URL`` resolve even when the section is built by default.
    """

    database_url: str = Field(
        default="sqlite+aiosqlite:///./strategy_analyser.db",
        validation_alias=AliasChoices("DATABASE_URL", "STORAGE__DATABASE_URL"),
    )
    sqlalchemy_echo: bool | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "SQLALCHEMY_ECHO",
            "DATABASE_ECHO",
            "STORAGE__SQLALCHEMY_ECHO",
        ),
        description=(
            "When set, overrides the default behaviour for SQLAlchemy's echo flag."
        ),
    )
    auto_create_schema: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "DATABASE_AUTO_CREATE",
            "STORAGE__AUTO_CREATE_SCHEMA",
        ),
        description="Create missing tables on startup instead of relying on Alembic.",
    )

    model_config = SettingsConfigDict(
        env_file=_DEFAULT_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def _ensure_database_url(cls, value: str | None) -> str:
        """Ensure that a usable database URL is provided."""

        if value is None:
            raise ValueError("DATABASE_URL must be configured")

        url = value.strip()
        if not url:
            raise ValueError("DATABASE_URL must be a non-empty string")
        return url


class ParserSettings(BaseSettings):
    """Settings consumed by the raw output parsers."""

    point_value: float = Field(
        default=5.0,
        gt=0,
        validation_alias=AliasChoices("POINT_VALUE", "PARSERS__POINT_VALUE"),
        description="Dollar value of one index point (MNQ by default).",
    )

    model_config = SettingsConfigDict(
        env_file=_DEFAULT_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


class Settings(BaseSettings):
    """Top level strategy analyser configuration."""

    env: str = Field(default="dev", validation_alias=AliasChoices("ENV", "APP_ENV"))
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("LOG_LEVEL", "LOGGING__LEVEL"),
    )
    cors_origins: str = Field(
        default="*",
        validation_alias=AliasChoices("CORS_ORIGINS", "HTTP__CORS_ORIGINS"),
    )
    storage: StorageSettings = Field(default_factory=StorageSettings)
    parsers: ParserSettings = Field(default_factory=ParserSettings)

    model_config = SettingsConfigDict(
        env_file=_DEFAULT_ENV_FILES,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: str | None) -> str:
        if value is None:
            return "INFO"
        cleaned = str(value).strip().upper()
        if not cleaned:
            raise ValueError("LOG_LEVEL must be a non-empty string")
        return cleaned

    @property
    def allowed_origins(self) -> list[str]:
        candidates = self.cors_origins.replace(",", " ").split()
        cleaned: list[str] = []
        for candidate in candidates:
            origin = candidate.strip().rstrip("/")
            if origin and origin not in cleaned:
                cleaned.append(origin)
        return cleaned or ["*"]

    @property
    def database_url(self) -> str:
        return self.storage.database_url

    @property
    def sqlalchemy_echo(self) -> bool:
        if self.storage.sqlalchemy_echo is not None:
            return self.storage.sqlalchemy_echo
        return False

    @property
    def point_value(self) -> float:
        return self.parsers.point_value


settings = Settings()

__all__ = [
    "ParserSettings",
    "Settings",
    "StorageSettings",
    "settings",
]
