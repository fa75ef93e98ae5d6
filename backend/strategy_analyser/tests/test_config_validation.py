"""Validation tests for strategy analyser configuration models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from backend.strategy_analyser.app.config import ParserSettings, Settings, StorageSettings


def test_storage_settings_read_flat_database_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "  postgresql+asyncpg://analyser@db/analyser  ")

    settings = Settings()

    assert settings.database_url == "postgresql+asyncpg://analyser@db/analyser"


@pytest.mark.parametrize("value", ["", "   "])
def test_empty_database_url_rejected(value: str) -> None:
    with pytest.raises(ValidationError):
        StorageSettings(database_url=value)


def test_sqlalchemy_echo_defaults_to_false(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SQLALCHEMY_ECHO", raising=False)
    monkeypatch.delenv("DATABASE_ECHO", raising=False)

    assert Settings().sqlalchemy_echo is False

    monkeypatch.setenv("DATABASE_ECHO", "true")
    assert Settings().sqlalchemy_echo is True


def test_log_level_is_normalised(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", " debug ")

    assert Settings().log_level == "DEBUG"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("*", ["*"]),
        ("", ["*"]),
        ("http://localhost:4200/, http://localhost:4200", ["http://localhost:4200"]),
        ("https://a.example https://b.example", ["https://a.example", "https://b.example"]),
    ],
)
def test_allowed_origins_parsing(monkeypatch: pytest.MonkeyPatch, raw: str, expected: list[str]) -> None:
    monkeypatch.setenv("CORS_ORIGINS", raw)

    assert Settings().allowed_origins == expected


@pytest.mark.parametrize("value", [0, -5])
def test_point_value_must_be_positive(value: float) -> None:
    with pytest.raises(ValidationError):
        ParserSettings(point_value=value)


def test_point_value_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("POINT_VALUE", "2")

    assert Settings().point_value == 2.0
