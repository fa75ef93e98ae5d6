from __future__ import annotations

from pathlib import Path

from alembic import command
from sqlalchemy import create_engine, inspect

from backend.strategy_analyser.db.base import Base
from backend.strategy_analyser.scripts.apply_migrations import build_config, run_migrations


def test_initial_migration_matches_models(tmp_path: Path) -> None:
    db_path = tmp_path / "migrated.sqlite3"

    run_migrations(f"sqlite+aiosqlite:///{db_path}")

    engine = create_engine(f"sqlite:///{db_path}")
    try:
        inspector = inspect(engine)
        tables = set(inspector.get_table_names())
        assert set(Base.metadata.tables) <= tables
        assert "alembic_version" in tables

        for name, table in Base.metadata.tables.items():
            migrated = {column["name"] for column in inspector.get_columns(name)}
            assert migrated == {column.name for column in table.columns}, name

        baseline_index = next(
            index
            for index in inspector.get_indexes("strategy_runs")
            if index["name"] == "uq_strategy_runs_baseline"
        )
        assert baseline_index["unique"]
        assert baseline_index["column_names"] == ["strategy_id"]

        foreign_keys = inspector.get_foreign_keys("daily_pnl")
        assert foreign_keys[0]["referred_table"] == "strategy_runs"
        assert foreign_keys[0]["options"].get("ondelete") == "CASCADE"
    finally:
        engine.dispose()


def test_downgrade_to_base_removes_tables(tmp_path: Path) -> None:
    db_path = tmp_path / "downgraded.sqlite3"
    url = f"sqlite+aiosqlite:///{db_path}"

    run_migrations(url)
    command.downgrade(build_config(url), "base")

    engine = create_engine(f"sqlite:///{db_path}")
    try:
        assert set(inspect(engine).get_table_names()) == {"alembic_version"}
    finally:
        engine.dispose()
