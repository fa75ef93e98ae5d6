#!/usr/bin/env python3
"""Parse a saved strategy output file and store it as a new run."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Optional

from sqlalchemy.exc import IntegrityError

from backend.strategy_analyser.app.config import settings
from backend.strategy_analyser.app.ingest import store_parsed_run
from backend.strategy_analyser.app.parsers import parser_registry
from backend.strategy_analyser.db.base import (
    create_engine,
    create_schema,
    create_session,
    dispose_engine,
)


async def _import_run(
    *,
    database_url: str,
    raw_data: str,
    description: Optional[str],
) -> int:
    parsed = parser_registry.parse_raw_data(raw_data)
    if parsed is None:
        raise SystemExit("Unable to parse the provided data. No suitable parser found.")

    create_engine(database_url, echo=False)
    await create_schema()

    session = create_session()
    try:
        run = await store_parsed_run(
            session, parsed, raw_data=raw_data, run_description=description
        )
    except IntegrityError as exc:  # pragma: no cover - interactive script guard
        raise SystemExit(f"Failed to store run: {exc}") from exc
    finally:
        await session.close()
        await dispose_engine()

    print(f"Stored {parsed.strategy_name} run #{run.id}: net P&L {run.net_pnl:.2f}")
    return run.id


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import a strategy output file as a run")
    parser.add_argument("path", type=Path, help="Text file holding the strategy output")
    parser.add_argument("--description", default=None, help="Run description to store")
    parser.add_argument(
        "--database-url",
        default=settings.database_url,
        help="Database URL to connect to (defaults to configured application URL).",
    )
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    raw_data = args.path.read_text(encoding="utf-8")
    if not raw_data.strip():
        raise SystemExit("Raw data file is empty")

    asyncio.run(
        _import_run(
            database_url=args.database_url,
            raw_data=raw_data,
            description=args.description,
        )
    )


if __name__ == "__main__":
    main()
