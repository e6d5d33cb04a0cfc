from __future__ import annotations

import argparse
import asyncio
from datetime import timedelta

from sqlalchemy import func, select

from docgen.db import AsyncSessionLocal, engine
from docgen.logger import logger
from docgen.models import DocumentJob as DocumentJobModel
from docgen.store import JobStore
from docgen.sweeper import RetentionSweeper


async def _count_jobs() -> int:
    async with AsyncSessionLocal() as db:
        return int((await db.execute(select(func.count()).select_from(DocumentJobModel))).scalar_one())


async def sweep_jobs(*, days: int, yes: bool) -> int:
    store = JobStore()
    retention = timedelta(days=days)
    cutoff = store.now() - retention

    before = await _count_jobs()
    logger.warning(
        "Retention sweep requested",
        extra={"before": before, "retention_days": days, "cutoff": cutoff.isoformat()},
    )

    if not yes:
        raise SystemExit(
            "Refusing to run without --yes. "
            f"This will DELETE all document jobs created before {cutoff.isoformat()}."
        )

    try:
        deleted = await RetentionSweeper(store, retention=retention).sweep()
        after = await _count_jobs()
    finally:
        await engine.dispose()

    logger.warning("Retention sweep completed", extra={"deleted": deleted, "after": after})
    return deleted


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Delete document jobs older than the retention window.",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=7,
        help="Retention window in days (default: 7).",
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Confirm destructive action (required).",
    )
    return parser


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()
    asyncio.run(sweep_jobs(days=args.days, yes=bool(args.yes)))


if __name__ == "__main__":
    main()
