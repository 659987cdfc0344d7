"""
Seed the soil report store with random sample data.

Usage:
    python -m seed --count 25
    python -m seed --keep          # add to existing rows instead of clearing

Every seeded report goes through `service.create`, so it is validated the
same way API writes are.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
import sys
from dataclasses import dataclass

from core.db import Database
from core.logging_config import configure_logging
from soil_reports import service
from soil_reports.errors import ValidationError
from soil_reports.repository import PostgresSoilReportStore
from soil_reports.store import SoilReportStore

logger = logging.getLogger(__name__)

INDIAN_STATES = [
    "Maharashtra",
    "Karnataka",
    "Punjab",
    "Gujarat",
    "Madhya Pradesh",
]

DISTRICTS: dict[str, list[str]] = {
    "Maharashtra": ["Pune", "Nagpur", "Nashik"],
    "Karnataka": ["Bangalore Rural", "Mysore", "Belgaum"],
    "Punjab": ["Ludhiana", "Amritsar", "Patiala"],
    "Gujarat": ["Ahmedabad", "Surat", "Vadodara"],
    "Madhya Pradesh": ["Bhopal", "Indore", "Gwalior"],
}

VILLAGES: dict[str, list[str]] = {
    "Pune": ["Wagholi", "Lohegaon", "Manjri"],
    "Nagpur": ["Hingna", "Wadi", "Kamptee"],
    "Ludhiana": ["Sahnewal", "Doraha", "Mullanpur"],
}

DEFAULT_VILLAGE = "Default Village"


@dataclass
class SeedStats:
    created: int = 0
    failed: int = 0


def random_report(rng: random.Random) -> dict:
    state = rng.choice(INDIAN_STATES)
    district = rng.choice(DISTRICTS[state])
    villages = VILLAGES.get(district)
    village = rng.choice(villages) if villages else DEFAULT_VILLAGE

    return {
        "state": state,
        "district": district,
        "village": village,
        "ph": round(rng.random() * 14, 2),
        "nitrogen": round(rng.random() * 500 + 100, 2),
        "phosphorus": round(rng.random() * 300 + 50, 2),
        "potassium": round(rng.random() * 400 + 100, 2),
    }


async def seed_reports(
    store: SoilReportStore,
    count: int,
    *,
    clear: bool = True,
    rng: random.Random | None = None,
) -> SeedStats:
    rng = rng or random.Random()
    stats = SeedStats()

    if clear:
        removed = await store.clear()
        logger.info("seed_cleared removed=%s", removed)

    for _ in range(count):
        try:
            await service.create(store, random_report(rng))
        except ValidationError as exc:
            stats.failed += 1
            logger.warning("seed_report_rejected error=%s", exc)
            continue
        stats.created += 1

    return stats


async def _run(count: int, clear: bool) -> SeedStats:
    database = Database()
    await database.connect()
    try:
        store = PostgresSoilReportStore(database)
        await store.ensure_schema()
        return await seed_reports(store, count, clear=clear)
    finally:
        await database.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Seed soil reports with random sample data.")
    parser.add_argument("--count", type=int, default=10, help="number of reports to create (default: 10)")
    parser.add_argument("--keep", action="store_true", help="keep existing reports instead of clearing them")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()
    if args.count < 0:
        logger.error("seed_invalid_count count=%s", args.count)
        return 2

    try:
        stats = asyncio.run(_run(args.count, clear=not args.keep))
    except RuntimeError as exc:
        logger.error("seed_failed error=%s", exc)
        return 1

    logger.info("seed_completed created=%s failed=%s", stats.created, stats.failed)
    return 0


if __name__ == "__main__":
    sys.exit(main())
