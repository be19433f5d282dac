"""
Seed script for the HealthGuard in-process store or Firestore.

Usage:
  - Dry run (default): python scripts/seed_db.py
  - Apply to configured store: python scripts/seed_db.py --apply
  - Force the in-process store: python scripts/seed_db.py --apply --force-mock

Behavior:
  - Loads `db_seed.json` from the working directory (or --file).
  - Validates every entry before anything is written.
  - Writes reporters and infrastructure features through the configured
    report store (USE_MOCK_DB decides which one).

NOTE: When applying to real Firestore, ensure `FIREBASE_CREDENTIALS_PATH` and `USE_MOCK_DB=false` are set in `.env`.
"""

import argparse
import json
import logging
import os
from typing import List, Tuple

from pydantic import ValidationError as PydanticValidationError

from app.models.map import InfrastructureCreate
from app.models.reporter import ReporterProfile
from app.store import build_store
from app.store.base import ReportStore

logger = logging.getLogger("seed_db")


def load_seed(path: str = "./db_seed.json") -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def parse_seed(seed: dict) -> Tuple[List[ReporterProfile], List[InfrastructureCreate]]:
    """Raises pydantic's ValidationError on the first malformed entry."""
    reporters = [
        ReporterProfile(reporter_id=reporter_id, **data)
        for reporter_id, data in seed.get("reporters", {}).items()
    ]
    features = [InfrastructureCreate(**data) for data in seed.get("infrastructure", [])]
    return reporters, features


def write_to_store(
    store: ReportStore,
    reporters: List[ReporterProfile],
    features: List[InfrastructureCreate],
    apply: bool = False,
) -> int:
    written = 0
    for profile in reporters:
        logger.info(f"Preparing: reporters/{profile.reporter_id} ({profile.role.value})")
        if apply:
            store.upsert_reporter(profile)
            written += 1
    for feature in features:
        logger.info(f"Preparing: infrastructure/{feature.type} '{feature.name}'")
        if apply:
            saved = store.add_infrastructure(feature)
            logger.info(f"Wrote: infrastructure/{saved.id}")
            written += 1
    return written


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    parser = argparse.ArgumentParser()
    parser.add_argument("--apply", action="store_true", help="Write seed to the store instead of dry-run")
    parser.add_argument("--force-mock", action="store_true", help="Use the in-process store even if Firestore is configured")
    parser.add_argument("--file", default=os.path.join(os.getcwd(), "db_seed.json"), help="Seed file path")
    args = parser.parse_args()

    if not os.path.exists(args.file):
        logger.error(f"Seed file not found: {args.file}")
        return 1

    try:
        reporters, features = parse_seed(load_seed(args.file))
    except PydanticValidationError as e:
        logger.error(f"Seed file is invalid, nothing written:\n{e}")
        return 1

    store = build_store(use_mock=True if args.force_mock else None)
    written = write_to_store(store, reporters, features, apply=args.apply)

    if args.apply:
        logger.info(f"Seeding completed ({written} entries).")
    else:
        logger.info("Dry run complete. Re-run with --apply to write to the store.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
