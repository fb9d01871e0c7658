"""Utility to seed a database with sample schemes and their steps."""

from __future__ import annotations

import argparse
import logging
import os
import sys

from scheme_service.db import database
from scheme_service.db.repositories.schemes import SchemeRepository


logger = logging.getLogger("scheme_service.scripts.seed_schemes")

SAMPLE_SCHEMES = [
    {
        "scheme_name": "World Domination",
        "steps": [
            (1, "Collect underpants"),
            (2, "???"),
            (3, "Profit"),
        ],
    },
    {
        "scheme_name": "Get Rich Quick",
        "steps": [
            (1, "Buy a lottery ticket"),
            (2, "Wait for the draw"),
        ],
    },
    {
        "scheme_name": "Find the Holy Grail",
        "steps": [
            (1, "quest"),
            (2, "...and quest"),
            (3, "...and quest some more"),
        ],
    },
    {
        "scheme_name": "Dig a Tunnel",
        "steps": [],
    },
]


# Access SessionLocal dynamically so test fixtures that rebind the
# sessionmaker are respected.
SessionLocal = lambda: database.SessionLocal()


def configure_logging() -> None:
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(level)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed sample schemes and steps")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop and recreate the schemes and steps tables before seeding",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be inserted without writing anything",
    )
    return parser.parse_args(argv)


def seed(session, reset: bool = False, dry_run: bool = False) -> int:
    """Insert the sample data and return the number of schemes created.

    Schemes whose name already exists are left untouched.
    """
    if dry_run:
        step_total = sum(len(s["steps"]) for s in SAMPLE_SCHEMES)
        print(f"{len(SAMPLE_SCHEMES)} schemes with {step_total} steps would be seeded; no changes made.")
        return 0

    bind = session.get_bind()
    # Release the connection and forget loaded rows before touching the schema
    session.close()
    if reset:
        logger.info("Resetting schemes tables")
        database.drop_db(bind)
    database.init_db(bind)

    repo = SchemeRepository(session)
    existing = {s.scheme_name for s in repo.find()}
    created = 0
    for sample in SAMPLE_SCHEMES:
        if sample["scheme_name"] in existing:
            logger.info("Skipping existing scheme %r", sample["scheme_name"])
            continue
        scheme = repo.add({"scheme_name": sample["scheme_name"]})
        for step_number, instructions in sample["steps"]:
            repo.add_step({"step_number": step_number, "instructions": instructions}, scheme.id)
        created += 1
    print(f"Seeded {created} schemes.")
    logger.info("Seeding finished: created=%s skipped=%s", created, len(SAMPLE_SCHEMES) - created)
    return created


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    args = parse_args(argv)
    with database.session_scope(SessionLocal) as session:
        seed(session, reset=args.reset, dry_run=args.dry_run)
    return 0


if __name__ == "__main__":  # pragma: no cover - manual execution path
    sys.exit(main())
