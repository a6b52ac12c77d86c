#!/usr/bin/env python3
"""Backfill slugs for blog posts, case studies and services stored without one."""
import logging
import sys

from dotenv import load_dotenv

from database import SLUGGED_COLLECTIONS, connect, ensure_indexes
from settings import Settings, setup_logging
from slugs import backfill_slugs

logger = logging.getLogger("scripts.migrate_slugs")


def migrate(db) -> dict:
    summary = {}
    for name, title_field in SLUGGED_COLLECTIONS.items():
        updated = backfill_slugs(db[name], title_field)
        for entry in updated:
            logger.info("%s %s -> %s", name, entry["id"], entry["slug"])
        summary[name] = len(updated)
    return summary


def main() -> int:
    load_dotenv()
    settings = Settings()
    setup_logging(settings.log_level)
    db = connect(settings.database_url, settings.database_name)
    if db is None:
        logger.critical("DATABASE_URL is not set")
        return 1
    summary = migrate(db)
    for name, count in summary.items():
        print(f"{name}: {count} document(s) updated")
    ensure_indexes(db)
    return 0


if __name__ == "__main__":
    sys.exit(main())
