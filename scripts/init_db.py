#!/usr/bin/env python3
"""
Prepare the MindShield call record store.

    python scripts/init_db.py            create missing tables
    python scripts/init_db.py --reset    drop stored calls and flagged numbers first
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy.exc import SQLAlchemyError

from config.settings import settings
from mindshield.database.connection import SessionLocal, check_database_health, create_tables, drop_tables
from mindshield.database.utils import CallRecordRepository

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
logger = logging.getLogger("init_db")


def _redacted_url(url: str) -> str:
    # user:password@host -> ***@host
    if "@" not in url:
        return url
    scheme, _, rest = url.partition("://")
    return f"{scheme}://***@{rest.split('@', 1)[1]}"


def init_database(reset: bool = False) -> bool:
    logger.info(f"Database: {_redacted_url(settings.database.url)}")

    if not check_database_health():
        logger.error("Database is unreachable; check DATABASE_URL")
        return False

    try:
        if reset:
            logger.warning("Dropping call_records and flagged_numbers")
            drop_tables()
        create_tables()
    except SQLAlchemyError as e:
        logger.error(f"Database initialization failed: {e}")
        return False

    db = SessionLocal()
    try:
        repo = CallRecordRepository(db)
        logger.info(
            f"Ready: {len(repo.get_all_call_records())} call records, "
            f"{len(repo.get_all_flagged_numbers())} flagged numbers"
        )
    finally:
        db.close()
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the MindShield database tables")
    parser.add_argument("--reset", action="store_true", help="Drop all tables (and their data) first")
    args = parser.parse_args()

    sys.exit(0 if init_database(reset=args.reset) else 1)
