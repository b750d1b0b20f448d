#!/usr/bin/env python3
"""
Migration script to create the channel tables, or add the test-result columns
(models_json, test_time, response_time_ms) to an existing channels table.
Run this script before the first channel test against an older database.
"""

import logging
import sys
from pathlib import Path

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from orm.models import engine as default_engine, init_db  # noqa: E402
from utils.logging_config import setup_logging  # noqa: E402

logger = logging.getLogger(__name__)

TEST_RESULT_COLUMNS = {
    "models_json": "TEXT",
    "test_time": "INTEGER",
    "response_time_ms": "INTEGER",
}


def migrate_database(engine=None) -> list[str]:
    """Create missing tables and add missing test-result columns.

    Returns:
        Names of the columns that were added.
    """
    engine = engine if engine is not None else default_engine
    init_db(bind=engine)

    existing = {column["name"] for column in inspect(engine).get_columns("channels")}
    added = []
    with engine.begin() as conn:
        for name, column_type in TEST_RESULT_COLUMNS.items():
            if name in existing:
                continue
            logger.info(f"Adding {name} column to channels table...")
            conn.execute(text(f"ALTER TABLE channels ADD COLUMN {name} {column_type}"))
            added.append(name)

    if added:
        logger.info(f"Added columns: {', '.join(added)}")
    else:
        logger.info("channels table already has all test-result columns")
    return added


def main():
    setup_logging()
    try:
        migrate_database()
    except SQLAlchemyError:
        logger.exception("Migration failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
