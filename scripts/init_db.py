"""
Database initialization script.

Run this script to create database tables and seed the exercise catalog.

Usage:
    python scripts/init_db.py
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from trainiq.core.config import settings
from trainiq.core.logger import setup_logger
from trainiq.db.init_db import init_db
from trainiq.db.session import engine

if __name__ == "__main__":
    setup_logger(level=settings.LOG_LEVEL, log_file=settings.LOG_FILE)
    logger.info("TrainIQ database initialization", database=settings.DATABASE_DBNAME, host=settings.DATABASE_HOST)

    try:
        init_db(engine)
    except SQLAlchemyError as e:
        logger.error("Database initialization failed", error=str(e))
        sys.exit(1)

    logger.info("Database initialized")
    sys.exit(0)
