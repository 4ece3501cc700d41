#!/usr/bin/env python3
"""
Database initialization script.
Run this to create all database tables.
"""

import logging
import sys

from sqlmodel import text

from taskhub.configs import get_settings
from taskhub.configs.database import init_db, make_engine

logger = logging.getLogger("taskhub.init_db")


def main():
    """Initialize the database schema."""
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    try:
        settings = get_settings()
        engine = make_engine(settings)

        logger.info("Testing database connection...")
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        logger.info("Database connection successful")

        init_db(engine)
        logger.info("Database schema created successfully")
    except Exception:
        logger.exception("Error initializing database")
        sys.exit(1)


if __name__ == "__main__":
    main()
