#!/usr/bin/env python3
import sys
import logging

from database.connection import Database

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

def create_all_tables(database: Database = None) -> bool:
    """Create all database tables"""
    database = database or Database()
    try:
        logger.info(f"Creating database tables on {database.engine.url.render_as_string(hide_password=True)}")
        database.create_tables()
        logger.info("All tables created successfully")
        return True
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        return False
    finally:
        database.dispose()

if __name__ == "__main__":
    success = create_all_tables()
    sys.exit(0 if success else 1)
