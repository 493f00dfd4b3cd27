# inventory_planning/scripts/setup_db.py
import argparse
import sys

from inventory_planning.db import db, get_db_type, create_all_tables, drop_all_tables
from inventory_planning.models import Base
from inventory_planning.logging_setup import get_logger

logger = get_logger('db_setup')

def setup_database(drop_existing=False):
    """Set up the database schema.

    Args:
        drop_existing: If True, drop existing tables before creating new ones

    Returns:
        True if setup was successful, False otherwise
    """
    try:
        db.initialize()
        db_type = get_db_type()

        logger.info(f"Database type: {db_type}")

        if db_type == "postgresql":
            if drop_existing:
                logger.info("Dropping all existing tables...")
                drop_all_tables()
                logger.info("All tables dropped successfully.")

            logger.info("Creating database tables...")
            create_all_tables()
            logger.info(f"Database tables created: {', '.join(sorted(Base.metadata.tables))}")

        else:  # Supabase
            logger.info("Using Supabase. Tables must be created via SQL migrations.")
            logger.info(f"Expected tables: {', '.join(sorted(Base.metadata.tables))}")

        return True
    except Exception as e:
        logger.error(f"Error setting up database: {str(e)}")
        logger.exception(e)
        return False

def main():
    parser = argparse.ArgumentParser(description='Set up the inventory planning database')
    parser.add_argument('--drop', action='store_true', help='Drop existing tables before setup')
    args = parser.parse_args()

    sys.exit(0 if setup_database(args.drop) else 1)

if __name__ == "__main__":
    main()
