#!/usr/bin/env python3
"""
Seed the category catalogue shops can be tagged with
"""
import sys
import logging

from sqlalchemy.orm import Session

from database.connection import Database
from models.category import Category

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    ("Grocery", "cart"),
    ("Restaurant", "restaurant"),
    ("Pharmacy", "medkit"),
    ("Electronics", "hardware-chip"),
    ("Clothing", "shirt"),
    ("Bakery", "cafe"),
    ("Hardware", "hammer"),
    ("Salon", "cut"),
    ("Books", "book"),
    ("Other", "ellipsis-horizontal"),
]

def seed_categories(db: Session) -> int:
    """Insert any missing default categories; returns how many were added."""
    existing = {name for (name,) in db.query(Category.category_name).all()}

    added = 0
    for order, (name, icon) in enumerate(DEFAULT_CATEGORIES, start=1):
        if name in existing:
            continue
        db.add(Category(category_name=name, icon=icon, display_order=order, is_active=True))
        added += 1

    db.commit()
    return added

if __name__ == "__main__":
    database = Database()
    try:
        database.create_tables()
        with database.session() as db:
            count = seed_categories(db)
        logger.info(f"Seeded {count} categories")
    except Exception as e:
        logger.error(f"Failed to seed categories: {e}")
        sys.exit(1)
    finally:
        database.dispose()
