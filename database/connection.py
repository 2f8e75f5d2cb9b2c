"""
Database connection management.
Handles per-request connections, transactions, initialization, and teardown.
"""

import logging
import sqlite3
from contextlib import contextmanager

from flask import g, current_app

logger = logging.getLogger(__name__)


def get_db():
    """
    Get the request's database connection with row factory.

    Returns:
        sqlite3.Connection: Database connection object
    """
    if 'db' not in g:
        db_path = current_app.config.get('DATABASE_PATH', 'instance/bouncyrent.db')
        g.db = sqlite3.connect(db_path, timeout=10)
        g.db.row_factory = sqlite3.Row
        # Enable foreign key constraints
        g.db.execute('PRAGMA foreign_keys = ON')
        # Enable WAL mode for better concurrency
        g.db.execute('PRAGMA journal_mode = WAL')
    return g.db


def close_db(e=None):
    """
    Close database connection.

    Args:
        e: Exception if any (from Flask teardown context)
    """
    db = g.pop('db', None)
    if db is not None:
        db.close()


@contextmanager
def transaction(immediate: bool = False):
    """
    Run a block of statements as one transaction.

    With immediate=True the write lock is taken up front (BEGIN IMMEDIATE),
    so read-then-write sequences such as number minting are serialized
    against other writers.

    Yields:
        sqlite3.Cursor bound to the open transaction
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('BEGIN IMMEDIATE' if immediate else 'BEGIN')
    try:
        yield cursor
        db.commit()
    except Exception:
        db.rollback()
        raise


def init_db():
    """
    Initialize database: drop existing tables, create new schema, insert seed data.
    WARNING: This will delete all existing data!
    """
    from database.schema import drop_tables, create_tables, create_indexes
    from database.seed import seed_database

    db = get_db()

    # Drop existing tables (in reverse order of dependencies)
    drop_tables(db)

    # Create all tables
    create_tables(db)

    # Create indexes
    create_indexes(db)

    db.commit()

    # Insert seed data
    seed_database()

    logger.info("Database initialized")


def bootstrap_database():
    """
    Idempotent process-start setup: create missing tables and the first admin.
    Safe to run from every process; existing data is never touched.
    """
    from database.schema import create_tables, create_indexes
    from database.seed import seed_database

    db = get_db()
    create_tables(db)
    create_indexes(db)
    db.commit()
    seed_database()
