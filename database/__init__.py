"""
Database package for the BouncyRent rental management system.

This package provides modular database operations:
- connection: Connection management and transactions (get_db, close_db, transaction)
- schema: Table creation and indexes
- seed: Initial seed data (first administrator)
"""

from database.connection import get_db, close_db, init_db, bootstrap_database, transaction
from database.schema import drop_tables, create_tables, create_indexes
from database.seed import seed_database

__all__ = [
    # Connection
    'get_db',
    'close_db',
    'init_db',
    'bootstrap_database',
    'transaction',
    # Schema
    'drop_tables',
    'create_tables',
    'create_indexes',
    # Seed
    'seed_database',
]
