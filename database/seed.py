"""
Database seed data.
Initial data population for fresh database installations.
"""

import logging

logger = logging.getLogger(__name__)


def seed_database():
    """Insert initial seed data. Safe to call on a populated database."""
    from models.user import ensure_initial_admin

    admin_id = ensure_initial_admin()
    if admin_id:
        logger.info(f"Seeded initial administrator (id={admin_id})")
