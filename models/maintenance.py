"""Maintenance records for attractions."""

import json

from database import get_db
from utils.errors import NotFoundError


def get_maintenance_records(attraction_id: int) -> list:
    """Maintenance records of an attraction, newest date first."""
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT * FROM maintenance_records
        WHERE attraction_id = ?
        ORDER BY date DESC, id DESC
    ''', (attraction_id,))
    return [dict(row) for row in cursor.fetchall()]


def get_maintenance_record(record_id: int) -> dict:
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM maintenance_records WHERE id = ?', (record_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def create_maintenance_record(attraction_id: int, date: str, description: str,
                              performed_by: str, cost: float = 0, images: list = None) -> int:
    """
    Record maintenance work on an attraction.

    Args:
        attraction_id: Attraction ID
        date: Work date in storage format
        description: What was done
        performed_by: Who did it (free text)
        cost: Cost of the work
        images: List of image URLs, stored as JSON

    Returns:
        New record ID

    Raises:
        NotFoundError: Unknown attraction
    """
    db = get_db()
    cursor = db.cursor()

    cursor.execute('SELECT id FROM attractions WHERE id = ?', (attraction_id,))
    if not cursor.fetchone():
        raise NotFoundError('Attraction', attraction_id)

    cursor.execute('''
        INSERT INTO maintenance_records
        (attraction_id, date, description, cost, performed_by, images_json)
        VALUES (?, ?, ?, ?, ?, ?)
    ''', (
        attraction_id, date, description, cost or 0, performed_by,
        json.dumps(images) if images else None
    ))
    db.commit()
    return cursor.lastrowid
