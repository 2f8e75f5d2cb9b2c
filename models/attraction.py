"""
Attraction data access functions.
Rentable items (bounce houses, slides, ...) with dimensions and price.
"""

from database import get_db
from utils.errors import ConflictError, NotFoundError

ATTRACTION_FIELDS = [
    'name', 'description', 'width', 'length', 'height', 'weight',
    'price', 'setup_time', 'image'
]


def get_all_attractions() -> list:
    """
    Get all attractions ordered by name.

    Returns:
        List of attraction dicts with reservation_count
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT a.*,
               (SELECT COUNT(DISTINCT reservation_id) FROM reservation_attractions
                WHERE attraction_id = a.id) as reservation_count
        FROM attractions a
        ORDER BY a.name
    ''')
    return [dict(row) for row in cursor.fetchall()]


def get_attraction_by_id(attraction_id: int, with_maintenance: bool = False) -> dict:
    """
    Get attraction by ID.

    Args:
        attraction_id: Attraction ID
        with_maintenance: Attach maintenance_records (newest first)

    Returns:
        Attraction dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM attractions WHERE id = ?', (attraction_id,))
    row = cursor.fetchone()
    if not row:
        return None

    attraction = dict(row)
    if with_maintenance:
        from models.maintenance import get_maintenance_records
        attraction['maintenance_records'] = get_maintenance_records(attraction_id)
    return attraction


def create_attraction(name: str, price: float, **kwargs) -> int:
    """
    Create new attraction.

    Args:
        name: Display name
        price: Rental price
        **kwargs: description, width, length, height, weight, setup_time, image

    Returns:
        New attraction ID
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        INSERT INTO attractions (
            name, description, width, length, height, weight, price, setup_time, image
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
    ''', (
        name, kwargs.get('description'),
        kwargs.get('width') or 0, kwargs.get('length') or 0,
        kwargs.get('height') or 0, kwargs.get('weight') or 0,
        price, kwargs.get('setup_time') or 0, kwargs.get('image')
    ))
    db.commit()
    return cursor.lastrowid


def update_attraction(attraction_id: int, **kwargs) -> dict:
    """
    Update the given attraction fields.

    Raises:
        NotFoundError: Unknown attraction
    """
    if not get_attraction_by_id(attraction_id):
        raise NotFoundError('Attraction', attraction_id)

    updates = []
    values = []
    for field in ATTRACTION_FIELDS:
        if field in kwargs:
            updates.append(f'{field} = ?')
            values.append(kwargs[field])

    if updates:
        updates.append('updated_at = CURRENT_TIMESTAMP')
        values.append(attraction_id)
        db = get_db()
        db.execute(f'UPDATE attractions SET {", ".join(updates)} WHERE id = ?', values)
        db.commit()

    return get_attraction_by_id(attraction_id)


def delete_attraction(attraction_id: int) -> dict:
    """
    Delete an attraction not used by any reservation.
    Its maintenance records are removed with it.

    Raises:
        NotFoundError: Unknown attraction
        ConflictError: Still referenced by reservation line items
    """
    attraction = get_attraction_by_id(attraction_id)
    if not attraction:
        raise NotFoundError('Attraction', attraction_id)

    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT COUNT(*) as refs FROM reservation_attractions WHERE attraction_id = ?',
                   (attraction_id,))
    if cursor.fetchone()['refs']:
        raise ConflictError('Cannot delete an attraction used in reservations')

    cursor.execute('DELETE FROM attractions WHERE id = ?', (attraction_id,))
    db.commit()
    return attraction
