"""
Reservation CRUD operations.
Handles create, read, update for reservations with their attraction line
items and assigned staff. Reservations are never hard-deleted; see
reservation_state.cancel_reservation.
"""

import logging

from database import get_db, transaction
from models.user import public_user
from utils.datetime_helpers import to_storage
from utils.errors import NotFoundError, ValidationError
from utils.validators import parse_amount, parse_id, parse_quantity
from .reservation_state import (
    DEFAULT_STATUS, cancellation_fields, transitions_enforced,
    validate_status, validate_status_transition
)
from .sequence import issue_numbered

logger = logging.getLogger(__name__)


# =============================================================================
# VALIDATION HELPERS
# =============================================================================

def _missing_ids(cursor, table: str, ids: list) -> list:
    """Return the ids that do not exist in table."""
    unique_ids = sorted(set(ids))
    if not unique_ids:
        return []
    placeholders = ','.join('?' * len(unique_ids))
    cursor.execute(f'SELECT id FROM {table} WHERE id IN ({placeholders})', unique_ids)
    found = {row['id'] for row in cursor.fetchall()}
    return [i for i in unique_ids if i not in found]


def _normalize_line_items(attractions) -> list:
    """
    Validate attraction line items.

    Args:
        attractions: List of dicts with attraction_id and optional quantity

    Returns:
        List of (attraction_id, quantity) tuples in input order
    """
    if attractions is None:
        return []
    if not isinstance(attractions, list):
        raise ValidationError('attractions must be a list')

    items = []
    for item in attractions:
        if not isinstance(item, dict):
            raise ValidationError('Each attraction must be an object')
        attraction_id = parse_id(item.get('attraction_id'), 'attractionId')
        items.append((attraction_id, parse_quantity(item.get('quantity'))))
    return items


def _normalize_user_ids(assigned_users) -> list:
    if assigned_users is None:
        return []
    if not isinstance(assigned_users, list):
        raise ValidationError('assignedUsers must be a list')
    user_ids = []
    for user_id in assigned_users:
        parsed = parse_id(user_id, 'assignedUsers')
        if parsed not in user_ids:
            user_ids.append(parsed)
    return user_ids


def _validate_references(cursor, client_id: int, line_items: list, user_ids: list) -> None:
    """Raise NotFoundError for the first missing client, attraction or user."""
    if _missing_ids(cursor, 'clients', [client_id]):
        raise NotFoundError('Client', client_id)

    missing = _missing_ids(cursor, 'attractions', [a for a, _ in line_items])
    if missing:
        raise NotFoundError('Attraction', missing[0])

    missing = _missing_ids(cursor, 'users', user_ids)
    if missing:
        raise NotFoundError('User', missing[0])


def _date_range(start_date, end_date) -> tuple:
    start = to_storage(start_date, 'startDate')
    end = to_storage(end_date, 'endDate')
    if start > end:
        raise ValidationError('startDate must not be after endDate')
    return start, end


def _write_children(cursor, reservation_id: int, line_items: list, user_ids: list) -> None:
    """Insert line items and staff assignments for a reservation."""
    for attraction_id, quantity in line_items:
        cursor.execute('''
            INSERT INTO reservation_attractions (reservation_id, attraction_id, quantity)
            VALUES (?, ?, ?)
        ''', (reservation_id, attraction_id, quantity))

    for user_id in user_ids:
        cursor.execute('''
            INSERT INTO reservation_assigned_users (reservation_id, user_id)
            VALUES (?, ?)
        ''', (reservation_id, user_id))


# =============================================================================
# CREATE
# =============================================================================

def create_reservation(
    client_id: int,
    start_date,
    end_date,
    attractions: list = None,
    assigned_users: list = None,
    notes: str = '',
    total_price=0,
    status: str = None,
    created_by: int = None
) -> dict:
    """
    Create a reservation with a freshly minted REZ code.

    Availability is not checked here; callers use
    reservation_availability.is_available before booking.

    Args:
        client_id: Owning client ID
        start_date: Start (date, datetime or ISO string)
        end_date: End, inclusive
        attractions: List of {attraction_id, quantity}
        assigned_users: List of staff user IDs
        notes: Free text
        total_price: Reservation total
        status: Initial status (default 'pending')
        created_by: Acting user ID

    Returns:
        The created reservation, resolved (see get_reservation)

    Raises:
        ValidationError: Bad dates, quantities, price or status
        NotFoundError: Unknown client, attraction or user
    """
    client_id = parse_id(client_id, 'clientId')
    start, end = _date_range(start_date, end_date)
    line_items = _normalize_line_items(attractions)
    user_ids = _normalize_user_ids(assigned_users)
    price = parse_amount(total_price if total_price is not None else 0, 'totalPrice')
    status = validate_status(status or DEFAULT_STATUS)

    _validate_references(get_db().cursor(), client_id, line_items, user_ids)
    cancelled_at, cancelled_by = cancellation_fields(None, status, created_by)

    def insert(cursor, code):
        cursor.execute('''
            INSERT INTO reservations (
                code, client_id, start_date, end_date, status, total_price,
                notes, cancelled_at, cancelled_by, created_by
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ''', (
            code, client_id, start, end, status, price,
            notes or '', cancelled_at, cancelled_by, created_by
        ))
        reservation_id = cursor.lastrowid
        _write_children(cursor, reservation_id, line_items, user_ids)
        return reservation_id

    code, reservation_id = issue_numbered('reservation', insert)
    logger.info(f"Reservation {code} created (id={reservation_id}, client={client_id})")
    return get_reservation(reservation_id)


# =============================================================================
# UPDATE
# =============================================================================

def update_reservation(
    reservation_id: int,
    client_id: int,
    start_date,
    end_date,
    attractions: list,
    assigned_users: list = None,
    total_price=None,
    notes: str = None,
    status: str = None,
    changed_by: int = None,
    bypass_validation: bool = None
) -> dict:
    """
    Replace a reservation's editable fields, staff and line items.

    Line items and staff are deleted and re-inserted in the same
    transaction as the row update. total_price, notes and status keep their
    stored values when None; assigned_users None clears the staff set.

    Returns:
        The updated reservation, resolved

    Raises:
        ValidationError / InvalidStatusTransitionError: Bad input
        NotFoundError: Unknown reservation, client, attraction or user
    """
    client_id = parse_id(client_id, 'clientId')
    start, end = _date_range(start_date, end_date)
    line_items = _normalize_line_items(attractions)
    user_ids = _normalize_user_ids(assigned_users)

    with transaction(immediate=True) as cursor:
        cursor.execute('SELECT * FROM reservations WHERE id = ?', (reservation_id,))
        row = cursor.fetchone()
        if not row:
            raise NotFoundError('Reservation', reservation_id)
        current = dict(row)

        _validate_references(cursor, client_id, line_items, user_ids)

        price = current['total_price'] if total_price is None else parse_amount(total_price, 'totalPrice')
        new_notes = current['notes'] if notes is None else notes
        new_status = current['status'] if status is None else validate_status(status)

        if transitions_enforced(bypass_validation):
            validate_status_transition(current['status'], new_status)

        cancelled_at, cancelled_by = cancellation_fields(
            current['status'], new_status, changed_by,
            current['cancelled_at'], current['cancelled_by']
        )

        cursor.execute('''
            UPDATE reservations
            SET client_id = ?, start_date = ?, end_date = ?, status = ?,
                total_price = ?, notes = ?, cancelled_at = ?, cancelled_by = ?,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (
            client_id, start, end, new_status, price, new_notes,
            cancelled_at, cancelled_by, reservation_id
        ))

        cursor.execute('DELETE FROM reservation_attractions WHERE reservation_id = ?', (reservation_id,))
        cursor.execute('DELETE FROM reservation_assigned_users WHERE reservation_id = ?', (reservation_id,))
        _write_children(cursor, reservation_id, line_items, user_ids)

    return get_reservation(reservation_id)


# =============================================================================
# READ
# =============================================================================

def _group_by(rows: list, key: str) -> dict:
    grouped = {}
    for row in rows:
        grouped.setdefault(row[key], []).append(row)
    return grouped


def _resolve(rows: list) -> list:
    """
    Attach client, line items (with attraction), staff and invoices to
    reservation rows, using one query per relation.
    """
    if not rows:
        return []

    db = get_db()
    cursor = db.cursor()
    ids = [r['id'] for r in rows]
    id_marks = ','.join('?' * len(ids))

    client_ids = sorted({r['client_id'] for r in rows})
    client_marks = ','.join('?' * len(client_ids))
    cursor.execute(f'SELECT * FROM clients WHERE id IN ({client_marks})', client_ids)
    clients = {row['id']: dict(row) for row in cursor.fetchall()}

    cursor.execute(f'''
        SELECT ra.id, ra.reservation_id, ra.attraction_id, ra.quantity,
               a.name, a.description, a.width, a.length, a.height, a.weight,
               a.price, a.setup_time, a.image
        FROM reservation_attractions ra
        JOIN attractions a ON ra.attraction_id = a.id
        WHERE ra.reservation_id IN ({id_marks})
        ORDER BY ra.id
    ''', ids)
    lines = _group_by([dict(row) for row in cursor.fetchall()], 'reservation_id')

    cursor.execute(f'''
        SELECT rau.reservation_id, u.*
        FROM reservation_assigned_users rau
        JOIN users u ON rau.user_id = u.id
        WHERE rau.reservation_id IN ({id_marks})
        ORDER BY u.name
    ''', ids)
    staff = _group_by([dict(row) for row in cursor.fetchall()], 'reservation_id')

    cursor.execute(f'''
        SELECT * FROM invoices
        WHERE reservation_id IN ({id_marks})
        ORDER BY issue_date DESC, id DESC
    ''', ids)
    invoices = _group_by([dict(row) for row in cursor.fetchall()], 'reservation_id')

    resolved = []
    for row in rows:
        reservation = dict(row)
        reservation['client'] = clients.get(reservation['client_id'])
        reservation['attractions'] = [
            {
                'id': line['id'],
                'attraction_id': line['attraction_id'],
                'quantity': line['quantity'],
                'attraction': {
                    'id': line['attraction_id'],
                    'name': line['name'],
                    'description': line['description'],
                    'width': line['width'],
                    'length': line['length'],
                    'height': line['height'],
                    'weight': line['weight'],
                    'price': line['price'],
                    'setup_time': line['setup_time'],
                    'image': line['image'],
                },
            }
            for line in lines.get(reservation['id'], [])
        ]
        reservation['assigned_users'] = [public_user(u) for u in staff.get(reservation['id'], [])]
        reservation['invoices'] = invoices.get(reservation['id'], [])
        resolved.append(reservation)
    return resolved


def get_reservation(reservation_id: int) -> dict:
    """
    Get a reservation with client, line items, staff and invoices.

    Returns:
        Reservation dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM reservations WHERE id = ?', (reservation_id,))
    row = cursor.fetchone()
    if not row:
        return None
    return _resolve([dict(row)])[0]


def get_reservation_by_code(code: str) -> dict:
    """Get a resolved reservation by its REZ code."""
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM reservations WHERE code = ?', (code,))
    row = cursor.fetchone()
    return _resolve([dict(row)])[0] if row else None


def get_all_reservations(status: str = None) -> list:
    """
    List reservations, newest created first, each resolved.

    Args:
        status: Optional status filter
    """
    db = get_db()
    cursor = db.cursor()

    query = 'SELECT * FROM reservations'
    params = []
    if status:
        query += ' WHERE status = ?'
        params.append(validate_status(status))
    query += ' ORDER BY created_at DESC, id DESC'

    cursor.execute(query, params)
    return _resolve([dict(row) for row in cursor.fetchall()])


def get_calendar_reservations(date_from=None, date_to=None) -> list:
    """
    Calendar entries ordered by start date.

    Args:
        date_from: Optional window start; keeps reservations ending on/after it
        date_to: Optional window end; keeps reservations starting on/before it

    Returns:
        List of {id, code, start_date, end_date, status, first_name, last_name}
    """
    db = get_db()
    cursor = db.cursor()

    query = '''
        SELECT r.id, r.code, r.start_date, r.end_date, r.status,
               c.first_name, c.last_name
        FROM reservations r
        JOIN clients c ON r.client_id = c.id
        WHERE 1=1
    '''
    params = []

    if date_from:
        query += ' AND r.end_date >= ?'
        params.append(to_storage(date_from, 'from'))
    if date_to:
        query += ' AND r.start_date <= ?'
        params.append(to_storage(date_to, 'to').replace('T00:00:00', 'T23:59:59'))

    query += ' ORDER BY r.start_date ASC, r.id ASC'

    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]
