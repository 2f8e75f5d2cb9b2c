"""
Client CRUD operations.
Handles create, read, update, delete and search for rental clients.
"""

from database import get_db
from utils.errors import ConflictError, NotFoundError

CLIENT_FIELDS = [
    'first_name', 'last_name', 'phone', 'email', 'street', 'building_number',
    'postal_code', 'city', 'company_name', 'tax_id', 'notes'
]

REQUIRED_CLIENT_FIELDS = [
    'first_name', 'last_name', 'phone', 'street', 'building_number',
    'postal_code', 'city'
]


# =============================================================================
# READ OPERATIONS
# =============================================================================

def get_all_clients(search: str = None) -> list:
    """
    Get all clients, newest first.

    Args:
        search: Optional substring matched against name, phone, email,
            company name and tax id

    Returns:
        List of client dicts
    """
    db = get_db()
    cursor = db.cursor()

    query = '''
        SELECT c.*,
               (SELECT COUNT(*) FROM reservations WHERE client_id = c.id) as reservation_count
        FROM clients c
        WHERE 1=1
    '''
    params = []

    if search:
        query += '''
            AND (c.first_name LIKE ? OR c.last_name LIKE ? OR c.phone LIKE ?
                 OR c.email LIKE ? OR c.company_name LIKE ? OR c.tax_id LIKE ?)
        '''
        params.extend([f'%{search}%'] * 6)

    query += ' ORDER BY c.created_at DESC, c.id DESC'

    cursor.execute(query, params)
    rows = cursor.fetchall()
    return [dict(row) for row in rows]


def get_client_by_id(client_id: int) -> dict:
    """
    Get client by ID.

    Args:
        client_id: Client ID

    Returns:
        Client dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM clients WHERE id = ?', (client_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_client_reservations(client_id: int) -> list:
    """Reservation summaries for a client, newest first."""
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT id, code, start_date, end_date, status, total_price
        FROM reservations
        WHERE client_id = ?
        ORDER BY start_date DESC
    ''', (client_id,))
    return [dict(row) for row in cursor.fetchall()]


# =============================================================================
# CREATE / UPDATE / DELETE
# =============================================================================

def create_client(first_name: str, last_name: str, phone: str, street: str,
                  building_number: str, postal_code: str, city: str, **kwargs) -> int:
    """
    Create new client.

    Args:
        first_name, last_name, phone, street, building_number, postal_code, city:
            Required contact and address fields
        **kwargs: Optional fields (email, company_name, tax_id, notes)

    Returns:
        New client ID
    """
    db = get_db()
    cursor = db.cursor()

    cursor.execute('''
        INSERT INTO clients (
            first_name, last_name, phone, email, street, building_number,
            postal_code, city, company_name, tax_id, notes
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    ''', (
        first_name, last_name, phone, kwargs.get('email'), street, building_number,
        postal_code, city, kwargs.get('company_name'), kwargs.get('tax_id'),
        kwargs.get('notes')
    ))

    db.commit()
    return cursor.lastrowid


def update_client(client_id: int, **kwargs) -> dict:
    """
    Update the given client fields (partial update).

    Args:
        client_id: Client ID
        **kwargs: Fields to update (see CLIENT_FIELDS)

    Returns:
        Updated client dict

    Raises:
        NotFoundError: If the client does not exist
    """
    if not get_client_by_id(client_id):
        raise NotFoundError('Client', client_id)

    updates = []
    values = []

    for field in CLIENT_FIELDS:
        if field in kwargs:
            updates.append(f'{field} = ?')
            values.append(kwargs[field])

    if updates:
        updates.append('updated_at = CURRENT_TIMESTAMP')
        values.append(client_id)

        db = get_db()
        db.execute(f'UPDATE clients SET {", ".join(updates)} WHERE id = ?', values)
        db.commit()

    return get_client_by_id(client_id)


def delete_client(client_id: int) -> dict:
    """
    Delete a client that has no reservations.

    Args:
        client_id: Client ID

    Returns:
        The deleted client dict

    Raises:
        NotFoundError: If the client does not exist
        ConflictError: If reservations or invoices still reference the client
    """
    client = get_client_by_id(client_id)
    if not client:
        raise NotFoundError('Client', client_id)

    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT
            (SELECT COUNT(*) FROM reservations WHERE client_id = ?) +
            (SELECT COUNT(*) FROM invoices WHERE client_id = ?) as refs
    ''', (client_id, client_id))
    if cursor.fetchone()['refs']:
        raise ConflictError('Cannot delete a client with reservations or invoices')

    cursor.execute('DELETE FROM clients WHERE id = ?', (client_id,))
    db.commit()
    return client
