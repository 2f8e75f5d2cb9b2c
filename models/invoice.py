"""
Invoice data access functions.
Handles invoice issuance (FV company invoices and PR receipts), partial
updates, deletion and the paginated, searchable list.
"""

import logging

from database import get_db, transaction
from utils.datetime_helpers import to_storage
from utils.errors import NotFoundError, ValidationError
from utils.validators import parse_amount, parse_id
from .sequence import issue_numbered

logger = logging.getLogger(__name__)

INVOICE_STATUSES = ('paid', 'unpaid')

# Columns a partial update may touch; invoice_number is never rewritten
INVOICE_UPDATE_FIELDS = (
    'reservation_id', 'client_id', 'issue_date', 'due_date', 'amount',
    'status', 'is_company_invoice', 'company_name', 'tax_id', 'pdf_url'
)


def _validate_invoice_status(status: str) -> str:
    if status not in INVOICE_STATUSES:
        raise ValidationError(f'Invalid status: {status}')
    return status


def _get_row(table: str, row_id: int) -> dict:
    cursor = get_db().cursor()
    cursor.execute(f'SELECT * FROM {table} WHERE id = ?', (row_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def invoice_kind(is_company_invoice: bool) -> str:
    """Sequence kind for an invoice: FV series or PR series."""
    return 'company_invoice' if is_company_invoice else 'receipt'


# =============================================================================
# CREATE
# =============================================================================

def create_invoice(
    reservation_id: int,
    issue_date,
    due_date,
    amount,
    status: str,
    is_company_invoice: bool = False,
    client_id: int = None,
    company_name: str = None,
    tax_id: str = None,
    pdf_url: str = None
) -> dict:
    """
    Issue an invoice for a reservation.

    The billed client defaults to the reservation's client. Company invoices
    take company name and tax id from the billed client when not given.

    Returns:
        The created invoice, resolved (see get_invoice)

    Raises:
        ValidationError: Missing or malformed field
        NotFoundError: Unknown reservation or client
    """
    for field, value in (('reservationId', reservation_id), ('issueDate', issue_date),
                         ('dueDate', due_date), ('amount', amount), ('status', status)):
        if value is None or value == '':
            raise ValidationError(f'Missing field: {field}')

    reservation_id = parse_id(reservation_id, 'reservationId')
    issue = to_storage(issue_date, 'issueDate')
    due = to_storage(due_date, 'dueDate')
    amount = parse_amount(amount, 'amount')
    status = _validate_invoice_status(status)
    is_company_invoice = bool(is_company_invoice)

    reservation = _get_row('reservations', reservation_id)
    if not reservation:
        raise NotFoundError('Reservation', reservation_id)

    client_id = parse_id(client_id, 'clientId') if client_id else reservation['client_id']
    client = _get_row('clients', client_id)
    if not client:
        raise NotFoundError('Client', client_id)

    if is_company_invoice:
        company_name = company_name or client.get('company_name')
        tax_id = tax_id or client.get('tax_id')
        if not company_name or not tax_id:
            logger.warning(f"Company invoice for reservation {reservation_id} lacks company name or tax id")

    def insert(cursor, number):
        cursor.execute('''
            INSERT INTO invoices (
                invoice_number, reservation_id, client_id, issue_date, due_date,
                amount, status, is_company_invoice, company_name, tax_id, pdf_url
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ''', (
            number, reservation_id, client_id, issue, due,
            amount, status, 1 if is_company_invoice else 0, company_name, tax_id, pdf_url
        ))
        return cursor.lastrowid

    number, invoice_id = issue_numbered(invoice_kind(is_company_invoice), insert)
    logger.info(f"Invoice {number} issued for reservation {reservation_id}")
    return get_invoice(invoice_id)


# =============================================================================
# UPDATE / DELETE
# =============================================================================

def update_invoice(invoice_id: int, **fields) -> dict:
    """
    Apply a partial update; fields not passed are left untouched.

    The invoice number is kept even when is_company_invoice changes.

    Returns:
        The updated invoice, resolved

    Raises:
        ValidationError: Malformed field
        NotFoundError: Unknown invoice, reservation or client
    """
    if not _get_row('invoices', invoice_id):
        raise NotFoundError('Invoice', invoice_id)

    values = {}
    for field in INVOICE_UPDATE_FIELDS:
        if field not in fields:
            continue
        value = fields[field]

        if field == 'reservation_id':
            value = parse_id(value, 'reservationId')
            if not _get_row('reservations', value):
                raise NotFoundError('Reservation', value)
        elif field == 'client_id':
            value = parse_id(value, 'clientId')
            if not _get_row('clients', value):
                raise NotFoundError('Client', value)
        elif field in ('issue_date', 'due_date'):
            value = to_storage(value, 'issueDate' if field == 'issue_date' else 'dueDate')
        elif field == 'amount':
            value = parse_amount(value, 'amount')
        elif field == 'status':
            value = _validate_invoice_status(value)
        elif field == 'is_company_invoice':
            value = 1 if value else 0

        values[field] = value

    if values:
        assignments = ', '.join(f'{field} = ?' for field in values)
        with transaction() as cursor:
            cursor.execute(
                f'UPDATE invoices SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?',
                list(values.values()) + [invoice_id]
            )

    return get_invoice(invoice_id)


def delete_invoice(invoice_id: int) -> dict:
    """
    Delete an invoice.

    Returns:
        The deleted invoice row

    Raises:
        NotFoundError: Unknown invoice
    """
    invoice = _get_row('invoices', invoice_id)
    if not invoice:
        raise NotFoundError('Invoice', invoice_id)

    with transaction() as cursor:
        cursor.execute('DELETE FROM invoices WHERE id = ?', (invoice_id,))

    logger.info(f"Invoice {invoice['invoice_number']} deleted")
    return invoice


# =============================================================================
# READ
# =============================================================================

def get_invoice(invoice_id: int) -> dict:
    """
    Get an invoice with its reservation summary and billed client.

    Returns:
        Invoice dict or None if not found
    """
    invoice = _get_row('invoices', invoice_id)
    if not invoice:
        return None

    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT id, code, start_date, end_date, status, total_price, client_id
        FROM reservations WHERE id = ?
    ''', (invoice['reservation_id'],))
    row = cursor.fetchone()
    invoice['reservation'] = dict(row) if row else None
    invoice['client'] = _get_row('clients', invoice['client_id']) if invoice['client_id'] else None
    return invoice


def get_invoices_for_reservation(reservation_id: int) -> list:
    """Invoices issued for a reservation, newest issue date first."""
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT * FROM invoices
        WHERE reservation_id = ?
        ORDER BY issue_date DESC, id DESC
    ''', (reservation_id,))
    return [dict(row) for row in cursor.fetchall()]


def list_invoices(page: int = 1, limit: int = 10, search: str = None, status: str = None) -> tuple:
    """
    Paginated invoice list, newest issue date first.

    Args:
        page: 1-based page number
        limit: Page size
        search: Case-insensitive substring matched against invoice id and
            number, the billed client's name, email, company and tax id,
            and the invoice's own company name and tax id
        status: 'paid' or 'unpaid'; other values are ignored

    Returns:
        Tuple of (invoice dicts with client, total count)
    """
    db = get_db()
    cursor = db.cursor()

    where = ' WHERE 1=1'
    params = []

    if search:
        term = f'%{search.strip()}%'
        where += '''
            AND (CAST(i.id AS TEXT) LIKE ? OR i.invoice_number LIKE ?
                 OR c.first_name LIKE ? OR c.last_name LIKE ? OR c.email LIKE ?
                 OR c.company_name LIKE ? OR c.tax_id LIKE ?
                 OR i.company_name LIKE ? OR i.tax_id LIKE ?)
        '''
        params.extend([term] * 9)

    if status in INVOICE_STATUSES:
        where += ' AND i.status = ?'
        params.append(status)

    base = ' FROM invoices i LEFT JOIN clients c ON i.client_id = c.id'

    cursor.execute(f'SELECT COUNT(*) as total{base}{where}', params)
    total = cursor.fetchone()['total']

    cursor.execute(f'''
        SELECT i.*,
               c.first_name as client_first_name, c.last_name as client_last_name,
               c.email as client_email, c.company_name as client_company_name,
               c.tax_id as client_tax_id,
               r.code as reservation_code
        {base}
        LEFT JOIN reservations r ON i.reservation_id = r.id
        {where}
        ORDER BY i.issue_date DESC, i.id DESC
        LIMIT ? OFFSET ?
    ''', params + [limit, (page - 1) * limit])

    invoices = []
    for row in cursor.fetchall():
        invoice = dict(row)
        client = {
            'id': invoice['client_id'],
            'first_name': invoice.pop('client_first_name'),
            'last_name': invoice.pop('client_last_name'),
            'email': invoice.pop('client_email'),
            'company_name': invoice.pop('client_company_name'),
            'tax_id': invoice.pop('client_tax_id'),
        }
        invoice['client'] = client if invoice['client_id'] else None
        invoices.append(invoice)

    return invoices, total
