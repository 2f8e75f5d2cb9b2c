"""
Human-readable sequence numbers for reservations and invoices.

Formats:
- reservation:      REZ-YYYY-NNNN      (counter per year)
- company_invoice:  FV/YYYY/MM/NNNN    (counter per year + month)
- receipt:          PR/YYYY/MM/NNNN    (counter per year + month)

The next number is one more than the highest number already stored in the
same partition, or 0001 when the partition is empty. Minting and inserting
happen in one BEGIN IMMEDIATE transaction; a UNIQUE collision (another
process won the race) is retried with a fresh number.
"""

import logging
import sqlite3

from flask import current_app

from database import get_db, transaction
from utils.datetime_helpers import get_today
from utils.errors import StorageUnavailable

logger = logging.getLogger(__name__)

# kind -> (table, column, prefix template)
SEQUENCE_KINDS = {
    'reservation': ('reservations', 'code', 'REZ-{year}-'),
    'company_invoice': ('invoices', 'invoice_number', 'FV/{year}/{month:02d}/'),
    'receipt': ('invoices', 'invoice_number', 'PR/{year}/{month:02d}/'),
}

SEQUENCE_DIGITS = 4


def _kind_entry(kind: str) -> tuple:
    try:
        return SEQUENCE_KINDS[kind]
    except KeyError:
        raise ValueError(f'Unknown sequence kind: {kind}')


def sequence_prefix(kind: str, period=None) -> str:
    """
    Partition prefix for a kind and period.

    Args:
        kind: 'reservation', 'company_invoice' or 'receipt'
        period: date or datetime (default: today in the configured timezone)

    Returns:
        Prefix string, e.g. 'REZ-2025-' or 'FV/2025/06/'
    """
    _, _, template = _kind_entry(kind)
    if period is None:
        period = get_today()
    return template.format(year=period.year, month=period.month)


def next_number(kind: str, period=None, cursor=None) -> str:
    """
    Compute the next number in the partition of kind + period.

    Args:
        kind: Sequence kind (see SEQUENCE_KINDS)
        period: date or datetime selecting the partition (default: today)
        cursor: Cursor of an open transaction (default: a new cursor)

    Returns:
        Formatted number, e.g. 'REZ-2025-0043'

    Raises:
        ValueError: Unknown kind
        StorageUnavailable: The database could not be read
    """
    table, column, _ = _kind_entry(kind)
    prefix = sequence_prefix(kind, period)
    cur = cursor or get_db().cursor()

    try:
        cur.execute(f'''
            SELECT MAX(CAST(SUBSTR({column}, ?) AS INTEGER)) as max_seq
            FROM {table}
            WHERE {column} LIKE ?
        ''', (len(prefix) + 1, f'{prefix}%'))
        row = cur.fetchone()
    except sqlite3.OperationalError as e:
        raise StorageUnavailable(f'Cannot read {table} sequence: {e}') from e

    next_seq = (row['max_seq'] or 0) + 1
    return f'{prefix}{next_seq:0{SEQUENCE_DIGITS}d}'


def _is_number_collision(error: sqlite3.IntegrityError, kind: str) -> bool:
    table, column, _ = SEQUENCE_KINDS[kind]
    message = str(error)
    return 'UNIQUE' in message and f'{table}.{column}' in message


def issue_numbered(kind: str, insert, period=None, max_retries: int = None):
    """
    Mint a number and insert the numbered row atomically.

    Args:
        kind: Sequence kind (see SEQUENCE_KINDS)
        insert: Callable(cursor, number) performing the inserts inside the
            open transaction; its return value is passed through
        period: date or datetime selecting the partition (default: today)
        max_retries: Attempts on number collision (default: SEQUENCE_MAX_RETRIES)

    Returns:
        Tuple of (number, insert result)

    Raises:
        StorageUnavailable: Database locked/unreachable, or every attempt collided
    """
    if max_retries is None:
        max_retries = current_app.config.get('SEQUENCE_MAX_RETRIES', 5)

    for attempt in range(1, max_retries + 1):
        try:
            with transaction(immediate=True) as cursor:
                number = next_number(kind, period, cursor)
                result = insert(cursor, number)
            return number, result
        except sqlite3.IntegrityError as e:
            if not _is_number_collision(e, kind):
                raise
            logger.warning(f"Sequence collision on {kind} (attempt {attempt}/{max_retries}): {e}")
        except sqlite3.OperationalError as e:
            raise StorageUnavailable(f'Cannot issue {kind} number: {e}') from e

    raise StorageUnavailable(f'Could not issue a unique {kind} number after {max_retries} attempts')
