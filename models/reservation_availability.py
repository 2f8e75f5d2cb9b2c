"""
Attraction availability checks.

Two date ranges [s1, e1] and [s2, e2] overlap when s1 <= e2 AND e1 >= s2
(inclusive bounds). Every reservation holding the attraction in a line item
counts, including cancelled ones unless AVAILABILITY_IGNORES_CANCELLED is set.
"""

from flask import current_app

from database import get_db
from utils.datetime_helpers import to_storage
from utils.errors import ValidationError


def _date_range(start_date, end_date) -> tuple:
    start = to_storage(start_date, 'startDate')
    end = to_storage(end_date, 'endDate')
    if start > end:
        raise ValidationError('startDate must not be after endDate')
    return start, end


def find_conflicting_reservations(
    attraction_id: int,
    start_date,
    end_date,
    exclude_reservation_id: int = None
) -> list:
    """
    Find reservations holding an attraction during an overlapping range.

    Args:
        attraction_id: Attraction ID
        start_date: Range start (date, datetime or ISO string)
        end_date: Range end, inclusive
        exclude_reservation_id: Reservation to ignore (when editing it)

    Returns:
        List of dicts: {id, code, start_date, end_date, status, client_name}
        ordered by start date

    Raises:
        ValidationError: Invalid dates or start after end
    """
    start, end = _date_range(start_date, end_date)

    db = get_db()
    cursor = db.cursor()

    query = '''
        SELECT DISTINCT r.id, r.code, r.start_date, r.end_date, r.status,
               c.first_name || ' ' || c.last_name as client_name
        FROM reservations r
        JOIN reservation_attractions ra ON ra.reservation_id = r.id
        JOIN clients c ON r.client_id = c.id
        WHERE ra.attraction_id = ?
          AND r.start_date <= ?
          AND r.end_date >= ?
    '''
    params = [attraction_id, end, start]

    if current_app.config.get('AVAILABILITY_IGNORES_CANCELLED'):
        query += " AND r.status != 'cancelled'"

    if exclude_reservation_id:
        query += ' AND r.id != ?'
        params.append(exclude_reservation_id)

    query += ' ORDER BY r.start_date'

    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


def is_available(
    attraction_id: int,
    start_date,
    end_date,
    exclude_reservation_id: int = None
) -> bool:
    """
    Check whether an attraction is free for a date range.

    Returns:
        True when no reservation claims the attraction in an overlapping range
    """
    return not find_conflicting_reservations(
        attraction_id, start_date, end_date, exclude_reservation_id
    )
