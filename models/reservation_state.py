"""
Reservation status management.
Handles status changes, cancellation metadata and the transition table.
"""

import logging

from flask import current_app

from database import get_db, transaction
from utils.datetime_helpers import now_str
from utils.errors import InvalidStatusTransitionError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

RESERVATION_STATUSES = ('pending', 'in_progress', 'completed', 'cancelled')

DEFAULT_STATUS = 'pending'

# Allowed source -> target pairs when enforcement is on.
# Any status may move to cancelled; writing the current status is always allowed.
VALID_STATUS_TRANSITIONS = {
    'pending': {'in_progress', 'cancelled'},
    'in_progress': {'completed', 'cancelled'},
    'completed': {'cancelled'},
    'cancelled': set(),
}


# =============================================================================
# VALIDATION
# =============================================================================

def validate_status(status: str) -> str:
    """Raise ValidationError unless status is a known reservation status."""
    if status not in RESERVATION_STATUSES:
        raise ValidationError(f'Invalid status: {status}')
    return status


def transitions_enforced(bypass_validation: bool = None) -> bool:
    """
    Decide whether the transition table applies to a status change.

    Args:
        bypass_validation: Explicit override; None follows ENFORCE_STATUS_TRANSITIONS
    """
    if bypass_validation is None:
        return bool(current_app.config.get('ENFORCE_STATUS_TRANSITIONS'))
    return not bypass_validation


def validate_status_transition(current_status: str, new_status: str) -> None:
    """
    Check a status change against VALID_STATUS_TRANSITIONS.

    Raises:
        ValidationError: Unknown target status
        InvalidStatusTransitionError: Pair not in the table
    """
    validate_status(new_status)
    if current_status == new_status:
        return
    if new_status not in VALID_STATUS_TRANSITIONS.get(current_status, set()):
        raise InvalidStatusTransitionError(current_status, new_status)


def cancellation_fields(old_status: str, new_status: str, acting_user_id: int,
                        cancelled_at: str = None, cancelled_by: int = None) -> tuple:
    """
    Cancellation metadata after a status write.

    Metadata exists only while cancelled: entering cancelled stamps it,
    leaving cancelled clears it, staying cancelled keeps the stored values.

    Returns:
        Tuple of (cancelled_at, cancelled_by)
    """
    if new_status != 'cancelled':
        return None, None
    if old_status == 'cancelled' and cancelled_at:
        return cancelled_at, cancelled_by
    return now_str(), acting_user_id


def _get_status_row(cursor, reservation_id: int) -> dict:
    cursor.execute('SELECT id, status, cancelled_at, cancelled_by FROM reservations WHERE id = ?',
                   (reservation_id,))
    row = cursor.fetchone()
    if not row:
        raise NotFoundError('Reservation', reservation_id)
    return dict(row)


# =============================================================================
# STATUS CHANGES
# =============================================================================

def cancel_reservation(reservation_id: int, cancelled_by: int) -> str:
    """
    Cancel a reservation on behalf of a user.

    Cancelling an already cancelled reservation is allowed and stamps a new
    cancelled_at.

    Args:
        reservation_id: Reservation ID
        cancelled_by: ID of the acting user (required)

    Returns:
        The cancelled_at timestamp written

    Raises:
        ValidationError: No acting user
        NotFoundError: Unknown reservation
    """
    if not cancelled_by:
        raise ValidationError('Cancelling user is required')

    cancelled_at = now_str()
    with transaction() as cursor:
        _get_status_row(cursor, reservation_id)
        cursor.execute('''
            UPDATE reservations
            SET status = 'cancelled',
                cancelled_at = ?,
                cancelled_by = ?,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (cancelled_at, cancelled_by, reservation_id))

    logger.info(f"Reservation {reservation_id} cancelled by user {cancelled_by}")
    return cancelled_at


def set_reservation_status(reservation_id: int, new_status: str, changed_by: int = None,
                           bypass_validation: bool = None) -> str:
    """
    Overwrite a reservation's status.

    Without enforcement any known status may be written. Moving to cancelled
    uses cancel semantics; any other status clears the cancellation metadata.

    Args:
        reservation_id: Reservation ID
        new_status: Target status
        changed_by: Acting user ID
        bypass_validation: Skip the transition table (None follows config)

    Returns:
        The previous status

    Raises:
        ValidationError: Unknown status
        InvalidStatusTransitionError: Enforcement on and pair not allowed
        NotFoundError: Unknown reservation
    """
    validate_status(new_status)

    if new_status == 'cancelled' and changed_by:
        old_status = _get_status_row(get_db().cursor(), reservation_id)['status']
        cancel_reservation(reservation_id, changed_by)
        return old_status

    with transaction() as cursor:
        row = _get_status_row(cursor, reservation_id)
        old_status = row['status']

        if transitions_enforced(bypass_validation):
            validate_status_transition(old_status, new_status)

        cancelled_at, cancelled_by = cancellation_fields(
            old_status, new_status, changed_by, row['cancelled_at'], row['cancelled_by']
        )
        cursor.execute('''
            UPDATE reservations
            SET status = ?,
                cancelled_at = ?,
                cancelled_by = ?,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (new_status, cancelled_at, cancelled_by, reservation_id))

    if old_status != new_status:
        logger.info(f"Reservation {reservation_id} status {old_status} -> {new_status}")
    return old_status
