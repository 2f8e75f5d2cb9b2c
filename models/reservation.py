"""
Reservation data access functions.

This module re-exports the reservation functions from the split modules:
- sequence.py: REZ / FV / PR number minting
- reservation_availability.py: Overlap checks per attraction
- reservation_state.py: Status changes and cancellation
- reservation_crud.py: Create, read, update with line items and staff
"""

# =============================================================================
# RE-EXPORTS
# =============================================================================

# Numbering
from .sequence import (
    SEQUENCE_KINDS,
    sequence_prefix,
    next_number,
    issue_numbered,
)

# Availability
from .reservation_availability import (
    find_conflicting_reservations,
    is_available,
)

# State management
from .reservation_state import (
    RESERVATION_STATUSES,
    DEFAULT_STATUS,
    VALID_STATUS_TRANSITIONS,
    validate_status,
    validate_status_transition,
    cancel_reservation,
    set_reservation_status,
)

# CRUD operations
from .reservation_crud import (
    create_reservation,
    update_reservation,
    get_reservation,
    get_reservation_by_code,
    get_all_reservations,
    get_calendar_reservations,
)

__all__ = [
    'SEQUENCE_KINDS', 'sequence_prefix', 'next_number', 'issue_numbered',
    'find_conflicting_reservations', 'is_available',
    'RESERVATION_STATUSES', 'DEFAULT_STATUS', 'VALID_STATUS_TRANSITIONS',
    'validate_status', 'validate_status_transition',
    'cancel_reservation', 'set_reservation_status',
    'create_reservation', 'update_reservation', 'get_reservation',
    'get_reservation_by_code', 'get_all_reservations', 'get_calendar_reservations',
]
