"""
Reservation API routes.
Create, update, cancel, status changes, calendar, availability and
confirmation emails.
"""

from flask import jsonify, request
from flask_login import login_required, current_user

from blueprints.api.serializers import (
    camelize, serialize_calendar_entry, serialize_email, serialize_reservation
)
from blueprints.api.services.email_service import send_confirmation_email
from models.email_log import get_email_logs
from models.reservation import (
    cancel_reservation, create_reservation, find_conflicting_reservations,
    get_all_reservations, get_calendar_reservations, get_reservation,
    set_reservation_status, update_reservation
)
from utils.api_response import api_success
from utils.audit import log_audit
from utils.decorators import role_required, STAFF_ROLES
from utils.errors import NotFoundError, ValidationError
from utils.validators import parse_id, require_fields


def _json_body() -> dict:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')
    return payload


def _line_items(payload: dict) -> list:
    """Map [{attractionId, quantity}] to model line items."""
    attractions = payload.get('attractions')
    if attractions is None:
        return []
    if not isinstance(attractions, list):
        raise ValidationError('attractions must be a list')
    return [
        {'attraction_id': item.get('attractionId'), 'quantity': item.get('quantity')}
        if isinstance(item, dict) else item
        for item in attractions
    ]


def _load(reservation_id: int) -> dict:
    reservation = get_reservation(reservation_id)
    if not reservation:
        raise NotFoundError('Reservation', reservation_id)
    return reservation


def register_routes(bp):
    """Register reservation routes on the blueprint."""

    # ============================================================================
    # READ
    # ============================================================================

    @bp.route('/reservations')
    @login_required
    def reservations_list():
        """All reservations, newest first. Query: status (optional)."""
        status = request.args.get('status') or None
        return jsonify([serialize_reservation(r) for r in get_all_reservations(status)])

    @bp.route('/reservations/<int:reservation_id>')
    @login_required
    def reservation_detail(reservation_id):
        """Reservation with client, attractions, staff and invoices."""
        return jsonify(serialize_reservation(_load(reservation_id)))

    @bp.route('/reservations/calendar')
    @login_required
    def reservations_calendar():
        """Calendar entries ordered by start date. Query: from, to (optional)."""
        entries = get_calendar_reservations(
            date_from=request.args.get('from') or None,
            date_to=request.args.get('to') or None
        )
        return jsonify([serialize_calendar_entry(e) for e in entries])

    @bp.route('/reservations/check-availability', methods=['POST'])
    @login_required
    def reservations_check_availability():
        """
        Check whether an attraction is free for a date range.

        Body: {startDate, endDate, attractionId, excludeReservationId?}
        Returns: {available, conflicts}
        """
        payload = _json_body()
        require_fields(payload, ['startDate', 'endDate', 'attractionId'])

        exclude_id = payload.get('excludeReservationId')
        conflicts = find_conflicting_reservations(
            parse_id(payload['attractionId'], 'attractionId'),
            payload['startDate'],
            payload['endDate'],
            exclude_reservation_id=parse_id(exclude_id, 'excludeReservationId') if exclude_id else None
        )
        return jsonify({
            'available': not conflicts,
            'conflicts': camelize(conflicts),
        })

    # ============================================================================
    # WRITE
    # ============================================================================

    @bp.route('/reservations', methods=['POST'])
    @login_required
    @role_required(*STAFF_ROLES)
    def reservations_create():
        """
        Create a reservation.

        Body: {clientId, startDate, endDate, totalPrice, notes?, status?,
               assignedUsers: [userId], attractions: [{attractionId, quantity}]}
        """
        payload = _json_body()
        require_fields(payload, ['clientId', 'startDate', 'endDate'])

        reservation = create_reservation(
            client_id=payload['clientId'],
            start_date=payload['startDate'],
            end_date=payload['endDate'],
            attractions=_line_items(payload),
            assigned_users=payload.get('assignedUsers'),
            notes=payload.get('notes') or '',
            total_price=payload.get('totalPrice'),
            status=payload.get('status'),
            created_by=current_user.id
        )

        log_audit('CREATE_RESERVATION', 'reservation', reservation['id'],
                  details={'code': reservation['code'], 'client_id': reservation['client_id']})

        return jsonify(serialize_reservation(reservation))

    @bp.route('/reservations/<int:reservation_id>', methods=['PUT'])
    @login_required
    @role_required(*STAFF_ROLES)
    def reservations_update(reservation_id):
        """
        Replace a reservation's data, staff and attraction lines.

        Body: same shape as create; attractions is required.
        """
        payload = _json_body()
        require_fields(payload, ['clientId', 'startDate', 'endDate'])
        if not isinstance(payload.get('attractions'), list):
            raise ValidationError('Missing field: attractions')

        reservation = update_reservation(
            reservation_id,
            client_id=payload['clientId'],
            start_date=payload['startDate'],
            end_date=payload['endDate'],
            attractions=_line_items(payload),
            assigned_users=payload.get('assignedUsers') or [],
            total_price=payload.get('totalPrice'),
            notes=payload.get('notes'),
            status=payload.get('status'),
            changed_by=current_user.id
        )

        log_audit('UPDATE_RESERVATION', 'reservation', reservation_id,
                  details={'code': reservation['code'], 'status': reservation['status']})

        return jsonify(serialize_reservation(reservation))

    @bp.route('/reservations/<int:reservation_id>', methods=['DELETE'])
    @login_required
    @role_required(*STAFF_ROLES)
    def reservations_cancel(reservation_id):
        """Cancel a reservation (status change; the row is kept)."""
        cancel_reservation(reservation_id, current_user.id)
        reservation = _load(reservation_id)

        log_audit('CANCEL_RESERVATION', 'reservation', reservation_id,
                  details={'code': reservation['code']})

        return api_success(reservation=serialize_reservation(reservation))

    @bp.route('/reservations/<int:reservation_id>/status', methods=['PUT'])
    @login_required
    @role_required(*STAFF_ROLES)
    def reservations_set_status(reservation_id):
        """Body: {status}"""
        payload = _json_body()
        require_fields(payload, ['status'])

        old_status = set_reservation_status(reservation_id, payload['status'], changed_by=current_user.id)
        reservation = _load(reservation_id)

        log_audit('UPDATE_RESERVATION_STATUS', 'reservation', reservation_id,
                  details={'from': old_status, 'to': reservation['status']})

        return jsonify(serialize_reservation(reservation))

    # ============================================================================
    # CONFIRMATION EMAILS
    # ============================================================================

    @bp.route('/reservations/<int:reservation_id>/confirmation-email', methods=['POST'])
    @login_required
    @role_required(*STAFF_ROLES)
    def reservations_send_confirmation(reservation_id):
        """Send the confirmation email. Body (optional): {to}"""
        reservation = _load(reservation_id)
        payload = request.get_json(silent=True) or {}

        result = send_confirmation_email(reservation, recipient=payload.get('to'))

        log_audit('SEND_CONFIRMATION_EMAIL', 'reservation', reservation_id,
                  details={'recipient': result['recipient'], 'success': result['success']})

        return jsonify(camelize(result)), (200 if result['success'] else 502)

    @bp.route('/reservations/<int:reservation_id>/emails')
    @login_required
    def reservations_emails(reservation_id):
        """Email attempts for a reservation, newest first."""
        _load(reservation_id)
        return jsonify([serialize_email(e) for e in get_email_logs(reservation_id)])
