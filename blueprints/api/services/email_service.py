"""
Reservation confirmation emails.

Sending is simulated: the rendered message is written to the log and the
attempt is recorded in email_log. Swap _deliver for a real transport to
send for real.
"""

import logging

from flask import current_app, render_template

from models.email_log import create_email_log
from utils.datetime_helpers import get_today, parse_datetime
from utils.errors import ValidationError

logger = logging.getLogger(__name__)


def _format_reservation_date(reservation: dict) -> str:
    start = parse_datetime(reservation['start_date'], 'startDate').date()
    end = parse_datetime(reservation['end_date'], 'endDate').date()
    if start == end:
        return start.strftime('%B %d, %Y')
    return f"{start.strftime('%B %d, %Y')} - {end.strftime('%B %d, %Y')}"


def render_confirmation_email(reservation: dict) -> str:
    """
    Render the confirmation HTML for a resolved reservation.

    The confirmation code is the reservation code.
    """
    lines = [
        {
            'name': line['attraction']['name'],
            'quantity': line['quantity'],
            'price': (line['attraction']['price'] or 0) * line['quantity'],
        }
        for line in reservation.get('attractions', [])
    ]
    return render_template(
        'email/reservation_confirmation.html',
        app_name=current_app.config['APP_NAME'],
        client=reservation['client'],
        reservation_date=_format_reservation_date(reservation),
        confirmation_code=reservation['code'],
        lines=lines,
        total_price=reservation['total_price'] or 0,
        support_email=current_app.config['SUPPORT_EMAIL'],
        support_phone=current_app.config['SUPPORT_PHONE'],
        year=get_today().year,
    )


def _deliver(sender: str, recipient: str, subject: str, html: str) -> str:
    logger.info(f"Sending email from {sender} to {recipient}: {subject}")
    logger.debug(f"Email content: {html[:200]}...")
    return f'Email sent successfully to {recipient}'


def send_confirmation_email(reservation: dict, recipient: str = None) -> dict:
    """
    Send (simulate) the confirmation email for a reservation.

    Args:
        reservation: Resolved reservation (see models.reservation.get_reservation)
        recipient: Override address (default: the client's email)

    Returns:
        dict with success, message, recipient and email_log_id

    Raises:
        ValidationError: No recipient address available
    """
    recipient = recipient or (reservation.get('client') or {}).get('email')
    if not recipient:
        raise ValidationError('Client has no email address')

    subject = f"{current_app.config['APP_NAME']} reservation confirmation {reservation['code']}"

    try:
        html = render_confirmation_email(reservation)
        message = _deliver(current_app.config['MAIL_SENDER'], recipient, subject, html)
        status = 'sent'
    except Exception as e:
        logger.error(f"Failed to send confirmation for {reservation['code']}: {e}", exc_info=True)
        message = f'Failed to send email: {e}'
        status = 'failed'

    email_log_id = create_email_log(reservation['id'], recipient, subject, status, message)

    return {
        'success': status == 'sent',
        'message': message,
        'recipient': recipient,
        'email_log_id': email_log_id,
    }
