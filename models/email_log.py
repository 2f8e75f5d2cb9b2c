"""Record of confirmation email attempts."""

from database import get_db


def create_email_log(reservation_id: int, recipient: str, subject: str,
                     status: str, message: str = None) -> int:
    """
    Record one send attempt.

    Args:
        reservation_id: Reservation the email is about
        recipient: Destination address
        subject: Email subject
        status: 'sent' or 'failed'
        message: Provider response or error text

    Returns:
        New email log ID
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        INSERT INTO email_log (reservation_id, recipient, subject, status, message)
        VALUES (?, ?, ?, ?, ?)
    ''', (reservation_id, recipient, subject, status, message))
    db.commit()
    return cursor.lastrowid


def get_email_logs(reservation_id: int) -> list:
    """Attempts for a reservation, newest first."""
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT * FROM email_log
        WHERE reservation_id = ?
        ORDER BY created_at DESC, id DESC
    ''', (reservation_id,))
    return [dict(row) for row in cursor.fetchall()]
