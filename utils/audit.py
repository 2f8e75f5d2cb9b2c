"""
Audit logging helper.
Records administrative actions; a failed write never fails the caller.
"""

import logging
from flask import request
from flask_login import current_user

# Configure logger for audit operations
logger = logging.getLogger(__name__)


def _request_origin() -> tuple:
    """Client IP (first X-Forwarded-For hop) and user agent, if in a request."""
    try:
        ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
        if ip_address and ',' in ip_address:
            ip_address = ip_address.split(',')[0].strip()
        user_agent = request.headers.get('User-Agent', '')[:255]
        return ip_address, user_agent
    except RuntimeError:
        # Outside request context (CLI, tests)
        return None, None


def log_audit(
    action: str,
    target: str = None,
    target_id: int = None,
    details=None,
    user_id: int = None
) -> int:
    """
    Log an audit entry.

    Captures the current user, IP address and user agent from the request
    context when available.

    Args:
        action: Action name (CREATE_RESERVATION, UNAUTHORIZED_DELETE_INVOICE, ...)
        target: Entity type (reservation, invoice, client, ...)
        target_id: ID of the affected entity
        details: dict or string with extra context
        user_id: Override user ID (defaults to current_user.id)

    Returns:
        New audit log ID, or None if logging failed

    Example:
        log_audit('CANCEL_RESERVATION', 'reservation', 12,
                  details={'code': 'REZ-2025-0007'})
    """
    try:
        from models.audit_log import create_audit_log

        if user_id is None:
            try:
                if current_user and current_user.is_authenticated:
                    user_id = current_user.id
            except RuntimeError:
                user_id = None  # System action

        ip_address, user_agent = _request_origin()

        return create_audit_log(
            action=action,
            target=target,
            target_id=target_id,
            user_id=user_id,
            details=details,
            ip_address=ip_address,
            user_agent=user_agent
        )

    except Exception as e:
        # Audit logging should never fail the main operation
        logger.error(f"Failed to log audit entry: {e}", exc_info=True)
        return None
