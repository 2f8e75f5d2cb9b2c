"""
Audit Log model and data access functions.
Handles audit log creation, retrieval, filtering, and retention cleanup.
"""

import json
from database import get_db
from utils.datetime_helpers import utc_cutoff


def _filters(user_id: int = None, action: str = None, target: str = None,
             target_id: int = None, start_date: str = None, end_date: str = None) -> tuple:
    """Build the WHERE clause shared by the list and count queries."""
    where = ' WHERE 1=1'
    params = []

    if user_id is not None:
        where += ' AND al.user_id = ?'
        params.append(user_id)

    if action:
        where += ' AND al.action = ?'
        params.append(action)

    if target:
        where += ' AND al.target = ?'
        params.append(target)

    if target_id is not None:
        where += ' AND al.target_id = ?'
        params.append(target_id)

    if start_date:
        where += ' AND date(al.created_at) >= date(?)'
        params.append(start_date)

    if end_date:
        where += ' AND date(al.created_at) <= date(?)'
        params.append(end_date)

    return where, params


# =============================================================================
# READ OPERATIONS
# =============================================================================

def get_audit_logs(
    user_id: int = None,
    action: str = None,
    target: str = None,
    target_id: int = None,
    start_date: str = None,
    end_date: str = None,
    limit: int = 100,
    offset: int = 0
) -> list:
    """
    Get audit logs with optional filtering, newest first.

    Args:
        user_id: Filter by user ID
        action: Filter by action (CREATE_RESERVATION, DELETE_INVOICE, ...)
        target: Filter by target entity (reservation, invoice, ...)
        target_id: Filter by specific entity ID
        start_date: Filter logs from this date (YYYY-MM-DD)
        end_date: Filter logs until this date (YYYY-MM-DD)
        limit: Maximum number of records to return
        offset: Number of records to skip for pagination

    Returns:
        List of audit log dicts with user_name / user_email
    """
    where, params = _filters(user_id, action, target, target_id, start_date, end_date)

    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(f'''
            SELECT al.*, u.name as user_name, u.email as user_email
            FROM audit_log al
            LEFT JOIN users u ON al.user_id = u.id
            {where}
            ORDER BY al.created_at DESC, al.id DESC
            LIMIT ? OFFSET ?
        ''', params + [limit, offset])
        rows = cursor.fetchall()

    logs = []
    for row in rows:
        entry = dict(row)
        if entry.get('details'):
            try:
                entry['details'] = json.loads(entry['details'])
            except ValueError:
                pass  # plain-text details are returned as stored
        logs.append(entry)
    return logs


def count_audit_logs(
    user_id: int = None,
    action: str = None,
    target: str = None,
    target_id: int = None,
    start_date: str = None,
    end_date: str = None
) -> int:
    """Count audit logs matching the same filters as get_audit_logs."""
    where, params = _filters(user_id, action, target, target_id, start_date, end_date)

    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(f'SELECT COUNT(*) as count FROM audit_log al{where}', params)
        return cursor.fetchone()['count']


def get_distinct_actions() -> list:
    """List of distinct action strings, for filter dropdowns."""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute('SELECT DISTINCT action FROM audit_log ORDER BY action')
        return [row['action'] for row in cursor.fetchall()]


# =============================================================================
# CREATE OPERATIONS
# =============================================================================

def create_audit_log(
    action: str,
    target: str = None,
    target_id: int = None,
    user_id: int = None,
    details=None,
    ip_address: str = None,
    user_agent: str = None
) -> int:
    """
    Create a new audit log entry.

    Args:
        action: Action name (CREATE_RESERVATION, UPDATE_INVOICE, ...)
        target: Entity type affected
        target_id: ID of the affected entity
        user_id: Acting user (None for system actions)
        details: dict (stored as JSON) or plain string
        ip_address: Client IP address
        user_agent: Client user agent string

    Returns:
        New audit log ID
    """
    if details is not None and not isinstance(details, str):
        details = json.dumps(details, default=str, ensure_ascii=False)

    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute('''
            INSERT INTO audit_log
            (user_id, action, target, target_id, details, ip_address, user_agent)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        ''', (user_id, action, target, target_id, details, ip_address, user_agent))
        return cursor.lastrowid


# =============================================================================
# CLEANUP OPERATIONS
# =============================================================================

def cleanup_old_logs(days: int = 90) -> int:
    """
    Delete audit logs older than the given number of days.

    Args:
        days: Number of days to retain logs

    Returns:
        Number of deleted records
    """
    with get_db() as conn:
        cursor = conn.cursor()
        # created_at is CURRENT_TIMESTAMP, i.e. UTC
        cursor.execute('DELETE FROM audit_log WHERE created_at < ?', (utc_cutoff(days),))
        return cursor.rowcount
