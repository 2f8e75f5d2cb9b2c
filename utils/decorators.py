"""
Route decorators for authentication and authorization.
Provides role-based access control for API routes.
"""

from functools import wraps
from flask import request
from flask_login import login_required, current_user

from utils.api_response import api_error


def role_required(*roles, audit_action: str = None, audit_target: str = None):
    """
    Decorator to require one of the given roles for a route.

    Must be applied below @login_required so current_user is authenticated.

    Usage:
        @api_bp.route('/invoices/<int:invoice_id>', methods=['DELETE'])
        @login_required
        @role_required('admin', audit_action='UNAUTHORIZED_DELETE_INVOICE',
                       audit_target='invoice')
        def delete_invoice(invoice_id):
            ...

    Args:
        *roles: Allowed role names
        audit_action: If set, a rejected call is written to the audit log
        audit_target: Target entity type for the audit entry

    Returns:
        Decorator function
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not current_user.has_role(*roles):
                if audit_action:
                    from utils.audit import log_audit
                    target_id = next(iter(kwargs.values()), None) if kwargs else None
                    log_audit(
                        audit_action,
                        target=audit_target,
                        target_id=target_id,
                        details={
                            'role': current_user.role,
                            'method': request.method,
                            'path': request.path,
                        }
                    )
                return api_error('Forbidden', status=403)

            return func(*args, **kwargs)
        return wrapper
    return decorator


# Re-export login_required for convenience
__all__ = ['login_required', 'role_required', 'MANAGER_ROLES', 'STAFF_ROLES']

# Role groups used by the API routes
MANAGER_ROLES = ('admin', 'manager')
STAFF_ROLES = ('admin', 'manager', 'employee')
