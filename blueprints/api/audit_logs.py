"""
Audit log API routes (admin only).
"""

from flask import current_app, jsonify, request
from flask_login import login_required

from blueprints.api.serializers import serialize_audit_log
from models.audit_log import count_audit_logs, get_audit_logs, get_distinct_actions
from utils.api_response import api_page
from utils.decorators import role_required
from utils.validators import parse_page_args


def register_routes(bp):
    """Register audit log routes on the blueprint."""

    @bp.route('/audit-logs')
    @login_required
    @role_required('admin')
    def audit_logs_list():
        """
        Paginated audit log, newest first.

        Query: page, limit, action, target, targetId, userId, from, to (YYYY-MM-DD)
        """
        page, limit = parse_page_args(
            request.args,
            current_app.config['ITEMS_PER_PAGE'],
            current_app.config['MAX_PAGE_SIZE']
        )

        filters = {
            'user_id': request.args.get('userId', type=int),
            'action': request.args.get('action') or None,
            'target': request.args.get('target') or None,
            'target_id': request.args.get('targetId', type=int),
            'start_date': request.args.get('from') or None,
            'end_date': request.args.get('to') or None,
        }

        logs = get_audit_logs(limit=limit, offset=(page - 1) * limit, **filters)
        total = count_audit_logs(**filters)

        return api_page([serialize_audit_log(entry) for entry in logs], total, page, limit)

    @bp.route('/audit-logs/actions')
    @login_required
    @role_required('admin')
    def audit_logs_actions():
        """Distinct action names, for filters."""
        return jsonify(get_distinct_actions())
