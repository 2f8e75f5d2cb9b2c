"""
General API routes: health check and staff directory.
"""

from flask import jsonify, current_app
from flask_login import login_required

from models.user import get_all_users, public_user
from utils.decorators import role_required, MANAGER_ROLES


def register_routes(bp):
    """Register health and user routes on the blueprint."""

    @bp.route('/health')
    def health_check():
        """
        Health check endpoint (no authentication required).

        Returns:
            JSON with status and version
        """
        return jsonify({
            'status': 'ok',
            'version': current_app.config['APP_VERSION'],
            'app': current_app.config['APP_NAME']
        })

    @bp.route('/users')
    @login_required
    @role_required(*MANAGER_ROLES)
    def users_list():
        """Active staff members, for assigning users to reservations."""
        return jsonify([public_user(u) for u in get_all_users(active_only=True)])
