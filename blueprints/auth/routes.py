"""
Authentication routes: login and current user.
Issues bearer tokens; every other API route reads them through Flask-Login.
"""

import logging

from flask import request, Blueprint
from flask_login import login_required, current_user

from blueprints.api.forms import form_payload, first_error
from blueprints.auth.forms import LoginForm
from models.user import get_user_by_email, get_user_by_id, update_last_login, check_password, public_user
from utils.api_response import api_error
from utils.audit import log_audit
from utils.tokens import sign_token

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Exchange email and password for a bearer token.

    Body: {email, password}
    Returns: {token, user}
    """
    form = LoginForm(formdata=form_payload(request.get_json(silent=True)))

    if not form.validate():
        return api_error(first_error(form), status=400)

    user_dict = get_user_by_email(form.email.data)

    # Same answer for unknown email and wrong password
    if user_dict is None or not check_password(user_dict, form.password.data):
        logger.info(f"Failed login for {form.email.data}")
        return api_error('Invalid credentials', status=401)

    if not user_dict.get('active'):
        return api_error('Account is disabled', status=401)

    update_last_login(user_dict['id'])
    log_audit('LOGIN', target='user', target_id=user_dict['id'], user_id=user_dict['id'])

    return {
        'token': sign_token(user_dict),
        'user': public_user(user_dict),
    }


@auth_bp.route('/me')
@login_required
def me():
    """Return the authenticated user."""
    return {'user': public_user(get_user_by_id(current_user.id))}
