"""
Flask extensions initialization.
Extensions are initialized here and then initialized with the app in app.py.
"""

import logging
from flask_login import LoginManager

logger = logging.getLogger(__name__)

# Initialize Flask-Login
login_manager = LoginManager()

# Sessions are not used, every API request carries its own bearer token
login_manager.session_protection = None


@login_manager.request_loader
def load_user_from_request(request):
    """
    Load user from the Authorization: Bearer header.

    Args:
        request: The incoming Flask request

    Returns:
        User object or None if the token is missing, invalid or expired
    """
    from models.user import get_user_by_id, User
    from utils.tokens import read_bearer_token, verify_token, InvalidTokenError

    token = read_bearer_token(request)
    if not token:
        return None

    try:
        payload = verify_token(token)
    except InvalidTokenError as e:
        logger.debug(f"Rejected bearer token: {e}")
        return None

    user_dict = get_user_by_id(payload['id'])
    if not user_dict or not user_dict.get('active'):
        return None
    return User(user_dict)


@login_manager.unauthorized_handler
def unauthorized():
    """Answer unauthenticated API calls with a JSON 401."""
    from utils.api_response import api_error
    return api_error('Unauthorized', status=401)
