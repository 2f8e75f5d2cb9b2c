"""
Bearer token signing and verification.
Tokens are HS256 JWTs carrying {id, email, role} with a fixed expiry.
"""

from datetime import datetime, timezone

from flask import current_app
from jose import JWTError, jwt


class InvalidTokenError(Exception):
    """Raised when a bearer token is malformed, tampered with or expired."""


def sign_token(user: dict) -> str:
    """
    Issue a signed token for a user row.

    Args:
        user: User dict with id, email and role

    Returns:
        Encoded JWT string
    """
    now = datetime.now(timezone.utc)
    payload = {
        'id': user['id'],
        'email': user['email'],
        'role': user['role'],
        'iat': now,
        'exp': now + current_app.config['JWT_EXPIRES'],
    }
    return jwt.encode(
        payload,
        current_app.config['JWT_SECRET_KEY'],
        algorithm=current_app.config['JWT_ALGORITHM']
    )


def verify_token(token: str) -> dict:
    """
    Decode and validate a token.

    Args:
        token: Encoded JWT string

    Returns:
        Payload dict with id, email, role

    Raises:
        InvalidTokenError: If the signature, expiry or claims are invalid
    """
    try:
        payload = jwt.decode(
            token,
            current_app.config['JWT_SECRET_KEY'],
            algorithms=[current_app.config['JWT_ALGORITHM']]
        )
    except JWTError as e:
        raise InvalidTokenError(str(e)) from e

    if 'id' not in payload or 'role' not in payload:
        raise InvalidTokenError('Token is missing required claims')
    return payload


def read_bearer_token(request) -> str | None:
    """Extract the token from an 'Authorization: Bearer <token>' header."""
    auth_header = request.headers.get('Authorization', '')
    scheme, _, token = auth_header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()
