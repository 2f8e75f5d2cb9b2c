"""
User model and data access functions.
Handles staff accounts, password checks, roles, and Flask-Login integration.
"""

import sqlite3

from werkzeug.security import generate_password_hash, check_password_hash
from flask import current_app
from database import get_db

USER_ROLES = ('admin', 'manager', 'employee', 'viewer')

# Columns safe to expose through the API
PUBLIC_USER_FIELDS = ('id', 'name', 'email', 'role', 'avatar')


class User:
    """
    User class for Flask-Login integration.
    Wraps database row dictionary with required Flask-Login properties.
    """

    def __init__(self, user_dict):
        """
        Initialize User from database row.

        Args:
            user_dict: Dictionary with user data from database
        """
        self.id = user_dict['id']
        self.email = user_dict['email']
        self.name = user_dict['name']
        self.role = user_dict['role']
        self.avatar = user_dict.get('avatar')
        self.active = user_dict['active']

    @property
    def is_authenticated(self):
        """Required by Flask-Login."""
        return True

    @property
    def is_active(self):
        """Required by Flask-Login."""
        return self.active == 1

    @property
    def is_anonymous(self):
        """Required by Flask-Login."""
        return False

    def get_id(self):
        """Required by Flask-Login. Returns user ID as unicode string."""
        return str(self.id)

    def has_role(self, *roles) -> bool:
        """True if the user's role is one of roles."""
        return self.role in roles


def public_user(user_dict: dict) -> dict:
    """Strip a user row down to its public fields."""
    if not user_dict:
        return None
    return {field: user_dict.get(field) for field in PUBLIC_USER_FIELDS}


def get_user_by_id(user_id: int) -> dict:
    """
    Get user by ID.

    Args:
        user_id: User ID

    Returns:
        User dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM users WHERE id = ?', (user_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_user_by_email(email: str) -> dict:
    """
    Get user by email (case-insensitive).

    Args:
        email: Email to search for

    Returns:
        User dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM users WHERE lower(email) = lower(?)', (email,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_all_users(active_only: bool = True) -> list:
    """
    Get all users.

    Args:
        active_only: If True, only return active users

    Returns:
        List of user dicts
    """
    db = get_db()
    cursor = db.cursor()

    query = 'SELECT * FROM users'

    if active_only:
        query += ' WHERE active = 1'

    query += ' ORDER BY name'

    cursor.execute(query)
    rows = cursor.fetchall()
    return [dict(row) for row in rows]


def get_users_by_ids(user_ids: list) -> list:
    """Get the users whose id is in user_ids."""
    if not user_ids:
        return []
    db = get_db()
    cursor = db.cursor()
    placeholders = ','.join('?' * len(user_ids))
    cursor.execute(f'SELECT * FROM users WHERE id IN ({placeholders})', list(user_ids))
    return [dict(row) for row in cursor.fetchall()]


def create_user(email: str, password: str, name: str, role: str = 'employee') -> int:
    """
    Create new user with hashed password.

    Args:
        email: Unique email (login)
        password: Plain text password (will be hashed)
        name: Display name
        role: One of USER_ROLES

    Returns:
        New user ID

    Raises:
        ValueError if role is unknown
        sqlite3.IntegrityError if email already exists
    """
    if role not in USER_ROLES:
        raise ValueError(f'Unknown role: {role}')

    db = get_db()
    password_hash = generate_password_hash(password)

    cursor = db.cursor()
    cursor.execute('''
        INSERT INTO users (email, name, password_hash, role)
        VALUES (?, ?, ?, ?)
    ''', (email, name, password_hash, role))

    db.commit()
    return cursor.lastrowid


def update_last_login(user_id: int) -> None:
    """
    Update last login timestamp.

    Args:
        user_id: User ID
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        UPDATE users SET last_login = CURRENT_TIMESTAMP
        WHERE id = ?
    ''', (user_id,))
    db.commit()


def check_password(user_dict: dict, password: str) -> bool:
    """
    Verify password against stored hash.

    Args:
        user_dict: User dictionary with password_hash
        password: Plain text password to check

    Returns:
        True if password matches
    """
    return check_password_hash(user_dict['password_hash'], password)


def any_user_exists() -> bool:
    """Persisted check used by bootstrap; true once any account exists."""
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT 1 FROM users LIMIT 1')
    return cursor.fetchone() is not None


def ensure_initial_admin() -> int | None:
    """
    Create the first administrator when no user exists yet.

    The check reads the users table, so every process (and every restart)
    reaches the same decision.

    Returns:
        New admin ID, or None when users already exist
    """
    if any_user_exists():
        return None

    try:
        return create_user(
            email=current_app.config['INITIAL_ADMIN_EMAIL'],
            password=current_app.config['INITIAL_ADMIN_PASSWORD'],
            name=current_app.config.get('INITIAL_ADMIN_NAME', 'Administrator'),
            role='admin'
        )
    except sqlite3.IntegrityError:
        # Another process seeded the same admin between the check and the insert
        get_db().rollback()
        return None
