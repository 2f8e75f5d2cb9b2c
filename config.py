"""
Flask application configuration classes.
Provides configuration for development, production, and testing environments.
"""

import os
from datetime import timedelta


def _env_flag(name: str, default: str = 'false') -> bool:
    return os.environ.get(name, default).lower() in ('1', 'true', 'yes')


class Config:
    """Base configuration class with common settings."""

    # Secret key for Flask internals; tokens use JWT_SECRET_KEY
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Database configuration (raw SQLite, no ORM)
    DATABASE_PATH = os.environ.get('DATABASE_PATH') or 'instance/bouncyrent.db'

    # Bearer token settings
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or 'dev-jwt-secret-change-in-production'
    JWT_ALGORITHM = os.environ.get('JWT_ALGORITHM', 'HS256')
    JWT_EXPIRES = timedelta(days=int(os.environ.get('JWT_EXPIRES_DAYS', 7)))

    # The API authenticates with bearer tokens, forms are validated without CSRF
    WTF_CSRF_ENABLED = False

    # Pagination
    ITEMS_PER_PAGE = 10
    MAX_PAGE_SIZE = 100

    # Timezone used for "today" (numbering periods, cancellation timestamps)
    TIMEZONE = os.environ.get('TIMEZONE', 'Europe/Warsaw')

    # Reservation rules
    SEQUENCE_MAX_RETRIES = 5
    ENFORCE_STATUS_TRANSITIONS = _env_flag('ENFORCE_STATUS_TRANSITIONS')
    AVAILABILITY_IGNORES_CANCELLED = _env_flag('AVAILABILITY_IGNORES_CANCELLED')

    # First administrator, created only when the users table is empty
    AUTO_BOOTSTRAP = True
    INITIAL_ADMIN_EMAIL = os.environ.get('INITIAL_ADMIN_EMAIL', 'admin@bouncyrent.com')
    INITIAL_ADMIN_PASSWORD = os.environ.get('INITIAL_ADMIN_PASSWORD', 'admin123')
    INITIAL_ADMIN_NAME = 'Administrator'

    # Confirmation emails (simulated, logged only)
    MAIL_SENDER = os.environ.get('MAIL_SENDER', 'no-reply@bouncyrent.com')
    SUPPORT_EMAIL = os.environ.get('SUPPORT_EMAIL', 'support@bouncyrent.com')
    SUPPORT_PHONE = os.environ.get('SUPPORT_PHONE', '(555) 123-4567')

    # Audit log retention
    AUDIT_LOG_RETENTION_DAYS = 90

    # Application settings
    APP_NAME = 'BouncyRent'
    APP_VERSION = '1.0.0'


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG = False
    TESTING = False

    SECRET_KEY = os.environ.get('SECRET_KEY') or Config.SECRET_KEY
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or Config.JWT_SECRET_KEY
    DATABASE_PATH = os.environ.get('DATABASE_PATH') or Config.DATABASE_PATH

    @classmethod
    def validate(cls) -> None:
        """Validate that required production environment variables are set."""
        secret_key = os.environ.get('SECRET_KEY')
        if not secret_key:
            raise ValueError("SECRET_KEY environment variable must be set in production")
        if len(secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters in production")
        jwt_secret = os.environ.get('JWT_SECRET_KEY')
        if not jwt_secret or len(jwt_secret) < 32:
            raise ValueError("JWT_SECRET_KEY must be set to at least 32 characters in production")
        if not os.environ.get('DATABASE_PATH'):
            raise ValueError("DATABASE_PATH environment variable must be set in production")


class TestConfig(Config):
    """Testing environment configuration."""

    TESTING = True
    DEBUG = True
    AUTO_BOOTSTRAP = False
    DATABASE_PATH = os.environ.get('DATABASE_PATH', ':memory:')
    SECRET_KEY = 'test-secret-key'
    JWT_SECRET_KEY = 'test-jwt-secret'
    ENFORCE_STATUS_TRANSITIONS = False
    AVAILABILITY_IGNORES_CANCELLED = False


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'test': TestConfig,
    'default': DevelopmentConfig
}
