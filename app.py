"""
BouncyRent - Attraction Rental Management System
Flask application factory and initialization
"""

import os
import sqlite3
import click
import logging
from flask import Flask
from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException

# Load environment variables
load_dotenv()

# Import configuration
from config import config

# Import extensions
from extensions import login_manager

# Import database functions
from database import close_db, init_db, bootstrap_database

from utils.api_response import api_error
from utils.errors import (
    ValidationError, NotFoundError, ConflictError, StorageUnavailable
)

logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """
    Application factory for Flask app.

    Args:
        config_name: Configuration name ('development', 'production', 'test')

    Returns:
        Flask application instance
    """
    # Determine config
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    config_class = config.get(config_name, config['default'])
    if config_name == 'production':
        config_class.validate()

    # Create Flask app
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config_class)

    # Initialize extensions
    initialize_extensions(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Register CLI commands
    register_cli_commands(app)

    # Register teardown handlers
    register_teardown_handlers(app)

    # Configure logging
    configure_logging(app)

    # Create schema and first admin once per process
    if app.config.get('AUTO_BOOTSTRAP'):
        db_dir = os.path.dirname(app.config['DATABASE_PATH'])
        if db_dir and not os.path.exists(db_dir):
            os.makedirs(db_dir, exist_ok=True)
        with app.app_context():
            bootstrap_database()

    return app


def initialize_extensions(app):
    """Initialize Flask extensions."""
    # Initialize Flask-Login (bearer token request loader)
    login_manager.init_app(app)


def register_blueprints(app):
    """Register Flask blueprints."""
    # Import blueprints
    from blueprints.auth.routes import auth_bp
    from blueprints.api import api_bp

    # Register blueprints
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(api_bp, url_prefix='/api')


def register_error_handlers(app):
    """Register JSON error handlers."""

    @app.errorhandler(ValidationError)
    def validation_error(error):
        """Handle invalid or missing input."""
        return api_error(error.message, status=400)

    @app.errorhandler(NotFoundError)
    def not_found_entity(error):
        """Handle references to missing entities."""
        return api_error(error.message, status=404)

    @app.errorhandler(ConflictError)
    def conflict_error(error):
        """Handle operations blocked by existing references."""
        return api_error(error.message, status=409)

    @app.errorhandler(StorageUnavailable)
    def storage_unavailable(error):
        """Handle an unreachable store."""
        logger.error(f"Storage unavailable: {error}", exc_info=True)
        return api_error('Something went wrong', status=500)

    @app.errorhandler(sqlite3.Error)
    def storage_failure(error):
        """Handle unexpected store errors without leaking details."""
        logger.exception(f"Storage failure: {error}")
        return api_error('Something went wrong', status=500)

    @app.errorhandler(HTTPException)
    def http_error(error):
        """Render HTTP errors (404 routes, 405 methods, bad JSON) as JSON."""
        return api_error(error.description or error.name, status=error.code)

    @app.errorhandler(Exception)
    def internal_error(error):
        """Handle 500 errors."""
        logger.exception(f"Unhandled error: {error}")
        return api_error('Something went wrong', status=500)


def register_cli_commands(app):
    """Register Flask CLI commands."""

    @app.cli.command('init-db')
    def init_db_command():
        """Initialize database with schema and seed data."""
        click.echo('Initializing database...')
        with app.app_context():
            init_db()
        click.echo('Database initialized successfully!')

    @app.cli.command('create-user')
    @click.argument('email')
    @click.argument('name')
    @click.option('--role', default='employee',
                  type=click.Choice(['admin', 'manager', 'employee', 'viewer']))
    @click.password_option()
    def create_user_command(email, name, role, password):
        """Create a new user."""
        from models.user import create_user

        with app.app_context():
            try:
                user_id = create_user(email=email, password=password, name=name, role=role)
                click.echo(f'User created successfully! ID: {user_id}')
            except (ValueError, sqlite3.IntegrityError) as e:
                click.echo(f'Error creating user: {str(e)}', err=True)

    @app.cli.command('cleanup-audit-logs')
    @click.option('--days', default=None, type=int, help='Retention in days')
    def cleanup_audit_logs_command(days):
        """Delete audit log entries older than the retention period."""
        from models.audit_log import cleanup_old_logs

        with app.app_context():
            retention = days or app.config['AUDIT_LOG_RETENTION_DAYS']
            deleted = cleanup_old_logs(retention)
        click.echo(f'Deleted {deleted} audit log entries older than {retention} days')


def register_teardown_handlers(app):
    """Register teardown handlers."""

    @app.teardown_appcontext
    def teardown_db(error):
        """Close database connection at end of request."""
        close_db(error)


def configure_logging(app):
    """Configure application logging."""
    if not app.debug and not app.testing:
        # Production logging
        if not os.path.exists('logs'):
            os.mkdir('logs')

        file_handler = logging.FileHandler('logs/bouncyrent.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        logging.getLogger().addHandler(file_handler)
        logging.getLogger().setLevel(logging.INFO)

        app.logger.setLevel(logging.INFO)
        app.logger.info('BouncyRent startup')
    else:
        # Development logging
        app.logger.setLevel(logging.DEBUG)


# Create application instance for development server
if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', debug=True)
