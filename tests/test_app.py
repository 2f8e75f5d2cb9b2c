"""
Tests for the application factory, error handlers, CLI commands and
database bootstrap.
"""

import sqlite3


class TestAppFactory:

    def test_create_app_testing(self, app):
        assert app.testing
        assert app.config['AUTO_BOOTSTRAP'] is False
        assert 'api' in app.blueprints
        assert 'auth' in app.blueprints

    def test_health_is_public(self, client):
        response = client.get('/api/health')

        assert response.status_code == 200
        assert response.get_json() == {'status': 'ok', 'version': '1.0.0', 'app': 'BouncyRent'}

    def test_unknown_route_is_json(self, client):
        response = client.get('/api/nowhere')

        assert response.status_code == 404
        assert response.get_json()['success'] is False

    def test_method_not_allowed_is_json(self, client):
        response = client.patch('/api/health')
        assert response.status_code == 405
        assert response.get_json()['success'] is False

    def test_storage_failure_hides_details(self, client, auth_headers, monkeypatch):
        from blueprints.api import clients as client_routes

        def broken(search=None):
            raise sqlite3.OperationalError('no such table: clients')

        monkeypatch.setattr(client_routes, 'get_all_clients', broken)

        response = client.get('/api/clients', headers=auth_headers())
        assert response.status_code == 500
        assert response.get_json() == {'success': False, 'error': 'Something went wrong'}

    def test_auto_bootstrap_creates_schema_and_admin(self, tmp_path, monkeypatch):
        from app import create_app
        from config import TestConfig
        from models.user import get_user_by_email

        db_path = tmp_path / 'data' / 'fresh.db'
        monkeypatch.setattr(TestConfig, 'AUTO_BOOTSTRAP', True)
        monkeypatch.setattr(TestConfig, 'DATABASE_PATH', str(db_path))

        fresh = create_app('test')

        assert db_path.exists()
        with fresh.app_context():
            assert get_user_by_email('admin@bouncyrent.com')['role'] == 'admin'


class TestBootstrap:

    def test_bootstrap_is_idempotent(self, app, sample_data):
        from database import bootstrap_database, get_db

        with app.app_context():
            bootstrap_database()
            bootstrap_database()

            cursor = get_db().cursor()
            cursor.execute('SELECT COUNT(*) as n FROM users')
            assert cursor.fetchone()['n'] == 1
            cursor.execute('SELECT COUNT(*) as n FROM clients')
            assert cursor.fetchone()['n'] == 1

    def test_initial_admin_only_when_no_users(self, app):
        from models.user import ensure_initial_admin

        with app.app_context():
            assert ensure_initial_admin() is None

    def test_initial_admin_after_users_removed(self, app):
        from database import get_db
        from models.user import ensure_initial_admin, get_user_by_id

        with app.app_context():
            db = get_db()
            db.execute('DELETE FROM audit_log')
            db.execute('DELETE FROM users')
            db.commit()

            admin_id = ensure_initial_admin()
            assert get_user_by_id(admin_id)['role'] == 'admin'


class TestCli:

    def test_create_user(self, app):
        from models.user import get_user_by_email

        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            'create-user', 'crew@bouncyrent.com', 'Crew Member', '--role', 'employee',
            '--password', 'crew-pass'
        ])

        assert result.exit_code == 0
        assert 'User created successfully' in result.output
        with app.app_context():
            assert get_user_by_email('crew@bouncyrent.com')['role'] == 'employee'

    def test_create_duplicate_user(self, app):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            'create-user', 'admin@bouncyrent.com', 'Again', '--password', 'x'
        ])

        assert 'Error creating user' in result.output

    def test_cleanup_audit_logs(self, app):
        from database import get_db
        from models.audit_log import create_audit_log

        with app.app_context():
            log_id = create_audit_log('LOGIN')
            db = get_db()
            db.execute("UPDATE audit_log SET created_at = '2000-01-01 00:00:00' WHERE id = ?", (log_id,))
            db.commit()

        result = app.test_cli_runner().invoke(args=['cleanup-audit-logs', '--days', '30'])

        assert result.exit_code == 0
        assert 'Deleted 1 audit log entries older than 30 days' in result.output

    def test_init_db(self, app, sample_data):
        from database import get_db

        result = app.test_cli_runner().invoke(args=['init-db'])

        assert result.exit_code == 0
        with app.app_context():
            cursor = get_db().cursor()
            cursor.execute('SELECT COUNT(*) as n FROM clients')
            assert cursor.fetchone()['n'] == 0
