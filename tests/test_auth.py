"""
Tests for login, bearer tokens and the current-user endpoint.
"""

from datetime import timedelta

ADMIN_EMAIL = 'admin@bouncyrent.com'
ADMIN_PASSWORD = 'admin123'


class TestLogin:

    def test_login_returns_token_and_user(self, app, client):
        response = client.post('/api/auth/login', json={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})

        assert response.status_code == 200
        data = response.get_json()
        assert data['token']
        assert data['user']['email'] == ADMIN_EMAIL
        assert data['user']['role'] == 'admin'
        assert 'password_hash' not in data['user']

        from models.audit_log import get_audit_logs
        with app.app_context():
            assert get_audit_logs(action='LOGIN')[0]['user_id'] == data['user']['id']

    def test_wrong_password(self, client):
        response = client.post('/api/auth/login', json={'email': ADMIN_EMAIL, 'password': 'nope'})

        assert response.status_code == 401
        assert response.get_json() == {'success': False, 'error': 'Invalid credentials'}

    def test_unknown_email_same_answer(self, client):
        response = client.post('/api/auth/login', json={'email': 'ghost@bouncyrent.com', 'password': 'x'})

        assert response.status_code == 401
        assert response.get_json()['error'] == 'Invalid credentials'

    def test_missing_password(self, client):
        response = client.post('/api/auth/login', json={'email': ADMIN_EMAIL})
        assert response.status_code == 400

    def test_malformed_email(self, client):
        response = client.post('/api/auth/login', json={'email': 'not-an-email', 'password': 'x'})
        assert response.status_code == 400

    def test_disabled_account(self, app, client, users):
        from database import get_db

        with app.app_context():
            db = get_db()
            db.execute('UPDATE users SET active = 0 WHERE id = ?', (users['viewer'],))
            db.commit()

        response = client.post('/api/auth/login', json={'email': 'viewer@bouncyrent.com', 'password': 'viewer-pass'})
        assert response.status_code == 401


class TestBearerToken:

    def test_me(self, client, auth_headers, users):
        response = client.get('/api/auth/me', headers=auth_headers('manager'))

        assert response.status_code == 200
        assert response.get_json()['user']['id'] == users['manager']

    def test_login_token_is_accepted(self, client):
        token = client.post('/api/auth/login', json={
            'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD
        }).get_json()['token']

        response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
        assert response.status_code == 200

    def test_missing_header(self, client):
        assert client.get('/api/auth/me').status_code == 401

    def test_wrong_scheme(self, client, auth_headers):
        token = auth_headers()['Authorization'].split(' ', 1)[1]
        response = client.get('/api/auth/me', headers={'Authorization': f'Basic {token}'})
        assert response.status_code == 401

    def test_expired_token(self, app, client, users):
        from models.user import get_user_by_id
        from utils.tokens import sign_token

        app.config['JWT_EXPIRES'] = timedelta(seconds=-10)
        with app.app_context():
            token = sign_token(get_user_by_id(users['admin']))

        response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
        assert response.status_code == 401

    def test_token_signed_with_other_key(self, app, client, users):
        from models.user import get_user_by_id
        from utils.tokens import sign_token

        with app.app_context():
            user = get_user_by_id(users['admin'])
            app.config['JWT_SECRET_KEY'] = 'another-secret'
            token = sign_token(user)
            app.config['JWT_SECRET_KEY'] = 'test-jwt-secret'

        response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
        assert response.status_code == 401

    def test_deactivated_user_token_rejected(self, app, client, auth_headers, users):
        from database import get_db

        headers = auth_headers('employee')
        with app.app_context():
            db = get_db()
            db.execute('UPDATE users SET active = 0 WHERE id = ?', (users['employee'],))
            db.commit()

        assert client.get('/api/auth/me', headers=headers).status_code == 401


class TestUsersDirectory:

    def test_manager_lists_users(self, client, auth_headers, users):
        response = client.get('/api/users', headers=auth_headers('manager'))

        assert response.status_code == 200
        emails = {u['email'] for u in response.get_json()}
        assert ADMIN_EMAIL in emails
        assert 'employee@bouncyrent.com' in emails

    def test_employee_forbidden(self, client, auth_headers):
        assert client.get('/api/users', headers=auth_headers('employee')).status_code == 403
