"""
Pytest configuration and fixtures.
Every test gets its own SQLite file, initialized with the schema and the
first administrator.

The app fixture is yielded outside any app context: each test-client
request then gets a fresh context (and a fresh Flask-Login user), while
model tests open their own `with app.app_context():` block.
"""

import pytest


ADMIN_EMAIL = 'admin@bouncyrent.com'
ADMIN_PASSWORD = 'admin123'


@pytest.fixture
def app(tmp_path):
    """Create test application with an isolated database."""
    from app import create_app
    from database import init_db

    app = create_app('test')
    app.config['DATABASE_PATH'] = str(tmp_path / 'bouncyrent_test.db')

    with app.app_context():
        init_db()

    yield app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def users(app):
    """One user per role; returns {role: user_id}."""
    from models.user import create_user, get_user_by_email

    with app.app_context():
        ids = {'admin': get_user_by_email(ADMIN_EMAIL)['id']}
        for role in ('manager', 'employee', 'viewer'):
            ids[role] = create_user(
                email=f'{role}@bouncyrent.com',
                password=f'{role}-pass',
                name=role.capitalize(),
                role=role
            )
    return ids


@pytest.fixture
def auth_headers(app, users):
    """Return a function building Authorization headers for a role."""
    from models.user import get_user_by_id
    from utils.tokens import sign_token

    def _headers(role='admin'):
        with app.app_context():
            token = sign_token(get_user_by_id(users[role]))
        return {'Authorization': f'Bearer {token}'}

    return _headers


@pytest.fixture
def sample_data(app):
    """A client with email and two attractions; returns their IDs."""
    from models.attraction import create_attraction
    from models.client import create_client

    with app.app_context():
        client_id = create_client(
            first_name='Anna',
            last_name='Nowak',
            phone='600100200',
            street='Lipowa',
            building_number='12',
            postal_code='00-001',
            city='Warszawa',
            email='anna.nowak@bouncyrent.com',
            company_name='Nowak Events',
            tax_id='5250001111'
        )
        castle_id = create_attraction(name='Castle', price=250.0, width=5, length=5, height=4)
        slide_id = create_attraction(name='Water Slide', price=400.0, setup_time=45)

    return {
        'client_id': client_id,
        'castle_id': castle_id,
        'slide_id': slide_id,
    }


@pytest.fixture
def reservation(app, sample_data, users):
    """Reservation for the Castle, 2025-06-01 to 2025-06-03."""
    from models.reservation import create_reservation

    with app.app_context():
        return create_reservation(
            client_id=sample_data['client_id'],
            start_date='2025-06-01',
            end_date='2025-06-03',
            attractions=[{'attraction_id': sample_data['castle_id'], 'quantity': 1}],
            assigned_users=[users['employee']],
            total_price=250,
            created_by=users['admin']
        )
