"""
Tests for reservation create / read / update and cancellation.
"""

import pytest

from database import get_db
from utils.datetime_helpers import get_today


class TestCreateReservation:

    def test_create_mints_code_and_defaults(self, app, reservation, users):
        with app.app_context():
            year = get_today().year
            assert reservation['code'] == f'REZ-{year}-0001'
            assert reservation['status'] == 'pending'
            assert reservation['cancelled_at'] is None
            assert reservation['created_by'] == users['admin']
            assert reservation['start_date'] == '2025-06-01T00:00:00'
            assert reservation['end_date'] == '2025-06-03T00:00:00'

    def test_second_reservation_increments_code(self, app, reservation, sample_data):
        from models.reservation import create_reservation

        with app.app_context():
            second = create_reservation(
                client_id=sample_data['client_id'],
                start_date='2025-06-10',
                end_date='2025-06-10',
                attractions=[{'attraction_id': sample_data['slide_id']}]
            )
            assert second['code'].endswith('-0002')

    def test_round_trip_line_items(self, app, sample_data):
        from models.reservation import create_reservation, get_reservation

        with app.app_context():
            created = create_reservation(
                client_id=sample_data['client_id'],
                start_date='2025-08-01T10:00:00',
                end_date='2025-08-02T18:00:00',
                attractions=[
                    {'attraction_id': sample_data['castle_id'], 'quantity': 2},
                    {'attraction_id': sample_data['slide_id'], 'quantity': 1},
                ],
                total_price=900
            )
            fetched = get_reservation(created['id'])

            lines = [(line['attraction_id'], line['quantity']) for line in fetched['attractions']]
            assert lines == [(sample_data['castle_id'], 2), (sample_data['slide_id'], 1)]
            assert fetched['attractions'][0]['attraction']['name'] == 'Castle'
            assert fetched['client']['last_name'] == 'Nowak'
            assert fetched['invoices'] == []

    def test_create_does_not_check_availability(self, app, reservation, sample_data):
        from models.reservation import create_reservation

        with app.app_context():
            overlapping = create_reservation(
                client_id=sample_data['client_id'],
                start_date='2025-06-02',
                end_date='2025-06-02',
                attractions=[{'attraction_id': sample_data['castle_id']}]
            )
            assert overlapping['id'] != reservation['id']

    def test_assigned_users_resolved_without_password(self, app, reservation, users):
        with app.app_context():
            assert [u['id'] for u in reservation['assigned_users']] == [users['employee']]
            assert 'password_hash' not in reservation['assigned_users'][0]

    def test_unknown_client(self, app, sample_data):
        from models.reservation import create_reservation
        from utils.errors import NotFoundError

        with app.app_context():
            with pytest.raises(NotFoundError):
                create_reservation(client_id=999, start_date='2025-06-01', end_date='2025-06-01')

    def test_unknown_attraction(self, app, sample_data):
        from models.reservation import create_reservation
        from utils.errors import NotFoundError

        with app.app_context():
            with pytest.raises(NotFoundError) as exc:
                create_reservation(
                    client_id=sample_data['client_id'],
                    start_date='2025-06-01',
                    end_date='2025-06-01',
                    attractions=[{'attraction_id': 999, 'quantity': 1}]
                )
            assert exc.value.message == 'Attraction not found'

    def test_invalid_quantity(self, app, sample_data):
        from models.reservation import create_reservation
        from utils.errors import ValidationError

        with app.app_context():
            with pytest.raises(ValidationError):
                create_reservation(
                    client_id=sample_data['client_id'],
                    start_date='2025-06-01',
                    end_date='2025-06-01',
                    attractions=[{'attraction_id': sample_data['castle_id'], 'quantity': 0}]
                )

    def test_start_after_end(self, app, sample_data):
        from models.reservation import create_reservation
        from utils.errors import ValidationError

        with app.app_context():
            with pytest.raises(ValidationError):
                create_reservation(
                    client_id=sample_data['client_id'],
                    start_date='2025-06-05',
                    end_date='2025-06-01'
                )

    def test_failed_create_leaves_nothing_behind(self, app, sample_data):
        from models.reservation import create_reservation
        from utils.errors import NotFoundError

        with app.app_context():
            with pytest.raises(NotFoundError):
                create_reservation(
                    client_id=sample_data['client_id'],
                    start_date='2025-06-01',
                    end_date='2025-06-01',
                    assigned_users=[999]
                )
            cursor = get_db().cursor()
            cursor.execute('SELECT COUNT(*) as n FROM reservations')
            assert cursor.fetchone()['n'] == 0


class TestUpdateReservation:

    def test_replaces_line_items_and_staff(self, app, reservation, sample_data, users):
        from models.reservation import update_reservation

        with app.app_context():
            updated = update_reservation(
                reservation['id'],
                client_id=sample_data['client_id'],
                start_date='2025-06-01',
                end_date='2025-06-04',
                attractions=[{'attraction_id': sample_data['slide_id'], 'quantity': 3}],
                assigned_users=[users['manager']]
            )

            assert [(a['attraction_id'], a['quantity']) for a in updated['attractions']] == [
                (sample_data['slide_id'], 3)
            ]
            assert [u['id'] for u in updated['assigned_users']] == [users['manager']]
            assert updated['end_date'] == '2025-06-04T00:00:00'
            assert updated['code'] == reservation['code']

    def test_omitted_fields_keep_stored_values(self, app, reservation, sample_data):
        from models.reservation import update_reservation

        with app.app_context():
            updated = update_reservation(
                reservation['id'],
                client_id=sample_data['client_id'],
                start_date='2025-06-01',
                end_date='2025-06-03',
                attractions=[{'attraction_id': sample_data['castle_id']}]
            )
            assert updated['total_price'] == 250
            assert updated['status'] == 'pending'
            assert updated['assigned_users'] == []

    def test_failed_update_keeps_old_lines(self, app, reservation, sample_data):
        from models.reservation import get_reservation, update_reservation
        from utils.errors import NotFoundError

        with app.app_context():
            with pytest.raises(NotFoundError):
                update_reservation(
                    reservation['id'],
                    client_id=sample_data['client_id'],
                    start_date='2025-06-01',
                    end_date='2025-06-03',
                    attractions=[{'attraction_id': 999}]
                )
            kept = get_reservation(reservation['id'])
            assert len(kept['attractions']) == 1
            assert kept['attractions'][0]['attraction_id'] == sample_data['castle_id']

    def test_unknown_reservation(self, app, sample_data):
        from models.reservation import update_reservation
        from utils.errors import NotFoundError

        with app.app_context():
            with pytest.raises(NotFoundError):
                update_reservation(
                    999,
                    client_id=sample_data['client_id'],
                    start_date='2025-06-01',
                    end_date='2025-06-03',
                    attractions=[]
                )


class TestListing:

    def test_list_newest_first(self, app, reservation, sample_data):
        from models.reservation import create_reservation, get_all_reservations

        with app.app_context():
            second = create_reservation(
                client_id=sample_data['client_id'],
                start_date='2025-05-01',
                end_date='2025-05-01'
            )
            listed = get_all_reservations()
            assert [r['id'] for r in listed] == [second['id'], reservation['id']]
            assert listed[1]['attractions'][0]['attraction']['name'] == 'Castle'

    def test_calendar_ordered_by_start(self, app, reservation, sample_data):
        from models.reservation import create_reservation, get_calendar_reservations

        with app.app_context():
            earlier = create_reservation(
                client_id=sample_data['client_id'],
                start_date='2025-05-01',
                end_date='2025-05-02'
            )
            entries = get_calendar_reservations()
            assert [e['id'] for e in entries] == [earlier['id'], reservation['id']]
            assert entries[0]['first_name'] == 'Anna'

    def test_calendar_window(self, app, reservation, sample_data):
        from models.reservation import create_reservation, get_calendar_reservations

        with app.app_context():
            create_reservation(
                client_id=sample_data['client_id'],
                start_date='2025-09-01',
                end_date='2025-09-02'
            )
            entries = get_calendar_reservations(date_from='2025-06-01', date_to='2025-06-30')
            assert [e['id'] for e in entries] == [reservation['id']]
