"""
Tests for attraction availability (inclusive overlap rule).
"""

import pytest


class TestIsAvailable:
    """Reservation A holds the Castle from 2025-06-01 to 2025-06-03."""

    def test_overlapping_range_is_unavailable(self, app, reservation, sample_data):
        from models.reservation import is_available

        with app.app_context():
            assert is_available(sample_data['castle_id'], '2025-06-02', '2025-06-04') is False

    def test_adjacent_range_is_available(self, app, reservation, sample_data):
        from models.reservation import is_available

        with app.app_context():
            assert is_available(sample_data['castle_id'], '2025-06-04', '2025-06-05') is True

    def test_bounds_are_inclusive(self, app, reservation, sample_data):
        from models.reservation import is_available

        with app.app_context():
            # touches the last day
            assert is_available(sample_data['castle_id'], '2025-06-03', '2025-06-10') is False
            # touches the first day
            assert is_available(sample_data['castle_id'], '2025-05-25', '2025-06-01') is False
            # encloses the whole reservation
            assert is_available(sample_data['castle_id'], '2025-05-01', '2025-07-01') is False

    def test_other_attraction_is_available(self, app, reservation, sample_data):
        from models.reservation import is_available

        with app.app_context():
            assert is_available(sample_data['slide_id'], '2025-06-01', '2025-06-03') is True

    def test_cancelled_reservation_still_blocks(self, app, reservation, sample_data, users):
        from models.reservation import cancel_reservation, is_available

        with app.app_context():
            cancel_reservation(reservation['id'], users['admin'])
            assert is_available(sample_data['castle_id'], '2025-06-02', '2025-06-02') is False

    def test_cancelled_reservation_ignored_when_configured(self, app, reservation, sample_data, users):
        from models.reservation import cancel_reservation, is_available

        app.config['AVAILABILITY_IGNORES_CANCELLED'] = True
        with app.app_context():
            cancel_reservation(reservation['id'], users['admin'])
            assert is_available(sample_data['castle_id'], '2025-06-02', '2025-06-02') is True

    def test_exclude_reservation_being_edited(self, app, reservation, sample_data):
        from models.reservation import is_available

        with app.app_context():
            assert is_available(
                sample_data['castle_id'], '2025-06-01', '2025-06-03',
                exclude_reservation_id=reservation['id']
            ) is True

    def test_start_after_end_rejected(self, app, sample_data):
        from models.reservation import is_available
        from utils.errors import ValidationError

        with app.app_context():
            with pytest.raises(ValidationError):
                is_available(sample_data['castle_id'], '2025-06-05', '2025-06-01')


class TestFindConflicts:

    def test_conflict_details(self, app, reservation, sample_data):
        from models.reservation import find_conflicting_reservations

        with app.app_context():
            conflicts = find_conflicting_reservations(sample_data['castle_id'], '2025-06-02', '2025-06-02')

            assert len(conflicts) == 1
            assert conflicts[0]['code'] == reservation['code']
            assert conflicts[0]['client_name'] == 'Anna Nowak'

    def test_line_item_listed_twice_reports_once(self, app, sample_data):
        from models.reservation import create_reservation, find_conflicting_reservations

        with app.app_context():
            create_reservation(
                client_id=sample_data['client_id'],
                start_date='2025-07-01',
                end_date='2025-07-01',
                attractions=[
                    {'attraction_id': sample_data['castle_id'], 'quantity': 1},
                    {'attraction_id': sample_data['castle_id'], 'quantity': 2},
                ]
            )
            assert len(find_conflicting_reservations(sample_data['castle_id'], '2025-07-01', '2025-07-01')) == 1
