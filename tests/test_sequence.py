"""
Tests for REZ / FV / PR sequence numbering.
"""

import sqlite3
from datetime import date

import pytest

from database import get_db


def _insert_reservation(client_id, code):
    db = get_db()
    db.execute('''
        INSERT INTO reservations (code, client_id, start_date, end_date)
        VALUES (?, ?, '2025-01-01T00:00:00', '2025-01-01T00:00:00')
    ''', (code, client_id))
    db.commit()


class TestSequenceFormat:
    """Prefixes and zero padding."""

    def test_prefixes(self, app):
        from models.sequence import sequence_prefix

        with app.app_context():
            assert sequence_prefix('reservation', date(2025, 6, 1)) == 'REZ-2025-'
            assert sequence_prefix('company_invoice', date(2025, 6, 1)) == 'FV/2025/06/'
            assert sequence_prefix('receipt', date(2025, 11, 30)) == 'PR/2025/11/'

    def test_first_number_in_empty_partition(self, app):
        from models.sequence import next_number

        with app.app_context():
            assert next_number('reservation', date(2025, 3, 1)) == 'REZ-2025-0001'
            assert next_number('company_invoice', date(2025, 3, 1)) == 'FV/2025/03/0001'
            assert next_number('receipt', date(2025, 3, 1)) == 'PR/2025/03/0001'

    def test_unknown_kind(self, app):
        from models.sequence import next_number

        with app.app_context():
            with pytest.raises(ValueError):
                next_number('credit_note', date(2025, 3, 1))


class TestSequenceIncrement:
    """Next number is max + 1 within the partition."""

    def test_increments_after_persisted_number(self, app, sample_data):
        from models.sequence import next_number

        with app.app_context():
            _insert_reservation(sample_data['client_id'], 'REZ-2025-0007')
            assert next_number('reservation', date(2025, 8, 1)) == 'REZ-2025-0008'

    def test_uses_numeric_max_not_lexical(self, app, sample_data):
        from models.sequence import next_number

        with app.app_context():
            _insert_reservation(sample_data['client_id'], 'REZ-2025-0999')
            _insert_reservation(sample_data['client_id'], 'REZ-2025-1000')
            assert next_number('reservation', date(2025, 8, 1)) == 'REZ-2025-1001'

    def test_resets_per_year(self, app, sample_data):
        from models.sequence import next_number

        with app.app_context():
            _insert_reservation(sample_data['client_id'], 'REZ-2025-0042')
            assert next_number('reservation', date(2025, 12, 31)) == 'REZ-2025-0043'
            assert next_number('reservation', date(2026, 1, 1)) == 'REZ-2026-0001'

    def test_created_reservation_starts_new_year_at_one(self, app, sample_data, monkeypatch):
        from models import sequence
        from models.reservation import create_reservation

        with app.app_context():
            _insert_reservation(sample_data['client_id'], 'REZ-2025-0042')
            monkeypatch.setattr(sequence, 'get_today', lambda: date(2026, 1, 2))

            created = create_reservation(
                client_id=sample_data['client_id'],
                start_date='2026-01-10',
                end_date='2026-01-10',
                attractions=[{'attraction_id': sample_data['castle_id'], 'quantity': 1}]
            )
            assert created['code'] == 'REZ-2026-0001'


class TestIssueNumbered:
    """Mint-and-insert under BEGIN IMMEDIATE with collision retry."""

    def test_retries_on_number_collision(self, app, sample_data, monkeypatch):
        from models import sequence

        with app.app_context():
            _insert_reservation(sample_data['client_id'], 'REZ-2025-0001')

            calls = []
            real_next_number = sequence.next_number

            def stale_then_fresh(kind, period=None, cursor=None):
                calls.append(kind)
                if len(calls) == 1:
                    return 'REZ-2025-0001'  # what a racing process would have read
                return real_next_number(kind, period, cursor)

            monkeypatch.setattr(sequence, 'next_number', stale_then_fresh)

            def insert(cursor, code):
                cursor.execute('''
                    INSERT INTO reservations (code, client_id, start_date, end_date)
                    VALUES (?, ?, '2025-02-01T00:00:00', '2025-02-01T00:00:00')
                ''', (code, sample_data['client_id']))
                return cursor.lastrowid

            number, _ = sequence.issue_numbered('reservation', insert, period=date(2025, 2, 1))

            assert number == 'REZ-2025-0002'
            assert len(calls) == 2

    def test_gives_up_after_max_retries(self, app, sample_data, monkeypatch):
        from models import sequence
        from utils.errors import StorageUnavailable

        with app.app_context():
            _insert_reservation(sample_data['client_id'], 'REZ-2025-0001')
            monkeypatch.setattr(sequence, 'next_number', lambda *a, **k: 'REZ-2025-0001')

            def insert(cursor, code):
                cursor.execute('''
                    INSERT INTO reservations (code, client_id, start_date, end_date)
                    VALUES (?, ?, '2025-02-01T00:00:00', '2025-02-01T00:00:00')
                ''', (code, sample_data['client_id']))

            with pytest.raises(StorageUnavailable):
                sequence.issue_numbered('reservation', insert, max_retries=3)

    def test_other_integrity_errors_propagate(self, app):
        from models import sequence

        with app.app_context():
            def insert(cursor, code):
                # client 999 does not exist
                cursor.execute('''
                    INSERT INTO reservations (code, client_id, start_date, end_date)
                    VALUES (?, 999, '2025-02-01T00:00:00', '2025-02-01T00:00:00')
                ''', (code,))

            with pytest.raises(sqlite3.IntegrityError):
                sequence.issue_numbered('reservation', insert)

            cursor = get_db().cursor()
            cursor.execute('SELECT COUNT(*) as n FROM reservations')
            assert cursor.fetchone()['n'] == 0

    def test_locked_database_is_storage_unavailable(self, app, monkeypatch):
        from models import sequence
        from utils.errors import StorageUnavailable

        def locked(*args, **kwargs):
            raise sqlite3.OperationalError('database is locked')

        with app.app_context():
            monkeypatch.setattr(sequence, 'transaction', locked)
            with pytest.raises(StorageUnavailable):
                sequence.issue_numbered('receipt', lambda cursor, number: None)
