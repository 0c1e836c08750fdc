"""
Database tests.
Tests schema initialization, seed data and store-level guarantees.
"""

import sqlite3

import pytest

from conftest import future
from database import get_db


class TestSchema:
    """Tests for tables and seed data."""

    def test_database_tables(self, app):
        with app.app_context():
            cursor = get_db().cursor()
            cursor.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name")
            tables = [row[0] for row in cursor.fetchall()]

            for table in ('users', 'user_allowed_tabs', 'rooms', 'reservations',
                          'notifications', 'activity_logs', 'expenses'):
                assert table in tables, f"Table {table} should exist"

    def test_seed_data(self, app):
        with app.app_context():
            cursor = get_db().cursor()
            cursor.execute("SELECT role FROM users WHERE email = 'admin@hotel.local'")
            assert cursor.fetchone()['role'] == 'admin'

            cursor.execute('SELECT COUNT(*) FROM rooms')
            assert cursor.fetchone()[0] == 7


class TestOverlapTriggers:
    """The store rejects overlapping active stays on a room."""

    def _insert(self, db, code, start, end, room_id=1, **flags):
        db.execute('''
            INSERT INTO reservations (reservation_code, room_id, full_name, phone,
                                      start_date, end_date, cancelled_at, admin_hidden)
            VALUES (?, ?, 'Guest', '+355690000000', ?, ?, ?, ?)
        ''', (code, room_id, start, end, flags.get('cancelled_at'), flags.get('admin_hidden', 0)))

    def test_overlap_insert_aborts(self, app):
        with app.app_context():
            db = get_db()
            self._insert(db, 'A', future(1), future(4))
            with pytest.raises(sqlite3.IntegrityError, match='reservation_overlap'):
                self._insert(db, 'B', future(3), future(5))

    def test_touching_and_inactive_rows_allowed(self, app):
        with app.app_context():
            db = get_db()
            self._insert(db, 'A', future(1), future(4))
            self._insert(db, 'B', future(4), future(6))
            self._insert(db, 'C', future(1), future(4), cancelled_at='2025-01-01 00:00:00')
            self._insert(db, 'D', future(1), future(4), admin_hidden=1)
            self._insert(db, 'E', future(1), future(4), room_id=2)
            db.commit()

    def test_reactivating_into_overlap_aborts(self, app):
        with app.app_context():
            db = get_db()
            self._insert(db, 'A', future(1), future(4))
            self._insert(db, 'B', future(2), future(3), admin_hidden=1)
            with pytest.raises(sqlite3.IntegrityError, match='reservation_overlap'):
                db.execute("UPDATE reservations SET admin_hidden = 0 WHERE reservation_code = 'B'")

    def test_date_check_constraint(self, app):
        with app.app_context():
            with pytest.raises(sqlite3.IntegrityError):
                self._insert(get_db(), 'A', future(4), future(4))

    def test_session_id_unique(self, app):
        with app.app_context():
            db = get_db()
            db.execute('''
                INSERT INTO reservations (reservation_code, room_id, full_name, phone,
                                          start_date, end_date, stripe_session_id)
                VALUES ('A', 1, 'G', '1', ?, ?, 'cs_1')
            ''', (future(1), future(2)))
            with pytest.raises(sqlite3.IntegrityError, match='stripe_session_id'):
                db.execute('''
                    INSERT INTO reservations (reservation_code, room_id, full_name, phone,
                                              start_date, end_date, stripe_session_id)
                    VALUES ('B', 2, 'G', '1', ?, ?, 'cs_1')
                ''', (future(1), future(2)))
