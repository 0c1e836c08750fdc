"""
User model and data access functions.
Handles user authentication, CRUD operations, and Flask-Login integration.
"""

import secrets
import sqlite3
from datetime import timedelta

from werkzeug.security import generate_password_hash, check_password_hash
from database import get_db
from utils.datetime_helpers import get_now, now_timestamp

ROLES = ('admin', 'worker', 'client')
STAFF_ROLES = ('admin', 'worker')


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
        self.phone = user_dict.get('phone')
        self.address = user_dict.get('address')
        self.email_verified = bool(user_dict.get('email_verified'))
        self.active = user_dict['active']
        self.created_at = user_dict.get('created_at')
        self.last_login = user_dict.get('last_login')

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

    @property
    def is_admin(self):
        return self.role == 'admin'

    @property
    def is_staff(self):
        return self.role in STAFF_ROLES

    def get_id(self):
        """Required by Flask-Login. Returns user ID as unicode string."""
        return str(self.id)

    def to_dict(self) -> dict:
        """Public representation (no password hash)."""
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'role': self.role,
            'phone': self.phone,
            'address': self.address,
            'email_verified': self.email_verified,
        }


def get_user_by_id(user_id: int) -> dict:
    """
    Get user by ID.

    Args:
        user_id: User ID

    Returns:
        User dict or None if not found
    """
    cursor = get_db().cursor()
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
    if not email:
        return None
    cursor = get_db().cursor()
    cursor.execute('SELECT * FROM users WHERE lower(email) = lower(?)', (email.strip(),))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_all_users(active_only: bool = False) -> list:
    """
    Get all users, newest first, without password hashes.

    Args:
        active_only: If True, only return active users

    Returns:
        List of user dicts
    """
    query = '''
        SELECT id, email, name, role, phone, address, active, email_verified,
               created_at, last_login
        FROM users
    '''

    if active_only:
        query += ' WHERE active = 1'

    query += ' ORDER BY created_at DESC, id DESC'

    cursor = get_db().cursor()
    cursor.execute(query)
    return [dict(row) for row in cursor.fetchall()]


def create_user(email: str, name: str, password: str, role: str = 'client', phone: str = None) -> int:
    """
    Create new user with hashed password.

    Args:
        email: Unique email
        name: Display name
        password: Plain text password (will be hashed)
        role: One of admin, worker, client
        phone: Optional phone number

    Returns:
        New user ID

    Raises:
        ValueError: If the role is unknown or the email already exists
    """
    if role not in ROLES:
        raise ValueError(f'Unknown role: {role}')

    db = get_db()
    password_hash = generate_password_hash(password)

    try:
        cursor = db.cursor()
        cursor.execute('''
            INSERT INTO users (email, name, password_hash, role, phone)
            VALUES (?, ?, ?, ?, ?)
        ''', (email.strip().lower(), name.strip(), password_hash, role, phone))
        db.commit()
    except sqlite3.IntegrityError:
        db.rollback()
        raise ValueError(f'Email already registered: {email}')

    return cursor.lastrowid


def update_user_role(user_id: int, role: str) -> bool:
    """
    Change a user's role.

    Returns:
        True if updated successfully

    Raises:
        ValueError: If the role is unknown
    """
    if role not in ROLES:
        raise ValueError(f'Unknown role: {role}')

    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        UPDATE users SET role = ?, updated_at = CURRENT_TIMESTAMP
        WHERE id = ?
    ''', (role, user_id))
    db.commit()
    return cursor.rowcount > 0


def set_user_active(user_id: int, active: bool) -> bool:
    """
    Activate or deactivate (soft delete) a user.

    Returns:
        True if updated successfully
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        UPDATE users SET active = ?, updated_at = CURRENT_TIMESTAMP
        WHERE id = ?
    ''', (1 if active else 0, user_id))
    db.commit()
    return cursor.rowcount > 0


def update_last_login(user_id: int) -> None:
    """
    Update last login timestamp.

    Args:
        user_id: User ID
    """
    db = get_db()
    db.execute('UPDATE users SET last_login = CURRENT_TIMESTAMP WHERE id = ?', (user_id,))
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
    return check_password_hash(user_dict['password_hash'], password or '')


def count_users() -> int:
    cursor = get_db().cursor()
    cursor.execute('SELECT COUNT(*) FROM users')
    return cursor.fetchone()[0]


def update_profile(user_id: int, name: str, phone: str = None, address: str = None) -> bool:
    """
    Update the self-service profile fields of a user.

    Returns:
        True if updated successfully
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        UPDATE users SET name = ?, phone = ?, address = ?, updated_at = CURRENT_TIMESTAMP
        WHERE id = ?
    ''', (name.strip(), phone, address, user_id))
    db.commit()
    return cursor.rowcount > 0


def set_verification_token(user_id: int, hours: int = 24) -> str:
    """
    Issue a fresh email verification token, replacing any earlier one.

    Args:
        user_id: User ID
        hours: Token lifetime

    Returns:
        The new token
    """
    token = secrets.token_urlsafe(32)
    expires = (get_now() + timedelta(hours=hours)).strftime('%Y-%m-%d %H:%M:%S')

    db = get_db()
    db.execute('''
        UPDATE users
        SET email_verification_token = ?, email_verification_expires = ?,
            updated_at = CURRENT_TIMESTAMP
        WHERE id = ?
    ''', (token, expires, user_id))
    db.commit()
    return token


def verify_email_token(token: str) -> dict:
    """
    Mark the owner of an unexpired token as verified and burn the token.

    Args:
        token: Token from the verification link

    Returns:
        The verified user dict, or None if the token is unknown or expired
    """
    if not token:
        return None

    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT * FROM users
        WHERE email_verification_token = ? AND email_verification_expires > ?
    ''', (token, now_timestamp()))
    row = cursor.fetchone()
    if row is None:
        return None

    db.execute('''
        UPDATE users
        SET email_verified = 1, email_verification_token = NULL,
            email_verification_expires = NULL, updated_at = CURRENT_TIMESTAMP
        WHERE id = ?
    ''', (row['id'],))
    db.commit()
    return get_user_by_id(row['id'])
