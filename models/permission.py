"""
Dashboard tab permission data access functions.
Admins hold every tab; workers hold the tabs stored for them.
"""

from database import get_db

DASHBOARD_TABS = (
    'overview',
    'rooms',
    'reservations',
    'payments',
    'reports',
    'users',
    'manageRooms',
    'activityLogsTab',
    'permissions',
    'expenses',
)


def normalize_tabs(tabs) -> list:
    """
    Keep known tab keys only, dropping duplicates but preserving order.

    Args:
        tabs: Iterable of tab keys (unknown keys are ignored)

    Returns:
        List of valid, unique tab keys
    """
    seen = []
    for tab in tabs or []:
        if tab in DASHBOARD_TABS and tab not in seen:
            seen.append(tab)
    return seen


def get_allowed_tabs(user_id: int) -> list:
    """
    Get the dashboard tabs a user may open.

    Args:
        user_id: User ID

    Returns:
        List of tab keys (all tabs for admins, none for clients)
    """
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute('SELECT role FROM users WHERE id = ?', (user_id,))
        row = cursor.fetchone()
        if not row:
            return []
        if row['role'] == 'admin':
            return list(DASHBOARD_TABS)
        if row['role'] != 'worker':
            return []

        cursor.execute('''
            SELECT tab_key FROM user_allowed_tabs
            WHERE user_id = ?
            ORDER BY id
        ''', (user_id,))
        return normalize_tabs(r['tab_key'] for r in cursor.fetchall())


def set_allowed_tabs(user_id: int, tabs) -> list:
    """
    Replace the stored tabs for a user.

    Args:
        user_id: User ID
        tabs: Iterable of tab keys; unknown keys and duplicates are dropped

    Returns:
        The stored list of tab keys
    """
    clean = normalize_tabs(tabs)

    db = get_db()
    cursor = db.cursor()
    try:
        cursor.execute('BEGIN IMMEDIATE')
        cursor.execute('DELETE FROM user_allowed_tabs WHERE user_id = ?', (user_id,))
        for tab in clean:
            cursor.execute(
                'INSERT INTO user_allowed_tabs (user_id, tab_key) VALUES (?, ?)',
                (user_id, tab)
            )
        db.commit()
    except Exception:
        db.rollback()
        raise

    return clean


def user_has_tab(user_id: int, tab: str) -> bool:
    """Check whether a user may open a dashboard tab."""
    return tab in get_allowed_tabs(user_id)
