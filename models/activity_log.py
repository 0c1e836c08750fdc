"""
Activity log model and data access functions.
Handles activity log creation, retrieval, filtering, and retention cleanup.
"""

import json
from datetime import timedelta
from database import get_db
from utils.datetime_helpers import get_now


# =============================================================================
# READ OPERATIONS
# =============================================================================

def _build_filters(
    user_id: int = None,
    action: str = None,
    entity_type: str = None,
    entity_id: int = None,
    start_date: str = None,
    end_date: str = None
) -> tuple:
    """Build the shared WHERE clause for list and count queries."""
    clauses = []
    params = []

    if user_id is not None:
        clauses.append('al.user_id = ?')
        params.append(user_id)

    if action:
        clauses.append('al.action = ?')
        params.append(action)

    if entity_type:
        clauses.append('al.entity_type = ?')
        params.append(entity_type)

    if entity_id is not None:
        clauses.append('al.entity_id = ?')
        params.append(entity_id)

    if start_date:
        clauses.append('date(al.created_at) >= date(?)')
        params.append(start_date)

    if end_date:
        clauses.append('date(al.created_at) <= date(?)')
        params.append(end_date)

    where = ' AND '.join(clauses) if clauses else '1=1'
    return where, params


def get_activity_logs(limit: int = 100, offset: int = 0, **filters) -> list:
    """
    Get activity logs with optional filtering, most recent first.

    Args:
        limit: Maximum number of records to return (default 100)
        offset: Number of records to skip for pagination
        **filters: user_id, action, entity_type, entity_id,
            start_date, end_date (YYYY-MM-DD)

    Returns:
        List of activity log dicts with 'changes' decoded
    """
    where, params = _build_filters(**filters)

    cursor = get_db().cursor()
    cursor.execute(f'''
        SELECT al.*, u.name as user_name, u.email as user_email
        FROM activity_logs al
        LEFT JOIN users u ON al.user_id = u.id
        WHERE {where}
        ORDER BY al.created_at DESC, al.id DESC
        LIMIT ? OFFSET ?
    ''', params + [limit, offset])

    logs = []
    for row in cursor.fetchall():
        entry = dict(row)
        if entry.get('changes'):
            entry['changes'] = json.loads(entry['changes'])
        logs.append(entry)
    return logs


def count_activity_logs(**filters) -> int:
    """Count activity logs matching the same filters as get_activity_logs."""
    where, params = _build_filters(**filters)
    cursor = get_db().cursor()
    cursor.execute(f'SELECT COUNT(*) as count FROM activity_logs al WHERE {where}', params)
    return cursor.fetchone()['count']


# =============================================================================
# CREATE OPERATIONS
# =============================================================================

def create_activity_log(
    action: str,
    entity_type: str,
    entity_id: int = None,
    description: str = None,
    changes: dict = None,
    user_id: int = None,
    performed_by: str = None,
    ip_address: str = None,
    user_agent: str = None
) -> int:
    """
    Create a new activity log entry.

    Args:
        action: Action type (CREATE, UPDATE, CANCEL, ...)
        entity_type: Entity type (reservation, room, expense, ...)
        entity_id: ID of the affected entity
        description: Human readable summary
        changes: Dictionary with before/after state
        user_id: Acting user (None for system actions such as webhooks)
        performed_by: Actor label shown in the dashboard
        ip_address: Client IP address
        user_agent: Client user agent string

    Returns:
        New activity log ID
    """
    changes_json = None
    if changes is not None:
        changes_json = json.dumps(changes, default=str, ensure_ascii=False)

    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute('''
            INSERT INTO activity_logs
            (action, entity_type, entity_id, description, changes,
             user_id, performed_by, ip_address, user_agent)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        ''', (action, entity_type, entity_id, description, changes_json,
              user_id, performed_by, ip_address, user_agent))
        return cursor.lastrowid


# =============================================================================
# CLEANUP OPERATIONS
# =============================================================================

def cleanup_old_logs(days: int = 365) -> int:
    """
    Delete activity logs older than the retention window.

    Args:
        days: Number of days to retain logs

    Returns:
        Number of deleted records
    """
    cutoff_str = (get_now() - timedelta(days=days)).strftime('%Y-%m-%d %H:%M:%S')

    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute('DELETE FROM activity_logs WHERE created_at < ?', (cutoff_str,))
        return cursor.rowcount
