"""
Business logic for admin operations.
Provides validation and business rules for user and permission management.
"""

from models.user import ROLES, get_all_users, get_user_by_email, get_user_by_id
from models.activity_log import count_activity_logs, get_activity_logs
from utils.messages import MESSAGES
from utils.validators import validate_email, validate_password


def validate_user_creation(email: str, name: str, password: str, role: str) -> tuple:
    """
    Validate staff account creation data.

    Args:
        email: Email to check
        name: Display name
        password: Password to validate
        role: Requested role

    Returns:
        Tuple of (is_valid, field, error_message)
    """
    if not name or not name.strip():
        return False, 'name', MESSAGES['field_required']

    if not validate_email((email or '').strip()):
        return False, 'email', MESSAGES['invalid_email']

    if get_user_by_email(email):
        return False, 'email', MESSAGES['email_exists']

    valid, error = validate_password(password)
    if not valid:
        return False, 'password', error

    if role not in ROLES:
        return False, 'role', MESSAGES['invalid_value']

    return True, None, ''


def can_modify_user(user_id: int, current_user_id: int, new_role: str = None,
                    deactivate: bool = False) -> tuple:
    """
    Check whether an admin may change a user's role or status.

    Admins cannot change themselves, and the last active admin cannot be
    demoted or deactivated.

    Returns:
        Tuple of (allowed, error_message)
    """
    if user_id == current_user_id:
        return False, MESSAGES['cannot_modify_self']

    user = get_user_by_id(user_id)
    if not user:
        return False, MESSAGES['user_not_found']

    losing_admin = user['role'] == 'admin' and (deactivate or (new_role and new_role != 'admin'))
    if losing_admin:
        active_admins = [u for u in get_all_users(active_only=True) if u['role'] == 'admin']
        if len(active_admins) <= 1:
            return False, 'Cannot remove the last administrator'

    return True, ''


def get_user_activity_summary(user_id: int) -> dict:
    """
    Get a user's recent activity for the staff profile header.

    Returns:
        Dict with total_actions and recent (last 10 entries)
    """
    return {
        'total_actions': count_activity_logs(user_id=user_id),
        'recent': get_activity_logs(limit=10, user_id=user_id),
    }
