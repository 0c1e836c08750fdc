"""
Route decorators for authentication and authorization.
Provides role- and tab-based access control for JSON routes.
"""

from functools import wraps
from flask_login import login_required, current_user

from utils.exceptions import AuthorizationError


def role_required(*roles):
    """
    Decorator to require one of the given roles.

    Usage:
        @bp.route('/expenses')
        @login_required
        @role_required('admin', 'worker')
        def list_expenses():
            ...

    Args:
        *roles: Allowed roles ('admin', 'worker', 'client')

    Returns:
        Decorator function
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if getattr(current_user, 'role', None) not in roles:
                raise AuthorizationError()
            return func(*args, **kwargs)
        return wrapper
    return decorator


def tab_required(tab: str):
    """
    Decorator to require access to a dashboard tab.

    Admins hold every tab; workers need the tab stored for them; clients
    never pass.

    Args:
        tab: Tab key (e.g. 'reservations')

    Returns:
        Decorator function
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            from utils.permissions import has_tab
            if not has_tab(current_user, tab):
                raise AuthorizationError()
            return func(*args, **kwargs)
        return wrapper
    return decorator


def staff_required(func):
    """Shortcut for role_required('admin', 'worker')."""
    return role_required('admin', 'worker')(func)


# Re-export login_required for convenience
__all__ = ['login_required', 'role_required', 'tab_required', 'staff_required']
