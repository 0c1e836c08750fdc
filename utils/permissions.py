"""
Permission checking and caching utilities.
Provides functions to load and check a user's dashboard tabs.
"""

from flask import g
from models.permission import get_allowed_tabs


def load_user_tabs(user_id: int) -> set:
    """
    Load the dashboard tabs for a user, cached on the request context.

    Args:
        user_id: User ID

    Returns:
        Set of tab keys
    """
    if 'user_tabs' not in g:
        g.user_tabs = set(get_allowed_tabs(user_id))
    return g.user_tabs


def has_tab(user, tab: str) -> bool:
    """
    Check if user may open a dashboard tab.

    Args:
        user: User object (Flask-Login)
        tab: Tab key to check

    Returns:
        True if the tab is allowed
    """
    if not user or not user.is_authenticated:
        return False
    if user.role == 'admin':
        return True
    return tab in load_user_tabs(user.id)
