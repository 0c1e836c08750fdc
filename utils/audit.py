"""
Activity logging helpers.
Best-effort recording of who did what to which entity.
"""

import logging
from flask import request
from flask_login import current_user

# Configure logger for activity operations
logger = logging.getLogger(__name__)


def log_activity(
    action: str,
    entity_type: str,
    entity_id: int = None,
    description: str = None,
    before: dict = None,
    after: dict = None,
    user_id: int = None,
    performed_by: str = None
) -> int | None:
    """
    Record an activity log entry.

    Captures the current user, IP address, and user agent from the Flask
    request context when one is active. Never raises: a failure is logged
    and reported as None so the caller's primary operation stands.

    Args:
        action: Action type (CREATE, UPDATE, CANCEL, ARCHIVE, PAYMENT, ...)
        entity_type: Entity type (reservation, room, expense, user, payment)
        entity_id: ID of the affected entity
        description: Human readable summary
        before: Entity state before the change
        after: Entity state after the change
        user_id: Override user ID (defaults to current_user.id)
        performed_by: Override actor label (defaults to the user's email)

    Returns:
        New activity log ID, or None if logging failed

    Example:
        log_activity('UPDATE', 'reservation', 12,
                     before={'status': 'pending'}, after={'status': 'confirmed'})
    """
    try:
        from models.activity_log import create_activity_log

        if user_id is None or performed_by is None:
            try:
                if current_user and current_user.is_authenticated:
                    user_id = current_user.id if user_id is None else user_id
                    performed_by = performed_by or current_user.email
            except (RuntimeError, AttributeError):
                # Outside request context (e.g. CLI)
                pass

        ip_address = None
        user_agent = None

        try:
            if request:
                ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
                if ip_address and ',' in ip_address:
                    ip_address = ip_address.split(',')[0].strip()
                user_agent = request.headers.get('User-Agent', '')[:255]
        except RuntimeError:
            # Outside request context
            pass

        changes = None
        if before is not None or after is not None:
            changes = {'before': before, 'after': after}

        return create_activity_log(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            changes=changes,
            user_id=user_id,
            performed_by=performed_by or 'system',
            ip_address=ip_address,
            user_agent=user_agent
        )

    except Exception as e:
        # Activity logging should never fail the main operation
        logger.error(f"Failed to log activity: {e}", exc_info=True)
        return None


__all__ = ['log_activity']
