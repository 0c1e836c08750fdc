"""
Staff notification routes.
Recent notifications, mark-all-read, and a server-sent unread-count stream.
"""

import logging
import time

from flask import Response, current_app, request, stream_with_context
from flask_login import login_required, current_user

from models.notification import count_unread, get_recent_notifications, mark_all_read
from utils.api_response import api_success
from utils.decorators import staff_required

logger = logging.getLogger(__name__)


def unread_event_stream(poll_seconds: float):
    """
    Yield server-sent events with the unread notification count.

    An 'unread' event is sent first and whenever the count changes; other
    polls send a comment line so a closed connection is noticed on write.
    Closing the generator ends the loop.
    """
    last_count = None
    try:
        while True:
            count = count_unread()
            if count != last_count:
                last_count = count
                yield f'event: unread\ndata: {count}\n\n'
            else:
                yield ': ping\n\n'
            time.sleep(poll_seconds)
    finally:
        logger.debug('Unread notification stream closed')


def register_routes(bp):
    """Register notification routes on the blueprint."""

    @bp.route('/notifications')
    @login_required
    def list_notifications():
        """Recent notifications for staff; clients get an empty list."""
        if current_user.role not in ('admin', 'worker'):
            return api_success(data=[], unread=0)

        limit = min(max(request.args.get('limit', 20, type=int), 1), 100)
        return api_success(data=get_recent_notifications(limit), unread=count_unread())

    @bp.route('/notifications/read-all', methods=['PATCH'])
    @login_required
    @staff_required
    def read_all_notifications():
        """Mark every notification as read."""
        updated = mark_all_read()
        return api_success(data={'updated': updated})

    @bp.route('/notifications/stream')
    @login_required
    @staff_required
    def notification_stream():
        """Server-sent events stream of the unread count."""
        poll_seconds = current_app.config.get('NOTIFICATION_POLL_SECONDS', 10)
        return Response(
            stream_with_context(unread_event_stream(poll_seconds)),
            mimetype='text/event-stream',
            headers={'Cache-Control': 'no-cache', 'X-Accel-Buffering': 'no'}
        )
