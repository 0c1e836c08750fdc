"""
Activity log routes.
JSON listing of who did what, filterable and paginated.
"""

from flask import request
from flask_login import login_required

from models.activity_log import count_activity_logs, get_activity_logs
from utils.api_response import api_success
from utils.decorators import tab_required


def register_routes(bp):
    """Register activity log routes on the blueprint."""

    @bp.route('/activity-log')
    @login_required
    @tab_required('activityLogsTab')
    def activity_log():
        """
        Activity log entries, most recent first.

        Query Parameters:
            user_id (int): Filter by user ID
            action (str): Filter by action (CREATE, UPDATE, CANCEL, ...)
            entity_type (str): Filter by entity type (reservation, room, ...)
            entity_id (int): Filter by specific entity ID
            start_date (str): Filter from date (YYYY-MM-DD)
            end_date (str): Filter until date (YYYY-MM-DD)
            page (int): Page number (default 1)
            per_page (int): Results per page (default 50, max 100)

        Returns:
            JSON response with logs and pagination info
        """
        filters = {
            'user_id': request.args.get('user_id', type=int),
            'action': request.args.get('action', '').strip() or None,
            'entity_type': request.args.get('entity_type', '').strip() or None,
            'entity_id': request.args.get('entity_id', type=int),
            'start_date': request.args.get('start_date', '').strip() or None,
            'end_date': request.args.get('end_date', '').strip() or None,
        }

        page = max(request.args.get('page', 1, type=int), 1)
        per_page = min(max(request.args.get('per_page', 50, type=int), 1), 100)
        offset = (page - 1) * per_page

        logs = get_activity_logs(limit=per_page, offset=offset, **filters)
        total = count_activity_logs(**filters)
        total_pages = (total + per_page - 1) // per_page if total > 0 else 1

        return api_success(
            data=logs,
            pagination={
                'page': page,
                'per_page': per_page,
                'total': total,
                'total_pages': total_pages,
            }
        )
