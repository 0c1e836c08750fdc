"""
Public API routes for JSON endpoints.
Health check and the room-type catalogue shown on the booking site.
"""

from flask import current_app, jsonify, Blueprint

from models.room import get_room_types
from utils.api_response import api_success

api_bp = Blueprint('api', __name__)


@api_bp.route('/health')
def health_check():
    """
    Health check endpoint (no authentication required).

    Returns:
        JSON with status and version
    """
    return jsonify({
        'status': 'ok',
        'version': current_app.config.get('APP_VERSION', '1.0.0'),
        'app': f"{current_app.config.get('APP_NAME', 'Hotel')} Hotel Management System"
    })


@api_bp.route('/rooms/types')
def api_room_types():
    """
    Room types with nightly price and number of rooms (no authentication).

    Returns:
        JSON list of room types
    """
    return api_success(data=get_room_types())
