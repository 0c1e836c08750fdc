"""
Admin routes for user and permission management.
Staff accounts, roles, activation, and dashboard tab grants.
"""

from flask import request, Blueprint
from flask_login import login_required, current_user

from utils.api_response import api_success, api_error
from utils.audit import log_activity
from utils.decorators import role_required, tab_required
from utils.exceptions import NotFoundError
from utils.messages import MESSAGES
from models.user import (get_all_users, get_user_by_id, create_user,
                         update_user_role, set_user_active)
from models.permission import DASHBOARD_TABS, get_allowed_tabs, set_allowed_tabs
from blueprints.admin.services import (validate_user_creation, can_modify_user,
                                       get_user_activity_summary)

admin_bp = Blueprint('admin', __name__)


def _get_user_or_404(user_id: int) -> dict:
    user = get_user_by_id(user_id)
    if not user:
        raise NotFoundError(MESSAGES['user_not_found'])
    user.pop('password_hash', None)
    return user


@admin_bp.route('/users')
@login_required
@tab_required('users')
def list_users():
    """List all users, newest first."""
    role_filter = request.args.get('role', '')
    users = get_all_users(active_only=request.args.get('active') == '1')
    if role_filter:
        users = [u for u in users if u['role'] == role_filter]
    return api_success(data=users)


@admin_bp.route('/users', methods=['POST'])
@login_required
@role_required('admin')
def create_staff_user():
    """
    Create a staff (or client) account.

    Request body:
        email, name, password, role (default worker), allowed_tabs (optional)
    """
    data = request.get_json(silent=True) or {}
    email = (data.get('email') or '').strip().lower()
    name = (data.get('name') or '').strip()
    password = data.get('password') or ''
    role = data.get('role') or 'worker'

    valid, field, error = validate_user_creation(email, name, password, role)
    if not valid:
        return api_error(error, 400, field=field)

    user_id = create_user(email=email, name=name, password=password, role=role,
                          phone=data.get('phone'))

    if role == 'worker' and data.get('allowed_tabs'):
        set_allowed_tabs(user_id, data['allowed_tabs'])

    log_activity('CREATE', 'user', user_id,
                 description=f'Created {role} account {email}',
                 after={'email': email, 'role': role})

    user = _get_user_or_404(user_id)
    user['allowed_tabs'] = get_allowed_tabs(user_id)
    return api_success(data=user, message=MESSAGES['user_updated'], status=201)


@admin_bp.route('/users/<int:user_id>')
@login_required
@tab_required('users')
def user_detail(user_id):
    """User with allowed tabs and recent activity."""
    user = _get_user_or_404(user_id)
    user['allowed_tabs'] = get_allowed_tabs(user_id)
    user['activity'] = get_user_activity_summary(user_id)
    return api_success(data=user)


@admin_bp.route('/users/<int:user_id>/role', methods=['PATCH'])
@login_required
@role_required('admin')
def change_role(user_id):
    """Change a user's role. Request body: {"role": "admin|worker|client"}"""
    data = request.get_json(silent=True) or {}
    new_role = data.get('role')

    user = _get_user_or_404(user_id)

    allowed, error = can_modify_user(user_id, current_user.id, new_role=new_role)
    if not allowed:
        return api_error(error, 400)

    try:
        update_user_role(user_id, new_role)
    except ValueError:
        return api_error(MESSAGES['invalid_value'], 400, field='role')

    log_activity('UPDATE', 'user', user_id,
                 description=f'Role of {user["email"]} changed to {new_role}',
                 before={'role': user['role']}, after={'role': new_role})

    return api_success(data=_get_user_or_404(user_id), message=MESSAGES['user_updated'])


@admin_bp.route('/users/<int:user_id>/active', methods=['PATCH'])
@login_required
@role_required('admin')
def change_active(user_id):
    """Activate or deactivate a user. Request body: {"active": true|false}"""
    data = request.get_json(silent=True) or {}
    active = bool(data.get('active'))

    user = _get_user_or_404(user_id)

    allowed, error = can_modify_user(user_id, current_user.id, deactivate=not active)
    if not allowed:
        return api_error(error, 400)

    set_user_active(user_id, active)

    log_activity('UPDATE', 'user', user_id,
                 description=f'{"Activated" if active else "Deactivated"} {user["email"]}',
                 before={'active': user['active']}, after={'active': int(active)})

    return api_success(data=_get_user_or_404(user_id), message=MESSAGES['user_updated'])


@admin_bp.route('/users/<int:user_id>/allowed-tabs')
@login_required
@role_required('admin')
def get_user_tabs(user_id):
    """Dashboard tabs granted to a user."""
    _get_user_or_404(user_id)
    return api_success(data={
        'id': user_id,
        'allowed_tabs': get_allowed_tabs(user_id),
        'all_tabs': list(DASHBOARD_TABS),
    })


@admin_bp.route('/users/<int:user_id>/allowed-tabs', methods=['PATCH'])
@login_required
@role_required('admin')
def update_user_tabs(user_id):
    """
    Replace a user's dashboard tabs.

    Request body:
        allowed_tabs: list of tab keys (unknown keys and duplicates dropped)
    """
    data = request.get_json(silent=True) or {}
    tabs = data.get('allowed_tabs')
    if not isinstance(tabs, list):
        tabs = []

    _get_user_or_404(user_id)
    before = get_allowed_tabs(user_id)
    stored = set_allowed_tabs(user_id, tabs)

    log_activity('UPDATE', 'permissions', user_id,
                 description='Dashboard tabs updated',
                 before={'allowed_tabs': before}, after={'allowed_tabs': stored})

    return api_success(data={'id': user_id, 'allowed_tabs': stored},
                       message=MESSAGES['tabs_updated'])
