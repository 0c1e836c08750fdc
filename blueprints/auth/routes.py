"""
Authentication routes: register, login, logout, current user,
profile update and email verification.
JSON endpoints over Flask-Login sessions.
"""

import logging
from flask import Blueprint, current_app, request
from flask_login import login_user, logout_user, login_required, current_user

from blueprints.auth.forms import (
    LoginForm, ProfileForm, RegisterForm, ResendVerificationForm, first_form_error
)
from blueprints.booking.services.email_service import send_verification_email
from models.user import (
    User, create_user, get_user_by_email, get_user_by_id,
    update_last_login, check_password, update_profile,
    set_verification_token, verify_email_token
)
from models.permission import get_allowed_tabs
from utils.api_response import api_success, api_error
from utils.audit import log_activity
from utils.messages import MESSAGES

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


def _user_payload(user: User) -> dict:
    payload = user.to_dict()
    payload['allowed_tabs'] = get_allowed_tabs(user.id)
    return payload


def _send_verification(user_id: int) -> bool:
    """Issue a fresh token and mail the link."""
    token = set_verification_token(
        user_id, hours=current_app.config.get('EMAIL_VERIFICATION_HOURS', 24)
    )
    return send_verification_email(get_user_by_id(user_id), token)


@auth_bp.route('/register', methods=['POST'])
def register():
    """
    Register a client account and log it in.

    Request body:
        name, email, password (min 8), phone (optional)
    """
    form = RegisterForm()

    if not form.validate_on_submit():
        field, error = first_form_error(form)
        return api_error(error, 400, field=field)

    if get_user_by_email(form.email.data):
        return api_error(MESSAGES['email_exists'], 409, field='email')

    try:
        user_id = create_user(
            email=form.email.data,
            name=form.name.data,
            password=form.password.data,
            role='client',
            phone=form.phone.data or None
        )
    except ValueError:
        return api_error(MESSAGES['email_exists'], 409, field='email')

    user = User(get_user_by_id(user_id))
    login_user(user)
    update_last_login(user.id)

    _send_verification(user_id)

    log_activity('CREATE', 'user', user.id,
                 description=f'Client registered: {user.email}',
                 user_id=user.id, performed_by=user.email)

    return api_success(data=_user_payload(user), message=MESSAGES['register_success'], status=201)


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Log in with email and password.

    Request body:
        email, password, remember_me (optional)
    """
    form = LoginForm()

    if not form.validate_on_submit():
        field, error = first_form_error(form)
        return api_error(error, 400, field=field)

    user_dict = get_user_by_email(form.email.data)

    if user_dict is None or not check_password(user_dict, form.password.data):
        logger.info(f'Failed login for {form.email.data}')
        return api_error(MESSAGES['invalid_credentials'], 401)

    if not user_dict.get('active'):
        return api_error(MESSAGES['account_disabled'], 403)

    user = User(user_dict)
    login_user(user, remember=form.remember_me.data)
    update_last_login(user.id)

    return api_success(
        data=_user_payload(user),
        message=MESSAGES['login_success'].format(name=user.name)
    )


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """Logout current user."""
    logout_user()
    return api_success(message=MESSAGES['logout_success'])


@auth_bp.route('/me')
@login_required
def me():
    """Current user with allowed dashboard tabs."""
    return api_success(data=_user_payload(current_user))


@auth_bp.route('/profile', methods=['PATCH'])
@login_required
def profile():
    """
    Update the current user's profile.

    Request body:
        name, phone (optional), address (optional)
    """
    form = ProfileForm()

    if not form.validate_on_submit():
        field, error = first_form_error(form)
        return api_error(error, 400, field=field)

    update_profile(
        current_user.id,
        name=form.name.data,
        phone=form.phone.data or None,
        address=form.address.data or None
    )
    log_activity('UPDATE', 'user', current_user.id,
                 description=f'Profile updated: {current_user.email}')

    user = User(get_user_by_id(current_user.id))
    return api_success(data=_user_payload(user), message=MESSAGES['profile_updated'])


@auth_bp.route('/verify-email')
def verify_email():
    """Confirm an email address from the link sent at registration."""
    user_dict = verify_email_token(request.args.get('token', '').strip())
    if user_dict is None:
        return api_error(MESSAGES['invalid_verification_token'], 400, field='token')

    log_activity('UPDATE', 'user', user_dict['id'],
                 description=f'Email verified: {user_dict["email"]}',
                 user_id=user_dict['id'], performed_by=user_dict['email'])

    return api_success(data=User(user_dict).to_dict(), message=MESSAGES['email_verified'])


@auth_bp.route('/resend-verification', methods=['POST'])
def resend_verification():
    """
    Send a new verification link.

    Unknown addresses get the same answer as known ones.

    Request body:
        email
    """
    form = ResendVerificationForm()

    if not form.validate_on_submit():
        field, error = first_form_error(form)
        return api_error(error, 400, field=field)

    user_dict = get_user_by_email(form.email.data)
    if user_dict is None:
        return api_success(message=MESSAGES['verification_requested'])

    if user_dict.get('email_verified'):
        return api_success(message=MESSAGES['already_verified'])

    if not _send_verification(user_dict['id']):
        return api_error(MESSAGES['verification_send_failed'], 502)

    return api_success(message=MESSAGES['verification_sent'])
