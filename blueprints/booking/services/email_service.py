"""
Email Service - Outbound reservation emails through Flask-Mail.

Handles:
- Guest confirmation after a paid booking
- Internal notice to the front desk
- Account email verification links

Every send is a side effect of an already committed write: they
return True/False and never raise.
"""

import logging
from typing import Any, Dict, Optional

from flask import current_app, render_template
from flask_mail import Message

from extensions import mail

logger = logging.getLogger(__name__)


def send_email(to: str, subject: str, html: str) -> bool:
    """
    Send one HTML email.

    Args:
        to: Recipient address
        subject: Subject line
        html: HTML body

    Returns:
        True if handed to the mail transport, False otherwise
    """
    if not to:
        logger.warning(f'Email "{subject}" skipped: no recipient')
        return False

    try:
        message = Message(subject=subject, recipients=[to], html=html)
        mail.send(message)
        return True
    except Exception as e:
        logger.error(f'Failed to send email "{subject}" to {to}: {e}', exc_info=True)
        return False


def send_reservation_confirmation(reservation: Dict[str, Any], to: Optional[str] = None) -> bool:
    """
    Send the booking confirmation to the guest.

    Args:
        reservation: Reservation dict (with room_name, reservation_code, ...)
        to: Recipient (default: the owning user's email)

    Returns:
        True if sent
    """
    try:
        html = render_template(
            'email/reservation_confirmation.html',
            app_name=current_app.config.get('APP_NAME'),
            reservation=reservation
        )
    except Exception as e:
        logger.error(f'Failed to render confirmation email: {e}', exc_info=True)
        return False

    return send_email(
        to or reservation.get('user_email'),
        f'Reservation confirmed - {reservation.get("reservation_code")}',
        html
    )


def send_admin_reservation_notice(reservation: Dict[str, Any], session_id: Optional[str] = None) -> bool:
    """
    Tell the front desk about a new paid reservation.

    Args:
        reservation: Reservation dict
        session_id: Payment session that produced it

    Returns:
        True if sent
    """
    try:
        html = render_template(
            'email/admin_reservation.html',
            app_name=current_app.config.get('APP_NAME'),
            reservation=reservation,
            session_id=session_id
        )
    except Exception as e:
        logger.error(f'Failed to render admin notice email: {e}', exc_info=True)
        return False

    return send_email(
        current_app.config.get('ADMIN_NOTIFICATION_EMAIL'),
        f'New reservation {reservation.get("reservation_code")} ({reservation.get("room_name")})',
        html
    )


def send_verification_email(user: Dict[str, Any], token: str) -> bool:
    """
    Send the email verification link to a newly registered account.

    Args:
        user: User dict (email, name)
        token: Verification token issued for the user

    Returns:
        True if sent
    """
    base_url = current_app.config.get('BASE_URL', '').rstrip('/')
    try:
        html = render_template(
            'email/verify_email.html',
            app_name=current_app.config.get('APP_NAME'),
            name=user.get('name'),
            verify_url=f'{base_url}/auth/verify-email?token={token}',
            hours=current_app.config.get('EMAIL_VERIFICATION_HOURS', 24)
        )
    except Exception as e:
        logger.error(f'Failed to render verification email: {e}', exc_info=True)
        return False

    return send_email(user.get('email'), 'Verify your email', html)
