"""
Payment Service - Online checkout and payment-webhook confirmation.

Handles:
- Checkout session creation with server-side pricing
- Webhook signature verification
- Idempotent reservation creation from a completed payment
- Recording paid-but-unbooked payments for manual reconciliation
"""

import json
import logging
from typing import Any, Dict, Optional

import stripe
from flask import current_app

from blueprints.booking.services.email_service import (
    send_admin_reservation_notice, send_reservation_confirmation
)
from models.notification import (
    NEW_RESERVATION, PAYMENT_UNRECONCILED, create_notification, get_notification_for_session
)
from models.reservation import (
    check_availability, create_reservation, get_reservation_by_session_id
)
from models.user import get_user_by_email
from utils.audit import log_activity
from utils.datetime_helpers import format_date, nights_between
from utils.exceptions import (
    DuplicateEventError, NoRoomAvailable,
    PaymentProviderError, PersistenceError, ValidationError
)
from utils.messages import MESSAGES
from utils.validators import (
    parse_positive_integer, require_fields, sanitize_input,
    validate_email, validate_stay_dates
)

logger = logging.getLogger(__name__)

WEBHOOK_ACTOR = 'stripe-webhook'

COMPLETED_EVENTS = (
    'checkout.session.completed',
    'checkout.session.async_payment_succeeded',
)

# Outcomes of handle_payment_confirmed
OUTCOME_CREATED = 'created'
OUTCOME_DUPLICATE = 'duplicate'
OUTCOME_IGNORED = 'ignored'
OUTCOME_UNRECONCILED = 'unreconciled'


# =============================================================================
# CHECKOUT
# =============================================================================

def create_checkout_session(payload: Dict[str, Any], user=None) -> Dict[str, Any]:
    """
    Create a processor checkout session for a stay.

    The price is computed here from the first free room's nightly rate x
    nights, the same room and rate a direct booking would take; the
    client-sent total is ignored. Availability is checked first so the guest
    is not sent to pay for a stay that cannot be booked right now.

    Args:
        payload: type, start_date, end_date, full_name, phone, address,
            guests, email (defaults to the user's email)
        user: Current user (optional)

    Returns:
        dict: url, session_id, total_price, nights

    Raises:
        ValidationError: Bad input
        NoRoomAvailable: Nothing free for the stay
        PaymentProviderError: Processor refused the session
    """
    require_fields(payload, ('type', 'start_date', 'end_date', 'full_name', 'phone'))
    start, end = validate_stay_dates(payload['start_date'], payload['end_date'])

    email = (payload.get('email') or getattr(user, 'email', None) or '').strip()
    if not validate_email(email):
        raise ValidationError(MESSAGES['invalid_email'], field='email')

    room_type = sanitize_input(payload['type'], 64)
    guests = parse_positive_integer(payload.get('guests'), 'guests', default=1)

    availability = check_availability(room_type, start, end)
    if not availability['available']:
        raise NoRoomAvailable()

    # First-fit room's own nightly rate
    room = availability['available_rooms'][0]
    nights = nights_between(start, end)
    total_price = round(float(room['price']) * nights, 2)
    room_name = room['name']

    base_url = current_app.config.get('BASE_URL', '').rstrip('/')
    stripe.api_key = current_app.config.get('STRIPE_SECRET_KEY')

    try:
        session = stripe.checkout.Session.create(
            payment_method_types=['card'],
            customer_email=email,
            client_reference_id=str(getattr(user, 'id', '') or email),
            metadata={
                'type': room_type,
                'startDate': format_date(start),
                'endDate': format_date(end),
                'fullname': sanitize_input(payload['full_name'], 120),
                'phone': sanitize_input(payload['phone'], 40),
                'address': sanitize_input(payload.get('address'), 255),
                'guests': str(guests),
                'totalPrice': f'{total_price:.2f}',
                'roomName': room_name,
            },
            line_items=[{
                'price_data': {
                    'currency': current_app.config.get('STRIPE_CURRENCY', 'eur'),
                    'product_data': {'name': f'Booking: {room_name} ({nights} nights)'},
                    'unit_amount': int(round(total_price * 100)),
                },
                'quantity': 1,
            }],
            mode='payment',
            success_url=f'{base_url}/success?session_id={{CHECKOUT_SESSION_ID}}',
            cancel_url=f'{base_url}/cancel',
        )
    except stripe.StripeError as e:
        logger.error(f'Checkout session creation failed: {e}', exc_info=True)
        raise PaymentProviderError()

    logger.info(f'Checkout session {session.id} created for {email} '
                f'({room_type}, {format_date(start)} to {format_date(end)})')

    return {
        'url': session.url,
        'session_id': session.id,
        'total_price': total_price,
        'nights': nights,
    }


# =============================================================================
# WEBHOOK
# =============================================================================

def verify_webhook(payload: bytes, sig_header: Optional[str]) -> Dict[str, Any]:
    """
    Verify the processor signature and parse the event.

    Args:
        payload: Raw request body
        sig_header: Stripe-Signature header value

    Returns:
        dict: Parsed event

    Raises:
        stripe.SignatureVerificationError: Missing or invalid signature
        ValueError: Body is not valid JSON
    """
    secret = current_app.config.get('STRIPE_WEBHOOK_SECRET')
    if not secret or not sig_header:
        raise stripe.SignatureVerificationError('Missing signature', sig_header, payload)

    text = payload.decode('utf-8') if isinstance(payload, bytes) else payload
    stripe.WebhookSignature.verify_header(text, sig_header, secret)
    return json.loads(text)


def _metadata_to_reservation(metadata: Dict[str, Any], session: Dict[str, Any]) -> Dict[str, Any]:
    """Map checkout metadata to reservation input; the amount charged wins."""
    total = metadata.get('totalPrice')
    if session.get('amount_total') is not None:
        total = round(session['amount_total'] / 100, 2)

    return {
        'type': metadata.get('type'),
        'start_date': metadata.get('startDate'),
        'end_date': metadata.get('endDate'),
        'full_name': metadata.get('fullname'),
        'phone': metadata.get('phone'),
        'address': metadata.get('address'),
        'guests': metadata.get('guests') or 1,
        'total_price': total,
        'status': 'confirmed',
    }


def record_unreconciled_payment(session: Dict[str, Any], reason: str,
                                customer_email: Optional[str] = None) -> None:
    """
    Leave a trace of a captured payment that produced no reservation.

    No refund or reassignment is attempted; staff settle it from the
    reconciliation report.
    """
    metadata = session.get('metadata') or {}
    amount = session.get('amount_total')
    payload = {
        'session_id': session.get('id'),
        'customer_email': customer_email,
        'amount': round(amount / 100, 2) if amount is not None else metadata.get('totalPrice'),
        'room_type': metadata.get('type'),
        'start_date': metadata.get('startDate'),
        'end_date': metadata.get('endDate'),
        'reason': reason,
    }

    logger.warning(f'Unreconciled payment {payload["session_id"]} ({reason}) from {customer_email}')

    create_notification(
        PAYMENT_UNRECONCILED,
        'Payment needs manual reconciliation',
        f'Payment {payload["session_id"]} from {customer_email or "unknown payer"} '
        f'could not be booked: {reason}.',
        payload=payload
    )
    log_activity('PAYMENT_UNRECONCILED', 'payment', None,
                 description=f'Payment {payload["session_id"]} not booked: {reason}',
                 after=payload, performed_by=WEBHOOK_ACTOR)


def handle_payment_confirmed(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Turn a completed-payment event into a confirmed, paid reservation.

    Safe to call any number of times with the same event: a reservation or
    an unreconciled-payment record already tied to the session id
    short-circuits before any side effect.

    Args:
        event: Verified processor event

    Returns:
        dict: {'outcome': created|duplicate|ignored|unreconciled, ...}
    """
    if event.get('type') not in COMPLETED_EVENTS:
        return {'outcome': OUTCOME_IGNORED}

    session = (event.get('data') or {}).get('object') or {}
    session_id = session.get('id')

    if session.get('payment_status') not in ('paid', 'no_payment_required') or not session_id:
        return {'outcome': OUTCOME_IGNORED}

    existing = get_reservation_by_session_id(session_id)
    if existing:
        logger.info(f'Payment session {session_id} already processed '
                    f'(reservation {existing["reservation_code"]})')
        return {'outcome': OUTCOME_DUPLICATE, 'reservation_id': existing['id']}

    if get_notification_for_session(PAYMENT_UNRECONCILED, session_id):
        logger.info(f'Payment session {session_id} already recorded for manual reconciliation')
        return {'outcome': OUTCOME_DUPLICATE, 'reservation_id': None}

    customer_email = session.get('customer_email') or \
        (session.get('customer_details') or {}).get('email')

    user = get_user_by_email(customer_email)
    if not user:
        record_unreconciled_payment(session, 'user_not_found', customer_email)
        return {'outcome': OUTCOME_UNRECONCILED, 'reason': 'user_not_found'}

    data = _metadata_to_reservation(session.get('metadata') or {}, session)

    try:
        reservation = create_reservation(
            data,
            user_id=user['id'],
            created_by=WEBHOOK_ACTOR,
            stripe_session_id=session_id,
            paid_online=True
        )
    except DuplicateEventError:
        # A concurrent delivery of the same event won the insert
        existing = get_reservation_by_session_id(session_id)
        return {'outcome': OUTCOME_DUPLICATE,
                'reservation_id': existing['id'] if existing else None}
    except NoRoomAvailable:
        record_unreconciled_payment(session, 'no_room_available', customer_email)
        return {'outcome': OUTCOME_UNRECONCILED, 'reason': 'no_room_available'}
    except ValidationError as e:
        record_unreconciled_payment(session, f'invalid_metadata: {e.message}', customer_email)
        return {'outcome': OUTCOME_UNRECONCILED, 'reason': 'invalid_metadata'}
    except PersistenceError:
        record_unreconciled_payment(session, 'store_error', customer_email)
        return {'outcome': OUTCOME_UNRECONCILED, 'reason': 'store_error'}

    logger.info(f'Reservation {reservation["reservation_code"]} confirmed for '
                f'{customer_email} from payment {session_id}')

    create_notification(
        NEW_RESERVATION,
        'New paid reservation',
        f'{reservation["full_name"]} booked {reservation["room_name"]} '
        f'#{reservation["room_number"]} ({reservation["start_date"]} to {reservation["end_date"]}).',
        reservation_id=reservation['id'],
        user_id=user['id']
    )
    log_activity('CREATE', 'reservation', reservation['id'],
                 description=f'Paid online reservation {reservation["reservation_code"]}',
                 after={'reservation_code': reservation['reservation_code'],
                        'invoice_number': reservation['invoice_number'],
                        'room_id': reservation['room_id'],
                        'start_date': reservation['start_date'],
                        'end_date': reservation['end_date'],
                        'amount_paid': reservation['amount_paid'],
                        'stripe_session_id': session_id},
                 user_id=user['id'], performed_by=WEBHOOK_ACTOR)

    send_reservation_confirmation(reservation, to=customer_email)
    send_admin_reservation_notice(reservation, session_id)

    return {'outcome': OUTCOME_CREATED, 'reservation_id': reservation['id']}


__all__ = [
    'create_checkout_session',
    'verify_webhook',
    'handle_payment_confirmed',
    'record_unreconciled_payment',
]
