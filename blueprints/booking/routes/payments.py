"""
Payment API routes.
Online checkout, processor webhook, invoice listing and reconciliation.
"""

import logging

import stripe
from flask import request
from flask_login import login_required, current_user

from blueprints.booking.services.payment_service import (
    create_checkout_session, handle_payment_confirmed, verify_webhook
)
from extensions import csrf
from models.reports import get_payments, get_unreconciled_payments
from utils.api_response import api_success, api_error
from utils.decorators import tab_required
from utils.messages import MESSAGES

logger = logging.getLogger(__name__)


def payment_filters() -> dict:
    """Invoice listing filters from the query string ('all' means none)."""
    filters = {}
    for key in ('payment_status', 'payment_method', 'start_date', 'end_date'):
        value = request.args.get(key, '').strip()
        if value and value != 'all':
            filters[key] = value
    return filters


def register_routes(bp):
    """Register payment routes on the blueprint."""

    @bp.route('/payments/checkout', methods=['POST'])
    @login_required
    def create_checkout():
        """
        Start an online payment for a stay.

        Request body:
            type, start_date, end_date, full_name, phone (required)
            address, guests, email (defaults to the account email)

        Returns:
            JSON with the checkout url and session id
        """
        payload = request.get_json(silent=True) or {}
        return api_success(data=create_checkout_session(payload, current_user))

    @bp.route('/payments/webhook', methods=['POST'])
    @csrf.exempt
    def payment_webhook():
        """
        Processor webhook.

        Answers 400 only when the signature or body is invalid. Any verified
        event is acknowledged with 200 so the processor stops retrying;
        payments that could not be booked are left for reconciliation.
        """
        payload = request.get_data()
        sig_header = request.headers.get('Stripe-Signature')

        try:
            event = verify_webhook(payload, sig_header)
        except (stripe.SignatureVerificationError, ValueError) as e:
            logger.warning(f'Rejected payment webhook: {e}')
            return api_error(MESSAGES['invalid_signature'], 400)

        result = handle_payment_confirmed(event)
        return api_success(data=result, received=True)

    @bp.route('/payments')
    @login_required
    @tab_required('payments')
    def list_payments():
        """
        Invoice listing.

        Query params:
            payment_status: PAID, UNPAID or all
            payment_method: cash, card or all
            start_date, end_date: Check-in range (YYYY-MM-DD)
        """
        return api_success(data=get_payments(**payment_filters()))

    @bp.route('/payments/unreconciled')
    @login_required
    @tab_required('payments')
    def list_unreconciled_payments():
        """Captured payments that produced no reservation."""
        return api_success(data=get_unreconciled_payments())
