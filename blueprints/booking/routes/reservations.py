"""
Reservation API routes.
Booking, listing, staff edits, payments at the desk, cancellation and hiding.
"""

from flask import request
from flask_login import login_required, current_user

from blueprints.booking.services.reservation_service import (
    reservation_snapshot, archive_reservation_by_staff, book_reservation,
    cancel_reservation_for_user, hide_reservation_for_user
)
from models.reservation import (
    change_reservation_status, get_latest_reservation, get_reservation_by_id,
    list_reservations, record_payment, reservation_visibility, update_reservation
)
from utils.api_response import api_success
from utils.audit import log_activity
from utils.decorators import role_required, tab_required
from utils.exceptions import AuthorizationError, NotFoundError
from utils.messages import MESSAGES
from utils.permissions import has_tab


def _get_reservation_or_404(reservation_id: int) -> dict:
    reservation = get_reservation_by_id(reservation_id)
    if not reservation:
        raise NotFoundError(MESSAGES['reservation_not_found'])
    return reservation


def _with_visibility(reservation: dict) -> dict:
    reservation['visibility'] = reservation_visibility(reservation)
    return reservation


def register_routes(bp):
    """Register reservation routes on the blueprint."""

    @bp.route('/reservations')
    @login_required
    def list_all_reservations():
        """
        List reservations visible to the current user.

        Clients get their own (minus hidden ones). Staff with the
        reservations tab get every row; ?archived=1 includes archived ones.
        """
        if current_user.role == 'client':
            rows = list_reservations(current_user.id, 'client')
        else:
            if not has_tab(current_user, 'reservations'):
                raise AuthorizationError()
            rows = list_reservations(
                current_user.id, current_user.role,
                include_hidden=request.args.get('archived') == '1'
            )
        return api_success(data=[_with_visibility(r) for r in rows])

    @bp.route('/reservations/latest')
    @login_required
    def latest_reservation():
        """Most recent reservation of the current user."""
        reservation = get_latest_reservation(current_user.id)
        if not reservation:
            raise NotFoundError(MESSAGES['reservation_not_found'])
        return api_success(data=_with_visibility(reservation))

    @bp.route('/reservations/<int:reservation_id>')
    @login_required
    def get_reservation(reservation_id):
        """Reservation detail (owner or staff)."""
        reservation = _get_reservation_or_404(reservation_id)
        if current_user.role == 'client':
            if reservation['user_id'] != current_user.id:
                raise AuthorizationError()
        elif not has_tab(current_user, 'reservations'):
            raise AuthorizationError()
        return api_success(data=_with_visibility(reservation))

    @bp.route('/reservations', methods=['POST'])
    @login_required
    def create_new_reservation():
        """
        Book a stay directly.

        Request body:
            full_name, phone, type, start_date, end_date (required)
            address, guests, total_price, room_id, user_id, status,
            payment_status, payment_method, amount_paid (staff only)

        Returns:
            201 with the reservation, 409 when no room is free
        """
        if current_user.role != 'client' and not has_tab(current_user, 'reservations'):
            raise AuthorizationError()

        data = request.get_json(silent=True) or {}
        reservation = book_reservation(data, current_user)
        return api_success(data=reservation, message=MESSAGES['reservation_created'], status=201)

    @bp.route('/reservations/<int:reservation_id>', methods=['PATCH'])
    @login_required
    @tab_required('reservations')
    def edit_reservation(reservation_id):
        """
        Edit a reservation.

        A body holding only 'status' changes the business status; any other
        field goes through the full edit (dates and type re-checked).
        """
        data = request.get_json(silent=True) or {}
        before = _get_reservation_or_404(reservation_id)

        if set(data) == {'status'}:
            reservation = change_reservation_status(reservation_id, data['status'])
        else:
            reservation = update_reservation(reservation_id, data, current_user)

        log_activity('UPDATE', 'reservation', reservation_id,
                     description=f'Updated reservation {before["reservation_code"]}',
                     before=reservation_snapshot(before), after=reservation_snapshot(reservation))
        return api_success(data=reservation, message=MESSAGES['reservation_updated'])

    @bp.route('/reservations/<int:reservation_id>/status', methods=['PATCH'])
    @login_required
    @tab_required('reservations')
    def update_reservation_status(reservation_id):
        """Change the business status of a reservation."""
        data = request.get_json(silent=True) or {}
        before = _get_reservation_or_404(reservation_id)
        reservation = change_reservation_status(reservation_id, data.get('status'))

        log_activity('UPDATE', 'reservation', reservation_id,
                     description=f'Status {before["status"]} -> {reservation["status"]}',
                     before={'status': before['status']},
                     after={'status': reservation['status']})
        return api_success(data=reservation, message=MESSAGES['reservation_updated'])

    @bp.route('/reservations/<int:reservation_id>/payments', methods=['POST'])
    @login_required
    @tab_required('payments')
    def add_payment(reservation_id):
        """
        Record a payment received at the desk.

        Request body:
            amount: Amount received (> 0)
            method: cash or card (default cash)
        """
        data = request.get_json(silent=True) or {}
        before = _get_reservation_or_404(reservation_id)
        reservation = record_payment(reservation_id, data.get('amount'),
                                     data.get('method') or 'cash')

        log_activity('PAYMENT', 'reservation', reservation_id,
                     description=f'Payment of {data.get("amount")} on {before["invoice_number"]}',
                     before={'amount_paid': before['amount_paid'],
                             'payment_status': before['payment_status']},
                     after={'amount_paid': reservation['amount_paid'],
                            'payment_status': reservation['payment_status']})
        return api_success(data=reservation, message=MESSAGES['payment_recorded'])

    @bp.route('/reservations/<int:reservation_id>/cancel', methods=['PATCH'])
    @login_required
    def cancel_own_reservation(reservation_id):
        """
        Cancel a reservation before its check-in date (owner only).

        Request body:
            reason: Optional cancellation reason
        """
        data = request.get_json(silent=True) or {}
        result = cancel_reservation_for_user(reservation_id, current_user, data.get('reason'))
        return api_success(data=result, message=MESSAGES['reservation_cancelled'])

    @bp.route('/reservations/<int:reservation_id>/hide', methods=['PATCH'])
    @login_required
    def hide_own_reservation(reservation_id):
        """Remove a reservation from the client's own list."""
        result = hide_reservation_for_user(reservation_id, current_user)
        return api_success(data=result, message=MESSAGES['reservation_hidden'])

    @bp.route('/reservations/<int:reservation_id>/archive', methods=['PATCH'])
    @login_required
    @role_required('admin')
    def archive_reservation_route(reservation_id):
        """Archive a reservation (admin soft delete, frees the room)."""
        result = archive_reservation_by_staff(reservation_id)
        return api_success(data=result, message=MESSAGES['reservation_archived'])
