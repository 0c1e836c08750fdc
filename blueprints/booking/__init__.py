"""
Booking blueprint initialization.
Registers the hotel booking and dashboard API routes.

Individual route logic is in:
- routes/availability.py - Availability preview
- routes/reservations.py - Reservation booking, edits, cancellation
- routes/payments.py - Checkout, payment webhook, invoices
- routes/rooms.py - Room management and housekeeping status
- routes/notifications.py - Staff notifications and unread stream
- routes/expenses.py - Operating expenses
- routes/activity_log.py - Activity log
- routes/reports.py - Dashboard and monthly reports
- routes/exports.py - Excel exports
"""

from flask import Blueprint

booking_bp = Blueprint('booking', __name__)

from blueprints.booking.routes import (  # noqa: E402
    availability,
    reservations,
    payments,
    rooms,
    notifications,
    expenses,
    activity_log,
    reports,
    exports,
)

availability.register_routes(booking_bp)
reservations.register_routes(booking_bp)
payments.register_routes(booking_bp)
rooms.register_routes(booking_bp)
notifications.register_routes(booking_bp)
expenses.register_routes(booking_bp)
activity_log.register_routes(booking_bp)
reports.register_routes(booking_bp)
exports.register_routes(booking_bp)
