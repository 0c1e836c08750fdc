"""
Domain error taxonomy for the booking flows.

Each error carries the HTTP-equivalent status used by the JSON error
handler registered in app.py. Models raise these; routes let them propagate.
"""

from utils.messages import MESSAGES


class BookingError(Exception):
    """Base class for expected, user-facing booking failures."""

    status_code = 500
    default_message = 'Request failed'

    def __init__(self, message: str = None, field: str = None):
        self.message = message or self.default_message
        self.field = field
        super().__init__(self.message)


class ValidationError(BookingError):
    """Missing or malformed input, past dates, end on or before start."""

    status_code = 400
    default_message = MESSAGES['invalid_value']


class NoRoomAvailable(BookingError):
    """
    No free room for the requested type and dates.

    Raised both when the availability check finds nothing and when the
    overlap trigger rejects the insert; callers cannot tell which.
    """

    status_code = 409
    default_message = MESSAGES['no_rooms_available']


class AuthorizationError(BookingError):
    """Role or ownership check failed."""

    status_code = 403
    default_message = MESSAGES['permission_denied']


class NotFoundError(BookingError):
    """Unknown reservation, room, user or expense."""

    status_code = 404
    default_message = MESSAGES['not_found']


class DuplicateEventError(BookingError):
    """Payment event already processed. A no-op success, not a failure."""

    status_code = 200
    default_message = MESSAGES['event_already_processed']


class PersistenceError(BookingError):
    """Unexpected store failure; details are logged, never returned."""

    status_code = 500
    default_message = MESSAGES['server_error']


class PaymentProviderError(BookingError):
    """The payment processor refused or failed to create a checkout session."""

    status_code = 502
    default_message = MESSAGES['checkout_failed']
