"""
Reservation data access functions.

This module re-exports the functions of the split modules:
- reservation_availability.py: Availability engine (overlap rule, first-fit)
- reservation_crud.py: Commit protocol, reads, edits, payments
- reservation_state.py: Cancellation, archive, hide, visibility
"""

# =============================================================================
# RE-EXPORTS
# =============================================================================

# Availability engine
from .reservation_availability import (
    OUT_OF_ORDER_REASON,
    BOOKED_REASON,
    dates_overlap,
    evaluate_rooms,
    pick_room,
    find_availability,
    check_availability,
)

# CRUD operations
from .reservation_crud import (
    # Constants
    RESERVATION_STATUSES,
    PAYMENT_METHODS,
    PAYMENT_STATUSES,
    # Numbering
    generate_reservation_code,
    format_invoice_number,
    assign_invoice_number,
    # Errors
    translate_store_error,
    # Create
    create_reservation,
    # Read
    get_reservation_by_id,
    get_reservation_by_code,
    get_reservation_by_session_id,
    list_reservations,
    get_latest_reservation,
    get_active_reservations_for_room,
    # Update
    update_reservation,
    change_reservation_status,
    record_payment,
)

# Cancellation and visibility
from .reservation_state import (
    VISIBILITY_ACTIVE,
    VISIBILITY_CLIENT_CANCELLED,
    VISIBILITY_ADMIN_ARCHIVED,
    VISIBILITY_CANCELLED_AND_ARCHIVED,
    reservation_visibility,
    is_active,
    cancel_reservation,
    archive_reservation,
    hide_reservation,
)
