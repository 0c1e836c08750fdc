"""
Centralized user-facing messages.
All API text in one place for consistency.
"""

MESSAGES = {
    # Success messages
    'login_success': 'Welcome {name}',
    'logout_success': 'Logged out',
    'register_success': 'Account created',
    'reservation_created': 'Reservation created successfully',
    'reservation_updated': 'Reservation updated',
    'reservation_cancelled': 'Reservation cancelled',
    'reservation_archived': 'Reservation archived',
    'reservation_hidden': 'Reservation removed from your list',
    'payment_recorded': 'Payment recorded',
    'room_created': 'Room created',
    'room_updated': 'Room updated',
    'room_deleted': 'Room deleted',
    'room_cleaned': 'Room marked as cleaned',
    'expense_created': 'Expense recorded',
    'expense_deleted': 'Expense deleted',
    'user_updated': 'User updated',
    'tabs_updated': 'Permissions updated',
    'profile_updated': 'Profile updated',
    'email_verified': 'Email verified',
    'verification_sent': 'Verification email sent.',
    'verification_requested': 'If the email exists, we sent a link.',
    'already_verified': 'Email already verified.',

    # Error messages
    'invalid_credentials': 'Invalid email or password',
    'account_disabled': 'Your account has been disabled. Contact the administrator.',
    'permission_denied': 'You do not have permission for this action',
    'not_found': 'Not found',
    'reservation_not_found': 'Reservation not found',
    'room_not_found': 'Room not found',
    'user_not_found': 'User not found',
    'expense_not_found': 'Expense not found',
    'missing_fields': 'Missing required fields',
    'date_required': 'Date is required',
    'invalid_date': 'Invalid date, expected YYYY-MM-DD',
    'invalid_date_range': 'End date must be after start date',
    'past_date': 'Cannot create or edit reservation in the past',
    'no_rooms_available': 'No rooms available for selected dates',
    'room_number_exists': 'Room number already exists.',
    'room_has_reservations': 'Cannot delete a room with active reservations',
    'already_cancelled': 'Already cancelled',
    'cancel_after_checkin': 'Cannot cancel on/after check-in date',
    'invalid_status': 'Invalid status',
    'invalid_amount': 'Amount must be greater than 0',
    'invalid_category': 'Invalid category',
    'invalid_payment_method': 'Invalid payment method',
    'email_exists': 'Email already registered',
    'invalid_email': 'Invalid email format',
    'password_too_short': 'Password must be at least 8 characters',
    'cannot_modify_self': 'You cannot change your own role or status',
    'event_already_processed': 'Event already processed',
    'invalid_signature': 'Invalid webhook signature',
    'invalid_verification_token': 'Verification link is invalid or has expired',
    'verification_send_failed': 'Could not send verification email',
    'checkout_failed': 'Failed to create checkout session',
    'server_error': 'Internal server error',

    # Validation messages
    'field_required': 'This field is required',
    'invalid_value': 'Invalid value',
}
