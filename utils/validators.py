"""
Input validation helper functions.
Provides validation for common input types and the booking date rules.
"""

import re
from datetime import date

from utils.datetime_helpers import parse_date, get_today
from utils.exceptions import ValidationError
from utils.messages import MESSAGES


def validate_email(email: str) -> bool:
    """
    Validate email format.

    Args:
        email: Email address to validate

    Returns:
        True if valid email format
    """
    if not email:
        return False

    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email))


def validate_phone(phone: str) -> bool:
    """
    Validate an international phone number.
    Accepts an optional leading '+' and 6 to 15 digits, ignoring separators.

    Args:
        phone: Phone number to validate

    Returns:
        True if valid phone format
    """
    if not phone:
        return False

    cleaned = re.sub(r'[\s\-\(\)\.]', '', phone)
    return bool(re.match(r'^\+?[0-9]{6,15}$', cleaned))


def validate_date_format(date_str: str) -> bool:
    """
    Validate date is in YYYY-MM-DD format.

    Args:
        date_str: Date string to validate

    Returns:
        True if valid format
    """
    try:
        parse_date(date_str)
        return True
    except (ValueError, TypeError):
        return False


def validate_password(password: str, min_length: int = 8) -> tuple:
    """
    Validate password strength.

    Args:
        password: Password to validate
        min_length: Minimum password length

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not password:
        return False, 'Password is required'

    if len(password) < min_length:
        return False, MESSAGES['password_too_short']

    return True, ''


def sanitize_input(text: str, max_length: int = None) -> str:
    """
    Sanitize text input by trimming and limiting length.

    Args:
        text: Text to sanitize
        max_length: Maximum length (optional)

    Returns:
        Sanitized text
    """
    if not text:
        return ''

    sanitized = str(text).strip()

    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized


def require_fields(data: dict, fields: list) -> None:
    """
    Ensure every named field is present and non-blank.

    Raises:
        ValidationError: Naming the first missing field
    """
    for field in fields:
        value = data.get(field) if data else None
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(MESSAGES['missing_fields'], field=field)


def parse_date_field(value, field: str) -> date:
    """
    Parse a date-only input field.

    Raises:
        ValidationError: If the value is not a valid YYYY-MM-DD date
    """
    try:
        return parse_date(value)
    except (ValueError, TypeError):
        raise ValidationError(MESSAGES['invalid_date'], field=field)


def validate_stay_dates(start_value, end_value, allow_past: bool = False) -> tuple:
    """
    Parse and check a stay's [start, end) range.

    Args:
        start_value: Check-in date (str or date)
        end_value: Check-out date (str or date)
        allow_past: Skip the not-before-today rule (unchanged edits)

    Returns:
        Tuple of (start_date, end_date) as dates

    Raises:
        ValidationError: Malformed dates, end <= start, or start before today
    """
    start = parse_date_field(start_value, 'start_date')
    end = parse_date_field(end_value, 'end_date')

    if end <= start:
        raise ValidationError(MESSAGES['invalid_date_range'], field='end_date')

    if not allow_past and start < get_today():
        raise ValidationError(MESSAGES['past_date'], field='start_date')

    return start, end


def parse_positive_number(value, field: str) -> float:
    """
    Parse a strictly positive number.

    Raises:
        ValidationError: If the value is missing, not numeric, or <= 0
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(MESSAGES['invalid_value'], field=field)
    if number != number or number <= 0:
        raise ValidationError(MESSAGES['invalid_amount'], field=field)
    return number


def parse_positive_integer(value, field: str, default: int = None) -> int:
    """
    Parse a strictly positive integer, falling back to a default when empty.

    Raises:
        ValidationError: If the value is present but not a positive integer
    """
    if value in (None, '') and default is not None:
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(MESSAGES['invalid_value'], field=field)
    if number <= 0:
        raise ValidationError(MESSAGES['invalid_value'], field=field)
    return number
