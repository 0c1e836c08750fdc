"""
Expense data access functions.
Handles operating expense recording, monthly listing, and deletion.
"""

import re
from database import get_db
from utils.datetime_helpers import format_date
from utils.exceptions import NotFoundError, ValidationError
from utils.messages import MESSAGES
from utils.validators import parse_date_field, parse_positive_number, sanitize_input

EXPENSE_CATEGORIES = ('utilities', 'maintenance', 'supplies', 'salary', 'marketing', 'other')
EXPENSE_PAYMENT_METHODS = ('cash', 'card', 'bank_transfer')

MONTH_PATTERN = re.compile(r'^(\d{4})-(\d{2})$')


def get_expense_by_id(expense_id: int) -> dict:
    cursor = get_db().cursor()
    cursor.execute('SELECT * FROM expenses WHERE id = ?', (expense_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def _month_bounds(month: str) -> tuple:
    """First day of the month and first day of the next one, as ISO strings."""
    match = MONTH_PATTERN.match(month or '')
    if not match:
        raise ValidationError(MESSAGES['invalid_date'], field='month')
    year, mon = int(match.group(1)), int(match.group(2))
    if not 1 <= mon <= 12:
        raise ValidationError(MESSAGES['invalid_date'], field='month')
    next_year, next_mon = (year + 1, 1) if mon == 12 else (year, mon + 1)
    return f'{year:04d}-{mon:02d}-01', f'{next_year:04d}-{next_mon:02d}-01'


def get_expenses(month: str = None, category: str = None) -> list:
    """
    List expenses, newest first.

    Args:
        month: Restrict to a month 'YYYY-MM' (optional)
        category: Restrict to a category; 'all' or empty means no filter

    Returns:
        List of expense dicts
    """
    query = 'SELECT * FROM expenses WHERE 1=1'
    params = []

    if month:
        start, end = _month_bounds(month)
        query += ' AND expense_date >= ? AND expense_date < ?'
        params.extend([start, end])

    if category and category != 'all':
        query += ' AND category = ?'
        params.append(category)

    query += ' ORDER BY expense_date DESC, id DESC'

    cursor = get_db().cursor()
    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


def create_expense(data: dict, created_by: str = None, created_by_id: int = None) -> dict:
    """
    Record an expense.

    Args:
        data: expense_date (YYYY-MM-DD), category, amount (> 0),
            payment_method (default cash), note
        created_by: Actor label (email)
        created_by_id: Acting user ID

    Returns:
        dict: The created expense

    Raises:
        ValidationError: Missing date/category/amount, bad category or method
    """
    if not data.get('expense_date') or not data.get('category') or data.get('amount') in (None, ''):
        raise ValidationError(MESSAGES['missing_fields'])

    expense_date = format_date(parse_date_field(data['expense_date'], 'expense_date'))

    category = str(data['category']).strip().lower()
    if category not in EXPENSE_CATEGORIES:
        raise ValidationError(MESSAGES['invalid_category'], field='category')

    amount = round(parse_positive_number(data['amount'], 'amount'), 2)

    payment_method = str(data.get('payment_method') or 'cash').strip().lower()
    if payment_method not in EXPENSE_PAYMENT_METHODS:
        raise ValidationError(MESSAGES['invalid_payment_method'], field='payment_method')

    note = sanitize_input(data.get('note'), 500)

    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        INSERT INTO expenses (expense_date, category, amount, payment_method, note,
                              created_by, created_by_id)
        VALUES (?, ?, ?, ?, ?, ?, ?)
    ''', (expense_date, category, amount, payment_method, note or None,
          created_by or 'staff', created_by_id))
    db.commit()

    return get_expense_by_id(cursor.lastrowid)


def delete_expense(expense_id: int) -> dict:
    """
    Delete an expense.

    Returns:
        dict: The deleted expense

    Raises:
        NotFoundError: Unknown expense
    """
    expense = get_expense_by_id(expense_id)
    if not expense:
        raise NotFoundError(MESSAGES['expense_not_found'])

    db = get_db()
    db.execute('DELETE FROM expenses WHERE id = ?', (expense_id,))
    db.commit()
    return expense


def sum_expenses_by_month(year: int) -> dict:
    """
    Total expenses per month of a year.

    Returns:
        dict: {month_number: total}
    """
    cursor = get_db().cursor()
    cursor.execute('''
        SELECT CAST(strftime('%m', expense_date) AS INTEGER) as month,
               SUM(amount) as total
        FROM expenses
        WHERE strftime('%Y', expense_date) = ?
        GROUP BY month
    ''', (f'{year:04d}',))
    return {row['month']: row['total'] or 0 for row in cursor.fetchall()}
