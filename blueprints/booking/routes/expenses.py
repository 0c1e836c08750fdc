"""Expense routes: monthly listing, recording and deletion."""

from flask import request
from flask_login import login_required, current_user

from models.expense import create_expense, delete_expense, get_expenses
from utils.api_response import api_success
from utils.audit import log_activity
from utils.decorators import staff_required
from utils.messages import MESSAGES


def register_routes(bp):
    """Register expense routes on the blueprint."""

    @bp.route('/expenses')
    @login_required
    @staff_required
    def list_expenses():
        """
        List expenses.

        Query params:
            month: YYYY-MM (optional)
            category: Category or 'all'
        """
        expenses = get_expenses(
            month=request.args.get('month') or None,
            category=request.args.get('category') or None
        )
        total = round(sum(e['amount'] for e in expenses), 2)
        return api_success(data=expenses, total=total)

    @bp.route('/expenses', methods=['POST'])
    @login_required
    @staff_required
    def add_expense():
        """
        Record an expense.

        Request body:
            expense_date, category, amount (required), payment_method, note
        """
        data = request.get_json(silent=True) or {}
        expense = create_expense(data, created_by=current_user.email,
                                 created_by_id=current_user.id)

        log_activity('CREATE', 'expense', expense['id'],
                     description=f'Expense {expense["category"]} {expense["amount"]:.2f}',
                     after=expense)
        return api_success(data=expense, message=MESSAGES['expense_created'], status=201)

    @bp.route('/expenses/<int:expense_id>', methods=['DELETE'])
    @login_required
    @staff_required
    def remove_expense(expense_id):
        """Delete an expense."""
        expense = delete_expense(expense_id)
        log_activity('DELETE', 'expense', expense_id,
                     description=f'Deleted expense {expense["category"]} {expense["amount"]:.2f}',
                     before=expense)
        return api_success(data={'id': expense_id}, message=MESSAGES['expense_deleted'])
