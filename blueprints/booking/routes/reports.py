"""Dashboard overview, housekeeping and monthly report routes."""

from flask import request
from flask_login import login_required

from models.reports import (
    get_dashboard_stats, get_housekeeping_summary, get_monthly_report
)
from utils.api_response import api_success
from utils.datetime_helpers import get_today
from utils.decorators import tab_required
from utils.exceptions import ValidationError
from utils.messages import MESSAGES
from utils.validators import parse_date_field


def _reference_date():
    """?date=YYYY-MM-DD, defaulting to today (UTC)."""
    value = request.args.get('date')
    return parse_date_field(value, 'date') if value else get_today()


def register_routes(bp):
    """Register report routes on the blueprint."""

    @bp.route('/reports/dashboard')
    @login_required
    @tab_required('overview')
    def dashboard_stats():
        """Overview tab figures."""
        return api_success(data=get_dashboard_stats(_reference_date()))

    @bp.route('/reports/housekeeping')
    @login_required
    @tab_required('rooms')
    def housekeeping_summary():
        """Room counts by current status."""
        return api_success(data=get_housekeeping_summary(_reference_date()))

    @bp.route('/reports/monthly')
    @login_required
    @tab_required('reports')
    def monthly_report():
        """
        Revenue, expenses and net per month.

        Query params:
            year: Four-digit year (default: current year)
        """
        year = request.args.get('year', type=int) or get_today().year
        if not 1970 <= year <= 9999:
            raise ValidationError(MESSAGES['invalid_value'], field='year')
        report = get_monthly_report(year)
        return api_success(
            data=report,
            year=year,
            totals={
                'revenue': round(sum(m['revenue'] for m in report), 2),
                'expenses': round(sum(m['expenses'] for m in report), 2),
                'net': round(sum(m['net'] for m in report), 2),
            }
        )
