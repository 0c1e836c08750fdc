"""Reports model module."""
from models.reports.dashboard import (
    get_dashboard_stats,
    get_housekeeping_summary
)
from models.reports.monthly import get_monthly_report
from models.reports.payments import (
    get_payments,
    get_unreconciled_payments
)

__all__ = [
    'get_dashboard_stats',
    'get_housekeeping_summary',
    'get_monthly_report',
    'get_payments',
    'get_unreconciled_payments'
]
