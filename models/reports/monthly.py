"""Monthly revenue vs expenses report."""
from typing import Any
from database import get_db
from models.expense import sum_expenses_by_month


def get_monthly_report(year: int) -> list[dict[str, Any]]:
    """
    Revenue, expenses and net per month for a year.

    Revenue is the amount actually paid on non-cancelled reservations,
    bucketed by check-in month.

    Args:
        year: Calendar year

    Returns:
        Twelve dicts: month (1-12), revenue, expenses, net
    """
    cursor = get_db().cursor()
    cursor.execute("""
        SELECT CAST(strftime('%m', start_date) AS INTEGER) as month,
               SUM(amount_paid) as revenue
        FROM reservations
        WHERE strftime('%Y', start_date) = ?
          AND cancelled_at IS NULL
        GROUP BY month
    """, (f'{year:04d}',))
    revenue_by_month = {row['month']: row['revenue'] or 0 for row in cursor.fetchall()}

    expenses_by_month = sum_expenses_by_month(year)

    report = []
    for month in range(1, 13):
        revenue = round(float(revenue_by_month.get(month, 0)), 2)
        expenses = round(float(expenses_by_month.get(month, 0)), 2)
        report.append({
            'month': month,
            'revenue': revenue,
            'expenses': expenses,
            'net': round(revenue - expenses, 2),
        })
    return report
