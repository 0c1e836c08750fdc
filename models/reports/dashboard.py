"""Dashboard overview and housekeeping queries."""
from datetime import date
from typing import Any
from database import get_db
from models.room import count_rooms
from models.user import count_users
from utils.datetime_helpers import add_days, format_date, get_today


def get_dashboard_stats(today: date | None = None) -> dict[str, Any]:
    """
    Get the overview tab figures.

    Occupancy counts active reservations covering today over the total
    number of rooms.

    Args:
        today: Reference date (default: today, UTC)

    Returns:
        Dict with total_users, total_reservations, total_earnings,
        today_checkins, upcoming_reservations, revenue_today,
        occupancy_percent
    """
    day = format_date(today or get_today())
    tomorrow = format_date(add_days(day, 1))

    cursor = get_db().cursor()

    total_users = count_users()

    cursor.execute("""
        SELECT COUNT(*) as total, COALESCE(SUM(total_price), 0) as earnings
        FROM reservations
        WHERE cancelled_at IS NULL
    """)
    row = cursor.fetchone()
    total_reservations = row['total']
    total_earnings = float(row['earnings'])

    cursor.execute("""
        SELECT COUNT(*) as checkins, COALESCE(SUM(total_price), 0) as revenue
        FROM reservations
        WHERE start_date = ? AND cancelled_at IS NULL AND admin_hidden = 0
    """, (day,))
    row = cursor.fetchone()
    today_checkins = row['checkins']
    revenue_today = float(row['revenue'])

    cursor.execute("""
        SELECT COUNT(*) FROM reservations
        WHERE start_date >= ? AND cancelled_at IS NULL AND admin_hidden = 0
    """, (tomorrow,))
    upcoming = cursor.fetchone()[0]

    total_rooms = count_rooms()

    cursor.execute("""
        SELECT COUNT(DISTINCT room_id) FROM reservations
        WHERE start_date <= ? AND end_date > ?
          AND cancelled_at IS NULL AND admin_hidden = 0
    """, (day, day))
    occupied = cursor.fetchone()[0]

    occupancy = round(occupied / total_rooms * 100) if total_rooms else 0

    return {
        'total_users': total_users,
        'total_reservations': total_reservations,
        'total_earnings': round(total_earnings, 2),
        'today_checkins': today_checkins,
        'upcoming_reservations': upcoming,
        'revenue_today': round(revenue_today, 2),
        'occupancy_percent': occupancy,
    }


def get_housekeeping_summary(today: date | None = None) -> dict[str, int]:
    """
    Housekeeping counts for a day (UTC).

    Out-of-order rooms are counted once and skipped otherwise. A room is
    counted once for a checkout today, else once for a check-in today.

    Returns:
        Dict with checkout_today, checkin_today, needs_cleaning, out_of_order
    """
    day = format_date(today or get_today())

    cursor = get_db().cursor()
    cursor.execute("""
        SELECT rm.id, rm.status,
               MAX(CASE WHEN r.end_date = ? THEN 1 ELSE 0 END) as has_checkout,
               MAX(CASE WHEN r.start_date = ? THEN 1 ELSE 0 END) as has_checkin
        FROM rooms rm
        LEFT JOIN reservations r ON r.room_id = rm.id
            AND r.cancelled_at IS NULL AND r.admin_hidden = 0
        GROUP BY rm.id
    """, (day, day))

    summary = {'checkout_today': 0, 'checkin_today': 0, 'needs_cleaning': 0, 'out_of_order': 0}

    for row in cursor.fetchall():
        if row['status'] == 'out_of_order':
            summary['out_of_order'] += 1
            continue
        if row['status'] == 'needs_cleaning':
            summary['needs_cleaning'] += 1
        if row['has_checkout']:
            summary['checkout_today'] += 1
        elif row['has_checkin']:
            summary['checkin_today'] += 1

    return summary
