"""
Alert Analytics

Alert engagement figures for an office dashboard.
"""

import math
from datetime import datetime
from typing import Dict

from app.services.alert_service import AlertService
from app.utils.time_utils import period_bounds


def calculate_percentage_change(current: float, previous: float) -> int:
    """
    Percentage change between two periods, rounded to an integer.

    Examples:
        (15, 10) -> 50, (5, 10) -> -50, (3, 0) -> 100, (0, 0) -> 0
    """
    if previous == 0:
        return 100 if current > 0 else 0
    # halves round up
    return math.floor((current - previous) / previous * 100 + 0.5)


def office_alert_stats(alert_service: AlertService, office_id: str, days: int = 7, now: datetime = None) -> Dict:
    """
    Alert figures for one office over the last `days` days.

    Returns:
        dict: active alert total, alerts created in the current and previous
        period, and the percentage change between them
    """
    current_start, current_end, previous_start, previous_end = period_bounds(days, now)

    current = alert_service.count_created_for_office(office_id, current_start, current_end)
    previous = alert_service.count_created_for_office(office_id, previous_start, previous_end)

    return {
        "office_id": office_id,
        "period_days": days,
        "active_alerts": alert_service.count_active_for_office(office_id),
        "alerts_created": current,
        "previous_alerts_created": previous,
        "percentage_change": calculate_percentage_change(current, previous),
    }
