"""Tests for alert analytics and reporting periods."""

from datetime import datetime

import pytest

from app.services.alert_service import AlertService
from app.services.analytics import calculate_percentage_change, office_alert_stats
from app.utils.time_utils import period_bounds

from conftest import office_alert_input


class TestCalculatePercentageChange:
    @pytest.mark.parametrize(
        "current, previous, expected",
        [
            (15, 10, 50),
            (5, 10, -50),
            (10, 10, 0),
            (3, 0, 100),
            (0, 0, 0),
            (1, 3, -67),
        ],
    )
    def test_percentage_change(self, current, previous, expected):
        assert calculate_percentage_change(current, previous) == expected


class TestPeriodBounds:
    def test_seven_day_periods_in_local_time(self):
        # 2024-06-10 12:00 UTC is 13:00 in Casablanca (UTC+1)
        current_start, current_end, previous_start, previous_end = period_bounds(
            7, now=datetime(2024, 6, 10, 12, 0)
        )

        assert current_start == datetime(2024, 6, 3, 23, 0)
        assert current_end == datetime(2024, 6, 10, 22, 59, 59, 999999)
        assert previous_start == datetime(2024, 5, 27, 23, 0)
        assert previous_end == datetime(2024, 6, 3, 22, 59, 59, 999999)

    def test_non_positive_days_are_rejected(self):
        with pytest.raises(ValueError):
            period_bounds(0)


class TestOfficeAlertStats:
    def test_stats_compare_current_and_previous_period(self, db, ref):
        service = AlertService(db)
        created = [
            datetime(2024, 6, 8, 10),
            datetime(2024, 6, 5, 10),
            datetime(2024, 6, 1, 10),
            datetime(2024, 5, 1, 10),
        ]
        for created_at in created:
            alert = service.create(office_alert_input([ref.agdal.id]))
            alert.created_at = created_at
        db.commit()

        stats = office_alert_stats(service, ref.agdal.id, days=7, now=datetime(2024, 6, 10, 12, 0))

        assert stats["active_alerts"] == 4
        assert stats["alerts_created"] == 2
        assert stats["previous_alerts_created"] == 1
        assert stats["percentage_change"] == 100
