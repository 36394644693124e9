"""Unit tests for payday schedules"""

from datetime import date, timedelta
from bill_planner.domain.models import PayFrequency, PayInfo
from bill_planner.domain.pay_schedule import next_pay_date, next_pay_dates, upcoming_pays

TODAY = date(2024, 1, 10)


def test_weekly_and_biweekly():
    assert next_pay_dates(date(2024, 1, 5), PayFrequency.WEEKLY, TODAY) == [
        date(2024, 1, 12),
        date(2024, 1, 19),
        date(2024, 1, 26),
    ]
    assert next_pay_dates(date(2023, 12, 29), PayFrequency.BIWEEKLY, TODAY)[0] == date(2024, 1, 12)


def test_payday_today_is_not_upcoming():
    assert next_pay_dates(date(2024, 1, 10), PayFrequency.WEEKLY, TODAY)[0] == date(2024, 1, 17)


def test_semimonthly_alternates_first_and_fifteenth():
    assert next_pay_dates(date(2024, 1, 1), PayFrequency.SEMIMONTHLY, TODAY) == [
        date(2024, 1, 15),
        date(2024, 2, 1),
        date(2024, 2, 15),
    ]


def test_monthly_clamps_and_keeps_anchor():
    assert next_pay_dates(date(2023, 12, 31), PayFrequency.MONTHLY, TODAY) == [
        date(2024, 1, 31),
        date(2024, 2, 29),
        date(2024, 3, 31),
    ]
    assert next_pay_date(date(2024, 1, 31), PayFrequency.MONTHLY) == date(2024, 2, 29)


def test_iteration_ceiling_falls_back_to_one_week_out():
    dates = next_pay_dates(date(1990, 1, 1), PayFrequency.WEEKLY, TODAY, max_iterations=10)

    assert dates == [TODAY + timedelta(days=7)]


def test_upcoming_pays_to_end_of_month():
    infos = [
        PayInfo(id="job", name="Day Job", last_pay_date=date(2024, 1, 5), frequency=PayFrequency.WEEKLY),
        PayInfo(id="side", name="Side Gig", last_pay_date=date(2024, 1, 1), frequency=PayFrequency.MONTHLY),
    ]

    pays = upcoming_pays(infos, TODAY)

    assert [(p.pay_info_id, p.pay_date) for p in pays] == [
        ("job", date(2024, 1, 12)),
        ("job", date(2024, 1, 19)),
        ("job", date(2024, 1, 26)),
        ("side", date(2024, 2, 1)),  # next date shown even after month end
    ]
    assert pays[0].days_until == 2


def test_upcoming_pays_empty():
    assert upcoming_pays([], TODAY) == []
