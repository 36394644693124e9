"""Upcoming paydays for income sources"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List, Optional

from bill_planner.domain.models import PayFrequency, PayInfo
from bill_planner.utils.date_utils import add_months, days_in_month, days_until

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 1000


@dataclass
class UpcomingPay:
    pay_info_id: str
    name: str
    pay_date: date
    days_until: int
    frequency: PayFrequency


def next_pay_date(current: date, frequency: PayFrequency, anchor_day: Optional[int] = None) -> date:
    """Following payday after `current`; monthly pay keeps anchor_day through short months"""
    if frequency == PayFrequency.WEEKLY:
        return current + timedelta(days=7)
    if frequency == PayFrequency.BIWEEKLY:
        return current + timedelta(days=14)
    if frequency == PayFrequency.SEMIMONTHLY:
        # 1st and 15th of each month
        if current.day < 15:
            return current.replace(day=15)
        return add_months(current.replace(day=1), 1)
    return add_months(current, 1, anchor_day=anchor_day)


def next_pay_dates(
    last_pay_date: date,
    frequency: PayFrequency,
    today: Optional[date] = None,
    count: int = 3,
    max_iterations: int = MAX_ITERATIONS,
) -> List[date]:
    """
    Next `count` paydays strictly after today.

    Walks forward from the last known payday. A last pay date far in the past
    (or bad data) is bounded by max_iterations; past that the schedule falls
    back to a single date one week out.
    """
    today = today or date.today()
    frequency = PayFrequency(frequency)
    current = last_pay_date
    iterations = 0

    while current <= today and iterations < max_iterations:
        current = next_pay_date(current, frequency, last_pay_date.day)
        iterations += 1

    if iterations >= max_iterations:
        logger.error(
            "Pay schedule exceeded max iterations",
            extra={"last_pay_date": last_pay_date.isoformat(), "frequency": frequency.value},
        )
        return [today + timedelta(days=7)]

    dates = []
    for _ in range(count):
        dates.append(current)
        current = next_pay_date(current, frequency, last_pay_date.day)
    return dates


def upcoming_pays(
    pay_infos: Iterable[PayInfo],
    today: Optional[date] = None,
    max_iterations: int = MAX_ITERATIONS,
) -> List[UpcomingPay]:
    """All paydays left this month across sources, plus each source's next one"""
    today = today or date.today()
    end_of_month = today.replace(day=days_in_month(today.year, today.month))

    pays: List[UpcomingPay] = []
    for info in pay_infos:
        for index, pay_date in enumerate(
            next_pay_dates(info.last_pay_date, info.frequency, today, max_iterations=max_iterations)
        ):
            if index == 0 or pay_date <= end_of_month:
                pays.append(
                    UpcomingPay(
                        pay_info_id=info.id,
                        name=info.name,
                        pay_date=pay_date,
                        days_until=days_until(pay_date, today),
                        frequency=PayFrequency(info.frequency),
                    )
                )

    return sorted(pays, key=lambda p: (p.pay_date, p.name))
