"""Calendar-month periods, identified by their first day."""

from datetime import date

from pfm.clock import Clock


def month_start(d: date) -> date:
    return d.replace(day=1)


def current_period(clock: Clock) -> date:
    """First day of the clock's current month."""
    return month_start(clock.today())


def in_period(d: date, period_start: date) -> bool:
    return d.year == period_start.year and d.month == period_start.month


def in_month(d: date, year: int, month: int) -> bool:
    return d.year == year and d.month == month
