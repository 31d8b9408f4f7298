"""
Monthly proration
"""
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings

from backend.core.utils import month_bounds

ZERO = Decimal('0')
WHOLE = Decimal('1')


def _round(value):
    return value.quantize(WHOLE, rounding=ROUND_HALF_UP)


def full_month_start_day():
    return getattr(settings, 'INVOICE_FULL_MONTH_START_DAY', 5)


def prorate_monthly_amount(amount, engagement_start, engagement_end, year, month):
    """
    Share of a monthly ``amount`` billed for ``year``/``month``.

    An engagement starting in the first days of the month (up to
    INVOICE_FULL_MONTH_START_DAY) and running to the month end pays the full
    month. Otherwise the amount is split per active day.
    """
    amount = Decimal(amount or 0)
    period_start, period_end = month_bounds(year, month)
    total_days = period_end.day
    effective_start = max(engagement_start, period_start) if engagement_start else period_start
    effective_end = min(engagement_end, period_end) if engagement_end else period_end

    if effective_start > effective_end:
        return {
            'amount': ZERO,
            'is_prorated': True,
            'active_days': 0,
            'total_days': total_days,
            'period_start': period_start,
            'period_end': period_end,
        }

    active_days = (effective_end - effective_start).days + 1
    is_prorated = active_days < total_days and not (
        effective_start.day <= full_month_start_day() and effective_end == period_end
    )
    return {
        'amount': _round(amount / total_days * active_days) if is_prorated else amount,
        'is_prorated': is_prorated,
        'active_days': active_days,
        'total_days': total_days,
        'period_start': effective_start,
        'period_end': effective_end,
    }


def calculate_prorated_reward(monthly_amount, start_date, year, month):
    """Monthly reward of someone who started on ``start_date``"""
    monthly_amount = Decimal(monthly_amount or 0)
    period_start, period_end = month_bounds(year, month)
    days_in_month = period_end.day
    result = {
        'full_amount': monthly_amount,
        'prorated_amount': monthly_amount,
        'is_prorated': False,
        'start_day': 1,
        'days_in_month': days_in_month,
        'days_worked': days_in_month,
        'percent_of_month': 100,
    }
    if isinstance(start_date, str):
        start_date = date.fromisoformat(start_date)
    if start_date is None or start_date < period_start:
        return result

    if start_date > period_end:
        result.update(prorated_amount=ZERO, is_prorated=True, start_day=start_date.day,
                      days_worked=0, percent_of_month=0)
        return result

    if start_date.day == 1:
        return result

    days_worked = days_in_month - start_date.day + 1
    result.update(
        prorated_amount=_round(monthly_amount / days_in_month * days_worked),
        is_prorated=True,
        start_day=start_date.day,
        days_worked=days_worked,
        percent_of_month=int(_round(Decimal(days_worked) / days_in_month * 100)),
    )
    return result
