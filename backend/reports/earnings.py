"""
Colleague earnings

A colleague's month is made of four parts: fixed pay from engagement
assignments (prorated when the assignment starts mid-month), the Creative
Boost reward for produced credits, approved upsell commissions and one-time
activity rewards.
"""
import logging
from decimal import Decimal

from django.db.models import Q
from django.utils import timezone

from backend.clients.models import ActivityReward, Colleague, EngagementAssignment, EngagementService, ExtraWork
from backend.clients.services import engagements_active_in_month
from backend.core.utils import month_bounds, period_label, previous_period
from backend.creative_boost.services import colleague_credits_by_client
from backend.invoicing.proration import calculate_prorated_reward

logger = logging.getLogger('backend.reports')

ZERO = Decimal('0')
CENT = Decimal('0.01')
HISTORY_MONTHS = 12


def _money(value):
    return Decimal(value or 0).quantize(CENT)


def _assignments_in_month(colleague, year, month):
    first_day, last_day = month_bounds(year, month)
    return (
        EngagementAssignment.objects.filter(
            colleague=colleague,
            engagement__in=engagements_active_in_month(year, month),
        )
        .filter(Q(start_date__isnull=True) | Q(start_date__lte=last_day))
        .filter(Q(end_date__isnull=True) | Q(end_date__gte=first_day))
        .select_related('engagement', 'engagement__client')
    )


def fixed_earnings(colleague, year, month):
    """Monthly assignment pay, prorated from the start day of assignments starting in the month"""
    rows = []
    for assignment in _assignments_in_month(colleague, year, month).order_by('engagement__name', 'id'):
        if not assignment.monthly_cost:
            continue
        reward = calculate_prorated_reward(assignment.monthly_cost, assignment.start_date, year, month)
        rows.append({
            'assignment_id': assignment.pk,
            'engagement_id': assignment.engagement_id,
            'engagement_name': assignment.engagement.name,
            'client_name': str(assignment.engagement.client),
            'monthly_cost': assignment.monthly_cost,
            'amount': _money(reward['prorated_amount']),
            'is_prorated': reward['is_prorated'],
            'days_worked': reward['days_worked'],
            'days_in_month': reward['days_in_month'],
        })
    return rows


def _service_commission_period(engagement_service):
    created = timezone.localdate(engagement_service.created_at)
    return created.year, created.month


def _service_commission_base(engagement_service):
    # Creative Boost commissions are paid from the whole credit package
    if engagement_service.creative_boost_max_credits and engagement_service.creative_boost_price_per_credit:
        return engagement_service.creative_boost_max_credits * engagement_service.creative_boost_price_per_credit
    return engagement_service.price


def _upsell_row(item_type, item, amount, client, engagement):
    return {
        'id': item.pk,
        'type': item_type,
        'client_id': client.pk if client else None,
        'client_name': str(client) if client else None,
        'engagement_id': engagement.pk if engagement else None,
        'engagement_name': engagement.name if engagement else None,
        'item_name': item.name,
        'amount': amount,
        'currency': item.currency,
        'upsold_by_id': item.upsold_by_id,
        'upsold_by_name': item.upsold_by.full_name if item.upsold_by else None,
        'commission_percent': item.upsell_commission_percent,
        'commission_amount': _money(amount * item.upsell_commission_percent / 100),
        'is_approved': item.commission_approved_at is not None,
        'approved_at': item.commission_approved_at,
        'created_at': item.created_at,
    }


def upsells_for_month(year, month, colleague=None, approved_only=False):
    """
    Upsell commissions falling into the month, newest first.

    Extra work counts in the month of its work date. Engagement services count
    in the month they were added; their commission is taken from the full
    price, never a prorated one.
    """
    first_day, last_day = month_bounds(year, month)
    extra_works = ExtraWork.objects.filter(
        upsold_by__isnull=False, upsell_commission_percent__gt=0, work_date__range=(first_day, last_day)
    ).select_related('client', 'engagement', 'upsold_by')
    engagement_services = EngagementService.objects.filter(
        upsold_by__isnull=False, upsell_commission_percent__gt=0
    ).select_related('engagement', 'engagement__client', 'upsold_by')
    if colleague is not None:
        extra_works = extra_works.filter(upsold_by=colleague)
        engagement_services = engagement_services.filter(upsold_by=colleague)
    if approved_only:
        extra_works = extra_works.filter(commission_approved_at__isnull=False)
        engagement_services = engagement_services.filter(commission_approved_at__isnull=False)

    rows = [_upsell_row('extra_work', ew, ew.amount, ew.client, ew.engagement) for ew in extra_works]
    for es in engagement_services:
        if _service_commission_period(es) != (year, month):
            continue
        row = _upsell_row('service', es, _service_commission_base(es), es.engagement.client, es.engagement)
        row['is_one_off'] = es.billing_type == 'one_off'
        rows.append(row)
    return sorted(rows, key=lambda r: r['created_at'], reverse=True)


def colleague_earnings(colleague, year, month):
    """Earnings of a colleague in one month, by part"""
    fixed = fixed_earnings(colleague, year, month)
    credits_by_client = colleague_credits_by_client(colleague, year, month)
    commissions = upsells_for_month(year, month, colleague=colleague, approved_only=True)
    first_day, last_day = month_bounds(year, month)
    activities = list(ActivityReward.objects.filter(colleague=colleague, activity_date__range=(first_day, last_day)))

    fixed_total = sum((row['amount'] for row in fixed), ZERO)
    cb_reward = sum((row['total_reward'] for row in credits_by_client), ZERO)
    commissions_total = sum((row['commission_amount'] for row in commissions), ZERO)
    activities_total = sum((reward.amount for reward in activities), ZERO)
    return {
        'year': year,
        'month': month,
        'period': period_label(year, month),
        'fixed_earnings': _money(fixed_total),
        'creative_boost_reward': _money(cb_reward),
        'creative_boost_credits': sum((row['total_credits'] for row in credits_by_client), ZERO),
        'commissions_reward': _money(commissions_total),
        'activities_reward': _money(activities_total),
        'activities_count': len(activities),
        'total_earnings': _money(fixed_total + cb_reward + commissions_total + activities_total),
        'fixed': fixed,
        'creative_boost': credits_by_client,
        'commissions': commissions,
        'activities': [
            {
                'id': reward.pk,
                'description': reward.description,
                'billing_type': reward.billing_type,
                'amount': reward.amount,
                'hours': reward.hours,
                'hourly_rate': reward.hourly_rate,
                'activity_date': reward.activity_date,
            }
            for reward in activities
        ],
    }


def team_earnings(year, month):
    """Earnings summary of every active colleague, biggest earner first"""
    summaries = []
    for colleague in Colleague.objects.filter(status='active'):
        earnings = colleague_earnings(colleague, year, month)
        summaries.append({
            'colleague_id': colleague.pk,
            'full_name': colleague.full_name,
            'position': colleague.position,
            'is_freelancer': colleague.is_freelancer,
            'engagement_count': _assignments_in_month(colleague, year, month).values('engagement_id').distinct().count(),
            **{key: earnings[key] for key in (
                'fixed_earnings', 'creative_boost_reward', 'creative_boost_credits', 'commissions_reward',
                'activities_reward', 'activities_count', 'total_earnings',
            )},
        })
    summaries.sort(key=lambda s: (-s['total_earnings'], s['full_name']))
    logger.info(f"Team earnings {period_label(year, month)}: {len(summaries)} colleague(s)")
    return {
        'year': year,
        'month': month,
        'colleagues': summaries,
        'total_earnings': sum((s['total_earnings'] for s in summaries), ZERO),
    }


def colleague_earnings_history(colleague, months=HISTORY_MONTHS, today=None):
    """Monthly earnings of the last ``months`` months, current month first"""
    today = today or timezone.localdate()
    year, month = today.year, today.month
    history = []
    for _ in range(months):
        history.append(colleague_earnings(colleague, year, month))
        year, month = previous_period(year, month)
    return history
