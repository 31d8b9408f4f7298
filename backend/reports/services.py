"""
Executive dashboard and management reports
"""
import logging
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal

from django.db.models import Sum, Count
from django.utils import timezone

from backend.clients.models import Client, Colleague, Engagement, EngagementAssignment
from backend.clients.services import engagement_margin
from backend.core.cache_utils import (
    cached_query, DASHBOARD_KPI_CACHE_TTL, DASHBOARD_KEY_PREFIX, REPORTS_CACHE_TTL, REPORTS_KEY_PREFIX
)
from backend.creative_boost.services import client_month_summaries
from backend.leads.models import Lead
from backend.meetings.services import todays_meetings, upcoming_meetings

logger = logging.getLogger('backend.reports')

ZERO = Decimal('0')
TOP_CLIENTS = 5
RECENT_WON_LEADS = 5
BIRTHDAY_WINDOW_DAYS = 14

# Keys removed for users without financial access
FINANCIAL_KEYS = {
    'monthly_recurring_revenue', 'monthly_revenue', 'invoice_estimate', 'package_amount',
    'estimated_price', 'revenue', 'cost', 'margin', 'margin_percent', 'total_cost',
    'monthly_cost', 'total_revenue', 'total_margin',
}


def strip_financials(data):
    """Copy of ``data`` without money figures, recursively"""
    if isinstance(data, dict):
        return {key: strip_financials(value) for key, value in data.items() if key not in FINANCIAL_KEYS}
    if isinstance(data, list):
        return [strip_financials(item) for item in data]
    return data


def _next_birthday(birthday, today):
    try:
        upcoming = birthday.replace(year=today.year)
    except ValueError:
        # 29 February outside a leap year
        upcoming = date(today.year, 3, 1)
    if upcoming < today:
        try:
            upcoming = birthday.replace(year=today.year + 1)
        except ValueError:
            upcoming = date(today.year + 1, 3, 1)
    return upcoming


def upcoming_birthdays(today=None, days=BIRTHDAY_WINDOW_DAYS):
    """Active colleagues with a birthday in the next ``days`` days, soonest first"""
    today = today or timezone.localdate()
    result = []
    for colleague in Colleague.objects.filter(status='active', birthday__isnull=False):
        next_birthday = _next_birthday(colleague.birthday, today)
        days_until = (next_birthday - today).days
        if days_until <= days:
            result.append({
                'colleague_id': colleague.pk,
                'full_name': colleague.full_name,
                'birthday': next_birthday,
                'days_until': days_until,
                'turning': next_birthday.year - colleague.birthday.year,
            })
    return sorted(result, key=lambda b: b['days_until'])


def top_clients_by_revenue(limit=TOP_CLIENTS):
    rows = (
        Engagement.objects.filter(status='active')
        .values('client_id')
        .annotate(monthly_revenue=Sum('monthly_fee'), engagement_count=Count('id'))
        .order_by('-monthly_revenue')[:limit]
    )
    clients = Client.objects.in_bulk([row['client_id'] for row in rows])
    return [
        {
            'client_id': row['client_id'],
            'client_name': str(clients[row['client_id']]),
            'monthly_revenue': row['monthly_revenue'] or ZERO,
            'engagement_count': row['engagement_count'],
        }
        for row in rows
    ]


def recently_won_leads(limit=RECENT_WON_LEADS):
    leads = Lead.objects.filter(stage='won').select_related('owner').order_by('-converted_at', '-updated_at')[:limit]
    return [
        {
            'lead_id': lead.pk,
            'company_name': lead.company_name,
            'owner': lead.owner.username if lead.owner else None,
            'estimated_price': lead.estimated_price,
            'currency': lead.currency,
            'converted_at': lead.converted_at,
        }
        for lead in leads
    ]


def _meeting_rows(meetings):
    return [
        {
            'meeting_id': meeting.pk,
            'title': meeting.title,
            'type': meeting.type,
            'client_name': str(meeting.client) if meeting.client else None,
            'scheduled_at': meeting.scheduled_at,
            'duration_minutes': meeting.duration_minutes,
        }
        for meeting in meetings.order_by('scheduled_at')
    ]


def creative_boost_totals(year, month):
    summaries = client_month_summaries(year, month)
    return {
        'client_count': len(summaries),
        'used_credits': sum((s['used_credits'] for s in summaries), ZERO),
        'max_credits': sum((s['max_credits'] for s in summaries), ZERO),
        'invoice_estimate': sum((s['estimated_invoice'] for s in summaries), ZERO),
        'package_amount': sum((s['invoice_amount'] for s in summaries), ZERO),
        'over_limit_clients': sum(1 for s in summaries if s['overage_credits'] > 0),
    }


@cached_query(cache_ttl=DASHBOARD_KPI_CACHE_TTL, key_prefix=DASHBOARD_KEY_PREFIX)
def dashboard_kpis(today):
    """Dashboard figures for ``today`` (cached, invalidated when source rows change)"""
    active_engagements = Engagement.objects.filter(status='active')
    mrr = active_engagements.aggregate(total=Sum('monthly_fee'))['total'] or ZERO
    week_start = timezone.now()

    logger.info(f"Dashboard KPIs computed for {today.isoformat()}")
    return {
        'date': today,
        'active_clients': Client.objects.filter(status='active').count(),
        'active_engagements': active_engagements.count(),
        'active_colleagues': Colleague.objects.filter(status='active').count(),
        'monthly_recurring_revenue': mrr,
        'top_clients': top_clients_by_revenue(),
        'recently_won_leads': recently_won_leads(),
        'meetings_today': _meeting_rows(todays_meetings(today=today)),
        'meetings_this_week': _meeting_rows(upcoming_meetings(days=7, now=week_start)),
        'upcoming_birthdays': upcoming_birthdays(today=today),
        'creative_boost': creative_boost_totals(today.year, today.month),
    }


@cached_query(cache_ttl=REPORTS_CACHE_TTL, key_prefix=REPORTS_KEY_PREFIX)
def engagement_margin_report(status='active'):
    engagements = Engagement.objects.filter(status=status).select_related('client').order_by('client__name', 'name')
    rows = [engagement_margin(engagement) for engagement in engagements]
    total_revenue = sum((r['revenue'] for r in rows), ZERO)
    total_cost = sum((r['cost'] for r in rows), ZERO)
    return {
        'engagements': rows,
        'total_revenue': total_revenue,
        'total_cost': total_cost,
        'total_margin': total_revenue - total_cost,
        'low_margin_count': sum(1 for r in rows if r['is_low_margin']),
    }


def client_margin_report(status='active'):
    """Engagement margins rolled up per client"""
    per_client = defaultdict(lambda: {'revenue': ZERO, 'cost': ZERO, 'engagement_count': 0})
    for row in engagement_margin_report(status=status)['engagements']:
        entry = per_client[row['client_id']]
        entry['client_id'] = row['client_id']
        entry['client_name'] = row['client_name']
        entry['revenue'] += row['revenue']
        entry['cost'] += row['cost']
        entry['engagement_count'] += 1

    result = []
    for entry in per_client.values():
        entry['margin'] = entry['revenue'] - entry['cost']
        if entry['revenue'] > 0:
            entry['margin_percent'] = (entry['margin'] / entry['revenue'] * 100).quantize(Decimal('0.01'))
        else:
            entry['margin_percent'] = ZERO
        result.append(entry)
    return sorted(result, key=lambda e: e['margin'], reverse=True)


def team_cost_breakdown():
    """Monthly assignment cost grouped by cost model and by colleague"""
    assignments = EngagementAssignment.objects.filter(engagement__status='active').select_related('colleague')

    by_model = {}
    for cost_model, label in EngagementAssignment.COST_MODEL_CHOICES:
        by_model[cost_model] = {'cost_model': cost_model, 'label': label, 'assignment_count': 0, 'monthly_cost': ZERO}
    by_colleague = {}
    for assignment in assignments:
        entry = by_model.setdefault(
            assignment.cost_model,
            {'cost_model': assignment.cost_model, 'label': assignment.cost_model, 'assignment_count': 0, 'monthly_cost': ZERO},
        )
        cost = assignment.monthly_cost or ZERO
        entry['assignment_count'] += 1
        entry['monthly_cost'] += cost

        colleague = by_colleague.setdefault(assignment.colleague_id, {
            'colleague_id': assignment.colleague_id,
            'full_name': assignment.colleague.full_name,
            'is_freelancer': assignment.colleague.is_freelancer,
            'assignment_count': 0,
            'monthly_cost': ZERO,
        })
        colleague['assignment_count'] += 1
        colleague['monthly_cost'] += cost

    return {
        'by_cost_model': list(by_model.values()),
        'by_colleague': sorted(by_colleague.values(), key=lambda c: c['monthly_cost'], reverse=True),
        'total_cost': sum((e['monthly_cost'] for e in by_model.values()), ZERO),
    }
