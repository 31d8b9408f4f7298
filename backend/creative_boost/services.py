"""
Creative Boost business operations: client registration, monthly allowances,
output tracking, settings history and the monthly sync with engagements.
"""
import logging
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import Q

from backend.clients.models import Client, EngagementAssignment, EngagementService
from backend.clients.services import engagements_active_in_month
from backend.core.cache_utils import cached_query, CB_OVERVIEW_CACHE_TTL, CB_OVERVIEW_KEY_PREFIX
from backend.core.cache_signals import suspend_cache_signals, invalidate_cb_overview_cache_manual, invalidate_dashboard_cache_manual
from backend.core.utils import previous_period
from .credits import build_summary, output_row_credits
from .models import CreativeBoostClient, ClientMonth, ClientMonthOutput, SettingsChange

logger = logging.getLogger(__name__)

STATUS_LABELS = dict(ClientMonth.STATUS_CHOICES)

# Tracked month settings: field -> (change type, label)
TRACKED_SETTINGS = {
    'max_credits': ('max_credits', 'Max. credits'),
    'price_per_credit': ('price_per_credit', 'Price per credit'),
    'status': ('status', 'Status'),
    'colleague': ('colleague', 'Colleague'),
}

# Fallbacks when copying settings from an engagement service without values
SERVICE_FALLBACK_MIN_CREDITS = Decimal('0')
SERVICE_FALLBACK_MAX_CREDITS = Decimal('50')
SERVICE_FALLBACK_PRICE_PER_CREDIT = Decimal('1500')

DEFAULT_OUTPUT_TYPES = [
    # (name, category, base credits)
    ('Static banner', 'banner', Decimal('1')),
    ('Banner translation', 'banner_translation', Decimal('0.5')),
    ('Banner revision', 'banner_revision', Decimal('0.5')),
    ('AI photo', 'ai_photo', Decimal('1')),
    ('Video up to 15 s', 'video', Decimal('3')),
    ('Video up to 30 s', 'video', Decimal('5')),
    ('Video translation', 'video_translation', Decimal('1.5')),
    ('Video revision', 'video_revision', Decimal('1')),
]


def _defaults():
    return getattr(settings, 'CREATIVE_BOOST_DEFAULTS', {
        'min_credits': Decimal('30'),
        'max_credits': Decimal('50'),
        'price_per_credit': Decimal('1500'),
    })


def _as_decimal(value):
    if value is None:
        return None
    return value if isinstance(value, Decimal) else Decimal(str(value))


def add_creative_boost_client(client, default_min_credits=None, default_max_credits=None, default_price_per_credit=None):
    """Register a client for Creative Boost; returns the existing registration if any"""
    defaults = _defaults()
    cb_client, created = CreativeBoostClient.objects.get_or_create(
        client=client,
        defaults={
            'default_min_credits': _as_decimal(default_min_credits) if default_min_credits is not None else defaults['min_credits'],
            'default_max_credits': _as_decimal(default_max_credits) if default_max_credits is not None else defaults['max_credits'],
            'default_price_per_credit': _as_decimal(default_price_per_credit) if default_price_per_credit is not None else defaults['price_per_credit'],
        }
    )
    if created:
        logger.info(f"Registered Creative Boost client {client.pk}")
    return cb_client


def add_client_to_month(client, year, month, min_credits=None, max_credits=None, price_per_credit=None,
                        colleague=None, engagement_service=None, engagement=None):
    """
    Add a client to a month.

    Settings come from the explicit arguments, then the client's defaults,
    then the global defaults. An existing month row is returned unchanged.
    """
    existing = ClientMonth.objects.filter(client=client, year=year, month=month).first()
    if existing:
        return existing

    cb_client = add_creative_boost_client(client)
    client_month = ClientMonth.objects.create(
        client=client,
        year=year,
        month=month,
        min_credits=_as_decimal(min_credits) if min_credits is not None else cb_client.default_min_credits,
        max_credits=_as_decimal(max_credits) if max_credits is not None else cb_client.default_max_credits,
        price_per_credit=_as_decimal(price_per_credit) if price_per_credit is not None else cb_client.default_price_per_credit,
        colleague=colleague,
        engagement_service=engagement_service,
        engagement=engagement,
        status='active',
    )
    logger.info(f"Added client {client.pk} to Creative Boost {year}-{month:02d}")
    return client_month


def remove_client_from_month(client, year, month):
    """Delete the month row and every output of the client in that month"""
    with transaction.atomic():
        outputs_deleted, _ = ClientMonthOutput.objects.filter(client=client, year=year, month=month).delete()
        months_deleted, _ = ClientMonth.objects.filter(client=client, year=year, month=month).delete()
    logger.info(f"Removed client {client.pk} from Creative Boost {year}-{month:02d} ({outputs_deleted} outputs)")
    return months_deleted > 0


def _setting_value(field, value):
    if field == 'status':
        return STATUS_LABELS.get(value, value)
    if field == 'colleague':
        return value.full_name if value is not None else None
    return str(value) if value is not None else None


def _setting_changed(field, old, new):
    if field == 'colleague':
        return (old.pk if old else None) != (new.pk if new else None)
    if field in ('max_credits', 'price_per_credit'):
        return _as_decimal(old) != _as_decimal(new)
    return old != new


def update_client_month(client_month, data, user=None):
    """
    Apply ``data`` to a client month and record tracked setting changes.

    Returns the list of created SettingsChange rows.
    """
    changes = []
    for field, (change_type, label) in TRACKED_SETTINGS.items():
        if field not in data:
            continue
        old = getattr(client_month, field)
        new = data[field]
        if not _setting_changed(field, old, new):
            continue
        changes.append(SettingsChange(
            client_month=client_month,
            client_id=client_month.client_id,
            year=client_month.year,
            month=client_month.month,
            change_type=change_type,
            field_name=label,
            old_value=_setting_value(field, old),
            new_value=_setting_value(field, new),
            changed_by=user if user is not None and user.is_authenticated else None,
            changed_by_name=user.display_name if user is not None and user.is_authenticated else None,
        ))

    with transaction.atomic():
        for field, value in data.items():
            setattr(client_month, field, value)
        client_month.save()
        if changes:
            SettingsChange.objects.bulk_create(changes)

    if changes:
        logger.info(f"Client month {client_month.pk}: {len(changes)} settings change(s)")
    return changes


def clients_for_month(year, month):
    return Client.objects.filter(creative_boost_months__year=year, creative_boost_months__month=month).distinct()


def available_clients_for_month(year, month):
    """Active registered clients that are not in the month yet"""
    taken = ClientMonth.objects.filter(year=year, month=month).values('client_id')
    return CreativeBoostClient.objects.filter(is_active=True).exclude(client_id__in=taken).select_related('client')


def client_outputs(client, year, month):
    return ClientMonthOutput.objects.filter(
        client=client, year=year, month=month
    ).select_related('output_type', 'colleague')


def update_client_output(client, output_type, year, month, data):
    """
    Upsert the output row of ``output_type``.

    Counts are clamped at 0. A row whose counts drop to 0 is deleted and a
    new row is only created when it holds at least one piece. Returns the
    saved row or None when nothing is stored.
    """
    output = ClientMonthOutput.objects.filter(
        client=client, output_type=output_type, year=year, month=month
    ).first()

    normal = data.get('normal_count', output.normal_count if output else 0)
    express = data.get('express_count', output.express_count if output else 0)
    normal = max(0, int(normal or 0))
    express = max(0, int(express or 0))

    if normal + express == 0:
        if output:
            output.delete()
            logger.info(f"Deleted empty output {output_type.name} for client {client.pk} {year}-{month:02d}")
        return None

    if output is None:
        output = ClientMonthOutput(client=client, output_type=output_type, year=year, month=month)
    output.normal_count = normal
    output.express_count = express
    if 'colleague' in data:
        output.colleague = data['colleague']
    output.save()
    return output


def summarize_client_month(client_month):
    outputs = list(client_outputs(client_month.client, client_month.year, client_month.month))
    return build_summary(client_month, outputs)


@cached_query(cache_ttl=CB_OVERVIEW_CACHE_TTL, key_prefix=CB_OVERVIEW_KEY_PREFIX)
def client_month_summaries(year, month):
    """Summaries (as dicts) of every client month in the period"""
    months = ClientMonth.objects.filter(year=year, month=month).select_related('client')
    outputs_by_client = {}
    for output in ClientMonthOutput.objects.filter(year=year, month=month).select_related('output_type'):
        outputs_by_client.setdefault(output.client_id, []).append(output)
    return [
        build_summary(client_month, outputs_by_client.get(client_month.client_id, [])).as_dict()
        for client_month in months
    ]


def summary_for_engagement_service(engagement_service, year, month):
    """Summary of the month row linked to an engagement service (or its client)"""
    client_month = ClientMonth.objects.filter(
        engagement_service=engagement_service, year=year, month=month
    ).select_related('client').first()
    if client_month is None:
        client_month = ClientMonth.objects.filter(
            client_id=engagement_service.engagement.client_id, year=year, month=month
        ).select_related('client').first()
    if client_month is None:
        return None
    return summarize_client_month(client_month)


def _colleague_outputs(colleague, year=None, month=None):
    queryset = ClientMonthOutput.objects.filter(colleague=colleague).select_related('output_type', 'client')
    if year is not None:
        queryset = queryset.filter(year=year)
    if month is not None:
        queryset = queryset.filter(month=month)
    return queryset


def colleague_credits(colleague, year, month):
    return sum((output_row_credits(o).total_credits for o in _colleague_outputs(colleague, year, month)), Decimal('0'))


def colleague_credits_year(colleague, year):
    return sum((output_row_credits(o).total_credits for o in _colleague_outputs(colleague, year)), Decimal('0'))


def colleague_credits_detail(colleague, year=None, month=None):
    """Per output row: client, output type, counts and credits"""
    details = []
    for output in _colleague_outputs(colleague, year, month).order_by('-year', '-month', 'id'):
        credits = output_row_credits(output)
        details.append({
            'output_id': output.pk,
            'client_id': output.client_id,
            'client_brand': output.client.brand_name or output.client.name,
            'output_type_id': output.output_type_id,
            'output_type_name': output.output_type.name,
            'year': output.year,
            'month': output.month,
            'normal_count': output.normal_count,
            'express_count': output.express_count,
            'normal_credits': credits.normal_credits,
            'express_credits': credits.express_credits,
            'total_credits': credits.total_credits,
        })
    return details


def default_reward_per_credit():
    return Decimal(str(getattr(settings, 'CREATIVE_BOOST_REWARD_PER_CREDIT', '80')))


def reward_per_credit(colleague, client_id, client_month=None):
    """
    Reward of ``colleague`` per credit produced for a client.

    The assignment on the month's engagement service wins, then the one on the
    month's engagement, then any assignment on the client's engagements.
    """
    assignments = EngagementAssignment.objects.filter(
        colleague=colleague, creative_boost_reward_per_credit__isnull=False
    ).order_by('-start_date', '-id')
    candidates = []
    if client_month is not None and client_month.engagement_service_id:
        candidates.append(assignments.filter(engagement_service_id=client_month.engagement_service_id))
    if client_month is not None and client_month.engagement_id:
        candidates.append(assignments.filter(engagement_id=client_month.engagement_id))
    candidates.append(assignments.filter(engagement__client_id=client_id))
    for queryset in candidates:
        assignment = queryset.first()
        if assignment:
            return assignment.creative_boost_reward_per_credit
    return default_reward_per_credit()


def colleague_credits_by_client(colleague, year, month):
    """Credits and reward of a colleague per client in the month, biggest reward first"""
    per_client = {}
    for output in _colleague_outputs(colleague, year, month):
        entry = per_client.setdefault(output.client_id, {
            'client_id': output.client_id,
            'client_brand': output.client.brand_name or output.client.name,
            'output_count': 0,
            'total_credits': Decimal('0'),
        })
        entry['output_count'] += output.normal_count + output.express_count
        entry['total_credits'] += output_row_credits(output).total_credits

    client_months = {
        cm.client_id: cm for cm in ClientMonth.objects.filter(client_id__in=list(per_client), year=year, month=month)
    }
    for client_id, entry in per_client.items():
        reward = reward_per_credit(colleague, client_id, client_months.get(client_id))
        entry['reward_per_credit'] = reward
        entry['total_reward'] = (entry['total_credits'] * reward).quantize(Decimal('0.01'))
    return sorted(per_client.values(), key=lambda e: (-e['total_reward'], e['client_brand']))


def creative_boost_services():
    return EngagementService.objects.filter(service__code=settings.CREATIVE_BOOST_SERVICE_CODE)


def ensure_client_months_for_active_engagements(year, month):
    """
    Create the month rows of every engagement active in the month that sells
    Creative Boost. Settings are copied from the previous month, falling back
    to the engagement service's credit settings. Existing rows are kept.

    Returns the created ClientMonth rows.
    """
    created = []
    prev_year, prev_month = previous_period(year, month)
    engagements = engagements_active_in_month(year, month).select_related('client').order_by('start_date', 'id')
    cb_services = creative_boost_services().filter(engagement__in=engagements).order_by('id')

    with transaction.atomic(), suspend_cache_signals():
        for cb_service in cb_services.select_related('engagement', 'engagement__client'):
            engagement = cb_service.engagement
            client = engagement.client
            if ClientMonth.objects.filter(client=client, year=year, month=month).exists():
                continue

            previous = ClientMonth.objects.filter(
                Q(engagement_service=cb_service) | Q(client=client),
                year=prev_year, month=prev_month,
            ).first()
            if previous:
                min_credits = previous.min_credits
                max_credits = previous.max_credits
                price = previous.price_per_credit
                colleague = previous.colleague
            else:
                min_credits = cb_service.creative_boost_min_credits if cb_service.creative_boost_min_credits is not None else SERVICE_FALLBACK_MIN_CREDITS
                max_credits = cb_service.creative_boost_max_credits if cb_service.creative_boost_max_credits is not None else SERVICE_FALLBACK_MAX_CREDITS
                price = cb_service.creative_boost_price_per_credit if cb_service.creative_boost_price_per_credit is not None else SERVICE_FALLBACK_PRICE_PER_CREDIT
                colleague = None

            add_creative_boost_client(
                client,
                default_min_credits=min_credits,
                default_max_credits=max_credits,
                default_price_per_credit=price,
            )
            created.append(ClientMonth.objects.create(
                client=client,
                year=year,
                month=month,
                min_credits=min_credits,
                max_credits=max_credits,
                price_per_credit=price,
                colleague=colleague,
                status='active',
                engagement_service=cb_service,
                engagement=engagement,
            ))

    if created:
        invalidate_cb_overview_cache_manual()
        invalidate_dashboard_cache_manual()
    logger.info(f"Creative Boost sync {year}-{month:02d}: created {len(created)} month(s)")
    return created


def settings_history(client, year=None, month=None):
    """Settings changes of a client, newest first"""
    queryset = SettingsChange.objects.filter(client=client).select_related('changed_by')
    if year is not None:
        queryset = queryset.filter(year=year)
    if month is not None:
        queryset = queryset.filter(month=month)
    return queryset.order_by('-changed_at', '-id')
