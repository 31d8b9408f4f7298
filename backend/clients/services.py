"""
Engagement and extra-work business rules

Views call these functions after validating input; they never touch the request.
"""
import logging
from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Sum
from django.utils import timezone

from backend.core.utils import month_bounds, period_label
from .models import Engagement, EngagementService, EngagementHistoryEntry, ExtraWork, ClientContact

logger = logging.getLogger(__name__)

# Engagement fields whose changes end up in the history
TRACKED_ENGAGEMENT_FIELDS = [
    'name', 'type', 'billing_model', 'currency', 'monthly_fee', 'one_off_fee', 'status',
    'start_date', 'end_date', 'notice_period_months', 'contact_person', 'offer_url', 'contract_url',
]

LOW_MARGIN_THRESHOLD = Decimal('30')


def _history_value(value):
    if value is None or value == '':
        return None
    if isinstance(value, models.Model):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _comparable(value):
    if isinstance(value, models.Model):
        return value.pk
    if isinstance(value, Decimal):
        return value.normalize()
    if value == '':
        return None
    return value


def record_engagement_created(engagement, user=None):
    return EngagementHistoryEntry.objects.create(
        engagement=engagement,
        change_type='created',
        new_value=engagement.name,
        changed_by=user,
    )


def record_engagement_changes(engagement, data, user=None):
    """
    Write one history entry per tracked field that ``data`` changes.

    Must be called before the new values are saved on the engagement.
    Returns the created entries.
    """
    entries = []
    for field in TRACKED_ENGAGEMENT_FIELDS:
        if field not in data:
            continue
        old = getattr(engagement, field)
        new = data[field]
        if isinstance(new, (int, float)) and not isinstance(new, bool) and isinstance(old, Decimal):
            new = Decimal(str(new))
        if _comparable(old) == _comparable(new):
            continue
        if field == 'status':
            change_type = 'status_change'
        elif field == 'end_date':
            change_type = 'end_date_set'
        else:
            change_type = 'field_update'
        entries.append(EngagementHistoryEntry(
            engagement=engagement,
            change_type=change_type,
            field_name=field,
            old_value=_history_value(old),
            new_value=_history_value(new),
            changed_by=user,
        ))
    if entries:
        EngagementHistoryEntry.objects.bulk_create(entries)
        logger.info(f"Engagement {engagement.pk}: recorded {len(entries)} change(s)")
    return entries


def record_service_change(engagement_service, change_type, user=None, old_value=None, new_value=None):
    """History entry for a service added to / removed from / repriced on an engagement"""
    return EngagementHistoryEntry.objects.create(
        engagement_id=engagement_service.engagement_id,
        change_type=change_type,
        field_name='price' if change_type == 'service_updated' else None,
        old_value=_history_value(old_value),
        new_value=_history_value(new_value),
        related_entity_id=str(engagement_service.pk),
        related_entity_name=engagement_service.name,
        changed_by=user,
    )


def record_assignment_change(assignment, change_type, user=None):
    return EngagementHistoryEntry.objects.create(
        engagement_id=assignment.engagement_id,
        change_type=change_type,
        new_value=assignment.role_on_engagement or None,
        related_entity_id=str(assignment.colleague_id),
        related_entity_name=assignment.colleague.full_name,
        changed_by=user,
    )


def engagement_is_active_in_month(engagement, year, month):
    """Active status and a date range overlapping the month"""
    if engagement.status != 'active':
        return False
    first_day, last_day = month_bounds(year, month)
    if engagement.start_date and engagement.start_date > last_day:
        return False
    if engagement.end_date and engagement.end_date < first_day:
        return False
    return True


def engagements_active_in_month(year, month, queryset=None):
    first_day, last_day = month_bounds(year, month)
    queryset = queryset if queryset is not None else Engagement.objects.all()
    return queryset.filter(
        status='active',
        start_date__lte=last_day,
    ).filter(
        models.Q(end_date__isnull=True) | models.Q(end_date__gte=first_day)
    )


def engagement_monthly_cost(engagement):
    """Sum of the monthly cost of all assignments"""
    total = engagement.assignments.aggregate(total=Sum('monthly_cost'))['total']
    return total or Decimal('0')


def engagement_margin(engagement):
    revenue = engagement.monthly_fee or Decimal('0')
    cost = engagement_monthly_cost(engagement)
    margin = revenue - cost
    if revenue > 0:
        margin_percent = (margin / revenue * 100).quantize(Decimal('0.01'))
    else:
        margin_percent = Decimal('0')
    return {
        'engagement_id': engagement.pk,
        'engagement_name': engagement.name,
        'client_id': engagement.client_id,
        'client_name': str(engagement.client),
        'revenue': revenue,
        'cost': cost,
        'margin': margin,
        'margin_percent': margin_percent,
        'is_low_margin': revenue > 0 and margin_percent < LOW_MARGIN_THRESHOLD,
        'assignment_count': engagement.assignments.count(),
    }


def advance_extra_work(extra_work, user=None):
    """Move extra work one step forward in its workflow"""
    flow = ExtraWork.STATUS_FLOW
    position = flow.index(extra_work.status)
    if position == len(flow) - 1:
        raise ValidationError(f"Extra work '{extra_work.name}' is already invoiced")

    previous = extra_work.status
    extra_work.status = flow[position + 1]
    if previous == 'pending_approval':
        extra_work.approval_date = timezone.now()
        extra_work.approved_by = user
    if extra_work.status == 'invoiced' and not extra_work.invoiced_at:
        extra_work.invoiced_at = timezone.now()
    extra_work.save()
    logger.info(f"Extra work {extra_work.pk} moved {previous} -> {extra_work.status}")
    return extra_work


def approve_upsell_commission(item, user=None):
    """
    Approve the upsell commission of an extra work or engagement service.

    Only approved commissions count towards the seller's earnings.
    """
    if item.upsold_by_id is None or not item.upsell_commission_percent:
        raise ValidationError(f"'{item.name}' has no upsell commission to approve")
    if item.commission_approved_at:
        raise ValidationError(f"Commission of '{item.name}' is already approved")
    item.commission_approved_at = timezone.now()
    item.commission_approved_by = user if user is not None and user.is_authenticated else None
    item.save(update_fields=['commission_approved_at', 'commission_approved_by', 'updated_at'])
    logger.info(f"Approved upsell commission of {item.__class__.__name__} {item.pk}")
    return item


def revoke_upsell_commission(item):
    if not item.commission_approved_at:
        raise ValidationError(f"Commission of '{item.name}' is not approved")
    item.commission_approved_at = None
    item.commission_approved_by = None
    item.save(update_fields=['commission_approved_at', 'commission_approved_by', 'updated_at'])
    logger.info(f"Revoked upsell commission of {item.__class__.__name__} {item.pk}")
    return item


def extra_work_ready_to_invoice(year, month):
    return ExtraWork.objects.filter(
        status='ready_to_invoice',
        billing_period=period_label(year, month),
    ).select_related('client', 'engagement')


def unbilled_one_off_services():
    return EngagementService.objects.filter(
        billing_type='one_off',
        is_active=True,
        invoicing_status='pending',
    ).select_related('engagement', 'engagement__client', 'service')


def primary_contact(client):
    return ClientContact.objects.filter(client=client, is_primary=True).first()


def decision_makers(client):
    return ClientContact.objects.filter(client=client, is_decision_maker=True)
