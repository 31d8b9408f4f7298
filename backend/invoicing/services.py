"""
Invoice drafts for a billing period and invoice issuing
"""
import logging
import re
from collections import defaultdict
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from backend.clients.models import ExtraWork, EngagementService
from backend.clients.services import (
    engagements_active_in_month, extra_work_ready_to_invoice, unbilled_one_off_services
)
from backend.core.utils import month_bounds, period_label
from backend.creative_boost.models import ClientMonth
from backend.creative_boost.services import summarize_client_month
from .models import IssuedInvoice
from .proration import prorate_monthly_amount

logger = logging.getLogger(__name__)

ZERO = Decimal('0')
INVOICE_NUMBER_ATTEMPTS = 2


def _line(source, engagement, description, amount, period_start, period_end, **extra):
    line = {
        'source': source,
        'engagement_id': engagement.pk,
        'engagement_service_id': None,
        'extra_work_id': None,
        'description': description,
        'source_amount': amount,
        'period_start': period_start,
        'period_end': period_end,
        'prorated_days': None,
        'total_days_in_month': None,
        'unit_price': amount,
        'quantity': 1,
        'adjustment_amount': ZERO,
        'adjustment_reason': '',
        'final_amount': amount,
        'hours': None,
        'hourly_rate': None,
        'currency': engagement.currency,
    }
    line.update(extra)
    return line


def _is_creative_boost(engagement_service):
    return engagement_service.service.code == settings.CREATIVE_BOOST_SERVICE_CODE


def _monthly_lines(engagement, year, month):
    lines = []
    for es in engagement.engagement_services.all():
        if not es.is_active or es.billing_type != 'monthly' or _is_creative_boost(es):
            continue
        proration = prorate_monthly_amount(es.price, engagement.start_date, engagement.end_date, year, month)
        description = es.name
        if proration['is_prorated']:
            description += f" ({proration['active_days']}/{proration['total_days']} days)"
        lines.append(_line(
            'engagement', engagement, description, proration['amount'],
            proration['period_start'], proration['period_end'],
            engagement_service_id=es.pk,
            source_amount=es.price,
            prorated_days=proration['active_days'] if proration['is_prorated'] else None,
            total_days_in_month=proration['total_days'] if proration['is_prorated'] else None,
        ))
    return lines


def _creative_boost_line(engagement, client_month, year, month):
    summary = summarize_client_month(client_month)
    amount = summary.invoice_amount
    if amount is None or amount <= 0:
        return None
    period_start, period_end = month_bounds(year, month)
    description = (
        f"Creative Boost - package {summary.max_credits.normalize():f} credits"
        f" (used {summary.used_credits.normalize():f})"
    )
    return _line(
        'creative_boost', engagement, description, amount, period_start, period_end,
        engagement_service_id=client_month.engagement_service_id,
    )


def _extra_work_line(engagement, extra_work, year, month):
    period_start, period_end = month_bounds(year, month)
    return _line(
        'extra_work', engagement, extra_work.name, extra_work.amount, period_start, period_end,
        extra_work_id=extra_work.pk,
        hours=extra_work.hours_worked,
        hourly_rate=extra_work.hourly_rate,
        currency=extra_work.currency,
    )


def _one_off_line(engagement, engagement_service, year, month):
    period_start, period_end = month_bounds(year, month)
    return _line(
        'one_off', engagement, f"{engagement_service.name} (one-off)", engagement_service.price,
        period_start, period_end,
        engagement_service_id=engagement_service.pk,
        currency=engagement_service.currency,
    )


def calculate_totals(line_items):
    subtotal = sum((Decimal(str(l['unit_price'])) * Decimal(str(l.get('quantity', 1))) for l in line_items), ZERO)
    adjustments = sum((Decimal(str(l.get('adjustment_amount') or 0)) for l in line_items), ZERO)
    return subtotal, adjustments, subtotal + adjustments


def build_engagement_invoices(year, month):
    """
    Invoice drafts of every active retainer engagement in the period.

    The Creative Boost line of a client goes on its first engagement only.
    Engagements without any line are left out.
    """
    engagements = list(
        engagements_active_in_month(year, month)
        .filter(type='retainer')
        .select_related('client')
        .prefetch_related('engagement_services__service')
        .order_by('client_id', 'start_date', 'id')
    )
    client_months = {
        cm.client_id: cm
        for cm in ClientMonth.objects.filter(year=year, month=month).select_related('client')
    }
    extra_by_engagement = defaultdict(list)
    for extra_work in extra_work_ready_to_invoice(year, month).filter(engagement__isnull=False).order_by('work_date', 'id'):
        extra_by_engagement[extra_work.engagement_id].append(extra_work)
    one_off_by_engagement = defaultdict(list)
    for es in unbilled_one_off_services().order_by('id'):
        one_off_by_engagement[es.engagement_id].append(es)
    already_issued = set(
        IssuedInvoice.objects.filter(year=year, month=month).values_list('engagement_id', flat=True)
    )

    drafts = []
    for engagement in engagements:
        lines = _monthly_lines(engagement, year, month)

        client_month = client_months.pop(engagement.client_id, None)
        if client_month is not None:
            cb_line = _creative_boost_line(engagement, client_month, year, month)
            if cb_line:
                lines.append(cb_line)

        lines += [_extra_work_line(engagement, ew, year, month) for ew in extra_by_engagement.get(engagement.pk, [])]
        lines += [_one_off_line(engagement, es, year, month) for es in one_off_by_engagement.get(engagement.pk, [])]
        if not lines:
            continue

        subtotal, adjustments, total = calculate_totals(lines)
        drafts.append({
            'engagement_id': engagement.pk,
            'engagement_name': engagement.name,
            'client_id': engagement.client_id,
            'client_name': str(engagement.client),
            'year': year,
            'month': month,
            'period': period_label(year, month),
            'currency': engagement.currency,
            'line_items': lines,
            'subtotal': subtotal,
            'total_adjustments': adjustments,
            'total_amount': total,
            'is_issued': engagement.pk in already_issued,
        })
    return drafts


def next_invoice_number(year, for_update=False):
    """Next FV-YYYY-NNN number of the year"""
    prefix = f"{getattr(settings, 'INVOICE_NUMBER_PREFIX', 'FV')}-{year}-"
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
    queryset = IssuedInvoice.objects.filter(invoice_number__startswith=prefix)
    if for_update:
        # Must run inside a transaction
        queryset = queryset.select_for_update()
    highest = 0
    for number in queryset.values_list('invoice_number', flat=True):
        match = pattern.match(number)
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{prefix}{highest + 1:03d}"


def _already_issued_error(engagement, year, month):
    return ValidationError(
        f"Invoice for engagement '{engagement.name}' in {period_label(year, month)} is already issued"
    )


def _claimed_rows(engagement, year, month, extra_work_ids, one_off_ids):
    """
    Extra work and one-off services the line items may mark as invoiced.

    Every referenced row must belong to the engagement and still wait for
    invoicing in the period, otherwise the invoice is rejected.
    """
    extra_works = ExtraWork.objects.filter(
        pk__in=extra_work_ids,
        engagement=engagement,
        status='ready_to_invoice',
        billing_period=period_label(year, month),
    )
    missing = set(extra_work_ids) - set(extra_works.values_list('pk', flat=True))
    if missing:
        raise ValidationError(
            f"Extra work {sorted(missing)} is not ready to invoice for engagement '{engagement.name}' "
            f"in {period_label(year, month)}"
        )
    one_offs = EngagementService.objects.filter(
        pk__in=one_off_ids,
        engagement=engagement,
        billing_type='one_off',
        invoicing_status='pending',
    )
    missing = set(one_off_ids) - set(one_offs.values_list('pk', flat=True))
    if missing:
        raise ValidationError(
            f"One-off services {sorted(missing)} are not pending invoicing on engagement '{engagement.name}'"
        )
    return extra_works, one_offs


def _create_invoice(engagement, year, month, **fields):
    """Create the invoice under the next free number, retrying once on a number clash"""
    for attempt in range(INVOICE_NUMBER_ATTEMPTS):
        try:
            with transaction.atomic():
                return IssuedInvoice.objects.create(
                    invoice_number=next_invoice_number(year, for_update=True),
                    engagement=engagement,
                    client=engagement.client,
                    year=year,
                    month=month,
                    **fields
                )
        except IntegrityError:
            if IssuedInvoice.objects.filter(engagement=engagement, year=year, month=month).exists():
                raise _already_issued_error(engagement, year, month)
            if attempt + 1 == INVOICE_NUMBER_ATTEMPTS:
                raise
            logger.warning(f"Invoice number clash for engagement {engagement.pk}, retrying")


def issue_invoice(engagement, year, month, user=None, line_items=None, notes=''):
    """
    Store the invoice of an engagement for the period.

    Without ``line_items`` the current draft is issued. Included extra work
    and one-off services are marked as invoiced; line items pointing at rows
    of another engagement, or at rows not waiting for invoicing, are rejected.
    """
    if IssuedInvoice.objects.filter(engagement=engagement, year=year, month=month).exists():
        raise _already_issued_error(engagement, year, month)
    if line_items is None:
        draft = next((d for d in build_engagement_invoices(year, month) if d['engagement_id'] == engagement.pk), None)
        if draft is None:
            raise ValidationError(
                f"Engagement '{engagement.name}' has nothing to invoice in {period_label(year, month)}"
            )
        line_items = draft['line_items']
    if not line_items:
        raise ValidationError("Invoice needs at least one line item")

    subtotal, adjustments, total = calculate_totals(line_items)
    extra_work_ids = [l['extra_work_id'] for l in line_items if l.get('source') == 'extra_work' and l.get('extra_work_id')]
    one_off_ids = [l['engagement_service_id'] for l in line_items if l.get('source') == 'one_off' and l.get('engagement_service_id')]
    now = timezone.now()

    with transaction.atomic():
        extra_works, one_offs = _claimed_rows(engagement, year, month, extra_work_ids, one_off_ids)
        invoice = _create_invoice(
            engagement, year, month,
            line_items=line_items,
            subtotal=subtotal,
            total_adjustments=adjustments,
            total_amount=total,
            currency=engagement.currency,
            notes=notes or '',
            issued_by=user,
        )
        extra_works.update(
            status='invoiced',
            invoice=invoice,
            invoice_number=invoice.invoice_number,
            invoiced_at=now,
        )
        one_offs.update(
            invoicing_status='invoiced',
            invoiced_at=now,
            invoiced_in_period=period_label(year, month),
            invoice=invoice,
        )

    logger.info(f"Issued invoice {invoice.invoice_number} for engagement {engagement.pk} ({period_label(year, month)})")
    return invoice
