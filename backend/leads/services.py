"""
Lead pipeline operations and funnel analytics
"""
import logging
from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.utils import timezone

from backend.clients.models import Client, ClientContact, Engagement, EngagementService, Service
from backend.clients.services import record_engagement_created
from .models import Lead, LeadNote, LeadHistoryEntry, LeadStageTransition

logger = logging.getLogger(__name__)

STAGE_LABELS = dict(Lead.STAGE_CHOICES)

# Forward path of the funnel
FUNNEL_STAGES = ['new_lead', 'meeting_done', 'waiting_access', 'access_received', 'preparing_offer', 'offer_sent', 'won']

# Fields that are not written to the history on update
UNTRACKED_FIELDS = {'stage', 'potential_services', 'access_request_platforms', 'created_by'}

NOTE_PREVIEW_LENGTH = 100


def _history_value(value):
    if value is None or value == '':
        return None
    if isinstance(value, models.Model):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _same(old, new):
    if isinstance(old, models.Model) or isinstance(new, models.Model):
        return getattr(old, 'pk', old) == getattr(new, 'pk', new)
    if isinstance(old, Decimal) and new is not None:
        return old == Decimal(str(new))
    return (old if old != '' else None) == (new if new != '' else None)


def record_lead_created(lead, user=None):
    return LeadHistoryEntry.objects.create(
        lead=lead, change_type='created', new_value=lead.company_name, changed_by=user
    )


def update_lead(lead, data, user=None):
    """Apply ``data`` to a lead, writing one history entry per changed field"""
    entries = []
    for field, new in data.items():
        if field in UNTRACKED_FIELDS:
            continue
        old = getattr(lead, field)
        if _same(old, new):
            continue
        entries.append(LeadHistoryEntry(
            lead=lead,
            change_type='owner_change' if field == 'owner' else 'field_update',
            field_name=field,
            old_value=_history_value(old),
            new_value=_history_value(new),
            changed_by=user,
        ))

    with transaction.atomic():
        for field, value in data.items():
            if field != 'stage':
                setattr(lead, field, value)
        lead.save()
        if entries:
            LeadHistoryEntry.objects.bulk_create(entries)
    return entries


def change_stage(lead, stage, user=None, confirm=False):
    """
    Move a lead to ``stage``.

    With ``confirm`` the move also counts for funnel analytics and is stored
    as a LeadStageTransition worth the lead's estimated price.
    """
    if stage not in STAGE_LABELS:
        raise ValidationError(f"Unknown stage: {stage}")
    previous = lead.stage
    if previous == stage:
        return None

    with transaction.atomic():
        lead.stage = stage
        update_fields = ['stage', 'updated_at']
        now = timezone.now()
        if stage == 'offer_sent' and not lead.offer_sent_at:
            lead.offer_sent_at = now
            lead.offer_sent_by = user
            update_fields += ['offer_sent_at', 'offer_sent_by']
        if stage == 'access_received' and not lead.access_received_at:
            lead.access_received_at = now
            update_fields.append('access_received_at')
        lead.save(update_fields=update_fields)
        LeadHistoryEntry.objects.create(
            lead=lead,
            change_type='stage_change',
            field_name='stage',
            old_value=STAGE_LABELS[previous],
            new_value=STAGE_LABELS[stage],
            changed_by=user,
        )
        transition = None
        if confirm:
            transition = LeadStageTransition.objects.create(
                lead=lead,
                from_stage=previous,
                to_stage=stage,
                transition_value=lead.estimated_price or Decimal('0'),
                confirmed_at=now,
                confirmed_by=user,
            )
    logger.info(f"Lead {lead.pk} moved {previous} -> {stage}")
    return transition


def add_note(lead, text, user=None):
    with transaction.atomic():
        note = LeadNote.objects.create(lead=lead, text=text, author=user)
        preview = text if len(text) <= NOTE_PREVIEW_LENGTH else text[:NOTE_PREVIEW_LENGTH] + '...'
        LeadHistoryEntry.objects.create(
            lead=lead, change_type='note_added', new_value=preview, changed_by=user
        )
    return note


def _potential_service_rows(lead):
    rows = []
    for item in lead.potential_services or []:
        service = Service.objects.filter(pk=item.get('service_id')).first()
        if service is None:
            logger.warning(f"Lead {lead.pk}: unknown service {item.get('service_id')} skipped on conversion")
            continue
        price = item.get('price')
        rows.append({
            'service': service,
            'name': item.get('name') or service.name,
            'price': Decimal(str(price)) if price is not None else service.price_for_tier(item.get('selected_tier')) or Decimal('0'),
            'currency': item.get('currency') or lead.currency,
            'billing_type': item.get('billing_type') or 'monthly',
            'selected_tier': item.get('selected_tier'),
        })
    return rows


def convert_lead(lead, user=None, engagement_data=None):
    """
    Turn a won lead into a client with contact, engagement and services.

    Returns (client, engagement). Converting a lead twice is rejected.
    """
    if lead.is_converted:
        raise ValidationError(f"Lead '{lead.company_name}' is already converted")
    engagement_data = engagement_data or {}
    service_rows = _potential_service_rows(lead)
    monthly_fee = sum((r['price'] for r in service_rows if r['billing_type'] == 'monthly'), Decimal('0'))
    one_off_fee = sum((r['price'] for r in service_rows if r['billing_type'] == 'one_off'), Decimal('0'))

    with transaction.atomic():
        client = Client.objects.create(
            name=lead.company_name,
            ico=lead.ico,
            dic=lead.dic,
            website=lead.website or '',
            industry=lead.industry or '',
            status='active',
            billing_street=lead.billing_street,
            billing_city=lead.billing_city,
            billing_zip=lead.billing_zip,
            billing_country=lead.billing_country,
            billing_email=lead.billing_email,
            acquisition_channel=lead.source_custom or lead.get_source_display(),
            start_date=engagement_data.get('start_date') or timezone.localdate(),
            created_by=user,
        )
        contact = None
        if lead.contact_name:
            contact = ClientContact.objects.create(
                client=client,
                name=lead.contact_name,
                position=lead.contact_position,
                email=lead.contact_email,
                phone=lead.contact_phone,
                is_primary=True,
                is_decision_maker=True,
            )
        engagement = Engagement.objects.create(
            client=client,
            contact_person=contact,
            name=engagement_data.get('name') or f"{lead.company_name} - {lead.get_offer_type_display()}",
            type=lead.offer_type,
            currency=lead.currency,
            monthly_fee=engagement_data.get('monthly_fee', monthly_fee),
            one_off_fee=one_off_fee,
            status=engagement_data.get('status', 'active'),
            start_date=engagement_data.get('start_date') or timezone.localdate(),
            offer_url=lead.offer_url,
            contract_url=lead.contract_url,
        )
        record_engagement_created(engagement, user=user)
        for row in service_rows:
            EngagementService.objects.create(engagement=engagement, **row)

        previous_stage = lead.stage
        lead.stage = 'won'
        lead.converted_to_client = client
        lead.converted_to_engagement = engagement
        lead.converted_at = timezone.now()
        lead.save()
        LeadHistoryEntry.objects.create(
            lead=lead,
            change_type='converted',
            old_value=STAGE_LABELS[previous_stage],
            new_value=str(client),
            changed_by=user,
        )

    logger.info(f"Lead {lead.pk} converted to client {client.pk} / engagement {engagement.pk}")
    return client, engagement


def conversion_rates(transitions=None):
    """Conversion between consecutive funnel stages over confirmed transitions"""
    transitions = list(transitions if transitions is not None else LeadStageTransition.objects.all())
    entries = {stage: 0 for stage in FUNNEL_STAGES}
    for t in transitions:
        if t.to_stage in entries:
            entries[t.to_stage] += 1

    rates = []
    for from_stage, to_stage in zip(FUNNEL_STAGES, FUNNEL_STAGES[1:]):
        count = sum(1 for t in transitions if t.from_stage == from_stage and t.to_stage == to_stage)
        total = entries[from_stage]
        rates.append({
            'from_stage': from_stage,
            'to_stage': to_stage,
            'from_label': STAGE_LABELS[from_stage],
            'to_label': STAGE_LABELS[to_stage],
            'count': count,
            'total': total,
            # No confirmed entry into the from-stage means no rate
            'rate': min(round(count / total * 100, 2), 100.0) if total else 0,
        })
    return rates


def overall_conversion(transitions=None):
    """Won entries per new-lead entry, in percent"""
    transitions = list(transitions if transitions is not None else LeadStageTransition.objects.all())
    new_leads = sum(1 for t in transitions if t.to_stage == 'new_lead')
    won = sum(1 for t in transitions if t.to_stage == 'won')
    if new_leads == 0:
        return 0
    return round(won / new_leads * 100, 2)


def monthly_trend(months=6, today=None):
    """Overall conversion per calendar month for the last ``months`` months"""
    today = today or timezone.localdate()
    trend = []
    for offset in range(months - 1, -1, -1):
        year, month = today.year, today.month - offset
        while month < 1:
            month += 12
            year -= 1
        month_transitions = list(LeadStageTransition.objects.filter(
            confirmed_at__year=year, confirmed_at__month=month
        ))
        won = sum(1 for t in month_transitions if t.to_stage == 'won')
        trend.append({
            'month': f"{year}-{month:02d}",
            'from_stage': 'new_lead',
            'to_stage': 'won',
            'count': won,
            'rate': overall_conversion(month_transitions),
        })
    return trend


def funnel_summary(months=6, today=None):
    transitions = list(LeadStageTransition.objects.all())
    return {
        'conversion_rates': conversion_rates(transitions),
        'overall_conversion': overall_conversion(transitions),
        'total_transitions': len(transitions),
        'monthly_trend': monthly_trend(months, today=today),
    }
