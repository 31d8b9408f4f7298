import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from backend.clients.models import Colleague
from .models import Applicant, ApplicantNote

logger = logging.getLogger(__name__)

STAGE_ORDER = [stage for stage, _ in Applicant.STAGE_CHOICES]


def change_stage(applicant, stage):
    if stage not in STAGE_ORDER:
        raise ValidationError(f"Unknown stage: {stage}")
    if applicant.converted_to_colleague_id and stage != 'hired':
        raise ValidationError("A hired applicant cannot leave the hired stage")
    previous = applicant.stage
    applicant.stage = stage
    applicant.save(update_fields=['stage', 'updated_at'])
    logger.info(f"Applicant {applicant.pk} moved {previous} -> {stage}")
    return applicant


def add_note(applicant, text, user=None):
    return ApplicantNote.objects.create(applicant=applicant, text=text, author=user)


def hire_applicant(applicant, position=None, seniority='mid'):
    """
    Create a colleague from an applicant and link them.

    Applicants with a company id are hired as freelancers; the hourly rate
    becomes the colleague's internal hourly cost.
    """
    if applicant.converted_to_colleague_id:
        raise ValidationError(f"Applicant '{applicant.full_name}' is already hired")

    with transaction.atomic():
        colleague = Colleague.objects.create(
            full_name=applicant.full_name,
            email=applicant.email,
            phone=applicant.phone,
            position=position or applicant.position,
            seniority=seniority,
            is_freelancer=bool(applicant.ico),
            internal_hourly_cost=applicant.hourly_rate or Decimal('0.00'),
            status='active',
        )
        applicant.stage = 'hired'
        applicant.converted_to_colleague = colleague
        if not applicant.onboarding_sent_at:
            applicant.onboarding_sent_at = timezone.now()
        applicant.save()

    logger.info(f"Applicant {applicant.pk} hired as colleague {colleague.pk}")
    return colleague


def kanban_board(queryset=None):
    """Applicants grouped by stage, in pipeline order"""
    queryset = queryset if queryset is not None else Applicant.objects.all()
    columns = {stage: [] for stage in STAGE_ORDER}
    for applicant in queryset:
        columns[applicant.stage].append(applicant)
    return [(stage, label, columns[stage]) for stage, label in Applicant.STAGE_CHOICES]
